# src/css_classnames/core/imports.py
import json
import re
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set, Tuple

import pathspec

from css_classnames.config import (
    ENCODING,
    IMPORT_CANDIDATES,
    NODE_MODULES_DIR,
    PACKAGE_STYLE_FIELD,
    REMOTE_IMPORT_PREFIXES,
    SOURCE_ENCODING,
)
from css_classnames.core.syntax import AtRule, Node, Stylesheet, parse_stylesheet
from css_classnames.errors import CyclicImportError, ImportResolutionError, ProcessingError
from css_classnames.models import SourceDocument

# One import URI: "a.css", 'a.css', url(a.css) or url("a.css")
_IMPORT_URI = re.compile(
    r"""\s*(?:
        url\(\s*(?P<url_quote>['"]?)(?P<url>.*?)(?P=url_quote)\s*\)
      | (?P<quote>['"])(?P<string>(?:\\.|(?!(?P=quote)).)*?)(?P=quote)
    )\s*""",
    re.X | re.I | re.S,
)


def read_source(path: Path) -> SourceDocument:
    """Reads a stylesheet; I/O and decoding problems become ProcessingError."""
    try:
        return SourceDocument(path=path, text=path.read_text(encoding=SOURCE_ENCODING))
    except (OSError, UnicodeDecodeError) as e:
        raise ProcessingError(f"Cannot read '{path}': {e}") from e


def parse_import_params(params: str) -> List[str]:
    """
    Returns the URIs named by an @import prelude.
    A comma-separated list of URIs (SCSS) yields every entry; anything after
    the last URI is a media/supports condition and is ignored.
    """
    uris = []
    pos = 0
    while True:
        m = _IMPORT_URI.match(params, pos)
        if not m:
            break
        uris.append(m.group("url") if m.group("url") is not None else m.group("string"))
        pos = m.end()
        if not params.startswith(",", pos):
            break
        pos += 1

    if not uris:
        raise ImportResolutionError(f"Unable to find uri in '@import {params}'")
    return uris


def is_remote(uri: str) -> bool:
    return uri.lower().startswith(REMOTE_IMPORT_PREFIXES)


def _candidates(base: Path, uri: str) -> Iterator[Path]:
    target = base / uri
    for pattern in IMPORT_CANDIDATES:
        yield Path(pattern.format(path=target, dir=target.parent, name=target.name))


def _package_style(package_dir: Path) -> Optional[Path]:
    manifest = package_dir / "package.json"
    if not manifest.is_file():
        return None
    try:
        data = json.loads(manifest.read_text(encoding=ENCODING))
    except (OSError, ValueError):
        return None
    style = data.get(PACKAGE_STYLE_FIELD) if isinstance(data, dict) else None
    if isinstance(style, str) and (package_dir / style).is_file():
        return package_dir / style
    return None


class ImportResolver:
    """
    Inlines @import statements recursively.
    Each file is inlined at most once; importing a file that is still being
    resolved is a cycle and raises CyclicImportError.
    """

    def __init__(self, load_paths: Optional[Iterable[Path]] = None,
                 exclude_patterns: Optional[Iterable[str]] = None):
        self.load_paths = [Path(p) for p in (load_paths or [])]
        self.exclude_spec = pathspec.PathSpec.from_lines("gitwildmatch", list(exclude_patterns or []))
        self.sources: List[Path] = []
        self._inlined: Set[Path] = set()

    def resolve(self, path: Path) -> Stylesheet:
        """Loads `path` and returns one stylesheet with every local import inlined."""
        self.sources = []
        self._inlined = set()
        path = Path(path).resolve()
        return Stylesheet(nodes=self._load(path, ()), source=path)

    def _load(self, path: Path, chain: Tuple[Path, ...]) -> List[Node]:
        if path in chain:
            raise CyclicImportError(chain + (path,))

        document = read_source(path)
        self.sources.append(path)
        sheet = parse_stylesheet(document)
        chain = chain + (path,)

        nodes: List[Node] = []
        for node in sheet.nodes:
            if not self._is_import(node):
                nodes.append(node)
                continue

            kept = False
            for uri in parse_import_params(node.params):
                if is_remote(uri) or self.is_excluded(uri):
                    if not kept:
                        nodes.append(node)
                        kept = True
                    continue

                target = self.resolve_id(uri, path.parent)
                if target in self._inlined:
                    continue
                nodes.extend(self._load(target, chain))

        self._inlined.add(path)
        return nodes

    @staticmethod
    def _is_import(node: Node) -> bool:
        return isinstance(node, AtRule) and node.name.lower() == "import" and node.nodes is None

    def is_excluded(self, uri: str) -> bool:
        normalized = uri[2:] if uri.startswith("./") else uri
        return self.exclude_spec.match_file(normalized)

    def resolve_id(self, uri: str, base_dir: Path) -> Path:
        """Finds the file an import URI refers to, or raises ImportResolutionError."""
        searched = [base_dir, *self.load_paths]
        for root in searched:
            for candidate in _candidates(root, uri):
                if candidate.is_file():
                    return candidate.resolve()

        # Bare package names are looked up in node_modules, walking upward.
        for parent in (base_dir, *base_dir.parents):
            modules = parent / NODE_MODULES_DIR
            if not modules.is_dir():
                continue
            searched.append(modules)
            for candidate in _candidates(modules, uri):
                if candidate.is_file():
                    return candidate.resolve()
            style = _package_style(modules / uri)
            if style is not None:
                return style.resolve()

        dirs = ", ".join(str(d) for d in searched)
        raise ImportResolutionError(f"Failed to find '{uri}' in [{dirs}]")
