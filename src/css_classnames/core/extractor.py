# src/css_classnames/core/extractor.py
from pathlib import Path
from typing import Iterable, Optional

from css_classnames.config import ENCODING
from css_classnames.core.imports import ImportResolver
from css_classnames.core.scope import ModuleScope
from css_classnames.models import ExtractionResult


class ClassNameExtractor:
    """
    Extracts the class names a CSS/SCSS module exports and writes them,
    sorted and comma-joined, to a text file.
    """

    def __init__(
        self,
        load_paths: Optional[Iterable[Path]] = None,
        exclude_patterns: Optional[Iterable[str]] = None,
        export_globals: bool = True,
        all_exports: bool = False,
    ):
        self.resolver = ImportResolver(load_paths, exclude_patterns)
        self.scope = ModuleScope(export_globals=export_globals, all_exports=all_exports)

    def collect(self, input_path: Path) -> ExtractionResult:
        """Runs import resolution and the scoping transform without writing anything."""
        sheet = self.resolver.resolve(Path(input_path))
        mapping = self.scope.process(sheet)
        return ExtractionResult(mapping=mapping, sources=tuple(self.resolver.sources))

    def extract(self, input_path: Path, output_path: Path) -> ExtractionResult:
        """
        Writes the serialized class names of `input_path` to `output_path`.
        Raises ProcessingError (or OSError on write) and leaves the output
        untouched when anything before the write fails.
        """
        result = self.collect(input_path)
        write_output(Path(output_path), result.serialize())
        return result


def write_output(output_path: Path, content: str) -> None:
    # newline="" keeps the content byte-exact on every platform
    with open(output_path, "w", encoding=ENCODING, newline="") as f:
        f.write(content)
