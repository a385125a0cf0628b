# src/css_classnames/core/scope.py
import base64
import hashlib
import re
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional

from css_classnames.config import KEYFRAMES_AT_RULES, SCOPED_HASH_LENGTH, SCOPED_NAME_TEMPLATE
from css_classnames.core.syntax import AtRule, Declaration, Node, Rule, Stylesheet
from css_classnames.models import ClassNameMapping

_NAME_CHAR = r"(?:[_a-zA-Z0-9-]|[^\x00-\x7f]|\\[0-9a-fA-F]{1,6}\s?|\\[^\n\r\f0-9a-fA-F])"
_NAME_START = r"(?:[_a-zA-Z]|[^\x00-\x7f]|\\[0-9a-fA-F]{1,6}\s?|\\[^\n\r\f0-9a-fA-F])"
_IDENT = rf"(?:--|-?{_NAME_START}){_NAME_CHAR}*"

_SELECTOR_TOKEN = re.compile(
    rf"""
      (?P<string>"(?:\\.|[^"\\])*"|'(?:\\.|[^'\\])*')
    | (?P<attribute>\[(?:"(?:\\.|[^"\\])*"|'(?:\\.|[^'\\])*'|[^\]"'])*\])
    | (?P<interpolation>\#\{{[^}}]*\}})
    | (?P<scope>:(?:global|local)(?![\w-])\(?)
    | (?P<cls>\.{_IDENT})
    | (?P<id>\#{_IDENT})
    | (?P<open>\()
    | (?P<close>\))
    | (?P<comma>,)
    """,
    re.X | re.S,
)

_ESCAPE = re.compile(r"\\(?:([0-9a-fA-F]{1,6})\s?|(.))", re.S)
_SCOPED_KEYFRAMES = re.compile(r"^:(global|local)(?:\(\s*(.+?)\s*\)|\s+(.+))$")
_VALUE_IMPORT = re.compile(r"^(?P<names>.+?)\s+from\s+\S+$", re.S)
_VALUE_DEFINITION = re.compile(r"^(?P<name>[\w-]+)\s*:?")
_PLAIN_NAME = re.compile(rf"^{_IDENT}$")


class ScopedName(NamedTuple):
    kind: str  # "class" or "id"
    name: str
    is_global: bool


def unescape(ident: str) -> str:
    """Decodes CSS escapes, so `sm\\:flex` becomes `sm:flex`."""
    def replace(m):
        if m.group(1):
            code = int(m.group(1), 16)
            if code == 0 or 0xD800 <= code <= 0xDFFF or code > 0x10FFFF:
                return "\ufffd"
            return chr(code)
        return m.group(2)

    return _ESCAPE.sub(replace, ident)


def scan_selector(selector: str) -> List[ScopedName]:
    """
    Finds class and id selectors along with their scope.

    Selectors are local unless wrapped in :global(...) or following a bare
    :global; a comma outside any parentheses starts a new local selector.
    """
    found: List[ScopedName] = []
    mode = "local"
    # Mode to restore when the matching ")" is reached
    saved: List[str] = []

    for m in _SELECTOR_TOKEN.finditer(selector):
        kind = m.lastgroup
        value = m.group()

        if kind == "scope":
            scope = value[1:].rstrip("(")
            if value.endswith("("):
                saved.append(mode)
            mode = scope
        elif kind == "open":
            saved.append(mode)
        elif kind == "close":
            if saved:
                mode = saved.pop()
        elif kind == "comma":
            if not saved:
                mode = "local"
        elif kind in ("cls", "id"):
            # Names built from interpolation are only known at compile time
            if selector.startswith("#{", m.end()):
                continue
            found.append(ScopedName("class" if kind == "cls" else "id", unescape(value[1:]), mode == "global"))

    return found


def generate_scoped_name(local: str, source: Optional[Path]) -> str:
    stem = re.sub(r"[^\w-]", "_", source.stem) if source else "css"
    seed = f"{source or ''}:{local}".encode("utf-8")
    digest = base64.urlsafe_b64encode(hashlib.sha1(seed).digest()).decode("ascii")
    return SCOPED_NAME_TEMPLATE.format(stem=stem, local=local, digest=digest[:SCOPED_HASH_LENGTH])


class ModuleScope:
    """
    Collects the names a stylesheet exports as a CSS module.

    By default only class names are exported, globals included. With
    `all_exports` the ids, keyframes, @value names and :export keys that CSS
    modules also put in its token map are exported as well.
    """

    def __init__(self, export_globals: bool = True, all_exports: bool = False):
        self.export_globals = export_globals
        self.all_exports = all_exports
        self._locals: Dict[str, Optional[Path]] = {}
        self._globals: Dict[str, None] = {}

    def process(self, sheet: Stylesheet) -> ClassNameMapping:
        self._locals = {}
        self._globals = {}
        self._walk(sheet.nodes, in_keyframes=False)

        mapping: ClassNameMapping = {}
        if self.export_globals:
            mapping.update((name, name) for name in self._globals)
        for name, source in self._locals.items():
            mapping[name] = generate_scoped_name(name, source)
        return mapping

    def _export(self, name: str, is_global: bool, source: Optional[Path]) -> None:
        if is_global:
            self._globals.setdefault(name, None)
        else:
            self._locals.setdefault(name, source)

    def _walk(self, nodes: List[Node], in_keyframes: bool) -> None:
        for node in nodes:
            if isinstance(node, Rule):
                self._visit_rule(node, in_keyframes)
                self._walk(node.nodes, in_keyframes)
            elif isinstance(node, AtRule):
                name = node.name.lower()
                if self.all_exports and name in KEYFRAMES_AT_RULES:
                    self._visit_keyframes(node)
                elif self.all_exports and name == "value":
                    self._visit_value(node)
                if node.nodes:
                    self._walk(node.nodes, in_keyframes or name in KEYFRAMES_AT_RULES)

    def _visit_rule(self, rule: Rule, in_keyframes: bool) -> None:
        if in_keyframes or rule.selector.startswith(":import"):
            return
        if rule.selector == ":export":
            if self.all_exports:
                for decl in rule.nodes:
                    if isinstance(decl, Declaration):
                        self._export(decl.prop, False, rule.source)
            return

        for scoped in scan_selector(rule.selector):
            if scoped.kind == "class" or self.all_exports:
                self._export(scoped.name, scoped.is_global, rule.source)

    def _visit_keyframes(self, node: AtRule) -> None:
        params = node.params.strip()
        m = _SCOPED_KEYFRAMES.match(params)
        if m:
            name = (m.group(2) or m.group(3)).strip()
            is_global = m.group(1) == "global"
        else:
            name, is_global = params, False
        if _PLAIN_NAME.match(name):
            self._export(unescape(name), is_global, node.source)

    def _visit_value(self, node: AtRule) -> None:
        imported = _VALUE_IMPORT.match(node.params)
        if imported:
            for item in imported.group("names").split(","):
                alias = item.split(" as ")[-1].strip()
                if alias:
                    self._export(alias, False, node.source)
            return

        defined = _VALUE_DEFINITION.match(node.params)
        if defined:
            self._export(defined.group("name"), False, node.source)
