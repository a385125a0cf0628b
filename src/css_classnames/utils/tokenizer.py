# src/css_classnames/utils/tokenizer.py
import re
from bisect import bisect_right
from pathlib import Path
from typing import Iterator, List, NamedTuple, Optional

from css_classnames.errors import CssSyntaxError


class Token(NamedTuple):
    kind: str  # "space", "comment", "word", "string", "at-word", "{", "}", ";"
    value: str
    line: int
    column: int


_SPACE = re.compile(r"\s+")
_AT_WORD = re.compile(r"@-?[_a-zA-Z][_a-zA-Z0-9-]*")
_STRINGS = {
    '"': re.compile(r'"(?:[^"\\]|\\.)*"', re.S),
    "'": re.compile(r"'(?:[^'\\]|\\.)*'", re.S),
}
_ESCAPE = re.compile(r"\\(?:[0-9a-fA-F]{1,6}\s?|.)", re.S)
# Unquoted url( ... ) may hold "//", ";" and other characters that end a word.
_URL = re.compile(r"url\(\s*(?![\s'\"])", re.I)
_WORD = re.compile(r"(?:(?!url\(\s*[^\s'\"])[^\s{};'\"/\\#@])+", re.I)


class Tokenizer:
    """Splits SCSS-superset stylesheet text into positioned tokens."""

    def __init__(self, text: str, source: Optional[Path] = None):
        self.text = text
        self.source = source
        self._line_starts = [0] + [m.end() for m in re.finditer(r"\n", text)]

    def position(self, offset: int):
        line = bisect_right(self._line_starts, offset)
        return line, offset - self._line_starts[line - 1] + 1

    def error(self, reason: str, offset: int) -> CssSyntaxError:
        line, column = self.position(offset)
        return CssSyntaxError(reason, self.source, line, column)

    def tokens(self) -> Iterator[Token]:
        text = self.text
        pos = 0
        while pos < len(text):
            kind, end = self._next(pos)
            line, column = self.position(pos)
            yield Token(kind, text[pos:end], line, column)
            pos = end

    def _next(self, pos: int):
        text = self.text
        ch = text[pos]

        if ch.isspace():
            return "space", _SPACE.match(text, pos).end()

        if ch in "{};":
            return ch, pos + 1

        if ch in _STRINGS:
            m = _STRINGS[ch].match(text, pos)
            if not m:
                raise self.error("Unclosed string", pos)
            return "string", m.end()

        if text.startswith("/*", pos):
            end = text.find("*/", pos + 2)
            if end == -1:
                raise self.error("Unclosed comment", pos)
            return "comment", end + 2

        if text.startswith("//", pos):
            end = text.find("\n", pos)
            return "comment", len(text) if end == -1 else end

        if ch == "@":
            m = _AT_WORD.match(text, pos)
            return ("at-word", m.end()) if m else ("word", pos + 1)

        if text.startswith("#{", pos):
            return "word", self._interpolation_end(pos)

        if ch == "\\":
            m = _ESCAPE.match(text, pos)
            return "word", m.end() if m else pos + 1

        m = _URL.match(text, pos)
        if m:
            end = text.find(")", m.end())
            if end == -1:
                raise self.error("Unclosed bracket", pos)
            return "word", end + 1

        m = _WORD.match(text, pos)
        if m:
            return "word", m.end()

        # Lone "/", "#" or "@" that did not start anything special
        return "word", pos + 1

    def _interpolation_end(self, pos: int) -> int:
        depth = 0
        for i in range(pos + 1, len(self.text)):
            if self.text[i] == "{":
                depth += 1
            elif self.text[i] == "}":
                depth -= 1
                if depth == 0:
                    return i + 1
        raise self.error("Unclosed interpolation", pos)

    @staticmethod
    def tokenize(text: str, source: Optional[Path] = None) -> List[Token]:
        """Tokenizes the whole text; raises CssSyntaxError on malformed input."""
        return list(Tokenizer(text, source).tokens())
