# src/css_classnames/core/syntax.py
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from css_classnames.errors import CssSyntaxError
from css_classnames.models import SourceDocument
from css_classnames.utils.tokenizer import Token, Tokenizer


@dataclass
class Declaration:
    prop: str
    value: str
    source: Optional[Path] = None
    line: int = 0
    column: int = 0


@dataclass
class AtRule:
    name: str
    params: str
    # None for body-less statements such as `@import "a.css";`
    nodes: Optional[List["Node"]] = None
    source: Optional[Path] = None
    line: int = 0
    column: int = 0


@dataclass
class Rule:
    selector: str
    nodes: List["Node"] = field(default_factory=list)
    source: Optional[Path] = None
    line: int = 0
    column: int = 0


@dataclass
class Stylesheet:
    nodes: List["Node"] = field(default_factory=list)
    source: Optional[Path] = None


Node = Union[Declaration, AtRule, Rule]


def _text(tokens: List[Token]) -> str:
    # Comments behave like whitespace inside selectors and params.
    return "".join(" " if t.kind == "comment" else t.value for t in tokens).strip()


def _significant(tokens: List[Token]) -> List[Token]:
    return [t for t in tokens if t.kind not in ("space", "comment")]


class Parser:
    """Builds a nested statement tree out of a token stream."""

    def __init__(self, tokens: List[Token], source: Optional[Path] = None):
        self.tokens = tokens
        self.source = source

    def parse(self) -> Stylesheet:
        root = Stylesheet(source=self.source)
        stack: List[Union[Stylesheet, Rule, AtRule]] = [root]
        buffer: List[Token] = []

        for token in self.tokens:
            if token.kind == "{":
                node = self._open(buffer, token)
                stack[-1].nodes.append(node)
                stack.append(node)
                buffer = []
            elif token.kind == "}":
                if len(stack) == 1:
                    raise CssSyntaxError("Unexpected }", self.source, token.line, token.column)
                self._flush(buffer, stack[-1])
                buffer = []
                stack.pop()
            elif token.kind == ";":
                self._flush(buffer, stack[-1])
                buffer = []
            else:
                buffer.append(token)

        self._flush(buffer, stack[-1])
        if len(stack) > 1:
            unclosed = stack[-1]
            raise CssSyntaxError("Unclosed block", self.source, unclosed.line, unclosed.column)
        return root

    def _open(self, buffer: List[Token], brace: Token) -> Union[Rule, AtRule]:
        significant = _significant(buffer)
        if significant and significant[0].kind == "at-word":
            first = significant[0]
            params = _text(buffer[buffer.index(first) + 1:])
            return AtRule(first.value[1:], params, [], self.source, first.line, first.column)

        start = significant[0] if significant else brace
        return Rule(_text(buffer), [], self.source, start.line, start.column)

    def _flush(self, buffer: List[Token], parent) -> None:
        significant = _significant(buffer)
        if not significant:
            return

        first = significant[0]
        if first.kind == "at-word":
            params = _text(buffer[buffer.index(first) + 1:])
            parent.nodes.append(AtRule(first.value[1:], params, None, self.source, first.line, first.column))
            return

        text = _text(buffer)
        prop, colon, value = text.partition(":")
        if not colon:
            raise CssSyntaxError("Unknown word", self.source, first.line, first.column)
        parent.nodes.append(Declaration(prop.strip(), value.strip(), self.source, first.line, first.column))


def parse_stylesheet(document: SourceDocument) -> Stylesheet:
    """Tokenizes and parses one source document."""
    tokens = Tokenizer.tokenize(document.text, document.path)
    return Parser(tokens, document.path).parse()
