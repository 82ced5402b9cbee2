"""
Token stream for model specification text.

Splits text into NAME, NUMBER, STRING and OP tokens (plus a final EOF),
dropping whitespace and ``#`` comments. Operators match longest-first, so
``@=``, ``**`` and ``<=`` arrive as single tokens. Every token keeps its
source location, and expression text is later sliced straight out of the
original source using token offsets.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List

from spikespec.errors import SourceLocation, SpecificationError

NAME = "NAME"
NUMBER = "NUMBER"
STRING = "STRING"
OP = "OP"
EOF = "EOF"

_OPERATORS = [
    "**=", "//=", ">>=", "<<=",
    "**", "//", "==", "!=", "<=", ">=", "+=", "-=", "*=", "/=", "%=", "@=",
    "&=", "|=", "^=", "->", "<<", ">>", ":=",
    "+", "-", "*", "/", "%", "@", "<", ">", "=", "(", ")", "[", "]", "{", "}",
    ",", ":", ";", ".", "~", "&", "|", "^",
]

_TOKEN_RE = re.compile(
    r"""
    (?P<SKIP>[ \t\r\f\v]+|\#[^\n]*)
  | (?P<NEWLINE>\n)
  | (?P<NUMBER>(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?j?)
  | (?P<NAME>[^\W\d]\w*)
  | (?P<STRING>'[^'\\\n]*(?:\\.[^'\\\n]*)*'|"[^"\\\n]*(?:\\.[^"\\\n]*)*")
  | (?P<OP>{operators})
    """.format(operators="|".join(re.escape(op) for op in _OPERATORS)),
    re.VERBOSE,
)


@dataclass(frozen=True)
class Token:
    """One lexical token.

    Attributes:
        kind: NAME, NUMBER, STRING, OP or EOF
        text: Exact source text of the token
        location: Where the token starts
    """

    kind: str
    text: str
    location: SourceLocation

    @property
    def start(self) -> int:
        return self.location.offset

    @property
    def end(self) -> int:
        return self.location.offset + len(self.text)

    def is_op(self, text: str) -> bool:
        return self.kind == OP and self.text == text

    def describe(self) -> str:
        if self.kind == EOF:
            return "end of input"
        return f"`{self.text}`"


def _iter_tokens(text: str) -> Iterator[Token]:
    line = 1
    line_start = 0
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise SpecificationError(
                f"Unexpected character {text[pos]!r}",
                SourceLocation(line, pos - line_start, pos),
            )
        kind = match.lastgroup
        if kind == "NEWLINE":
            line += 1
            line_start = match.end()
        elif kind != "SKIP":
            yield Token(kind, match.group(), SourceLocation(line, pos - line_start, pos))
        pos = match.end()
    yield Token(EOF, "", SourceLocation(line, pos - line_start, pos))


def tokenize(text: str) -> List[Token]:
    """Split specification text into tokens, ending with an EOF token.

    Raises:
        SpecificationError: On a character that starts no token
    """
    return list(_iter_tokens(text))
