"""
Tokenizer for TableDB statements.

Splits a statement into words, quoted strings, punctuation and single
"other" characters. Every token remembers its offsets in the source so the
parser can recover the exact text of an unquoted list item, spaces
included ("Deals damage").

Invariants:
    - Tokenizing never fails except on an unterminated quoted item
    - Whitespace never produces a token
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List

from ..errors import ParseError


class TokenType(Enum):
    """Token categories."""

    WORD = "WORD"
    STRING = "STRING"
    STAR = "STAR"
    EQUALS = "EQUALS"
    COMMA = "COMMA"
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    SEMICOLON = "SEMICOLON"
    OTHER = "OTHER"
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """A token and its [start, end) offsets in the source."""

    type: TokenType
    value: str
    start: int
    end: int

    def is_keyword(self, keyword: str) -> bool:
        return self.type == TokenType.WORD and self.value.upper() == keyword


_PUNCTUATION = {
    "*": TokenType.STAR,
    "=": TokenType.EQUALS,
    ",": TokenType.COMMA,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ";": TokenType.SEMICOLON,
}

# Tokens after which a quote opens a quoted list item.
_ITEM_START = (TokenType.LPAREN, TokenType.COMMA)

# OTHER is the catch-all.
_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
    | (?P<quote>['"])
    | (?P<word>[A-Za-z0-9_]+)
    | (?P<punct>[*=,();])
    | (?P<other>.)
    """,
    re.VERBOSE | re.DOTALL,
)


def tokenize(text: str) -> List[Token]:
    """Tokenize a statement.

    A quote only delimits a string when it starts a list item, right after
    "(" or ",". Anywhere else it is an OTHER token, so apostrophes inside
    unquoted values (Don't, O'Brien) stay part of the value.

    Args:
        text: Statement text

    Returns:
        Tokens in source order, terminated by an EOF token

    Raises:
        ParseError: If a quoted item is opened and never closed
    """
    tokens: List[Token] = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        kind = match.lastgroup
        start, end = match.span()
        pos = end
        if kind == "ws":
            continue
        if kind == "quote" and tokens and tokens[-1].type in _ITEM_START:
            close = text.find(match.group(), end)
            if close < 0:
                raise ParseError("unterminated quoted value", statement=text)
            pos = close + 1
            tokens.append(Token(TokenType.STRING, text[end:close], start, pos))
        elif kind == "word":
            tokens.append(Token(TokenType.WORD, match.group(), start, end))
        elif kind == "punct":
            tokens.append(Token(_PUNCTUATION[match.group()], match.group(), start, end))
        else:
            tokens.append(Token(TokenType.OTHER, match.group(), start, end))
    tokens.append(Token(TokenType.EOF, "", len(text), len(text)))
    return tokens
