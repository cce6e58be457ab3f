"""
Statement parser for TableDB.

Turns one statement into a typed Command. Supported shapes (keywords are
case-insensitive, a trailing semicolon is optional):

    SELECT * FROM <table>
    SELECT * FROM <table> WHERE id = <integer>
    INSERT INTO <table> (<col>, ...) VALUES (<val>, ...)

List items are trimmed. An item written as a single quoted string is
unquoted, so quoted values may contain commas and parentheses. Any other
item is taken verbatim, inner spaces and apostrophes included (Don't).

Invariants:
    - parse() is pure: the same text gives the same Command or ParseError
    - parse() raises nothing but ParseError
    - No semantic checks here (unknown columns are the executor's call)

How to change safely:
    - Add a Command variant before adding a branch
    - Keep error messages stable, clients match on them
"""

from __future__ import annotations

from typing import List

from ..errors import ParseError
from .commands import Command, Insert, SelectAll, SelectById
from .lexer import Token, TokenType, tokenize

UNSUPPORTED_COMMAND = "unsupported command"
COUNT_MISMATCH = "column/value count mismatch"

# Matches the interpreter's default int/str conversion limit
MAX_ID_DIGITS = 4300


def clean_statement(text: str) -> str:
    """Strip surrounding whitespace and NUL terminators."""
    return text.strip().strip("\x00").strip()


def parse(text: str) -> Command:
    """Parse a statement into a Command.

    Args:
        text: Raw statement text

    Returns:
        SelectAll, SelectById or Insert

    Raises:
        ParseError: If the statement is not one of the supported shapes
    """
    return _Parser(clean_statement(text)).parse()


class _Parser:
    """Recursive-descent parser over the token list of one statement."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = tokenize(text)
        self.pos = 0

    def parse(self) -> Command:
        token = self._peek()
        if token.is_keyword("SELECT"):
            return self._parse_select()
        if token.is_keyword("INSERT"):
            return self._parse_insert()
        raise self._unsupported()

    # Statement shapes

    def _parse_select(self) -> Command:
        self._expect_keyword("SELECT")
        self._expect(TokenType.STAR)
        self._expect_keyword("FROM")
        table = self._expect(TokenType.WORD).value

        if not self._peek().is_keyword("WHERE"):
            self._expect_end()
            return SelectAll(table=table)

        self._advance()
        self._expect_keyword("ID")
        self._expect(TokenType.EQUALS)
        literal = self._expect(TokenType.WORD).value
        if not literal.isdigit() or len(literal) > MAX_ID_DIGITS:
            raise self._unsupported()
        self._expect_end()
        try:
            record_id = int(literal)
        except ValueError:
            # PYTHONINTMAXSTRDIGITS set below MAX_ID_DIGITS
            raise self._unsupported() from None
        return SelectById(table=table, id=record_id)

    def _parse_insert(self) -> Insert:
        self._expect_keyword("INSERT")
        self._expect_keyword("INTO")
        table = self._expect(TokenType.WORD).value
        columns = self._parse_list()
        self._expect_keyword("VALUES")
        values = self._parse_list()
        self._expect_end()

        if len(columns) != len(values):
            raise ParseError(COUNT_MISMATCH, statement=self.text)
        return Insert(table=table, columns=tuple(columns), values=tuple(values))

    def _parse_list(self) -> List[str]:
        """Parse a parenthesized, comma separated list of raw items."""
        self._expect(TokenType.LPAREN)
        if self._peek().type == TokenType.RPAREN:
            raise self._unsupported()

        items: List[str] = []
        current: List[Token] = []
        while True:
            token = self._peek()
            if token.type == TokenType.EOF:
                raise self._unsupported()
            self._advance()
            if token.type == TokenType.RPAREN:
                items.append(self._item_text(current))
                return items
            if token.type == TokenType.COMMA:
                items.append(self._item_text(current))
                current = []
            else:
                current.append(token)

    def _item_text(self, tokens: List[Token]) -> str:
        if not tokens:
            return ""
        if len(tokens) == 1 and tokens[0].type == TokenType.STRING:
            return tokens[0].value
        return self.text[tokens[0].start : tokens[-1].end]

    # Token helpers

    def _peek(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.type != TokenType.EOF:
            self.pos += 1
        return token

    def _expect(self, token_type: TokenType) -> Token:
        if self._peek().type != token_type:
            raise self._unsupported()
        return self._advance()

    def _expect_keyword(self, keyword: str) -> Token:
        if not self._peek().is_keyword(keyword):
            raise self._unsupported()
        return self._advance()

    def _expect_end(self) -> None:
        if self._peek().type == TokenType.SEMICOLON:
            self._advance()
        self._expect(TokenType.EOF)

    def _unsupported(self) -> ParseError:
        return ParseError(UNSUPPORTED_COMMAND, statement=self.text)
