"""
Unit tests for the statement parser.

Tests cover:
- The three supported statement shapes
- Keyword case and whitespace handling
- List splitting, trimming and quoting
- Rejection of everything else
"""

import pytest

from dbaas.tabledb_server.errors import ParseError
from dbaas.tabledb_server.query import (
    COUNT_MISMATCH,
    UNSUPPORTED_COMMAND,
    Insert,
    SelectAll,
    SelectById,
    clean_statement,
    parse,
)
from dbaas.tabledb_server.query.lexer import TokenType, tokenize


class TestSelect:
    """Tests for SELECT statements."""

    def test_select_all(self):
        """SELECT * FROM table parses to SelectAll."""
        assert parse("SELECT * FROM spells") == SelectAll(table="spells")

    def test_select_by_id(self):
        """WHERE id = n parses to SelectById."""
        assert parse("SELECT * FROM spells WHERE id = 1") == SelectById(table="spells", id=1)

    def test_keywords_case_insensitive(self):
        """Keywords match regardless of case."""
        assert parse("select * from spells where ID = 7") == SelectById(table="spells", id=7)
        assert parse("SeLeCt * FrOm spells") == SelectAll(table="spells")

    def test_table_name_case_preserved(self):
        """Table names keep their case."""
        assert parse("SELECT * FROM Spell_Book2") == SelectAll(table="Spell_Book2")

    def test_surrounding_whitespace_ignored(self):
        """Leading and trailing whitespace is stripped."""
        assert parse("  \tSELECT * FROM spells \r\n") == SelectAll(table="spells")

    def test_extra_inner_whitespace(self):
        """Tokens may be separated by any whitespace."""
        assert parse("SELECT   *\tFROM  spells  WHERE id=3") == SelectById(table="spells", id=3)

    def test_trailing_semicolon(self):
        """A trailing semicolon is optional."""
        assert parse("SELECT * FROM spells;") == SelectAll(table="spells")
        assert parse("SELECT * FROM spells WHERE id = 2 ;") == SelectById(table="spells", id=2)

    def test_trailing_nul_terminator(self):
        """NUL terminators sent by front-ends are ignored."""
        assert parse("SELECT * FROM spells\x00") == SelectAll(table="spells")
        assert parse("SELECT * FROM spells WHERE id = 4\x00\n") == SelectById(
            table="spells", id=4
        )

    def test_leading_zeros_in_id(self):
        """Integer literals are decimal."""
        assert parse("SELECT * FROM spells WHERE id = 007") == SelectById(table="spells", id=7)

    def test_long_id_literal(self):
        """Long integer literals are exact."""
        assert parse("SELECT * FROM spells WHERE id = " + "9" * 100) == SelectById(
            table="spells", id=int("9" * 100)
        )

    @pytest.mark.parametrize(
        "statement",
        [
            "SELECT name FROM spells",
            "SELECT * FROM",
            "SELECT * FROM spells WHERE name = 1",
            "SELECT * FROM spells WHERE id = -1",
            "SELECT * FROM spells WHERE id = 1.5",
            "SELECT * FROM spells WHERE id = abc",
            "SELECT * FROM spells WHERE id =",
            "SELECT * FROM spells LIMIT 1",
            "SELECT * FROM spells;;",
            "SELECT * FROM my-table",
            "SELECT * FROM spells WHERE id = " + "9" * 5000,
        ],
    )
    def test_malformed_select(self, statement):
        """Near-miss SELECTs are unsupported."""
        with pytest.raises(ParseError) as exc_info:
            parse(statement)
        assert exc_info.value.message == UNSUPPORTED_COMMAND


class TestInsert:
    """Tests for INSERT statements."""

    def test_insert(self):
        """INSERT pairs columns and values positionally."""
        command = parse(
            "INSERT INTO spells (name, description) VALUES (Fireball, Deals damage)"
        )
        assert command == Insert(
            table="spells",
            columns=("name", "description"),
            values=("Fireball", "Deals damage"),
        )
        assert command.fields == {"name": "Fireball", "description": "Deals damage"}

    def test_items_trimmed(self):
        """List items are whitespace-trimmed."""
        command = parse("INSERT INTO spells (  name ,description  ) VALUES (  a b  ,  c )")
        assert command.columns == ("name", "description")
        assert command.values == ("a b", "c")

    def test_quoted_values_unquoted(self):
        """Single- and double-quoted items are unquoted."""
        command = parse(
            "INSERT INTO spells (id, name, description) VALUES (1, 'Fireball', \"Deals damage\")"
        )
        assert command.values == ("1", "Fireball", "Deals damage")

    def test_quoted_values_keep_commas_and_parens(self):
        """Quoted items may contain commas and parentheses."""
        command = parse("INSERT INTO spells (name, description) VALUES ('a, b', '(c)')")
        assert command.fields == {"name": "a, b", "description": "(c)"}

    def test_unquoted_punctuation_kept(self):
        """Unquoted items are taken verbatim."""
        command = parse("INSERT INTO spells (name) VALUES (Fire-ball!)")
        assert command.values == ("Fire-ball!",)

    def test_apostrophes_in_unquoted_values(self):
        """Apostrophes inside a value neither quote nor join items."""
        command = parse("INSERT INTO spells (name, description) VALUES (Don't, it's hot)")
        assert command.values == ("Don't", "it's hot")

        command = parse("INSERT INTO spells (name) VALUES (O'Brien)")
        assert command.values == ("O'Brien",)

    def test_quoted_and_apostrophe_items_mixed(self):
        """A quoted item and an apostrophe item side by side."""
        command = parse("INSERT INTO spells (name, description) VALUES ('a, b', O'Brien's)")
        assert command.values == ("a, b", "O'Brien's")

    def test_empty_items(self):
        """Empty items are kept, the executor decides what they mean."""
        command = parse("INSERT INTO spells (name, ) VALUES (x, )")
        assert command.columns == ("name", "")
        assert command.values == ("x", "")

    def test_no_semantic_validation(self):
        """Unknown columns parse fine."""
        command = parse("INSERT INTO spells (power) VALUES (9000)")
        assert command.fields == {"power": "9000"}

    def test_repeated_column_kept_positionally(self):
        """Repeated columns stay visible in columns."""
        command = parse("INSERT INTO spells (name, name) VALUES (a, b)")
        assert command.columns == ("name", "name")
        assert command.fields == {"name": "b"}

    def test_nul_terminated_insert(self):
        """Front-end style statements with NUL terminators parse."""
        command = parse("INSERT INTO spells (name) VALUES ('Fireball')\x00")
        assert command.fields == {"name": "Fireball"}

    @pytest.mark.parametrize(
        "statement",
        [
            "INSERT INTO spells (name, description) VALUES (Fireball)",
            "INSERT INTO spells (name) VALUES (a, b)",
        ],
    )
    def test_count_mismatch(self, statement):
        """Column/value arity mismatch is its own error."""
        with pytest.raises(ParseError) as exc_info:
            parse(statement)
        assert exc_info.value.message == COUNT_MISMATCH

    @pytest.mark.parametrize(
        "statement",
        [
            "INSERT INTO spells VALUES (a)",
            "INSERT INTO spells (name) (a)",
            "INSERT INTO spells () VALUES ()",
            "INSERT INTO spells (name) VALUES (a",
            "INSERT INTO spells (name) VALUES ((a))",
            "INSERT INTO spells (name) VALUES (a) extra",
            "INSERT spells (name) VALUES (a)",
        ],
    )
    def test_malformed_insert(self, statement):
        """Malformed INSERTs are unsupported."""
        with pytest.raises(ParseError) as exc_info:
            parse(statement)
        assert exc_info.value.message == UNSUPPORTED_COMMAND

    def test_mismatch_after_malformed_tail_is_unsupported(self):
        """Shape is checked before arity."""
        with pytest.raises(ParseError) as exc_info:
            parse("INSERT INTO spells (a, b) VALUES (1) trailing")
        assert exc_info.value.message == UNSUPPORTED_COMMAND

    def test_unterminated_quote(self):
        """An unterminated quote is reported."""
        with pytest.raises(ParseError) as exc_info:
            parse("INSERT INTO spells (name) VALUES ('Fireball)")
        assert exc_info.value.message == "unterminated quoted value"

    def test_insert_requires_equal_lengths(self):
        """Insert refuses mismatched tuples when built directly."""
        with pytest.raises(ValueError):
            Insert(table="t", columns=("a",), values=())


class TestUnsupported:
    """Tests for statements outside the grammar."""

    @pytest.mark.parametrize(
        "statement",
        [
            "",
            "   ",
            "DROP TABLE spells",
            "DELETE FROM spells WHERE id = 1",
            "UPDATE spells SET name = x",
            "hello",
            "\x00",
        ],
    )
    def test_unsupported(self, statement):
        """Anything else is an unsupported command."""
        with pytest.raises(ParseError) as exc_info:
            parse(statement)
        assert exc_info.value.message == UNSUPPORTED_COMMAND
        assert exc_info.value.code == "PARSE_ERROR"

    def test_parse_is_deterministic(self):
        """Parsing the same text twice gives equal results."""
        text = "INSERT INTO spells (name) VALUES ('x')"
        assert parse(text) == parse(text)

        for bad in ("DROP TABLE spells", "INSERT INTO t (a) VALUES (1, 2)"):
            with pytest.raises(ParseError) as first:
                parse(bad)
            with pytest.raises(ParseError) as second:
                parse(bad)
            assert first.value.message == second.value.message


class TestLexer:
    """Tests for the tokenizer."""

    def test_token_types(self):
        """Words, punctuation and strings are recognized."""
        tokens = tokenize("SELECT * FROM t WHERE id = 1;")
        assert [t.type for t in tokens] == [
            TokenType.WORD,
            TokenType.STAR,
            TokenType.WORD,
            TokenType.WORD,
            TokenType.WORD,
            TokenType.WORD,
            TokenType.EQUALS,
            TokenType.WORD,
            TokenType.SEMICOLON,
            TokenType.EOF,
        ]

    def test_offsets(self):
        """Tokens carry source offsets."""
        tokens = tokenize("ab ('c d')")
        assert (tokens[0].start, tokens[0].end) == (0, 2)
        assert tokens[2].type == TokenType.STRING
        assert tokens[2].value == "c d"
        assert (tokens[2].start, tokens[2].end) == (4, 9)

    def test_other_characters(self):
        """Unknown characters become OTHER tokens."""
        tokens = tokenize("a-b")
        assert [t.type for t in tokens] == [
            TokenType.WORD,
            TokenType.OTHER,
            TokenType.WORD,
            TokenType.EOF,
        ]

    def test_clean_statement(self):
        """Whitespace and NULs are stripped from both ends only."""
        assert clean_statement(" \x00a\x00b\x00\n") == "a\x00b"

    def test_quote_mid_item_is_other(self):
        """Only a quote that starts a list item opens a string."""
        tokens = tokenize("(it's, x)")
        assert [t.type for t in tokens] == [
            TokenType.LPAREN,
            TokenType.WORD,
            TokenType.OTHER,
            TokenType.WORD,
            TokenType.COMMA,
            TokenType.WORD,
            TokenType.RPAREN,
            TokenType.EOF,
        ]

    def test_quote_outside_list_is_other(self):
        """Quotes outside a list never raise."""
        tokens = tokenize("SELECT 'x")
        assert tokens[1].type == TokenType.OTHER
