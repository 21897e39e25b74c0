import io
import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from recognizer import ner_parser
from recognizer.ner_ast import Grammar, RuleDef
from recognizer.ner_errors import GrammarIOError, GrammarSyntaxError
from recognizer.ner_trie import TrieDictionary


def test_parse_single_rule():
    grammar = ner_parser.parse_string("rsvp <- RSVP")
    assert isinstance(grammar, Grammar)
    assert grammar.rules == (RuleDef(entity_id="rsvp", surface_forms=("RSVP",), line_number=1),)
    assert grammar.rules[0].line == "rsvp <- RSVP"


def test_arrow_without_spaces():
    rule = ner_parser.parse_string("cf<-CF").rules[0]
    assert rule.entity_id == "cf"
    assert rule.surface_forms == ("CF",)


def test_tab_separated_surface_forms():
    rule = ner_parser.parse_string("nyc <- New York City\tNYC\tBig Apple").rules[0]
    assert rule.surface_forms == ("New York City", "NYC", "Big Apple")


def test_only_the_first_arrow_separates():
    rule = ner_parser.parse_string("arrow <- a <- b").rules[0]
    assert rule.entity_id == "arrow"
    assert rule.surface_forms == ("a <- b",)


def test_blank_lines_are_skipped_but_counted():
    grammar = ner_parser.parse_string("a <- x\n\n   \nb <- y\n")
    assert [rule.entity_id for rule in grammar.rules] == ["a", "b"]
    assert [rule.line_number for rule in grammar.rules] == [1, 4]


@pytest.mark.parametrize("source", ["a <- x\r\nb <- y\r\n", "a <- x\rb <- y", "a <- x\nb <- y"])
def test_line_endings(source):
    grammar = ner_parser.parse_string(source)
    assert [rule.surface_forms for rule in grammar.rules] == [("x",), ("y",)]


def test_empty_source():
    assert ner_parser.parse_string("").rules == ()
    assert ner_parser.parse_source(None).rules == ()


def test_entity_ids_in_order_of_appearance():
    grammar = ner_parser.parse_string("b <- x\na <- y\nb <- z")
    assert grammar.entity_ids == ("b", "a")


# -- Tests for error handling -- #


def test_missing_arrow():
    with pytest.raises(GrammarSyntaxError) as excinfo:
        ner_parser.parse_string("badline")
    assert excinfo.value.line_number == 1
    assert excinfo.value.line == "badline"
    assert "'<-'" in excinfo.value.reason
    assert "line 1" in str(excinfo.value)


def test_error_reports_line_number():
    with pytest.raises(GrammarSyntaxError) as excinfo:
        ner_parser.parse_string("a <- x\n\nbroken")
    assert excinfo.value.line_number == 3


def test_empty_identifier():
    with pytest.raises(GrammarSyntaxError) as excinfo:
        ner_parser.parse_string("  <- x")
    assert "entity id" in excinfo.value.reason


def test_empty_right_hand_side():
    with pytest.raises(GrammarSyntaxError) as excinfo:
        ner_parser.parse_string("a <-")
    assert "second part" in excinfo.value.reason


@pytest.mark.parametrize("line", ["a <- x\t\ty", "a <- x\t"])
def test_empty_surface_form(line):
    with pytest.raises(GrammarSyntaxError) as excinfo:
        ner_parser.parse_string(line)
    assert "tabs" in excinfo.value.reason


def test_parse_file(tmp_path):
    grammar_file = tmp_path / "entities.txt"
    grammar_file.write_text("paris <- Paris City\nrsvp <- RSVP\n", encoding="utf-8")

    grammar = ner_parser.parse_file(str(grammar_file))
    assert grammar.source_name == str(grammar_file)
    assert len(grammar.rules) == 2

    # a PathLike is read as a file, a str as grammar text
    assert ner_parser.parse_source(grammar_file).rules == grammar.rules


def test_parse_missing_file(tmp_path):
    with pytest.raises(GrammarIOError) as excinfo:
        ner_parser.parse_file(tmp_path / "missing.txt")
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)


def test_parse_binary_stream():
    stream = io.BytesIO("z <- Z\N{LATIN SMALL LETTER U WITH DIAERESIS}rich\n".encode("utf-8"))
    grammar = ner_parser.parse_stream(stream)
    assert grammar.rules[0].surface_forms == ("Z\N{LATIN SMALL LETTER U WITH DIAERESIS}rich",)


def test_parse_text_stream():
    grammar = ner_parser.parse_source(io.StringIO("a <- x\n"))
    assert grammar.rules[0].entity_id == "a"


@pytest.mark.parametrize("content", [b"a <- x\rb <- y", b"a <- x\r\nb <- y\r\n", b"a <- x\nb <- y"])
def test_binary_stream_line_endings(content):
    grammar = ner_parser.parse_stream(io.BytesIO(content))
    assert [(rule.entity_id, rule.surface_forms) for rule in grammar.rules] == [
        ("a", ("x",)),
        ("b", ("y",)),
    ]
    assert grammar.rules == ner_parser.parse_string(content.decode("utf-8")).rules


def test_text_stream_with_carriage_returns():
    grammar = ner_parser.parse_stream(io.StringIO("a <- x\rb <- y", newline=""))
    assert [rule.line_number for rule in grammar.rules] == [1, 2]


def test_invalid_utf8():
    with pytest.raises(GrammarIOError):
        ner_parser.parse_stream(io.BytesIO(b"a <- \xff\xfe\n"))
    with pytest.raises(GrammarIOError):
        ner_parser.parse_source(b"a <- \xff")


def test_unsupported_source_type():
    with pytest.raises(TypeError):
        ner_parser.parse_source(42)


class TestCompile:
    """Compiling grammars into a trie dictionary."""

    def test_compile_puts_every_surface_form(self):
        trie = TrieDictionary()
        ner_parser.compile_source("nyc <- New York City\tNYC\nparis <- Paris", trie)
        assert trie.get("New York City") == ["nyc"]
        assert trie.get("NYC") == ["nyc"]
        assert trie.get("Paris") == ["paris"]
        assert len(trie) == 3

    def test_repeated_surface_forms_merge_ids(self):
        trie = TrieDictionary()
        ner_parser.compile_source("a <- Foo\nb <- Foo\na <- Foo", trie)
        assert trie.get("Foo") == ["a", "b"]

    def test_surface_form_without_word_characters(self):
        trie = TrieDictionary()
        with pytest.raises(GrammarSyntaxError) as excinfo:
            ner_parser.compile_source("a <- foo\nb <- ...", trie)
        assert excinfo.value.line_number == 2
        assert excinfo.value.line == "b <- ..."
        # nothing was inserted
        assert trie.is_empty()

    def test_whitespace_only_surface_form(self):
        with pytest.raises(GrammarSyntaxError):
            ner_parser.compile_source("a <- x\t   ", TrieDictionary())

    def test_syntax_error_leaves_trie_untouched(self):
        trie = TrieDictionary()
        with pytest.raises(GrammarSyntaxError):
            ner_parser.compile_source("a <- foo\nbadline", trie)
        assert trie.is_empty()

    def test_compile_parsed_grammar(self):
        grammar = ner_parser.parse_string("a <- x")
        trie = ner_parser.compile_grammar(grammar, TrieDictionary())
        assert "x" in trie
