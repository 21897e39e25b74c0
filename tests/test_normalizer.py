import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from recognizer.ner_normalize import collapse_whitespace, normalize, normalize_char


@pytest.mark.parametrize(
    "text",
    [
        "",
        "plain ascii",
        "Z\N{LATIN SMALL LETTER U WITH DIAERESIS}rich",
        "\N{LATIN SMALL LIGATURE FI}ne",
        "tab\tnewline\ncr\r",
        "\N{LEFT DOUBLE QUOTATION MARK}quoted\N{RIGHT DOUBLE QUOTATION MARK}",
        "emoji \N{GRINNING FACE} here",
    ],
)
def test_normalize_preserves_length(text):
    assert len(normalize(text)) == len(text)


def test_diacritics_are_removed():
    assert normalize("Z\N{LATIN SMALL LETTER U WITH DIAERESIS}rich") == "Zurich"
    assert normalize("caf\N{LATIN SMALL LETTER E WITH ACUTE}") == "cafe"
    assert normalize("\N{LATIN CAPITAL LETTER A WITH RING ABOVE}") == "A"


def test_typographic_punctuation_becomes_ascii():
    assert normalize("O\N{RIGHT SINGLE QUOTATION MARK}Brien") == "O'Brien"
    assert normalize("\N{LEFT DOUBLE QUOTATION MARK}x\N{RIGHT DOUBLE QUOTATION MARK}") == '"x"'
    assert normalize("a\N{EM DASH}b\N{EN DASH}c") == "a-b-c"
    assert normalize_char("\N{SOFT HYPHEN}") == "-"
    assert normalize_char("\N{HORIZONTAL ELLIPSIS}") == "."


def test_whitespace_and_controls_become_spaces():
    assert normalize("a\tb\nc\rd") == "a b c d"
    assert normalize("a\N{NO-BREAK SPACE}b") == "a b"
    assert normalize_char("\x00") == " "
    assert normalize_char("\x07") == " "


def test_characters_without_single_representative_are_kept():
    # NFKD expands the ligature to two characters
    assert normalize_char("\N{LATIN SMALL LIGATURE FI}") == "\N{LATIN SMALL LIGATURE FI}"
    assert normalize_char("\N{GRINNING FACE}") == "\N{GRINNING FACE}"


def test_ascii_is_unchanged():
    text = "Hello, World! 123 (x) [y] {z}"
    assert normalize(text) == text


def test_collapse_whitespace():
    assert collapse_whitespace("Paris   City") == "Paris City"
    assert collapse_whitespace("a \t\n b") == "a b"
    assert collapse_whitespace("none") == "none"
