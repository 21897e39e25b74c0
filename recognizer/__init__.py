"""
Trie-based named entity recognition.

Entities are defined one per line as ``id <- surface form[TAB surface form]*``
and found in text with tolerance for diacritics, typographic punctuation,
irregular whitespace, case and interleaved noise, controlled by thresholds.

- ner_normalize: one-to-one text normalization
- ner_trie: trie dictionary of surface forms
- ner_parser: grammar parsing and compilation
- ner_scanner: the boundary-aware scan driver
- ner_collector: markup insertion for matches
- ner_markup: match templates and a flattened-content document
- ner_recognizer: build_scanner() entry point
"""

from .ner_ast import Grammar, MatchSpan, RuleDef, ScanCandidate, UnmatchedSpan
from .ner_collector import MatchCollector
from .ner_errors import (
    ConfigurationError,
    GrammarIOError,
    GrammarSyntaxError,
    InternalConsistencyError,
    RecognizerError,
)
from .ner_markup import MarkupDocument, MarkupElement
from .ner_normalize import normalize
from .ner_options import Balancing, RecognizerOptions, ScanOptions, options_from_mapping
from .ner_parser import compile_grammar, compile_source, parse_file, parse_string
from .ner_recognizer import Scanner, build_scanner
from .ner_scanner import find_matches, scan
from .ner_trie import TrieDictionary

__all__ = [
    "Balancing",
    "ConfigurationError",
    "Grammar",
    "GrammarIOError",
    "GrammarSyntaxError",
    "InternalConsistencyError",
    "MarkupDocument",
    "MarkupElement",
    "MatchCollector",
    "MatchSpan",
    "RecognizerError",
    "RecognizerOptions",
    "RuleDef",
    "ScanCandidate",
    "ScanOptions",
    "Scanner",
    "TrieDictionary",
    "UnmatchedSpan",
    "build_scanner",
    "compile_grammar",
    "compile_source",
    "find_matches",
    "normalize",
    "options_from_mapping",
    "parse_file",
    "parse_string",
    "scan",
]
