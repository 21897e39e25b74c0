"""
Entry point: build a scanner from a grammar, a match template and options.
"""

import logging
from typing import Any, Iterator, List, Mapping, Optional, Union

from .ner_ast import MatchSpan, Span
from .ner_collector import MatchCollector
from .ner_markup import MarkupElement, as_template, template_attribute
from .ner_options import RecognizerOptions, options_from_mapping
from .ner_parser import compile_source
from .ner_scanner import find_matches, scan
from .ner_trie import TrieDictionary

logger = logging.getLogger(__name__)


class Scanner:
    """
    Recognizes the entities of a compiled grammar in texts and documents.

    A Scanner holds no per-scan state, so one instance can serve several
    threads at once.
    """

    def __init__(
        self,
        trie: TrieDictionary,
        template: MarkupElement,
        attribute_name: str,
        options: RecognizerOptions,
    ):
        self.trie = trie
        self.template = template
        self.attribute_name = attribute_name
        self.options = options

    def spans(self, text: str) -> Iterator[Span]:
        """Matched and unmatched spans of text, in order."""
        return scan(text, self.trie, self.options.scan)

    def matches(self, text: str) -> List[MatchSpan]:
        return find_matches(text, self.trie, self.options.scan)

    def scan(self, document):
        """
        Mark up the entities in a document.

        Args:
            document: An object with get_content(), insert_markup() and copy(),
                such as a MarkupDocument

        Returns:
            A copy of document with an element inserted for every match; the
            document itself is not changed
        """
        transformed = document.copy()
        text = transformed.get_content()
        collector = MatchCollector(
            transformed, self.template, self.attribute_name, self.options.balancing
        )
        count = collector.collect(scan(text, self.trie, self.options.scan), text)
        logger.info("Recognized %s entities in %s characters", count, len(text))
        return transformed


def build_scanner(
    grammar_source: Any,
    template: Union[MarkupElement, str],
    options: Optional[Union[Mapping[str, Any], RecognizerOptions]] = None,
) -> Scanner:
    """
    Compile a grammar into a scanner.

    Args:
        grammar_source: Grammar text, a path, a stream, UTF-8 bytes, or None
        template: Match element template with exactly one empty attribute, or
            its XML text
        options: Option map (keys as in OPTION_KEYS) or RecognizerOptions

    Raises:
        ConfigurationError: On bad options or a bad template
        GrammarSyntaxError: On a bad grammar line
        GrammarIOError: If the grammar cannot be read
    """
    recognizer_options = options_from_mapping(options)
    match_template = as_template(template)
    attribute_name = template_attribute(match_template)

    scan_options = recognizer_options.scan
    trie = TrieDictionary(scan_options.word_chars, scan_options.no_word_before)
    compile_source(grammar_source, trie)
    trie.freeze()
    return Scanner(trie, match_template, attribute_name, recognizer_options)
