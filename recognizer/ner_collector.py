"""
Match collection: turns accepted matches into markup insertions.
"""

import logging
from typing import Iterable

from .ner_ast import MatchSpan, Span
from .ner_markup import MarkupElement
from .ner_options import Balancing

logger = logging.getLogger(__name__)

# Joins the ids of the entities matched by one span.
ID_SEPARATOR = "\t"


class MatchCollector:
    """
    Inserts a copy of the match template into a document for every match, with
    the template's empty attribute set to the matched entity ids.

    The document needs an insert_markup(element, balancing, start, end) method.
    """

    def __init__(
        self,
        document,
        template: MarkupElement,
        attribute_name: str,
        balancing: Balancing = Balancing.OUTER,
        separator: str = ID_SEPARATOR,
    ):
        self.document = document
        self.template = template
        self.attribute_name = attribute_name
        self.balancing = balancing
        self.separator = separator

    def match(self, text: str, span: MatchSpan):
        element = self.template.shallow_copy()
        element.set_attribute(self.attribute_name, self.separator.join(span.ids))
        self.document.insert_markup(element, self.balancing, span.start, span.end)

    def no_match(self, text: str, span: Span):
        # Unmatched text stays as it is.
        pass

    def collect(self, spans: Iterable[Span], text: str = "") -> int:
        """
        Handle the spans of one scan of text (passed on to match and no_match).

        Returns:
            The number of inserted elements
        """
        count = 0
        for span in spans:
            if isinstance(span, MatchSpan):
                self.match(text, span)
                count += 1
            else:
                self.no_match(text, span)
        logger.debug("Inserted %s %s elements", count, self.template.name)
        return count
