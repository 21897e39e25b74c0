"""
Markup elements and a flattened-content document.

A MarkupDocument is plain text content plus elements inserted over character
ranges of that content. It is the simplest document model the recognizer can
write into: get_content() gives the text to scan and insert_markup() receives
the matches. Richer document models only need the same three methods
(get_content, insert_markup, copy).
"""

import bisect
import logging
import xml.etree.ElementTree as ElementTree
from dataclasses import dataclass, field
from html import escape
from typing import Dict, List, Optional, Tuple, Union

from .ner_errors import ConfigurationError
from .ner_options import Balancing

logger = logging.getLogger(__name__)


@dataclass
class MarkupElement:
    """An element without content: a name and attributes."""

    name: str
    attributes: Dict[str, str] = field(default_factory=dict)

    def shallow_copy(self) -> "MarkupElement":
        return MarkupElement(name=self.name, attributes=dict(self.attributes))

    def set_attribute(self, name: str, value: str):
        self.attributes[name] = value

    @classmethod
    def from_xml(cls, source: str) -> "MarkupElement":
        """
        Build an element from XML text such as '<entity ids=""/>'. Child nodes
        and text are ignored.

        Raises:
            ConfigurationError: If source is not well-formed XML
        """
        try:
            element = ElementTree.fromstring(source)
        except ElementTree.ParseError as e:
            raise ConfigurationError(f"The match template is not well-formed XML: {e}") from e
        return cls(name=element.tag, attributes=dict(element.attrib))

    def start_tag(self) -> str:
        attrs = "".join(
            f' {name}="{escape(value, quote=True)}"'
            for name, value in self.attributes.items()
        )
        return f"<{self.name}{attrs}>"

    def end_tag(self) -> str:
        return f"</{self.name}>"


def template_attribute(template: MarkupElement) -> str:
    """
    The name of the single empty attribute of a match template, which receives
    the ids of the matched entities.

    Raises:
        ConfigurationError: If the template has no or several empty attributes
    """
    empty = [name for name, value in template.attributes.items() if not value]
    if not empty:
        raise ConfigurationError(
            "The match element template must have exactly one empty attribute. Found none."
        )
    if len(empty) > 1:
        raise ConfigurationError(
            "The match element template must have exactly one empty attribute."
            f" Found {', '.join(empty)}."
        )
    return empty[0]


def as_template(template: Union[MarkupElement, str]) -> MarkupElement:
    """Accept a template element or its XML text."""
    if isinstance(template, MarkupElement):
        return template
    if isinstance(template, str):
        return MarkupElement.from_xml(template)
    raise ConfigurationError(
        f"The match element template must be an element, not {type(template).__name__}."
    )


@dataclass(frozen=True)
class InsertedMarkup:
    """An element inserted over the characters [start, end) of the content."""

    element: MarkupElement
    balancing: Balancing
    start: int
    end: int


class MarkupDocument:
    """
    Text content with properly nested markup elements over character ranges.
    """

    def __init__(self, content: str, markup: Optional[List[InsertedMarkup]] = None):
        self.content = content
        self._markup: List[InsertedMarkup] = []
        self._keys: List[Tuple[int, int]] = []
        self._max_end = 0
        for inserted in markup or ():
            self.insert_markup(
                inserted.element, inserted.balancing, inserted.start, inserted.end
            )

    def get_content(self) -> str:
        return self.content

    @property
    def markup(self) -> Tuple[InsertedMarkup, ...]:
        """Inserted elements ordered by start, outer elements first."""
        return tuple(self._markup)

    def insert_markup(
        self, element: MarkupElement, balancing: Balancing, start: int, end: int
    ):
        """
        Insert an element spanning content[start:end].

        Raises:
            ValueError: If the range is outside the content or crosses the range
                of an element that is already present
        """
        if not 0 <= start <= end <= len(self.content):
            raise ValueError(
                f"Markup range [{start}, {end}) is outside the content (length {len(self.content)})"
            )
        # Elements inserted in text order after all others cannot cross anything.
        if start < self._max_end:
            for other in self._markup:
                crosses = (other.start < start < other.end < end) or (
                    start < other.start < end < other.end
                )
                if crosses:
                    raise ValueError(
                        f"Markup range [{start}, {end}) crosses [{other.start}, {other.end});"
                        f" balancing {balancing.name} is not supported by MarkupDocument"
                    )
        key = (start, -end)
        index = bisect.bisect_right(self._keys, key)
        self._keys.insert(index, key)
        self._markup.insert(index, InsertedMarkup(element, balancing, start, end))
        self._max_end = max(self._max_end, end)

    def copy(self) -> "MarkupDocument":
        """A copy whose markup can be changed independently."""
        duplicate = MarkupDocument(self.content)
        duplicate._markup = list(self._markup)
        duplicate._keys = list(self._keys)
        duplicate._max_end = self._max_end
        return duplicate

    def to_xml(self, root: Optional[MarkupElement] = None) -> str:
        """
        Serialize the content with its markup, optionally wrapped in a root
        element.
        """
        parts: List[str] = []
        open_elements: List[InsertedMarkup] = []
        position = 0

        def close_until(offset: int):
            nonlocal position
            while open_elements and open_elements[-1].end <= offset:
                inner = open_elements.pop()
                parts.append(escape(self.content[position : inner.end], quote=False))
                parts.append(inner.element.end_tag())
                position = inner.end

        if root is not None:
            parts.append(root.start_tag())
        for inserted in self._markup:
            close_until(inserted.start)
            parts.append(escape(self.content[position : inserted.start], quote=False))
            parts.append(inserted.element.start_tag())
            position = inserted.start
            open_elements.append(inserted)
        close_until(len(self.content))
        parts.append(escape(self.content[position:], quote=False))
        if root is not None:
            parts.append(root.end_tag())
        return "".join(parts)
