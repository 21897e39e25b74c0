"""
Options for named entity recognition.

The dynamic key/value option map accepted at the outer boundary is validated
into frozen dataclasses before any grammar is compiled or any text is scanned.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .ner_errors import ConfigurationError
from .ner_normalize import normalize

logger = logging.getLogger(__name__)


class Balancing(Enum):
    """
    Strategy used by the document model when an inserted element does not align
    with existing element boundaries. The recognizer passes it through.
    """

    OUTER = "OUTER"
    INNER = "INNER"
    START = "START"
    END = "END"

    @classmethod
    def parse(cls, value: Any) -> "Balancing":
        """Parse a balancing name, case-insensitively."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        names = ", ".join(member.name for member in cls)
        raise ConfigurationError(
            f"The option 'balancing' cannot be set to '{value}'. Expected one of: {names}."
        )


@dataclass(frozen=True)
class ScanOptions:
    """Configuration of the scan driver and the trie dictionary."""

    word_chars: str = ""
    no_word_before: str = ""
    no_word_after: str = ""
    case_insensitive_min_length: int = -1
    fuzzy_min_length: int = -1

    def __post_init__(self):
        for name in ("word_chars", "no_word_before", "no_word_after"):
            value = getattr(self, name)
            if not isinstance(value, str):
                raise ConfigurationError(
                    f"The string option '{_option_key(name)}' cannot be set to '{value}'."
                )
        for name in ("case_insensitive_min_length", "fuzzy_min_length"):
            value = getattr(self, name)
            # bool is an int subclass, but True is not a length
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(
                    f"The numeric option '{_option_key(name)}' cannot be set to '{value}'."
                )
            if value < -1:
                raise ConfigurationError(
                    f"The numeric option '{_option_key(name)}' must be -1 or larger, got {value}."
                )

    @property
    def case_insensitive(self) -> bool:
        """Whether the dictionary is also walked case-insensitively."""
        return self.case_insensitive_min_length >= 0

    @property
    def fuzzy(self) -> bool:
        return self.fuzzy_min_length >= 0

    def no_word_after_chars(self) -> frozenset:
        """
        Normalized characters after which a word may not start, next to letters
        and digits.
        """
        return frozenset(normalize(self.no_word_after))


@dataclass(frozen=True)
class RecognizerOptions:
    """All options of a recognizer: scan configuration plus markup balancing."""

    scan: ScanOptions = field(default_factory=ScanOptions)
    balancing: Balancing = Balancing.OUTER


# Option key -> ScanOptions field. 'balancing' is handled separately.
SCAN_OPTION_FIELDS = {
    "word-chars": "word_chars",
    "no-word-before": "no_word_before",
    "no-word-after": "no_word_after",
    "case-insensitive-min-length": "case_insensitive_min_length",
    "fuzzy-min-length": "fuzzy_min_length",
}
OPTION_KEYS = frozenset(SCAN_OPTION_FIELDS) | {"balancing"}


def _option_key(field_name: str) -> str:
    return field_name.replace("_", "-")


def options_from_mapping(
    options: Optional[Mapping[str, Any]] = None,
) -> RecognizerOptions:
    """
    Build validated options from a key/value map.

    Args:
        options: Map with any of the keys in OPTION_KEYS, or None for defaults

    Returns:
        The validated RecognizerOptions

    Raises:
        ConfigurationError: On an unknown key or a value of the wrong type
    """
    if options is None:
        return RecognizerOptions()
    if isinstance(options, RecognizerOptions):
        return options
    if not isinstance(options, Mapping):
        raise ConfigurationError(
            f"Options must be a mapping, not {type(options).__name__}."
        )

    scan_kwargs: Dict[str, Any] = {}
    balancing = Balancing.OUTER
    for key, value in options.items():
        if key == "balancing":
            balancing = Balancing.parse(value)
        elif key in SCAN_OPTION_FIELDS:
            scan_kwargs[SCAN_OPTION_FIELDS[key]] = value
        else:
            raise ConfigurationError(f"The option '{key}' is not valid.")

    result = RecognizerOptions(scan=ScanOptions(**scan_kwargs), balancing=balancing)
    logger.debug("Recognizer options: %s", result)
    return result
