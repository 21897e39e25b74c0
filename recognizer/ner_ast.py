from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

# === Grammar Structures ===


@dataclass(frozen=True)
class RuleDef:
    """Represents one grammar line: an entity id and its surface forms."""

    entity_id: str
    surface_forms: Tuple[str, ...]
    line_number: int = 0
    line: str = field(default="", compare=False)


@dataclass(frozen=True)
class Grammar:
    """Represents a parsed grammar source."""

    rules: Tuple[RuleDef, ...] = field(default_factory=tuple)
    source_name: Optional[str] = None

    @property
    def entity_ids(self) -> Tuple[str, ...]:
        """
        The distinct entity ids of the grammar, in order of first appearance.
        """
        return tuple(dict.fromkeys(rule.entity_id for rule in self.rules))


# === Scan Structures ===


@dataclass(frozen=True)
class ScanCandidate:
    """Represents one dictionary hit from a fixed start position."""

    start: int
    end: int
    matched_key: str
    ids: Tuple[str, ...]
    case_folded: bool = False


@dataclass(frozen=True)
class MatchSpan:
    """Represents an accepted match of one or more entities."""

    start: int
    end: int
    ids: Tuple[str, ...]

    @property
    def length(self) -> int:
        """
        The length of the match in characters of the original text.
        """
        return self.end - self.start


@dataclass(frozen=True)
class UnmatchedSpan:
    """Represents a stretch of text between matches."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start


Span = Union[MatchSpan, UnmatchedSpan]
