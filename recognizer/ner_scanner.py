"""
NER Scanner: the boundary-aware scan driver.

This module walks a text once from left to right. At every position where a
word may start it asks the trie dictionary for the longest entity keys, applies
the case and fuzziness thresholds, and emits MatchSpan and UnmatchedSpan
objects that together cover the text without gaps or overlaps.
"""

import logging
from typing import Dict, Iterator, List, Optional, Tuple

from .ner_ast import MatchSpan, ScanCandidate, Span, UnmatchedSpan
from .ner_errors import InternalConsistencyError
from .ner_normalize import collapse_whitespace, normalize
from .ner_options import ScanOptions
from .ner_trie import TrieDictionary

logger = logging.getLogger(__name__)


def accepts(
    candidate: ScanCandidate,
    text: str,
    normalized_text: str,
    trie: TrieDictionary,
    options: ScanOptions,
) -> bool:
    """
    Decide whether a dictionary hit is a match.

    Case: long enough for case-insensitive matching, or the trie characters of
    the original text equal the key exactly.
    Fuzz: long enough for fuzzy matching, or the normalized text (whitespace
    runs as one space) equals the key, i.e. no noise characters were skipped
    and no case was folded.
    """
    length = candidate.end - candidate.start
    trie_chars = trie.to_trie_chars(text[candidate.start : candidate.end])

    ci_min = options.case_insensitive_min_length
    case_ok = (ci_min >= 0 and length >= ci_min) or trie_chars == candidate.matched_key
    if not case_ok:
        return False

    fuzzy_min = options.fuzzy_min_length
    matched = collapse_whitespace(normalized_text[candidate.start : candidate.end])
    return (fuzzy_min >= 0 and length >= fuzzy_min) or matched == candidate.matched_key


def select_match(
    candidates: List[ScanCandidate],
    start: int,
    text: str,
    normalized_text: str,
    trie: TrieDictionary,
    options: ScanOptions,
) -> Optional[Tuple[int, List[str]]]:
    """
    Apply the acceptance policy to the candidates from one start position.

    Candidates are grouped by their end. The longest group with at least one
    accepted candidate wins; its accepted ids are merged in order without
    duplicates.

    Returns:
        (end, ids) of the match, or None if no candidate is accepted

    Raises:
        InternalConsistencyError: If candidates disagree on the start or an
            accepted match would be empty
    """
    by_end: Dict[int, List[ScanCandidate]] = {}
    for candidate in candidates:
        if candidate.start != start:
            raise InternalConsistencyError(
                f"Match starts at both {candidate.start} and {start}"
            )
        by_end.setdefault(candidate.end, []).append(candidate)

    for end in sorted(by_end, reverse=True):
        ids: List[str] = []
        for candidate in by_end[end]:
            if not accepts(candidate, text, normalized_text, trie, options):
                continue
            if end <= start:
                raise InternalConsistencyError(
                    f"No progress matching from '{text[start:]}'"
                )
            for entity_id in candidate.ids:
                if entity_id not in ids:
                    ids.append(entity_id)
        if ids:
            if len(by_end) > 1:
                logger.debug(
                    "Case-sensitive and case-insensitive walks from %s end at %s; "
                    "accepted the match ending at %s",
                    start,
                    sorted(by_end),
                    end,
                )
            return end, ids
    return None


def scan(text: str, trie: TrieDictionary, options: ScanOptions) -> Iterator[Span]:
    """
    Scan text for entities.

    Args:
        text: The text to scan; any content is accepted
        trie: The compiled dictionary
        options: Word boundary characters and matching thresholds

    Yields:
        MatchSpan and UnmatchedSpan objects in text order, covering the whole
        text exactly once

    Raises:
        InternalConsistencyError: If the dictionary or the acceptance policy
            misbehaves
    """
    normalized_text = normalize(text)
    length = len(text)
    if len(normalized_text) != length:
        raise InternalConsistencyError(
            f"Normalization changed the text length from {length} to {len(normalized_text)}"
        )

    no_word_after = options.no_word_after_chars()
    allow_case_insensitive = options.case_insensitive
    start = 0  # Starting position to search in text.
    unmatched_start = 0  # Start of the unmatched characters, up to the next match.
    match_count = 0

    while start < length:
        step_start = start
        # A word must start with a trie character. It cannot start immediately
        # after a letter, digit or no-word-after character.
        while start < length and (
            not trie.trie_char(normalized_text[start])
            or (
                start > 0
                and (
                    normalized_text[start - 1].isalnum()
                    or normalized_text[start - 1] in no_word_after
                )
            )
        ):
            start += 1

        selected = None
        if start < length:
            candidates = trie.scan(normalized_text, start, allow_case_insensitive)
            if candidates:
                selected = select_match(
                    candidates, start, text, normalized_text, trie, options
                )

        if selected is not None:
            end, ids = selected
            if unmatched_start < start:
                yield UnmatchedSpan(unmatched_start, start)
            yield MatchSpan(start, end, tuple(ids))
            match_count += 1
            start = end
            unmatched_start = end
        elif start < length:
            # No match here; skip the rest of a run of letters and digits (but
            # not word characters), as no word can start inside it.
            c = text[start]
            start += 1
            if c.isalnum():
                while start < length and text[start].isalnum():
                    start += 1

        if start <= step_start:
            raise InternalConsistencyError(f"No progress scanning at position {start}")

    if unmatched_start < length:
        yield UnmatchedSpan(unmatched_start, length)
    logger.debug("Scanned %s characters, %s matches", length, match_count)


def find_matches(
    text: str, trie: TrieDictionary, options: ScanOptions
) -> List[MatchSpan]:
    """All matches in text, in order."""
    return [span for span in scan(text, trie, options) if isinstance(span, MatchSpan)]


def drive(text: str, trie: TrieDictionary, options: ScanOptions, handler) -> int:
    """
    Feed the spans of a scan to a handler object with match(text, span) and
    no_match(text, span) methods.

    Returns:
        The number of matches
    """
    count = 0
    for span in scan(text, trie, options):
        if isinstance(span, MatchSpan):
            handler.match(text, span)
            count += 1
        else:
            handler.no_match(text, span)
    return count
