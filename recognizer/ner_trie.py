"""
Trie dictionary of entity surface forms.

Surface forms are stored as sequences of trie characters (letters, digits and
configured word characters) with the words separated by a single space. A
terminal node keeps its canonical key and every entity id that was put there.

Scanning walks normalized text from a start position: trie characters follow
child edges, a run of other characters that contains whitespace follows the
separator edge, and a run without whitespace is skipped as noise.
"""

import logging
from functools import lru_cache
from typing import Dict, List, Optional, Sequence, Tuple

from .ner_ast import ScanCandidate
from .ner_normalize import normalize

logger = logging.getLogger(__name__)

# Joins the words of a multi-word key.
SEPARATOR = " "


@lru_cache(maxsize=4096)
def case_variants(c: str) -> Tuple[str, ...]:
    """
    The character itself followed by its single-character lower and upper case
    forms, without duplicates.
    """
    variants = [c]
    for variant in (c.lower(), c.upper()):
        if len(variant) == 1 and variant not in variants:
            variants.append(variant)
    return tuple(variants)


class TrieNode:
    """A node of the trie; a terminal node carries a key and entity ids."""

    __slots__ = ("children", "key", "ids")

    def __init__(self):
        self.children: Dict[str, "TrieNode"] = {}
        self.key: Optional[str] = None
        self.ids: List[str] = []

    @property
    def is_terminal(self) -> bool:
        return self.key is not None


class TrieDictionary:
    """
    Maps surface forms (sequences of words) to entity ids and finds the longest
    surface form starting at a position in normalized text.

    A dictionary is filled with put() and then only read. Reads from several
    threads are safe as long as nobody calls put() at the same time; freeze()
    makes that explicit.
    """

    def __init__(self, word_chars: str = "", no_word_before: str = ""):
        """
        Args:
            word_chars: Characters that are part of a word next to letters and digits
            no_word_before: Characters that may not immediately follow a match,
                next to letters and digits
        """
        self.word_chars = frozenset(normalize(word_chars))
        self.no_word_before = frozenset(normalize(no_word_before))
        self.root = TrieNode()
        self._key_count = 0
        self._node_count = 1
        self._frozen = False

    # === Alphabet ===

    def trie_char(self, c: str) -> bool:
        """
        Is c (a normalized character) acceptable in a trie key?
        """
        return (c.isalnum() or c in self.word_chars) and not c.isspace()

    def to_trie_chars(self, text: str) -> str:
        """
        Project text onto its trie characters: normalize it, split it into words
        on whitespace, drop all other non-trie characters, and join the
        remaining words with a single separator.

        Args:
            text: Original or normalized text

        Returns:
            The canonical key for text, possibly empty
        """
        words = []
        current: List[str] = []
        for c in normalize(text):
            if c.isspace():
                if current:
                    words.append("".join(current))
                    current = []
            elif self.trie_char(c):
                current.append(c)
        if current:
            words.append("".join(current))
        return SEPARATOR.join(words)

    def ends_word(self, normalized_text: str, end: int) -> bool:
        """
        May a match end at position end? It may not be followed by a letter, a
        digit or a no-word-before character.
        """
        if end >= len(normalized_text):
            return True
        c = normalized_text[end]
        return not (c.isalnum() or c in self.no_word_before)

    # === Building ===

    def put(self, surface_form: str, entity_id: str) -> str:
        """
        Insert a surface form for an entity id. Ids of repeated surface forms are
        accumulated, not overwritten.

        Args:
            surface_form: The words of the entity as written in the grammar
            entity_id: The id of the entity

        Returns:
            The canonical key under which the surface form is stored

        Raises:
            ValueError: If the surface form contains no trie characters
            RuntimeError: If the dictionary has been frozen
        """
        if self._frozen:
            raise RuntimeError("Cannot put into a frozen trie dictionary.")
        key = self.to_trie_chars(surface_form)
        if not key:
            raise ValueError(
                f"Surface form '{surface_form}' contains no word characters."
            )
        node = self.root
        for c in key:
            child = node.children.get(c)
            if child is None:
                child = TrieNode()
                node.children[c] = child
                self._node_count += 1
            node = child
        if node.key is None:
            node.key = key
            self._key_count += 1
        if entity_id not in node.ids:
            node.ids.append(entity_id)
        return key

    def freeze(self) -> "TrieDictionary":
        """Refuse any further put(); returns self."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # === Lookup ===

    def _find(self, key: str) -> Optional[TrieNode]:
        node = self.root
        for c in key:
            node = node.children.get(c)
            if node is None:
                return None
        return node

    def get(self, surface_form: str) -> Optional[List[str]]:
        """
        The entity ids stored for a surface form, or None if it is not present.
        The lookup is exact: case-sensitive and after projection onto trie
        characters.
        """
        node = self._find(self.to_trie_chars(surface_form))
        if node is None or not node.is_terminal:
            return None
        return list(node.ids)

    def __contains__(self, surface_form: str) -> bool:
        return self.get(surface_form) is not None

    def __len__(self) -> int:
        """The number of distinct keys."""
        return self._key_count

    @property
    def node_count(self) -> int:
        return self._node_count

    def is_empty(self) -> bool:
        return self._key_count == 0

    # === Scanning ===

    def scan(
        self, normalized_text: str, start: int, allow_case_insensitive: bool = False
    ) -> List[ScanCandidate]:
        """
        Find the longest keys that match normalized_text from start.

        The exact walk compares characters as they are. If allowed, a second
        walk follows every case variant of each character. Each walk reports the
        nodes of its longest terminal that ends at a word end; a node found by
        both walks is reported once, as an exact hit.

        Args:
            normalized_text: Text produced by normalize()
            start: Position where the match must start
            allow_case_insensitive: Also walk case-insensitively

        Returns:
            The candidates, exact hits first; empty if nothing matches
        """
        candidates: List[ScanCandidate] = []
        if start >= len(normalized_text) or not self.root.children:
            return candidates

        exact = self._walk(normalized_text, start, fold_case=False)
        seen = set()
        if exact is not None:
            end, nodes = exact
            for node in nodes:
                seen.add((end, id(node)))
                candidates.append(
                    ScanCandidate(start, end, node.key, tuple(node.ids), False)
                )

        if allow_case_insensitive:
            folded = self._walk(normalized_text, start, fold_case=True)
            if folded is not None:
                end, nodes = folded
                for node in nodes:
                    if (end, id(node)) in seen:
                        continue
                    candidates.append(
                        ScanCandidate(start, end, node.key, tuple(node.ids), True)
                    )
        return candidates

    def _walk(
        self, text: str, start: int, fold_case: bool
    ) -> Optional[Tuple[int, Sequence[TrieNode]]]:
        """
        Walk the trie along text from start.

        Returns:
            (end, terminal nodes) of the longest terminal at a word end, or None
        """
        length = len(text)
        frontier: List[TrieNode] = [self.root]
        pos = start
        best = None
        while frontier and pos < length:
            c = text[pos]
            if not self.trie_char(c):
                # A run of non-trie characters is a word separator if it holds
                # whitespace, and noise otherwise.
                run_end = pos
                has_space = False
                while run_end < length and not self.trie_char(text[run_end]):
                    if text[run_end].isspace():
                        has_space = True
                    run_end += 1
                if run_end == length:
                    break
                if has_space:
                    frontier = [
                        node.children[SEPARATOR]
                        for node in frontier
                        if SEPARATOR in node.children
                    ]
                pos = run_end
                continue

            next_frontier: List[TrieNode] = []
            variants = case_variants(c) if fold_case else (c,)
            for node in frontier:
                for variant in variants:
                    child = node.children.get(variant)
                    if child is not None and child not in next_frontier:
                        next_frontier.append(child)
            frontier = next_frontier
            pos += 1

            terminals = [node for node in frontier if node.is_terminal]
            if terminals and self.ends_word(text, pos):
                best = (pos, terminals)
        return best
