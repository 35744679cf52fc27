from __future__ import annotations
from typing import Dict, Iterator, List, Optional

from ..models import Suggestion


class TrieNode:
    """
    One character step in the trie.
    children: char -> TrieNode (owned by this node)
    suggestions: phrases whose token ends exactly here, in insertion order
    """

    __slots__ = ("children", "suggestions")

    def __init__(self) -> None:
        self.children: Dict[str, TrieNode] = {}
        self.suggestions: List[Suggestion] = []


class SuggestionTrie:
    """
    Character trie keyed by the *tokens* of each phrase. A phrase is attached
    to the terminal node of every one of its tokens, so "difusor aromático"
    is found from "dif" and from "arom". Nodes are never removed.

    Not thread-safe on its own; AutocompleteEngine wraps it in a lock.
    """

    def __init__(self) -> None:
        self._root = TrieNode()
        self._size = 0

    @property
    def size(self) -> int:
        """Number of suggestions inserted (phrases, not tokens)."""
        return self._size

    def insert(self, tokens: List[str], suggestion: Suggestion) -> None:
        for token in tokens:
            node = self._root
            for ch in token:
                nxt = node.children.get(ch)
                if nxt is None:
                    nxt = node.children[ch] = TrieNode()
                node = nxt
            node.suggestions.append(suggestion)
        self._size += 1

    def find(self, prefix: str) -> Optional[TrieNode]:
        """Node reached by spelling `prefix`, or None on the first missing char."""
        node = self._root
        for ch in prefix:
            node = node.children.get(ch)
            if node is None:
                return None
        return node

    def iter_subtree(self, node: TrieNode) -> Iterator[Suggestion]:
        """
        Every suggestion stored at `node` and below (iterative walk).
        """
        stack = [node]
        while stack:
            cur = stack.pop()
            yield from cur.suggestions
            stack.extend(cur.children.values())

    def collect(self, prefix: str) -> List[Suggestion]:
        """
        Prefix-complete lookup. One add_suggestion() call is reported once
        even if several of its tokens share the prefix.
        """
        node = self.find(prefix)
        if node is None:
            return []
        seen = set()
        out: List[Suggestion] = []
        for s in self.iter_subtree(node):
            if s.seq in seen:
                continue
            seen.add(s.seq)
            out.append(s)
        return out
