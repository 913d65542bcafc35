"""Prefix trie over strings with word-set algebra.

Each node owns a dict of children keyed by the next character. Words are the
character paths from the root to a node flagged ``is_end``. Union and
difference are built by enumerating the words of one trie and replaying them
as inserts or removals on another, and equality compares word sets, so two
tries built in different orders compare equal.

Serialized form is one word per line, so words must not contain line breaks.
"""
from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Dict, Iterable, Iterator, List, Optional, TextIO, Tuple

logger = logging.getLogger(__name__)

ROOT_LABEL = "\0"


class TrieNode:
    """A single character position along one or more words."""

    __slots__ = ("data", "is_end", "children")

    def __init__(self, data: str = ROOT_LABEL) -> None:
        self.data = data
        self.is_end = False
        self.children: Dict[str, TrieNode] = {}

    def __repr__(self) -> str:
        return f"TrieNode({self.data!r}, is_end={self.is_end}, children={len(self.children)})"


Visitor = Callable[[TrieNode], None]


class Trie:
    """Exact string set indexed by shared prefixes."""

    def __init__(self, words: Optional[Iterable[str]] = None) -> None:
        self.root = TrieNode()
        if isinstance(words, str):
            raise TypeError("expected an iterable of words, not a single str")
        if words is not None:
            for word in words:
                self.insert(word)

    def __repr__(self) -> str:
        return f"Trie({list(self.words())!r})"

    def __str__(self) -> str:
        return "".join(f"{word}\n" for word in self.words())

    def insert(self, word: str) -> None:
        """Add ``word``. Inserting an existing word or ``""`` changes nothing."""
        if not word:
            return
        node = self.root
        for char in word:
            child = node.children.get(char)
            if child is None:
                child = TrieNode(char)
                node.children[char] = child
            node = child
        node.is_end = True

    def search(self, word: str) -> bool:
        """Return True if ``word`` was inserted (not merely a prefix of one)."""
        if not word:
            return False
        node = self._find(word)
        return node is not None and node.is_end

    __call__ = search
    __contains__ = search

    def starts_with(self, prefix: str) -> bool:
        """Return True if some inserted word begins with ``prefix``."""
        return self._find(prefix) is not None

    def remove(self, word: str) -> None:
        """Remove ``word`` and prune nodes no other word passes through.

        Removing a word that is not present is a no-op.
        """
        if not word:
            return
        path: List[Tuple[TrieNode, str]] = []
        node = self.root
        for char in word:
            child = node.children.get(char)
            if child is None:
                return
            path.append((node, char))
            node = child
        if not node.is_end:
            return

        node.is_end = False
        pruned = 0
        while path:
            parent, char = path.pop()
            child = parent.children[char]
            if child.children or child.is_end:
                break
            del parent.children[char]
            pruned += 1
        logger.debug("Removed %r, pruned %d nodes", word, pruned)

    def bfs(self, visitor: Visitor) -> None:
        """Call ``visitor`` on every node in level order, root first.

        The visitor may change node contents but not add or remove children.
        """
        queue = deque([self.root])
        while queue:
            node = queue.popleft()
            visitor(node)
            queue.extend(node.children.values())

    def dfs(self, visitor: Visitor) -> None:
        """Call ``visitor`` on every node in pre-order, root first."""
        stack = [self.root]
        while stack:
            node = stack.pop()
            visitor(node)
            stack.extend(reversed(list(node.children.values())))

    def words(self) -> Iterator[str]:
        """Yield every word, depth-first with siblings in insertion order."""
        stack: List[Tuple[TrieNode, str]] = [(self.root, "")]
        while stack:
            node, prefix = stack.pop()
            if node.is_end:
                yield prefix
            for child in reversed(list(node.children.values())):
                stack.append((child, prefix + child.data))

    __iter__ = words

    def words_with_prefix(self, prefix: str) -> Iterator[str]:
        """Yield every word starting with ``prefix``."""
        start = self._find(prefix)
        if start is None:
            return
        stack: List[Tuple[TrieNode, str]] = [(start, prefix)]
        while stack:
            node, path = stack.pop()
            if node.is_end:
                yield path
            for child in reversed(list(node.children.values())):
                stack.append((child, path + child.data))

    def __len__(self) -> int:
        return sum(1 for _ in self.words())

    def node_count(self) -> int:
        """Number of nodes, the root included."""
        count = 0

        def visit(_node: TrieNode) -> None:
            nonlocal count
            count += 1

        self.bfs(visit)
        return count

    def union(self, other: "Trie") -> "Trie":
        """Return a new trie holding the words of both tries."""
        result = self.copy()
        result += other
        return result

    def difference(self, other: "Trie") -> "Trie":
        """Return a new trie holding the words of this trie absent from ``other``."""
        result = self.copy()
        result -= other
        return result

    def __add__(self, other: object) -> "Trie":
        if not isinstance(other, Trie):
            return NotImplemented
        return self.union(other)

    def __iadd__(self, other: object) -> "Trie":
        if not isinstance(other, Trie):
            return NotImplemented
        # Snapshot first so ``t += t`` does not iterate a trie it mutates.
        for word in list(other.words()):
            self.insert(word)
        return self

    def __sub__(self, other: object) -> "Trie":
        if not isinstance(other, Trie):
            return NotImplemented
        return self.difference(other)

    def __isub__(self, other: object) -> "Trie":
        if not isinstance(other, Trie):
            return NotImplemented
        for word in list(other.words()):
            self.remove(word)
        return self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Trie):
            return NotImplemented
        return set(self.words()) == set(other.words())

    def copy(self) -> "Trie":
        """Return a structurally independent duplicate of this trie."""
        clone = Trie()
        pending = [(self.root, clone.root)]
        while pending:
            source, target = pending.pop()
            target.is_end = source.is_end
            for char, child in source.children.items():
                duplicate = TrieNode(child.data)
                target.children[char] = duplicate
                pending.append((child, duplicate))
        return clone

    __copy__ = copy

    def __deepcopy__(self, memo: dict) -> "Trie":
        return self.copy()

    def move(self) -> "Trie":
        """Hand this trie's nodes to a new trie and leave this one empty."""
        moved = Trie()
        moved.root = self.root
        self.root = TrieNode()
        logger.debug("Moved root out of trie into %r", moved)
        return moved

    def write(self, stream: TextIO) -> None:
        """Write every word to ``stream``, one per line.

        Raises:
            ValueError: If a word contains a line break. Nothing is written.
        """
        words = list(self.words())
        for word in words:
            if "\n" in word or "\r" in word:
                raise ValueError(f"cannot write {word!r}: words may not contain line breaks")
        for word in words:
            stream.write(word)
            stream.write("\n")

    def read(self, stream: TextIO) -> "Trie":
        """Insert every line of ``stream`` as a word; blank lines are skipped."""
        count = 0
        for line in stream:
            word = line.rstrip("\r\n")
            if word:
                self.insert(word)
                count += 1
        logger.debug("Read %d words from stream", count)
        return self

    @classmethod
    def from_stream(cls, stream: TextIO) -> "Trie":
        return cls().read(stream)

    def _find(self, prefix: str) -> Optional[TrieNode]:
        node = self.root
        for char in prefix:
            node = node.children.get(char)
            if node is None:
                return None
        return node
