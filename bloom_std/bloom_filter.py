"""Bloom filter with an exact-confirmation record, using double hashing.

The filter uses two independent hash families (MurmurHash3 via mmh3 and xxHash64)
combined with the Kirsch-Mitzenmacher optimization to produce the configured
number of hash functions.

Alongside the bitset the filter keeps the set of literal strings that were
added. ``certainly_contains`` answers from that set, so it never reports a
false positive, at the cost of the filter's usual sublinear memory: the record
grows with every distinct item. ``possibly_contains`` only looks at the bits.
"""
from __future__ import annotations

import logging
import os
from typing import Iterable, Iterator, Set

import mmh3
import xxhash

logger = logging.getLogger(__name__)

DEFAULT_SIZE = 1024
DEFAULT_NUM_HASHES = 3
FILE_DELIMITER = ","


class InvalidConfiguration(ValueError):
    """Raised when a filter is built with a non-positive size or hash count."""


class IncompatibleFilter(ValueError):
    """Raised when combining filters whose size or hashing differ."""


class BloomFilter:
    """Bloom filter backed by a bytearray bitset plus a record of added literals."""

    def __init__(
        self,
        num_hashes: int = DEFAULT_NUM_HASHES,
        size: int = DEFAULT_SIZE,
        *,
        seed1: int = 0,
        seed2: int = 0,
    ) -> None:
        """Initialize an empty Bloom filter.

        Args:
            num_hashes: Number of hash functions to use.
            size: Number of bits in the filter.
            seed1: Seed for MurmurHash3 (default 0).
            seed2: Seed for xxHash64 (default 0).

        Raises:
            InvalidConfiguration: If size or num_hashes is not positive.
        """
        if num_hashes <= 0:
            raise InvalidConfiguration("num_hashes must be positive")
        if size <= 0:
            raise InvalidConfiguration("size must be positive")

        self.size = size
        self.num_hashes = num_hashes
        self.seed1 = seed1
        self.seed2 = seed2
        self._bit_array = bytearray((size + 7) // 8)
        self._exact: Set[str] = set()

    def __repr__(self) -> str:
        return f"BloomFilter(size={self.size}, num_hashes={self.num_hashes})"

    def __len__(self) -> int:
        return len(self._exact)

    def add(self, item: str) -> None:
        """Insert ``item`` into the filter.

        If ``item`` names a readable regular file, the file is bulk-loaded
        instead: its contents are split on commas and every trimmed token is
        added as a literal. Anything else, including devices and FIFOs, or a
        file that cannot be opened and decoded, is added verbatim.
        """
        if not os.path.isfile(item):
            self._add_literal(item)
            return
        try:
            with open(item, encoding="utf-8") as handle:
                contents = handle.read()
        except (OSError, ValueError):
            self._add_literal(item)
            return

        logger.debug("Bulk-loading %s into %r", item, self)
        self._add_tokens(contents)

    def add_from_file(self, path: str) -> int:
        """Bulk-load the comma-separated tokens of ``path``.

        Unlike :meth:`add`, a missing or unreadable file raises ``OSError``.

        Returns:
            The number of tokens added.
        """
        with open(path, encoding="utf-8") as handle:
            contents = handle.read()
        logger.debug("Bulk-loading %s into %r", path, self)
        return self._add_tokens(contents)

    def update(self, items: Iterable[str]) -> None:
        """Insert all ``items`` into the filter as literals."""
        for item in items:
            self._add_literal(item)

    def possibly_contains(self, item: str) -> bool:
        """Return True if ``item`` may be present, False if definitely absent."""
        for bit_index in self._hashes(item):
            byte_index = bit_index >> 3
            mask = 1 << (bit_index & 7)
            if not (self._bit_array[byte_index] & mask):
                return False
        return True

    __contains__ = possibly_contains
    __call__ = possibly_contains

    def certainly_contains(self, item: str) -> bool:
        """Return True only if ``item`` was added verbatim."""
        return item in self._exact

    def reset(self) -> None:
        """Clear every bit and forget all recorded literals."""
        self._bit_array = bytearray(len(self._bit_array))
        self._exact = set()
        logger.debug("Reset %r", self)

    def bit_count(self) -> int:
        """Number of bits currently set."""
        return sum(bin(byte).count("1") for byte in self._bit_array)

    def fill_ratio(self) -> float:
        return self.bit_count() / self.size

    def estimated_false_positive_rate(self) -> float:
        """Probability that an absent item hits only set bits, given the current load."""
        return self.fill_ratio() ** self.num_hashes

    def intersection(self, other: "BloomFilter") -> "BloomFilter":
        """Return a filter holding the bitwise AND of both bitsets.

        The exact record of the result is the intersection of both records.
        """
        self._check_compatible(other)
        result = self._empty_like()
        result._bit_array = bytearray(
            a & b for a, b in zip(self._bit_array, other._bit_array)
        )
        result._exact = self._exact & other._exact
        return result

    def union(self, other: "BloomFilter") -> "BloomFilter":
        """Return a filter holding the bitwise OR of both bitsets.

        The result is the filter that adding every item of both operands to one
        filter would produce. Its exact record is the union of both records.
        """
        self._check_compatible(other)
        result = self._empty_like()
        result._bit_array = bytearray(
            a | b for a, b in zip(self._bit_array, other._bit_array)
        )
        result._exact = self._exact | other._exact
        return result

    def __and__(self, other: object) -> "BloomFilter":
        if not isinstance(other, BloomFilter):
            return NotImplemented
        return self.intersection(other)

    def __or__(self, other: object) -> "BloomFilter":
        if not isinstance(other, BloomFilter):
            return NotImplemented
        return self.union(other)

    def copy(self) -> "BloomFilter":
        """Return an independent filter with the same bits, hashing and record."""
        clone = self._empty_like()
        clone._bit_array = bytearray(self._bit_array)
        clone._exact = set(self._exact)
        return clone

    __copy__ = copy

    def move(self) -> "BloomFilter":
        """Hand this filter's storage to a new filter and reset this one."""
        moved = self._empty_like()
        moved._bit_array = self._bit_array
        moved._exact = self._exact
        self._bit_array = bytearray(len(moved._bit_array))
        self._exact = set()
        logger.debug("Moved storage out of %r", self)
        return moved

    def _add_literal(self, item: str) -> None:
        for bit_index in self._hashes(item):
            byte_index = bit_index >> 3
            mask = 1 << (bit_index & 7)
            self._bit_array[byte_index] |= mask
        self._exact.add(item)

    def _add_tokens(self, contents: str) -> int:
        count = 0
        for token in contents.split(FILE_DELIMITER):
            token = token.strip()
            if not token:
                continue
            self._add_literal(token)
            count += 1
        logger.debug("Added %d tokens to %r", count, self)
        return count

    def _empty_like(self) -> "BloomFilter":
        return BloomFilter(
            self.num_hashes, self.size, seed1=self.seed1, seed2=self.seed2
        )

    def _check_compatible(self, other: "BloomFilter") -> None:
        if (self.size, self.num_hashes, self.seed1, self.seed2) != (
            other.size,
            other.num_hashes,
            other.seed1,
            other.seed2,
        ):
            raise IncompatibleFilter(
                f"cannot combine {self!r} (seeds {self.seed1}, {self.seed2}) with "
                f"{other!r} (seeds {other.seed1}, {other.seed2})"
            )

    def _hashes(self, item: str) -> Iterator[int]:
        """Generate hash positions using Kirsch-Mitzenmacher double hashing."""
        data = item.encode("utf-8")
        h1 = mmh3.hash(data, self.seed1, signed=False)
        h2 = xxhash.xxh64(data, seed=self.seed2).intdigest() % self.size
        if h2 == 0:
            h2 = 1  # Ensure progress for the arithmetic progression.

        for i in range(self.num_hashes):
            yield (h1 + i * h2) % self.size

    @property
    def bit_array(self) -> bytearray:
        """Expose the underlying bit array (primarily for inspection)."""
        return self._bit_array
