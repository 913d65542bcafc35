"""Consolidated Bloom filter and trie evaluation suite.

Performs a deterministic 80/20 split of unique tokens (sorted), builds a
Bloom filter and a trie from the 80% training set, and runs:

1. Membership test on training set (should be all present in both)
2. False positive rate on held-out test set (items not inserted)
3. Trie agreement: exact lookups on training and held-out items
4. Filter properties and memory usage
5. Throughput for inserts and queries

Filter size is set to 10x the number of training items, and we use 7 hash
functions (Kirsch-Mitzenmacher double hashing).

Run with:

    python -m evaluation.suite --items 100000
"""
from __future__ import annotations

import argparse
import logging
import random
import time
import uuid
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bloom_std.bloom_filter import BloomFilter
from trie_std.trie import Trie

logger = logging.getLogger(__name__)

NUM_HASHES = 7
SIZE_FACTOR = 10


def generate_synthetic_data(n: int, seed: Optional[int] = None) -> List[str]:
    """Generate n unique random strings, sorted."""
    rng = random.Random(seed)
    # UUIDs are virtually guaranteed to be unique
    words = {str(uuid.UUID(int=rng.getrandbits(128), version=4)) for _ in range(n)}
    return sorted(words)


def build_split(
    words: Sequence[str], num_hashes: int = NUM_HASHES
) -> Tuple[BloomFilter, Trie, List[str], List[str]]:
    """Create deterministic 80/20 split and build the filter and trie.

    Returns (bloom_filter, trie, training_words, test_words).
    """
    split = int(len(words) * 0.8)
    train = list(words[:split])
    test = list(words[split:])

    filter_size = max(1, len(train) * SIZE_FACTOR)
    bloom = BloomFilter(num_hashes, filter_size)
    bloom.update(train)
    trie = Trie(train)

    return bloom, trie, train, test


def test_membership(bloom: BloomFilter, trie: Trie, train: List[str]) -> Dict[str, int]:
    """Verify all training items are present in the filter and the trie."""
    print("TEST A: Membership on training set")
    missing_bloom = [w for w in train if w not in bloom]
    missing_trie = [w for w in train if not trie.search(w)]
    print(f"  Training items: {len(train)}")
    print(f"  Missing from filter: {len(missing_bloom)} (expected 0)")
    print(f"  Missing from trie: {len(missing_trie)} (expected 0)")
    if missing_bloom:
        print(f"  Example missing: {missing_bloom[:5]}")
    print()
    return {"missing_bloom": len(missing_bloom), "missing_trie": len(missing_trie)}


def test_false_positive_on_heldout(
    bloom: BloomFilter, train: List[str], test: List[str]
) -> Optional[float]:
    """Measure empirical false positive rate on held-out test set."""
    print("TEST B: False positive rate on held-out items")
    train_set = set(train)
    test_filtered = [w for w in test if w not in train_set]

    if not test_filtered:
        print("  No held-out items available for testing.")
        print()
        return None

    false_positives = sum(1 for w in test_filtered if w in bloom)
    confirmed = sum(1 for w in test_filtered if bloom.certainly_contains(w))
    fpr = false_positives / len(test_filtered)

    print(f"  Held-out items: {len(test_filtered)}")
    print(f"  False positives: {false_positives}")
    print(f"  Empirical FPR: {fpr:.6f} ({fpr*100:.4f}%)")
    print(f"  Estimated FPR: {bloom.estimated_false_positive_rate():.6f}")
    print(f"  Exact confirmations on held-out: {confirmed} (expected 0)")
    print()
    return fpr


def test_trie_agreement(trie: Trie, train: List[str], test: List[str]) -> int:
    """Count held-out items the trie wrongly reports; prefixes must still match."""
    print("TEST C: Trie exact lookups")
    train_set = set(train)
    wrong = sum(1 for w in test if trie.search(w) != (w in train_set))
    prefixes = sum(1 for w in train if trie.starts_with(w[: len(w) // 2]))
    print(f"  Wrong answers on held-out items: {wrong} (expected 0)")
    print(f"  Half-prefixes found: {prefixes}/{len(train)}")
    print(f"  Trie nodes: {trie.node_count()}")
    print()
    return wrong


def show_properties(bloom: BloomFilter, train: List[str]) -> Dict[str, Any]:
    """Display filter memory and configuration properties."""
    print("TEST D: Filter properties")
    bytes_len = len(bloom.bit_array)
    mb = bytes_len / (1024 * 1024)

    print(f"  Filter size (bits): {bloom.size}")
    print(f"  Filter size (bytes): {bytes_len}")
    print(f"  Filter size (MB): {mb:.2f}")
    print(f"  Number of hash functions: {bloom.num_hashes}")
    print(f"  Fill ratio: {bloom.fill_ratio():.4f}")
    print(f"  Items inserted: {len(train)}")
    if train:
        print(f"  Bytes per item: {bytes_len / len(train):.4f}")
    print()
    return {"bytes": bytes_len, "fill_ratio": bloom.fill_ratio()}


def test_performance(
    bloom: BloomFilter, train: List[str], test: List[str], target_ops: int = 1_000_000
) -> Dict[str, float]:
    """Measure insertion and query throughput (Ops/Sec)."""
    print("TEST E: Performance Benchmarking")

    bench_filter = BloomFilter(bloom.num_hashes, bloom.size)
    bench_trie = Trie()

    start_time = time.perf_counter()
    bench_filter.update(train)
    insert_time = time.perf_counter() - start_time

    start_time = time.perf_counter()
    for word in train:
        bench_trie.insert(word)
    trie_insert_time = time.perf_counter() - start_time

    queries = test or train
    repeats = (target_ops // max(1, len(queries))) + 1
    large_test_set = (queries * repeats)[:target_ops]

    start_time = time.perf_counter()
    for word in large_test_set:
        _ = word in bench_filter
    query_time = time.perf_counter() - start_time

    start_time = time.perf_counter()
    for word in large_test_set:
        _ = bench_trie.search(word)
    trie_query_time = time.perf_counter() - start_time

    def rate(count: int, elapsed: float) -> float:
        return count / elapsed if elapsed > 0 else float("inf")

    metrics = {
        "insert_count": len(train),
        "insert_ops_per_sec": rate(len(train), insert_time),
        "trie_insert_ops_per_sec": rate(len(train), trie_insert_time),
        "query_count": len(large_test_set),
        "query_ops_per_sec": rate(len(large_test_set), query_time),
        "trie_query_ops_per_sec": rate(len(large_test_set), trie_query_time),
    }

    print(f"    - Filter insertion throughput: {metrics['insert_ops_per_sec']:,.0f} ops/sec")
    print(f"    - Trie insertion throughput: {metrics['trie_insert_ops_per_sec']:,.0f} ops/sec")
    print(f"    - Filter query throughput: {metrics['query_ops_per_sec']:,.0f} ops/sec")
    print(f"    - Trie query throughput: {metrics['trie_query_ops_per_sec']:,.0f} ops/sec")
    print()
    return metrics


def run_all(
    items: int = 100_000,
    num_hashes: int = NUM_HASHES,
    seed: Optional[int] = None,
    target_ops: int = 1_000_000,
) -> Dict[str, Any]:
    """Run all tests and return the collected results."""
    full_words = generate_synthetic_data(items, seed)
    print(f"Full dataset unique items: {len(full_words)}")

    print("=" * 60)
    print("Running Bloom Filter / Trie Test Suite (80/20 split)")
    print("=" * 60)
    print()

    bloom, trie, train, test = build_split(full_words, num_hashes)

    results: Dict[str, Any] = {}
    results["membership"] = test_membership(bloom, trie, train)
    results["false_positive_rate"] = test_false_positive_on_heldout(bloom, train, test)
    results["trie_wrong"] = test_trie_agreement(trie, train, test)
    results["properties"] = show_properties(bloom, train)
    results["performance"] = test_performance(bloom, train, test, target_ops)

    print("=" * 60)
    print("Test suite completed successfully!")
    print("=" * 60)
    return results


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Evaluate the Bloom filter and trie.")
    parser.add_argument("--items", type=int, default=100_000, help="Number of synthetic items")
    parser.add_argument("--num-hashes", type=int, default=NUM_HASHES)
    parser.add_argument("--seed", type=int, default=None, help="Seed for synthetic data")
    parser.add_argument("--queries", type=int, default=1_000_000, help="Query operations to time")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Evaluating %d items with %d hash functions", args.items, args.num_hashes)
    run_all(args.items, args.num_hashes, args.seed, args.queries)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
