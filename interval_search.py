"""
Interval Pair Search Engine

Scans every ordering of the twelve pitch classes and keeps the ones whose six
consecutive pairs use each interval of {3, 4, 5, 7, 8, 9} exactly once
(minor 3rd, major 3rd, perfect 4th, perfect 5th, minor 6th, major 6th).

Orderings are not generated recursively. A running counter is encoded as a
mixed-radix "selection vector" (factorial number system, position 0 least
significant) and each vector is decoded to a permutation by picking the k-th
not-yet-used symbol. Counter 0..12!-1 maps one-to-one onto the permutations,
so a scan can start, stop and resume at any index.

API:
    from interval_search import scan
    result = scan(progress=lambda i, total, found: ...)
    result.solutions   # list of 12-tuples, discovery order
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from math import factorial
from typing import Callable, Iterator

SYMBOL_COUNT = 12
PAIR_WIDTH = 2
REQUIRED_INTERVALS = frozenset({3, 4, 5, 7, 8, 9})
MAX_COMBOS = factorial(SYMBOL_COUNT)  # 479,001,600

DEFAULT_PROGRESS_EVERY = 100_000

ProgressSink = Callable[[int, int, int], None]


# ---------------------------------------------------------------------------
# Index sequencer
# ---------------------------------------------------------------------------

def advance(vector: list[int]) -> list[int]:
    """
    Step a selection vector to the next index, in place.

    Position i holds a digit in [0, size - i). Incrementing a digit that
    reaches its radix resets it to 0 and carries into position i + 1. The
    largest vector wraps around to all zeros.
    """
    size = len(vector)
    for i in range(size):
        vector[i] += 1
        if vector[i] >= size - i:
            vector[i] = 0
            continue
        break
    return vector


def vector_for_index(index: int, size: int = SYMBOL_COUNT) -> list[int]:
    """Encode an index in [0, size!) as a selection vector."""
    if index < 0 or index >= factorial(size):
        raise ValueError(f"Index {index} outside [0, {factorial(size)})")
    vector = []
    for position in range(size):
        radix = size - position
        vector.append(index % radix)
        index //= radix
    return vector


def index_for_vector(vector: list[int]) -> int:
    """Inverse of vector_for_index."""
    size = len(vector)
    index = 0
    weight = 1
    for position, digit in enumerate(vector):
        radix = size - position
        if digit < 0 or digit >= radix:
            raise ValueError(
                f"Digit {digit} at position {position} outside [0, {radix})"
            )
        index += digit * weight
        weight *= radix
    return index


# ---------------------------------------------------------------------------
# Permutation decoder
# ---------------------------------------------------------------------------

def decode(vector: list[int], out: list[int] | None = None,
           picked: bytearray | None = None) -> list[int]:
    """
    Decode a selection vector into an ordering of symbols 0..size-1.

    Each position walks the symbols upward from 0, skipping the ones already
    picked, until vector[k] free symbols have been passed; the free symbol it
    lands on is the pick. O(n^2) at worst, which is fine for n = 12.

    `out` and `picked` are optional scratch buffers owned by the caller.
    `picked` is cleared before use.
    """
    size = len(vector)
    if out is None:
        out = [0] * size
    if picked is None:
        picked = bytearray(size)
    else:
        picked[:] = bytes(size)

    for k, skip in enumerate(vector):
        symbol = 0
        while skip or picked[symbol]:
            if not picked[symbol]:
                skip -= 1
            symbol += 1
        picked[symbol] = 1
        out[k] = symbol
    return out


def ordering_for_index(index: int, size: int = SYMBOL_COUNT) -> list[int]:
    return decode(vector_for_index(index, size))


def index_for_ordering(ordering) -> int:
    """Scan index at which `ordering` is produced. Raises ValueError if it is not a permutation."""
    size = len(ordering)
    picked = bytearray(size)
    vector = []
    for symbol in ordering:
        if not 0 <= symbol < size or picked[symbol]:
            raise ValueError(f"Not a permutation of 0..{size - 1}: {list(ordering)}")
        vector.append(sum(1 for s in range(symbol) if not picked[s]))
        picked[symbol] = 1
    return index_for_vector(vector)


# ---------------------------------------------------------------------------
# Constraint evaluator
# ---------------------------------------------------------------------------

def pair_intervals(ordering) -> list[int]:
    """Signed difference (second - first) of each consecutive pair."""
    return [ordering[k + 1] - ordering[k]
            for k in range(0, len(ordering) - 1, PAIR_WIDTH)]


def evaluate(ordering, allowed: frozenset[int] = REQUIRED_INTERVALS,
             used: set[int] | None = None, descending: bool = False) -> bool:
    """
    Return True when the pair intervals of `ordering` are a permutation of
    `allowed`.

    Pairs are read left to right and the check stops at the first pair whose
    interval is negative, not allowed, or already used. A descending pair
    (negative interval) is always rejected unless `descending` is set:
    otherwise every solution would also appear with each of its pairs
    reversed, 64 copies of the same set of pairs. The scan never sets it.

    A second pass confirms every allowed interval was used.

    `used` is an optional caller-owned scratch set, cleared before use.
    """
    if used is None:
        used = set()
    else:
        used.clear()

    for k in range(0, len(ordering) - 1, PAIR_WIDTH):
        interval = ordering[k + 1] - ordering[k]
        if interval < 0:
            if not descending:
                return False
            interval = -interval
        if interval not in allowed or interval in used:
            return False
        used.add(interval)

    for interval in allowed:
        if interval not in used:
            return False
    return True


# ---------------------------------------------------------------------------
# Driver / solution collector
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SearchSpace:
    """Symbol count and allowed intervals of one scan. Defaults to 12 / {3,4,5,7,8,9}."""
    size: int = SYMBOL_COUNT
    allowed: frozenset[int] = REQUIRED_INTERVALS

    def __post_init__(self):
        object.__setattr__(self, 'allowed', frozenset(self.allowed))

    @property
    def total(self) -> int:
        return factorial(self.size)

    @property
    def pair_count(self) -> int:
        return self.size // PAIR_WIDTH

    def validate(self) -> None:
        if self.size < PAIR_WIDTH or self.size % PAIR_WIDTH:
            raise ValueError(f"Symbol count must be a positive even number, got {self.size}")
        bad = sorted(v for v in self.allowed if v < 1 or v >= self.size)
        if bad:
            raise ValueError(f"Intervals {bad} outside [1, {self.size - 1}]")


DEFAULT_SPACE = SearchSpace()


@dataclass
class ScanResult:
    """Outcome of one scan over [start, stop)."""
    start: int
    stop: int
    next_index: int                 # first index not scanned; resume from here
    solutions: list[tuple[int, ...]] = field(default_factory=list)
    cancelled: bool = False
    elapsed: float = 0.0

    @property
    def complete(self) -> bool:
        return self.next_index >= self.stop

    @property
    def scanned(self) -> int:
        return self.next_index - self.start


def _check_range(start: int, stop: int | None, total: int) -> int:
    if stop is None:
        stop = total
    if not 0 <= start <= stop <= total:
        raise ValueError(f"Invalid scan range [{start}, {stop}) for {total} orderings")
    return stop


def iter_orderings(start: int = 0, stop: int | None = None,
                   space: SearchSpace | None = None) -> Iterator[tuple[int, list[int]]]:
    """
    Yield (index, ordering) for every index in [start, stop).

    The ordering list is reused between iterations; copy it to keep it.
    """
    space = space or DEFAULT_SPACE
    stop = _check_range(start, stop, space.total)
    if start == stop:
        return
    vector = vector_for_index(start, space.size)
    ordering = [0] * space.size
    picked = bytearray(space.size)
    for index in range(start, stop):
        yield index, decode(vector, ordering, picked)
        advance(vector)


def scan(start: int = 0, stop: int | None = None,
         space: SearchSpace | None = None,
         progress: ProgressSink | None = None,
         progress_every: int = DEFAULT_PROGRESS_EVERY,
         cancel=None) -> ScanResult:
    """
    Sequentially scan [start, stop) and collect every accepted ordering.

    progress(current_index, total, solutions_so_far) is called after each
    batch of `progress_every` orderings and once when the scan ends;
    current_index is the next index to be scanned.

    cancel is anything with an is_set() method (e.g. threading.Event). It is
    checked before each batch; once set, the scan stops and returns what it
    has collected so far with cancelled=True.
    """
    space = space or DEFAULT_SPACE
    space.validate()
    stop = _check_range(start, stop, space.total)
    if progress_every < 1:
        raise ValueError(f"progress_every must be >= 1, got {progress_every}")

    total = space.total
    allowed = space.allowed
    solutions: list[tuple[int, ...]] = []
    used: set[int] = set()
    cancelled = False
    started = time.perf_counter()

    index = start
    for index, ordering in iter_orderings(start, stop, space):
        if (index - start) % progress_every == 0:
            if progress is not None and index > start:
                progress(index, total, len(solutions))
            if cancel is not None and cancel.is_set():
                cancelled = True
                break
        if evaluate(ordering, allowed, used):
            solutions.append(tuple(ordering))
    else:
        index = stop

    if progress is not None:
        progress(index, total, len(solutions))

    return ScanResult(
        start=start,
        stop=stop,
        next_index=index,
        solutions=solutions,
        cancelled=cancelled,
        elapsed=time.perf_counter() - started,
    )


# ---------------------------------------------------------------------------
# Range partitioning
# ---------------------------------------------------------------------------

def shard_ranges(total: int, shards: int) -> list[tuple[int, int]]:
    """Split [0, total) into `shards` contiguous ranges of near-equal size."""
    if shards < 1:
        raise ValueError(f"shards must be >= 1, got {shards}")
    base, extra = divmod(total, shards)
    ranges = []
    start = 0
    for i in range(shards):
        stop = start + base + (1 if i < extra else 0)
        ranges.append((start, stop))
        start = stop
    return ranges


def merge_results(results: list[ScanResult]) -> ScanResult:
    """Concatenate contiguous shard results in index order."""
    if not results:
        raise ValueError("No results to merge")
    ordered = sorted(results, key=lambda r: r.start)
    for prev, cur in zip(ordered, ordered[1:]):
        if prev.stop != cur.start:
            raise ValueError(
                f"Shard [{prev.start}, {prev.stop}) is not followed by [{cur.start}, {cur.stop})"
            )
    merged = ScanResult(start=ordered[0].start, stop=ordered[-1].stop,
                        next_index=ordered[0].start)
    for r in ordered:
        merged.solutions.extend(r.solutions)
        merged.elapsed += r.elapsed
        if r.cancelled or not r.complete:
            merged.next_index = r.next_index
            merged.cancelled = r.cancelled
            break
        merged.next_index = r.stop
    return merged
