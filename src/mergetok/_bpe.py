"""
Core Byte Pair Encoding (BPE) operations.
"""

import heapq

from typing_extensions import deprecated

from .merges import MergeTable
from .types import Token, TokenPair

# end-of-list sentinel for the linked symbol list
_END = -1


def apply_merges(symbols: list[Token], table: MergeTable) -> list[Token]:
    """
    Merge adjacent symbols greedily by rule rank until no rule applies.

    At every step the adjacent pair with the lowest rank in the current
    sequence is merged; equal ranks are merged leftmost first. Candidate
    pairs live in a heap keyed on ``(rank, position)`` over a doubly linked
    list of symbols, so each merge costs O(log n) instead of a full rescan.
    Heap entries are validated lazily when popped.

    :param symbols: Atomic symbols of one word (or of the whole text stream).
    :param table: Merge rules to apply.
    :return: The merged symbol sequence.
    """
    n = len(symbols)
    if n < 2:
        return list(symbols)

    syms = list(symbols)
    prev = list(range(-1, n - 1))
    nxt = list(range(1, n + 1))
    nxt[-1] = _END
    alive = [True] * n

    heap: list[tuple[int, int, Token, Token]] = []
    for i in range(n - 1):
        hit = table.lookup(syms[i], syms[i + 1])
        if hit is not None:
            heap.append((hit[0], i, syms[i], syms[i + 1]))
    heapq.heapify(heap)

    while heap:
        _, i, left, right = heapq.heappop(heap)
        j = nxt[i] if alive[i] else _END
        # stale: one side of the pair was merged away since the push
        if j == _END or syms[i] != left or syms[j] != right:
            continue

        merged = left + right
        syms[i] = merged
        alive[j] = False
        k = nxt[j]
        nxt[i] = k
        if k != _END:
            prev[k] = i

        # new pairs formed with the left and right neighbours
        p = prev[i]
        if p != _END:
            hit = table.lookup(syms[p], merged)
            if hit is not None:
                heapq.heappush(heap, (hit[0], p, syms[p], merged))
        if k != _END:
            hit = table.lookup(merged, syms[k])
            if hit is not None:
                heapq.heappush(heap, (hit[0], i, merged, syms[k]))

    return [sym for sym, keep in zip(syms, alive) if keep]


def merge_pair(symbols: list[Token], target: TokenPair, merged: Token) -> list[Token]:
    """
    Merge all occurrences of a target symbol pair into ``merged``, left to right.
    """
    out: list[Token] = []

    i = 0
    while i < len(symbols):
        # check if we can form a pair and it matches the target
        if (
            i < len(symbols) - 1
            and symbols[i] == target[0]
            and symbols[i + 1] == target[1]
        ):
            out.append(merged)
            i += 2
        else:
            out.append(symbols[i])
            i += 1

    return out


@deprecated(
    "Reference implementation for documentation and testing only. Use `apply_merges()`."
)
def slow_apply_merges(symbols: list[Token], table: MergeTable) -> list[Token]:
    """
    Rescan-based greedy BPE: O(n) scan per merge step.

    Each step scans every adjacent pair, picks the lowest-ranked one and
    merges all of its occurrences before scanning again. Produces the same
    output as :func:`apply_merges`.
    """
    syms = list(symbols)
    while len(syms) >= 2:
        best: tuple[int, TokenPair, Token] | None = None
        for pair in zip(syms, syms[1:]):
            hit = table.lookup(*pair)
            if hit is not None and (best is None or hit[0] < best[0]):
                best = (hit[0], pair, hit[1])
        if best is None:
            break
        _, pair, merged = best
        syms = merge_pair(syms, pair, merged)
    return syms


__all__ = ["apply_merges", "merge_pair", "slow_apply_merges"]
