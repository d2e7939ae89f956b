"""
CPDScan — token-based copy/paste detector with CSV, XML, text
and Visual Studio reports.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence


def build_suffix_array(seq: Sequence[int]) -> list[int]:
    """
    Suffix array by prefix doubling, O(n log^2 n).

    Every suffix must be unique; callers guarantee that with a distinct
    terminator per concatenated stream.
    """
    n = len(seq)
    if n == 0:
        return []

    dense = {value: i for i, value in enumerate(sorted(set(seq)))}
    rank = [dense[value] for value in seq]
    sa = sorted(range(n), key=rank.__getitem__)
    if rank[sa[-1]] == n - 1:
        return sa

    k = 1
    while True:
        current = rank

        def sort_key(i: int) -> tuple[int, int]:
            return current[i], current[i + k] if i + k < n else -1

        sa.sort(key=sort_key)
        new_rank = [0] * n
        prev_key = sort_key(sa[0])
        for idx in range(1, n):
            key = sort_key(sa[idx])
            new_rank[sa[idx]] = new_rank[sa[idx - 1]] + (key != prev_key)
            prev_key = key
        rank = new_rank
        if rank[sa[-1]] == n - 1:
            return sa
        k <<= 1


def build_lcp_array(seq: Sequence[int], sa: Sequence[int]) -> list[int]:
    """
    Kasai's algorithm: ``lcp[i]`` is the longest common prefix of the
    suffixes at ``sa[i - 1]`` and ``sa[i]``; ``lcp[0]`` is 0.
    """
    n = len(seq)
    rank = [0] * n
    for i, pos in enumerate(sa):
        rank[pos] = i

    lcp = [0] * n
    h = 0
    for i in range(n):
        r = rank[i]
        if r == 0:
            h = 0
            continue
        j = sa[r - 1]
        while i + h < n and j + h < n and seq[i + h] == seq[j + h]:
            h += 1
        lcp[r] = h
        if h > 0:
            h -= 1
    return lcp


def iter_lcp_intervals(
    lcp: Sequence[int], min_length: int
) -> Iterator[tuple[int, int, int]]:
    """
    Yield ``(length, lb, rb)`` for every lcp-interval whose value is at
    least ``min_length``; suffixes ``sa[lb..rb]`` share exactly ``length``
    leading symbols.

    Bottom-up traversal of the virtual suffix tree, children before parents.
    """
    stack: list[tuple[int, int]] = [(0, 0)]
    n = len(lcp)
    for i in range(1, n + 1):
        value = lcp[i] if i < n else 0
        lb = i - 1
        while value < stack[-1][0]:
            length, lb = stack.pop()
            if length >= min_length:
                yield length, lb, i - 1
        if value > stack[-1][0]:
            stack.append((value, lb))
