"""
CPDScan — token-based copy/paste detector with CSV, XML, text
and Visual Studio reports.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .errors import ConfigurationError
from .suffix import build_lcp_array, build_suffix_array, iter_lcp_intervals
from .tokens import TokenStream

# =========================
# Data structures
# =========================


@dataclass(frozen=True, slots=True)
class Occurrence:
    filepath: str
    start_line: int
    end_line: int
    start_token: int
    end_token: int
    start_column: int
    end_column: int

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1


@dataclass(frozen=True, slots=True)
class Match:
    token_count: int
    occurrences: tuple[Occurrence, ...]

    @property
    def line_count(self) -> int:
        return max(o.line_count for o in self.occurrences)

    @property
    def first(self) -> Occurrence:
        return self.occurrences[0]


# =========================
# Corpus
# =========================


class _Corpus:
    """All token streams concatenated into one integer sequence."""

    __slots__ = ("codes", "file_of", "file_starts", "streams")

    def __init__(self, streams: Sequence[TokenStream]) -> None:
        self.streams = streams
        self.codes: list[int] = []
        self.file_of: list[int] = []
        self.file_starts: list[int] = []

        vocabulary: dict[tuple[str, str], int] = {}
        for file_index, stream in enumerate(streams):
            self.file_starts.append(len(self.codes))
            for token in stream.tokens:
                self.codes.append(vocabulary.setdefault(token.key, len(vocabulary)))
                self.file_of.append(file_index)
            # Unique terminator: no repeat can cross a file boundary.
            self.codes.append(-(file_index + 1))
            self.file_of.append(file_index)

    def predecessor(self, pos: int) -> int | None:
        return self.codes[pos - 1] if pos > 0 else None

    def occurrence(self, pos: int, length: int) -> Occurrence:
        file_index = self.file_of[pos]
        stream = self.streams[file_index]
        start = pos - self.file_starts[file_index]
        end = start + length - 1
        first, last = stream[start], stream[end]
        return Occurrence(
            filepath=stream.filepath,
            start_line=first.line,
            end_line=last.end_line,
            start_token=start,
            end_token=end,
            start_column=first.column,
            end_column=last.end_column,
        )


def _is_left_maximal(corpus: _Corpus, positions: Sequence[int]) -> bool:
    first = corpus.predecessor(positions[0])
    return any(corpus.predecessor(p) != first for p in positions[1:])


def _drop_overlapping(
    corpus: _Corpus, positions: Sequence[int], length: int
) -> list[int]:
    kept: list[int] = []
    for pos in positions:
        if (
            kept
            and corpus.file_of[kept[-1]] == corpus.file_of[pos]
            and pos - kept[-1] < length
        ):
            continue
        kept.append(pos)
    return kept


def _is_covered(covered: bytearray, positions: Sequence[int], length: int) -> bool:
    # Every occurrence lies inside spans already taken by reported matches.
    return all(0 not in covered[p : p + length] for p in positions)


# =========================
# Public API
# =========================


def find_matches(
    streams: Sequence[TokenStream], minimum_token_count: int
) -> list[Match]:
    """
    Find every maximal duplicated token sequence of at least
    ``minimum_token_count`` tokens.

    Each repeat is reported once with all of its non-overlapping positions.
    A repeat whose occurrences all fall inside longer matches already
    reported (the shorter periods of one repeated run) is dropped.
    Matches are ordered by descending token count, then by the position of
    their first occurrence; occurrences follow stream order, then token
    index. The result depends only on the streams and their order.
    """
    if minimum_token_count <= 0:
        raise ConfigurationError(
            f"Minimum token count must be positive, got {minimum_token_count}"
        )
    if not any(len(s) >= minimum_token_count for s in streams):
        return []

    corpus = _Corpus(streams)
    sa = build_suffix_array(corpus.codes)
    lcp = build_lcp_array(corpus.codes, sa)

    candidates: list[tuple[int, list[int]]] = []
    for length, lb, rb in iter_lcp_intervals(lcp, minimum_token_count):
        positions = sorted(sa[lb : rb + 1])
        if not _is_left_maximal(corpus, positions):
            continue
        kept = _drop_overlapping(corpus, positions, length)
        if len(kept) < 2:
            continue
        candidates.append((length, kept))

    candidates.sort(key=lambda item: (-item[0], item[1][0]))
    covered = bytearray(len(corpus.codes))
    matches: list[Match] = []
    for length, kept in candidates:
        if _is_covered(covered, kept, length):
            continue
        for p in kept:
            covered[p : p + length] = b"\x01" * length
        matches.append(
            Match(
                token_count=length,
                occurrences=tuple(corpus.occurrence(p, length) for p in kept),
            )
        )
    return matches