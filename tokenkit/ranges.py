"""Ranges over an original or normalized string, and offset helpers."""

from __future__ import annotations

import dataclasses
import enum
from collections.abc import Sequence
from dataclasses import dataclass


class IndexOn(enum.Enum):
    """Which string a range indexes."""

    ORIGINAL = enum.auto()
    NORMALIZED = enum.auto()


def _utf8_len(char: str) -> int:
    return len(char.encode("utf-8", "surrogatepass"))


@dataclass(frozen=True)
class Range:
    """A half-open span ``[start, end)`` on the original or normalized string.

    A ``start`` of ``None`` means the range is unbounded on the left.
    """

    start: int | None
    end: int
    index_on: IndexOn

    def __len__(self) -> int:
        if self.start is None or self.start < 0:
            return self.end
        return self.end - self.start

    def values(self) -> tuple[int | None, int]:
        """The ``(start, end)`` pair."""
        return (self.start, self.end)

    def into_full_range(self, max_len: int) -> Range:
        """Resolve an unbounded start and clip the end to ``max_len``."""
        start = 0 if self.start is None else self.start
        end = min(self.end, max_len)
        return dataclasses.replace(self, start=start, end=end)


def range_of(s: str, r: Sequence[int]) -> str:
    """Characters of ``s`` between ``r[0]`` and ``r[-1]``; empty when out of bounds."""
    length = len(s)
    start = r[0] if r else 0
    end = min(r[-1], length)
    if start < 0 or start >= length or end > length or start >= end:
        return ""
    return s[start:end]


def bytes_to_char(s: str, byte_range: Sequence[int]) -> tuple[int | None, int | None]:
    """Convert a range to character indices, walking ``s`` one character at a time.

    A bound that no character lines up with comes back as ``None``.
    """
    lo, hi = byte_range
    start: int | None
    end: int | None
    start = end = 0 if (lo, hi) == (0, 0) else None

    for idx, char in enumerate(s):
        if not lo <= idx <= hi:
            continue
        if idx == lo:
            start = idx
        if idx == hi:
            end = idx
        if idx + _utf8_len(char) == hi:
            end = idx + 1
    return start, end


def char_to_bytes(s: str, char_range: Sequence[int]) -> tuple[int | None, int | None]:
    """Convert a character range back to a span, walking ``s`` one character at a time.

    A bound that no character lines up with comes back as ``None``.
    Raises ``IndexError`` for an empty range on the last character.
    """
    lo, hi = char_range
    start: int | None
    end: int | None
    start = end = 0 if (lo, hi) == (0, 0) else None

    if lo == hi:
        if 0 <= lo < len(s):
            if lo + 1 >= len(s):
                raise IndexError(f"character range {tuple(char_range)} is out of bounds")
            start = end = lo + 1
        return start, end

    for idx, char in enumerate(s):
        if lo < idx <= hi:
            if start is None:
                start = idx
            end = idx + _utf8_len(char)
    return start, end


def expand_alignments(alignments: Sequence[Sequence[int]]) -> tuple[int, int] | None:
    """The span covered by a run of alignments, or ``None`` when there are none."""
    if not alignments:
        return None
    return (alignments[0][0], alignments[-1][1])


def apply_sign(origin: int, signed: int) -> int:
    """Add ``signed`` to ``origin``, flooring the result at zero."""
    return max(0, origin + signed)