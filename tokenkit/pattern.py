"""Patterns that locate matches inside a string.

Every pattern reports the whole input as an ordered, contiguous list of
pieces, each flagged as a match or not. Offsets are UTF-8 byte offsets.
"""

from __future__ import annotations

import abc
import enum
from dataclasses import dataclass
from itertools import accumulate
from typing import Callable

import regex


class SplitDelimiterBehavior(enum.Enum):
    """What to do with the delimiter when splitting on a pattern.

    Splitting ``the-final--countdown`` on ``-``:

    * ``REMOVED``: ``["the", "final", "countdown"]``
    * ``ISOLATED``: ``["the", "-", "final", "-", "-", "countdown"]``
    * ``MERGED_WITH_PREVIOUS``: ``["the-", "final-", "-", "countdown"]``
    * ``MERGED_WITH_NEXT``: ``["the", "-final", "-", "-countdown"]``
    * ``CONTIGUOUS``: ``["the", "-", "final", "--", "countdown"]``
    """

    REMOVED = enum.auto()
    ISOLATED = enum.auto()
    MERGED_WITH_PREVIOUS = enum.auto()
    MERGED_WITH_NEXT = enum.auto()
    CONTIGUOUS = enum.auto()


@dataclass(frozen=True)
class OffsetsMatch:
    """A ``(start, end)`` byte span and whether it is a match."""

    offsets: tuple[int, int]
    match: bool


def _utf8_len(char: str) -> int:
    return len(char.encode("utf-8", "surrogatepass"))


def _byte_positions(s: str) -> list[int]:
    """Byte offset of every character boundary, the end included."""
    return [0, *accumulate(_utf8_len(c) for c in s)]


def _empty() -> list[OffsetsMatch]:
    return [OffsetsMatch((0, 0), False)]


def _scan(inside: str, predicate: Callable[[str], bool]) -> list[OffsetsMatch]:
    """Match single characters for which ``predicate`` holds."""
    if not inside:
        return _empty()

    subs: list[OffsetsMatch] = []
    prev_start = 0
    has_previous = False
    pos = 0
    for char in inside:
        width = _utf8_len(char)
        if predicate(char):
            if has_previous:
                subs.append(OffsetsMatch((prev_start, pos), False))
            subs.append(OffsetsMatch((pos, pos + width), True))
            prev_start = pos + width
            has_previous = False
        else:
            has_previous = True
        pos += width

    if has_previous:
        subs.append(OffsetsMatch((prev_start, pos), False))
    return subs


def _regex_matches(compiled: regex.Pattern, inside: str) -> list[OffsetsMatch]:
    positions = _byte_positions(inside)
    total = positions[-1]
    spans = [(positions[m.start()], positions[m.end()]) for m in compiled.finditer(inside)]

    if not spans:
        return [OffsetsMatch((0, total), False)]

    subs: list[OffsetsMatch] = []
    current = 0
    first_start = spans[0][0]
    if first_start > 0:
        subs.append(OffsetsMatch((0, first_start), False))
        current += first_start

    for (start, end), following in zip(spans, [*spans[1:], None]):
        subs.append(OffsetsMatch((start, end), True))
        current += end - start
        if following is not None and end != following[0]:
            subs.append(OffsetsMatch((end, following[0]), False))
            current += following[0] - end

    if current < total:
        subs.append(OffsetsMatch((current, total), False))
    return subs


class Pattern(abc.ABC):
    """Something that can find its matches inside a string."""

    @abc.abstractmethod
    def find_matches(self, inside: str) -> list[OffsetsMatch]:
        """Cover ``inside`` with contiguous, ordered pieces flagged as matches or not."""


class CharPattern(Pattern):
    """Matches every occurrence of a single character."""

    def __init__(self, char: str) -> None:
        if len(char) != 1:
            raise ValueError(f"expected a single character, got {char!r}")
        self.char = char

    def find_matches(self, inside: str) -> list[OffsetsMatch]:
        return _scan(inside, lambda c: c == self.char)

    def __repr__(self) -> str:
        return f"CharPattern({self.char!r})"


class StringPattern(Pattern):
    """Matches every non-overlapping occurrence of a literal string."""

    def __init__(self, string: str) -> None:
        self.string = string
        self._compiled = regex.compile(regex.escape(string)) if string else None

    def find_matches(self, inside: str) -> list[OffsetsMatch]:
        if self._compiled is None:
            return [OffsetsMatch((0, len(inside.encode("utf-8", "surrogatepass"))), False)]
        return _regex_matches(self._compiled, inside)

    def __repr__(self) -> str:
        return f"StringPattern({self.string!r})"


class RegexPattern(Pattern):
    """Matches a regular expression."""

    def __init__(self, expression: str) -> None:
        self.expression = expression
        self._compiled = regex.compile(expression)

    def find_matches(self, inside: str) -> list[OffsetsMatch]:
        if not inside:
            return _empty()
        return _regex_matches(self._compiled, inside)

    def __repr__(self) -> str:
        return f"RegexPattern({self.expression!r})"


class FnPattern(Pattern):
    """Matches every character for which a predicate holds."""

    def __init__(self, fn: Callable[[str], bool]) -> None:
        self.fn = fn

    def find_matches(self, inside: str) -> list[OffsetsMatch]:
        return _scan(inside, self.fn)


class InvertPattern(Pattern):
    """Flips the match flag of every piece found by the wrapped pattern."""

    def __init__(self, pattern: Pattern) -> None:
        self.pattern = pattern

    def find_matches(self, inside: str) -> list[OffsetsMatch]:
        return [
            OffsetsMatch(m.offsets, not m.match) for m in self.pattern.find_matches(inside)
        ]

    def __repr__(self) -> str:
        return f"InvertPattern({self.pattern!r})"