"""Normalization operations on an aligned string.

Every operation rewrites the normalized form while keeping the alignments
with the original string up to date, so offsets can always be mapped back.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Callable, Iterator

from tokenkit.alignment import AlignedString, ChangeMap
from tokenkit.pattern import Pattern, SplitDelimiterBehavior
from tokenkit.ranges import IndexOn, Range, apply_sign


def _utf8(text: str) -> bytes:
    return text.encode("utf-8", "surrogatepass")


def _segments(s: str) -> Iterator[str]:
    """Split ``s`` into a starter followed by its combining characters."""
    current = ""
    for char in s:
        if current and unicodedata.combining(char) == 0:
            yield current
            current = ""
        current += char
    if current:
        yield current


def _decomposition_changes(s: str, form: str) -> list[ChangeMap]:
    changes: list[ChangeMap] = []
    for segment in _segments(s):
        for i, char in enumerate(unicodedata.normalize(form, segment)):
            changes.append(ChangeMap(char, 0 if i == 0 else 1))
    return changes


class NormalizedString(AlignedString):
    """An aligned string with the usual normalization operations.

    Operations modify the string in place and return it, so they can be chained.
    """

    def nfd(self) -> NormalizedString:
        """Apply canonical decomposition."""
        return self.transform(_decomposition_changes(self.normalized, "NFD"), 0)

    def nfc(self) -> NormalizedString:
        """Leave an NFC string untouched; otherwise decompose it canonically."""
        if unicodedata.is_normalized("NFC", self.normalized):
            return self
        return self.transform(_decomposition_changes(self.normalized, "NFD"), 0)

    def nfkd(self) -> NormalizedString:
        """Apply compatibility decomposition."""
        if unicodedata.is_normalized("NFKD", self.normalized):
            return self
        return self.transform(_decomposition_changes(self.normalized, "NFKD"), 0)

    def nfkc(self) -> NormalizedString:
        """Replace each character by its compatibility decomposition as one piece."""
        if unicodedata.is_normalized("NFKC", self.normalized):
            return self
        changes: list[ChangeMap] = []
        for segment in _segments(self.normalized):
            decomposed = unicodedata.normalize("NFKD", segment)
            if len(decomposed) == 1:
                changes.append(ChangeMap(decomposed, 0))
            elif len(decomposed) > 1:
                changes.append(ChangeMap(decomposed, -1))
        return self.transform(changes, 0)

    def filter(self, fn: Callable[[str], bool]) -> NormalizedString:
        """Keep only the characters for which ``fn`` holds."""
        changes: list[ChangeMap] = []
        removed = 0
        for char in reversed(self.normalized):
            if fn(char):
                changes.append(ChangeMap(char, -removed))
                removed = 0
            else:
                removed += 1
        changes.reverse()
        return self.transform(changes, removed)

    def prepend(self, s: str) -> NormalizedString:
        """Add ``s`` in front of a non-empty normalized string."""
        if not self.normalized:
            return self
        first = self.normalized[0]
        changes = [ChangeMap(char, 0 if i == 0 else 1) for i, char in enumerate(s)]
        changes.append(ChangeMap(first, 1))
        return self.transform_range(Range(0, len(_utf8(first)), IndexOn.NORMALIZED), changes, 0)

    def append(self, s: str) -> NormalizedString:
        """Add ``s`` at the end of a non-empty normalized string."""
        if not self.normalized:
            return self
        last = self.normalized[-1]
        total = len(self)
        start = total - len(_utf8(last))
        changes = [ChangeMap(last, 0), *(ChangeMap(char, 1) for char in s)]
        return self.transform_range(Range(start, total, IndexOn.NORMALIZED), changes, 0)

    def map(self, fn: Callable[[str], str]) -> NormalizedString:
        """Replace every character by ``fn(char)``, tracking alignments."""
        return self.transform([ChangeMap(fn(char), 0) for char in self.normalized], 0)

    def for_each(self, fn: Callable[[str], str]) -> NormalizedString:
        """Apply ``fn`` to every character without touching the alignments."""
        self.normalized = "".join(fn(char) for char in self.normalized)
        return self

    def remove_accents(self) -> NormalizedString:
        """Remove all non-spacing marks."""
        return self.filter(lambda c: unicodedata.category(c) != "Mn")

    def lowercase(self) -> NormalizedString:
        """Lowercase the normalized string."""
        self.normalized = self.normalized.lower()
        return self

    def uppercase(self) -> NormalizedString:
        """Uppercase the normalized string."""
        self.normalized = self.normalized.upper()
        return self

    def clear(self) -> NormalizedString:
        """Remove the whole normalized string."""
        return self.transform([], len(self.normalized))

    def split(self, pattern: Pattern, behavior: SplitDelimiterBehavior) -> list[NormalizedString]:
        """Split on ``pattern``, treating the delimiters according to ``behavior``."""
        matches = [[m.offsets[0], m.offsets[1], m.match] for m in pattern.find_matches(self.normalized)]

        if behavior is SplitDelimiterBehavior.ISOLATED:
            splits = [[start, end, False] for start, end, _ in matches]
        elif behavior is SplitDelimiterBehavior.REMOVED:
            splits = matches
        elif behavior is SplitDelimiterBehavior.MERGED_WITH_PREVIOUS:
            splits = []
            previous = False
            for start, end, is_match in matches:
                if is_match and not previous and splits:
                    splits[-1][1] = end
                else:
                    splits.append([start, end, False])
                previous = is_match
        elif behavior is SplitDelimiterBehavior.CONTIGUOUS:
            splits = []
            previous = False
            for start, end, is_match in matches:
                if is_match == previous and splits:
                    splits[-1][1] = end
                else:
                    splits.append([start, end, False])
                previous = is_match
        elif behavior is SplitDelimiterBehavior.MERGED_WITH_NEXT:
            splits = []
            previous = False
            for start, end, is_match in reversed(matches):
                if is_match and not previous and splits:
                    splits[-1][0] = start
                else:
                    splits.append([start, end, False])
                previous = is_match
            splits.reverse()
        else:
            raise ValueError(f"unsupported split behavior: {behavior!r}")

        pieces: list[NormalizedString] = []
        for start, end, is_match in splits:
            if is_match:
                continue
            piece = self.slice(Range(start, end, IndexOn.NORMALIZED))
            if piece is not None:
                pieces.append(piece)
        return pieces

    def lstrip(self) -> NormalizedString:
        """Remove leading whitespace."""
        return self._strip(left=True, right=False)

    def rstrip(self) -> NormalizedString:
        """Remove trailing whitespace."""
        return self._strip(left=False, right=True)

    def strip(self) -> NormalizedString:
        """Remove leading and trailing whitespace."""
        return self._strip(left=True, right=True)

    def _strip(self, *, left: bool, right: bool) -> NormalizedString:
        text = self.normalized
        leading = len(text) - len(text.lstrip()) if left else 0
        trailing = len(text) - len(text.rstrip()) if right else 0
        if leading == 0 and trailing == 0:
            return self

        stop = len(text) - trailing
        changes = [
            ChangeMap(char, -trailing if i == stop - 1 else 0)
            for i, char in enumerate(text)
            if leading <= i < stop
        ]
        return self.transform(changes, leading)

    def replace(self, pattern: Pattern, content: str) -> NormalizedString:
        """Replace every match of ``pattern`` with ``content``."""
        offset = 0
        new_len = len(_utf8(content))
        for m in pattern.find_matches(self.normalized):
            if not m.match:
                continue
            start, end = m.offsets
            r0 = apply_sign(start, offset)
            r1 = apply_sign(end, offset)
            removed = _utf8(self.normalized)[r0:r1].decode("utf-8", "surrogatepass")
            changes = [ChangeMap(char, 1) for char in content]
            self.transform_range(Range(r0, r1, IndexOn.NORMALIZED), changes, len(removed))
            offset += new_len - (end - start)
        return self