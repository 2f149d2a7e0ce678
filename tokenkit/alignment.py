"""A string that remembers how its normalized form lines up with the original.

Alignments are kept per UTF-8 byte: ``alignments`` maps every byte of the
normalized string to a ``(start, end)`` span of the original, and
``alignments_original`` maps every byte of the original to a span of the
normalized string.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from itertools import islice
from typing import NamedTuple

from tokenkit.ranges import IndexOn, Range, apply_sign, expand_alignments

Alignment = tuple[int, int]


class ChangeMap(NamedTuple):
    """One piece of a new normalized string and how it relates to the old one.

    ``change`` is ``1`` for a newly inserted piece, ``0`` when it replaces the
    current character and ``-N`` when it replaces the current character and
    the ``N`` characters that follow it are removed.
    """

    value: str
    change: int


def _utf8_len(text: str) -> int:
    return len(text.encode("utf-8", "surrogatepass"))


def _encode(text: str) -> bytes:
    return text.encode("utf-8", "surrogatepass")


def _decode(data: bytes) -> str:
    return data.decode("utf-8", "surrogatepass")


def _create_alignments(s: str) -> list[Alignment]:
    alignments: list[Alignment] = []
    pos = 0
    for char in s:
        width = _utf8_len(char)
        alignments.extend([(pos, pos + width)] * width)
        pos += width
    return alignments


@dataclass
class AlignedString:
    """An original string, its normalized form and the alignments between them."""

    original: str
    normalized: str
    alignments: list[Alignment] = field(default_factory=list)
    alignments_original: list[Alignment] = field(default_factory=list)
    original_shift: int = 0

    def __post_init__(self) -> None:
        self.alignments = [tuple(a) for a in self.alignments]
        self.alignments_original = [tuple(a) for a in self.alignments_original]

    @classmethod
    def from_str(cls, s: str) -> AlignedString:
        """A string whose normalized form is still identical to the original."""
        return cls(s, s, _create_alignments(s), _create_alignments(s), 0)

    def offsets_original(self) -> tuple[int, int]:
        """The span this string covers in the full original string."""
        return (self.original_shift, self.original_shift + self.len_original())

    def __len__(self) -> int:
        return _utf8_len(self.normalized)

    def len_original(self) -> int:
        """Length of the original string in bytes."""
        return _utf8_len(self.original)

    def is_empty(self) -> bool:
        """Whether the normalized string is empty."""
        return not self.normalized

    def convert_offset(self, input_range: Range) -> Range | None:
        """Convert a range from one referential to the other.

        Returns ``None`` when the range lies outside the string.
        """
        if input_range.index_on is IndexOn.ORIGINAL:
            target = input_range.into_full_range(self.len_original())
            alignments = self.alignments_original
            index_on = IndexOn.NORMALIZED
        else:
            target = input_range.into_full_range(len(self))
            alignments = self.alignments
            index_on = IndexOn.ORIGINAL

        if target.start == target.end:
            return target

        upper = len(alignments)
        if not (0 <= target.start <= upper and 0 <= target.end <= upper):
            return None
        if target.start > target.end:
            raise ValueError(f"range start {target.start} is after its end {target.end}")

        lo, hi = expand_alignments(alignments[target.start:target.end])
        return Range(lo, hi, index_on)

    def _resolve(self, r: Range, index_on: IndexOn, length: int) -> Range:
        if r.index_on is index_on:
            return r.into_full_range(length)
        converted = self.convert_offset(r)
        if converted is None:
            raise ValueError(f"range {r.values()} is out of bounds")
        return converted

    def range(self, r: Range) -> str:
        """The part of the normalized string that ``r`` covers."""
        target = self._resolve(r, IndexOn.NORMALIZED, len(self))
        return _decode(_encode(self.normalized)[target.start:target.end])

    def range_original(self, r: Range) -> str:
        """The part of the original string that ``r`` covers."""
        target = self._resolve(r, IndexOn.ORIGINAL, self.len_original())
        return _decode(_encode(self.original)[target.start:target.end])

    def _validate_range(self, input_range: Range) -> Range | None:
        if input_range.index_on is IndexOn.ORIGINAL:
            text = self.original
        else:
            text = self.normalized
        r = input_range.into_full_range(_utf8_len(text))
        if r.start == 0 and r.end == 0:
            return r
        boundaries = {0}
        pos = 0
        for char in text:
            pos += _utf8_len(char)
            boundaries.add(pos)
        if r.start < r.end and r.start in boundaries and r.end in boundaries:
            return r
        return None

    def slice(self, input_range: Range) -> AlignedString | None:
        """A new string covering ``input_range``, or ``None`` off char boundaries."""
        full = self._validate_range(input_range)
        if full is None:
            return None

        if full.index_on is IndexOn.ORIGINAL:
            n_range, o_range = self.convert_offset(full), full
        else:
            n_range, o_range = full, self.convert_offset(full)
        if n_range is None or o_range is None:
            return None

        n_shift = o_range.start
        prefix = expand_alignments(self.alignments_original[:n_shift])
        o_shift = 0 if prefix is None else prefix[1]

        return type(self)(
            self.range_original(full),
            self.range(full),
            [(a0 - n_shift, a1 - n_shift) for a0, a1 in self.alignments[n_range.start:n_range.end]],
            [
                (a0 - o_shift, a1 - o_shift)
                for a0, a1 in self.alignments_original[o_range.start:o_range.end]
            ],
            self.original_shift + o_range.start,
        )

    def transform_range(
        self,
        input_range: Range,
        changes: Iterable[ChangeMap | tuple[str, int]],
        initial_offset: int = 0,
    ) -> AlignedString:
        """Rewrite the part of the normalized string covered by ``input_range``.

        ``changes`` yields the new pieces (see :class:`ChangeMap`);
        ``initial_offset`` is the number of characters removed at the very
        beginning of the range. The string is modified in place and returned.
        """
        if input_range.index_on is IndexOn.NORMALIZED:
            n_range = input_range.into_full_range(len(self))
        else:
            n_range = self.convert_offset(input_range)
            if n_range is None:
                raise ValueError(f"range {input_range.values()} is out of bounds")

        alignments = self.alignments
        n_start = n_range.start
        n_end = min(n_range.end, len(alignments))

        normalized_bytes = _encode(self.normalized)
        replaced: Iterator[str] = iter(_decode(normalized_bytes[n_start:n_end]))
        original = list(self.alignments_original)

        end_shift_start = n_end
        initial_removed = 0
        if initial_offset > 0:
            removed_chars = list(islice(replaced, initial_offset))
            if len(removed_chars) < initial_offset:
                raise ValueError(
                    f"expected to remove {initial_offset} characters but could not find them"
                )
            offset = n_start
            o_shift = 0
            for char in removed_chars:
                width = _utf8_len(char)
                lo, hi = expand_alignments(alignments[offset:offset + width])
                offset += width
                o_shift += width
                segment = original[lo:hi]
                end_shift_start = max([end_shift_start, *(a1 for _, a1 in segment)])
                shifted = [(a0, apply_sign(a1, -o_shift)) for a0, a1 in segment]
                original[lo:hi] = [(min(a0, a1), a1) for a0, a1 in shifted]
                initial_removed += width

        o_shift = -initial_removed
        offset = initial_removed + n_start
        new_alignments: list[Alignment] = []
        pieces: list[str] = []

        for value, change in changes:
            idx = offset
            if change > 0:
                align = (0, 0) if idx < 1 else alignments[idx - 1]
                replaced_size = 0
            else:
                align = alignments[idx]
                replaced_char = next(replaced, None)
                replaced_size = 0 if replaced_char is None else _utf8_len(replaced_char)

            value_len = _utf8_len(value)
            size_change = value_len - replaced_size

            removed_bytes = 0
            for _ in range(max(0, -change)):
                removed = next(replaced, None)
                if removed is None:
                    raise ValueError(
                        f"expected to remove {-change} characters but could not find them"
                    )
                removed_bytes += _utf8_len(removed)

            from_original = from_normalized = 0
            if removed_bytes > 0:
                start = alignments[idx][1]
                end = alignments[idx + removed_bytes][1]
                from_original = max(0, end - start)
                from_normalized = removed_bytes - from_original

            segment = original[align[0]:align[1]]
            if segment:
                lo, hi = expand_alignments(segment)
                size_change_original = value_len - (hi - lo)
                apply_shift = change < 0 or size_change == size_change_original
                updated: list[Alignment] = []
                for a0, a1 in segment:
                    if change > 0:
                        updated.append((a0, a1 + value_len))
                        continue
                    b1 = apply_sign(apply_sign(a1, size_change), -from_normalized)
                    b0 = a0
                    if apply_shift:
                        b0 = apply_sign(b0, o_shift)
                        b1 = apply_sign(b1, o_shift)
                    updated.append((b0, b1))
                original[align[0]:align[1]] = updated

            if from_original > 0:
                start = alignments[idx][1]
                end = alignments[idx + removed_bytes][1]
                new_idx = original[align[0]][1]
                cleared = original[start:end]
                if cleared:
                    original[start:end] = [(new_idx, new_idx)] * len(cleared)

            offset += replaced_size + removed_bytes
            o_shift += size_change - removed_bytes
            new_alignments.extend([align] * value_len)
            pieces.append(value)

        if o_shift != 0:
            span = expand_alignments(alignments[end_shift_start:])
            if span is not None:
                lo, hi = span
                segment = original[lo:hi]
                if segment:
                    original[lo:hi] = [
                        (apply_sign(a0, o_shift), apply_sign(a1, o_shift)) for a0, a1 in segment
                    ]

        self.alignments = alignments[:n_start] + new_alignments + alignments[n_end:]
        self.alignments_original = original
        self.normalized = _decode(
            normalized_bytes[:n_start] + _encode("".join(pieces)) + normalized_bytes[n_end:]
        )
        return self

    def transform(
        self,
        changes: Iterable[ChangeMap | tuple[str, int]],
        initial_offset: int = 0,
    ) -> AlignedString:
        """Rewrite the whole normalized string; see :meth:`transform_range`."""
        whole = Range(0, self.len_original(), IndexOn.ORIGINAL)
        return self.transform_range(whole, changes, initial_offset)