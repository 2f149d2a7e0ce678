"""Text being split into pieces, each tracking where it sits in the input.

A :class:`PreTokenizedString` starts as one piece covering the whole input.
Pre-tokenizers split it further, normalizers rewrite pieces and a model
attaches tokens to them. Offsets can be reported against the unmodified input
or the normalized text, in bytes or in characters.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Union

from tokenkit.normalized import NormalizedString
from tokenkit.ranges import IndexOn


class OffsetType(enum.Enum):
    """Unit in which offsets are reported."""

    BYTE = enum.auto()
    CHAR = enum.auto()


@dataclass(frozen=True)
class Token:
    """A token produced by a model, with offsets into its piece."""

    id: int
    value: str
    offsets: tuple[int, int]


@dataclass(frozen=True)
class PreToken:
    """A piece of text, its offsets and the tokens attached to it, if any."""

    value: str
    offsets: tuple[int, int]
    tokens: list[Token] | None = None


@dataclass
class Split:
    """One piece of a :class:`PreTokenizedString` and its optional tokens."""

    normalized: NormalizedString
    tokens: list[Token] | None = None


SplitResult = Union[NormalizedString, Split]
SplitFn = Callable[[int, NormalizedString], Iterable[SplitResult]]


class BytesToCharOffsetConverter:
    """Converts byte offsets into character offsets for one string."""

    def __init__(self, sequence: str) -> None:
        self.byte_to_char: dict[int, int] = {}
        pos = 0
        for char_idx, char in enumerate(sequence):
            width = len(char.encode("utf-8", "surrogatepass"))
            for byte_idx in range(pos, pos + width):
                self.byte_to_char[byte_idx] = char_idx
            pos += width

    def convert(self, offsets: tuple[int, int]) -> tuple[int, int]:
        """Map a ``(start, end)`` byte pair to character indices.

        Raises ``ValueError`` when a bound is not a byte of the string.
        """
        start, end = offsets
        try:
            char_start = self.byte_to_char[start]
        except KeyError:
            raise ValueError(f"invalid offsets start {start}") from None
        try:
            char_end = self.byte_to_char[end]
        except KeyError:
            raise ValueError(f"invalid offsets end {end}") from None
        return (char_start, char_end)


class PreTokenizedString:
    """An input string split into normalized pieces."""

    def __init__(self, normalized: NormalizedString) -> None:
        self.original: str = normalized.original
        self.splits: list[Split] = [Split(normalized)]

    @classmethod
    def from_str(cls, s: str) -> PreTokenizedString:
        """A single piece covering the whole of ``s``."""
        return cls(NormalizedString.from_str(s))

    def split(self, split_fn: SplitFn) -> PreTokenizedString:
        """Split every piece without tokens using ``split_fn``.

        ``split_fn`` receives the piece index and the piece and yields new
        pieces, as normalized strings or as :class:`Split` objects. Empty
        pieces are dropped; pieces that already carry tokens are kept as is.
        """
        new_splits: list[Split] = []
        for index, current in enumerate(self.splits):
            if current.tokens is not None:
                new_splits.append(current)
                continue
            for produced in split_fn(index, current.normalized):
                piece = produced if isinstance(produced, Split) else Split(produced)
                if piece.normalized.normalized:
                    new_splits.append(piece)
        self.splits = new_splits
        return self

    def normalize(
        self, fn: Callable[[NormalizedString], NormalizedString]
    ) -> PreTokenizedString:
        """Rewrite every piece without tokens using ``fn``.

        Pieces that already carry tokens are dropped.
        """
        self.splits = [
            Split(fn(s.normalized), s.tokens) for s in self.splits if s.tokens is None
        ]
        return self

    def tokenize(
        self, fn: Callable[[NormalizedString], list[Token]]
    ) -> PreTokenizedString:
        """Attach tokens from ``fn`` to every piece that has none yet."""
        self.splits = [
            s if s.tokens is not None else Split(s.normalized, list(fn(s.normalized)))
            for s in self.splits
        ]
        return self

    def get_splits(
        self,
        offset_ref: IndexOn = IndexOn.ORIGINAL,
        offset_type: OffsetType = OffsetType.BYTE,
    ) -> list[PreToken]:
        """Every piece with its offsets in the chosen referential and unit."""
        converter = (
            BytesToCharOffsetConverter(self.original)
            if offset_type is OffsetType.CHAR
            else None
        )
        pre_tokens: list[PreToken] = []
        offset = 0
        for s in self.splits:
            if offset_ref is IndexOn.ORIGINAL:
                offsets = s.normalized.offsets_original()
            else:
                length = len(s.normalized)
                offsets = (offset, offset + length)
                offset += length
            if converter is not None:
                offsets = converter.convert(offsets)
            pre_tokens.append(PreToken(s.normalized.normalized, offsets, s.tokens))
        return pre_tokens

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PreTokenizedString):
            return NotImplemented
        return self.original == other.original and self.splits == other.splits

    def __repr__(self) -> str:
        return f"PreTokenizedString(original={self.original!r}, splits={self.splits!r})"