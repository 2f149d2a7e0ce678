"""Pre-tokenizers that split a :class:`PreTokenizedString` into words."""

from __future__ import annotations

import abc
import unicodedata
from collections.abc import Iterable
from dataclasses import dataclass, field

from tokenkit.normalizers import is_bert_punctuation, is_bert_whitespace
from tokenkit.pattern import (
    CharPattern,
    FnPattern,
    InvertPattern,
    Pattern,
    RegexPattern,
    SplitDelimiterBehavior,
)
from tokenkit.pretokenized import PreTokenizedString


class PreTokenizer(abc.ABC):
    """A step that splits a pre-tokenized string further."""

    @abc.abstractmethod
    def pre_tokenize(self, pretokenized: PreTokenizedString) -> PreTokenizedString:
        """Split ``pretokenized`` and return it."""


def _split_with(
    pretokenized: PreTokenizedString, pattern: Pattern, behavior: SplitDelimiterBehavior
) -> PreTokenizedString:
    return pretokenized.split(lambda _, normalized: normalized.split(pattern, behavior))


_WORDS = RegexPattern(r"(?a)\w+|[^\w\s]+")


class Whitespace(PreTokenizer):
    """Splits into runs of word characters and runs of other non-spaces."""

    def pre_tokenize(self, pretokenized: PreTokenizedString) -> PreTokenizedString:
        return _split_with(pretokenized, InvertPattern(_WORDS), SplitDelimiterBehavior.REMOVED)


class WhitespaceSplit(PreTokenizer):
    """Splits on whitespace only."""

    def pre_tokenize(self, pretokenized: PreTokenizedString) -> PreTokenizedString:
        return _split_with(
            pretokenized, FnPattern(is_bert_whitespace), SplitDelimiterBehavior.REMOVED
        )


@dataclass
class Split(PreTokenizer):
    """Splits on a pattern, optionally inverting what counts as a match."""

    pattern: Pattern
    behavior: SplitDelimiterBehavior
    invert: bool = False

    def pre_tokenize(self, pretokenized: PreTokenizedString) -> PreTokenizedString:
        pattern = InvertPattern(self.pattern) if self.invert else self.pattern
        return _split_with(pretokenized, pattern, self.behavior)


@dataclass
class CharDelimiterSplit(PreTokenizer):
    """Splits on a single delimiter character, removing it."""

    delimiter: str

    def pre_tokenize(self, pretokenized: PreTokenizedString) -> PreTokenizedString:
        return _split_with(
            pretokenized, CharPattern(self.delimiter), SplitDelimiterBehavior.REMOVED
        )


@dataclass
class Sequence(PreTokenizer):
    """Applies several pre-tokenizers one after another."""

    pretokenizers: Iterable[PreTokenizer] = field(default_factory=list)

    def pre_tokenize(self, pretokenized: PreTokenizedString) -> PreTokenizedString:
        for pretokenizer in self.pretokenizers:
            pretokenized = pretokenizer.pre_tokenize(pretokenized)
        return pretokenized


@dataclass
class Punctuation(PreTokenizer):
    """Splits on punctuation characters."""

    behavior: SplitDelimiterBehavior = SplitDelimiterBehavior.ISOLATED

    def pre_tokenize(self, pretokenized: PreTokenizedString) -> PreTokenizedString:
        return _split_with(pretokenized, FnPattern(is_bert_punctuation), self.behavior)


def _is_numeric(c: str) -> bool:
    return unicodedata.category(c).startswith("N")


@dataclass
class Digits(PreTokenizer):
    """Splits numbers apart, as runs or as individual digits."""

    individual_digits: bool = False

    def pre_tokenize(self, pretokenized: PreTokenizedString) -> PreTokenizedString:
        behavior = (
            SplitDelimiterBehavior.ISOLATED
            if self.individual_digits
            else SplitDelimiterBehavior.CONTIGUOUS
        )
        return _split_with(pretokenized, FnPattern(_is_numeric), behavior)