"""Normalizers: reusable steps that rewrite a :class:`NormalizedString`.

Every normalizer modifies the string it is given, keeping the alignments with
the original up to date, and returns it so steps can be chained.
"""

from __future__ import annotations

import abc
import enum
import unicodedata
from collections.abc import Iterable
from dataclasses import dataclass, field

from tokenkit.alignment import ChangeMap
from tokenkit.normalized import NormalizedString
from tokenkit.pattern import Pattern, RegexPattern, StringPattern

_BERT_ASCII_PUNCTUATION = (
    (0x21, 0x2F),
    (0x3A, 0x40),
    (0x5B, 0x60),
    (0x7B, 0x7E),
)

_CJK_RANGES = (
    (0x4E00, 0x9FFF),
    (0x3400, 0x4DBF),
    (0xF900, 0xFAFF),
    (0x20000, 0x2A6DF),
    (0x2A700, 0x2B73F),
    (0x2B740, 0x2B81F),
    (0x2B820, 0x2CEAF),
    (0x2F800, 0x2FA1F),
)


def is_bert_whitespace(c: str) -> bool:
    """Whether ``c`` is one of the whitespace characters BERT recognises."""
    return c in (" ", "\t", "\n", "\r")


def is_bert_punctuation(c: str) -> bool:
    """Whether ``c`` is ASCII punctuation or in a Unicode punctuation category."""
    code = ord(c)
    if any(lo <= code <= hi for lo, hi in _BERT_ASCII_PUNCTUATION):
        return True
    return unicodedata.category(c).startswith("P")


def is_control(c: str) -> bool:
    """Whether ``c`` is a control or format character other than tab and newlines."""
    if c in ("\t", "\n", "\r"):
        return False
    return unicodedata.category(c) in ("Cc", "Cf")


def is_chinese(c: str) -> bool:
    """Whether ``c`` lies in one of the CJK ideograph blocks."""
    code = ord(c)
    return any(lo <= code <= hi for lo, hi in _CJK_RANGES)


class Normalizer(abc.ABC):
    """A step that rewrites a normalized string."""

    @abc.abstractmethod
    def normalize(self, normalized: NormalizedString) -> NormalizedString:
        """Rewrite ``normalized`` and return it."""


def _clean_text(normalized: NormalizedString) -> NormalizedString:
    changes: list[ChangeMap] = []
    removed = 0
    for char in reversed(normalized.normalized):
        if char == "\x00" or char == "\ufffd" or is_control(char):
            removed += 1
        elif removed > 0:
            if is_bert_whitespace(char):
                char = " "
            changes.append(ChangeMap(char, -removed))
            removed = 0
        else:
            changes.append(ChangeMap(char, 0))
    changes.reverse()
    return normalized.transform(changes, removed)


def _handle_chinese_chars(normalized: NormalizedString) -> NormalizedString:
    changes: list[ChangeMap] = []
    for char in normalized.normalized:
        if is_chinese(char):
            changes.extend((ChangeMap(" ", 1), ChangeMap(char, 0), ChangeMap(" ", 1)))
        else:
            changes.append(ChangeMap(char, 0))
    return normalized.transform(changes, 0)


@dataclass
class BertNormalizer(Normalizer):
    """The normalization BERT applies before tokenizing."""

    clean_text: bool
    lowercase: bool
    handle_chinese_chars: bool
    strip_accents: bool

    def normalize(self, normalized: NormalizedString) -> NormalizedString:
        if self.clean_text:
            normalized = _clean_text(normalized)
        if self.handle_chinese_chars:
            normalized = _handle_chinese_chars(normalized)
        if self.lowercase:
            normalized = normalized.lowercase()
        if self.strip_accents:
            normalized = normalized.remove_accents()
        return normalized


@dataclass
class DefaultNormalizer(Normalizer):
    """Lowercases and strips surrounding whitespace, each optionally."""

    lowercase: bool = True
    strip: bool = True

    def normalize(self, normalized: NormalizedString) -> NormalizedString:
        if self.lowercase:
            normalized = normalized.lowercase()
        if self.strip:
            normalized = normalized.strip()
        return normalized


def lowercase_normalizer() -> DefaultNormalizer:
    """A normalizer that only lowercases."""
    return DefaultNormalizer(lowercase=True, strip=False)


@dataclass
class Prepend(Normalizer):
    """Adds a fixed string in front of every non-empty input."""

    prepend: str

    def normalize(self, normalized: NormalizedString) -> NormalizedString:
        if normalized.is_empty():
            return normalized
        return normalized.prepend(self.prepend)


class ReplacePattern(enum.Enum):
    """How the pattern of a :class:`Replace` is interpreted."""

    STRING = enum.auto()
    REGEX = enum.auto()


class Replace(Normalizer):
    """Replaces every match of a pattern with fixed content.

    Also usable as a decoder, applying the same replacement to tokens.
    """

    def __init__(self, pattern_type: ReplacePattern, pattern: str, content: str) -> None:
        if pattern_type is ReplacePattern.STRING:
            compiled: Pattern = StringPattern(pattern)
        elif pattern_type is ReplacePattern.REGEX:
            compiled = RegexPattern(pattern)
        else:
            raise ValueError(f"unsupported replace pattern type: {pattern_type!r}")
        self.pattern_type = pattern_type
        self.pattern = compiled
        self.content = content

    def normalize(self, normalized: NormalizedString) -> NormalizedString:
        return normalized.replace(self.pattern, self.content)

    def decode_chain(self, tokens: Iterable[str]) -> list[str]:
        """Apply the replacement to each token separately."""
        out: list[str] = []
        for token in tokens:
            data = token.encode("utf-8", "surrogatepass")
            parts = [
                self.content
                if m.match
                else data[m.offsets[0]:m.offsets[1]].decode("utf-8", "surrogatepass")
                for m in self.pattern.find_matches(token)
            ]
            out.append("".join(parts))
        return out

    def decode(self, tokens: Iterable[str]) -> str:
        """Apply the replacement to each token and join the results."""
        return "".join(self.decode_chain(tokens))

    def __repr__(self) -> str:
        return f"Replace({self.pattern_type!r}, {self.pattern!r}, {self.content!r})"


@dataclass
class Sequence(Normalizer):
    """Applies several normalizers one after another."""

    normalizers: list[Normalizer] = field(default_factory=list)

    def normalize(self, normalized: NormalizedString) -> NormalizedString:
        for normalizer in self.normalizers:
            normalized = normalizer.normalize(normalized)
        return normalized


@dataclass
class Strip(Normalizer):
    """Removes leading and/or trailing whitespace."""

    strip_left: bool = True
    strip_right: bool = True

    def normalize(self, normalized: NormalizedString) -> NormalizedString:
        if self.strip_left and self.strip_right:
            return normalized.strip()
        if self.strip_left:
            return normalized.lstrip()
        if self.strip_right:
            return normalized.rstrip()
        return normalized


class StripAccents(Normalizer):
    """Removes all non-spacing marks."""

    def normalize(self, normalized: NormalizedString) -> NormalizedString:
        return normalized.remove_accents()


class UnicodeForm(enum.Enum):
    """Unicode normalization forms."""

    NFC = "NFC"
    NFD = "NFD"
    NFKC = "NFKC"
    NFKD = "NFKD"


@dataclass
class UnicodeNormalizer(Normalizer):
    """Applies the chosen Unicode normalization form."""

    form: UnicodeForm

    def normalize(self, normalized: NormalizedString) -> NormalizedString:
        if self.form is UnicodeForm.NFC:
            return normalized.nfc()
        if self.form is UnicodeForm.NFD:
            return normalized.nfd()
        if self.form is UnicodeForm.NFKC:
            return normalized.nfkc()
        if self.form is UnicodeForm.NFKD:
            return normalized.nfkd()
        return normalized


class NFC(Normalizer):
    """Unicode NFC normalization."""

    def normalize(self, normalized: NormalizedString) -> NormalizedString:
        return normalized.nfc()


class NFD(Normalizer):
    """Unicode NFD normalization."""

    def normalize(self, normalized: NormalizedString) -> NormalizedString:
        return normalized.nfd()


class NFKC(Normalizer):
    """Unicode NFKC normalization."""

    def normalize(self, normalized: NormalizedString) -> NormalizedString:
        return normalized.nfkc()


class NFKD(Normalizer):
    """Unicode NFKD normalization."""

    def normalize(self, normalized: NormalizedString) -> NormalizedString:
        return normalized.nfkd()