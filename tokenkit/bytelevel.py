"""Byte-level pre-tokenization and decoding.

Every byte of the UTF-8 input is mapped to a visible character, so that a
model working on these characters never meets a control code or whitespace.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from tokenkit.alignment import ChangeMap
from tokenkit.normalized import NormalizedString
from tokenkit.pattern import RegexPattern, SplitDelimiterBehavior
from tokenkit.pretokenized import PreTokenizedString

# Words with an optional leading space, contractions and punctuation runs.
# Whitespace that is not attached to a word is left unmatched.
_SPLIT_PATTERN = RegexPattern(
    r"'s|'t|'re|'ve|'m|'ll|'d| ?\p{L}+| ?\p{N}+| ?[^\t\n\f\r \p{L}\p{N}]+"
)


def generate_bytes_char() -> dict[int, str]:
    """Map every byte value to a printable character.

    Printable Latin-1 bytes map to themselves; control codes and whitespace
    map to characters from U+0100 onwards, in byte order.
    """
    code_points = [
        *range(256, 289),  # bytes 0-32
        *range(33, 127),  # bytes 33-126
        *range(289, 323),  # bytes 127-160
        *range(161, 173),  # bytes 161-172
        323,  # byte 173
        *range(174, 256),  # bytes 174-255
    ]
    return {byte: chr(cp) for byte, cp in enumerate(code_points)}


BYTES_CHAR: dict[int, str] = generate_bytes_char()
CHAR_BYTES: dict[str, int] = {char: byte for byte, char in BYTES_CHAR.items()}


def _to_byte_level(normalized: NormalizedString) -> NormalizedString:
    changes: list[ChangeMap] = []
    for char in normalized.normalized:
        for i, byte in enumerate(char.encode("utf-8", "surrogatepass")):
            changes.append(ChangeMap(BYTES_CHAR[byte], 0 if i == 0 else 1))
    return normalized.transform(changes, 0)


def _from_byte_level(text: str) -> str:
    data = bytes(CHAR_BYTES.get(char, 0) for char in text)
    return data.decode("utf-8", "replace")


@dataclass
class ByteLevel:
    """Splits into words and maps every byte to a visible character.

    ``add_prefix_space`` adds a space in front of input that lacks one, so
    the first word is treated like any other. ``trim_offsets`` tells a
    post-processing step to leave whitespace out of the offsets.
    """

    add_prefix_space: bool = True
    trim_offsets: bool = True

    def alphabet(self) -> set[str]:
        """The 256 characters that bytes are mapped to."""
        return set(BYTES_CHAR.values())

    def pre_tokenize(self, pretokenized: PreTokenizedString) -> PreTokenizedString:
        def split_fn(_: int, normalized: NormalizedString) -> list[NormalizedString]:
            if self.add_prefix_space and not normalized.normalized.startswith(" "):
                normalized = normalized.prepend(" ")
            return normalized.split(_SPLIT_PATTERN, SplitDelimiterBehavior.ISOLATED)

        return pretokenized.split(split_fn).normalize(_to_byte_level)

    def decode(self, tokens: Iterable[str]) -> str:
        """Turn byte-level tokens back into one string."""
        return _from_byte_level("".join(tokens))

    def decode_chain(self, tokens: Iterable[str]) -> list[str]:
        """Turn each byte-level token back into text separately."""
        return [_from_byte_level(token) for token in tokens]