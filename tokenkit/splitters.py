"""Pre-tokenizers for BERT, SentencePiece-style metaspace and Unicode scripts."""

from __future__ import annotations

import functools
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

import regex

from tokenkit.normalized import NormalizedString
from tokenkit.normalizers import is_bert_punctuation
from tokenkit.pattern import FnPattern, RegexPattern, SplitDelimiterBehavior, StringPattern
from tokenkit.pretokenized import PreTokenizedString
from tokenkit.ranges import IndexOn, Range

_WHITESPACE_RUN = RegexPattern(r"[\t\n\f\r ]+")
_WHITESPACE = RegexPattern(r"[\t\n\f\r ]")
_PUNCTUATION = FnPattern(is_bert_punctuation)


class BertPreTokenizer:
    """Splits on whitespace, then isolates every punctuation character."""

    def pre_tokenize(self, pretokenized: PreTokenizedString) -> PreTokenizedString:
        def split_fn(_: int, normalized: NormalizedString) -> Iterator[NormalizedString]:
            for word in normalized.split(_WHITESPACE_RUN, SplitDelimiterBehavior.REMOVED):
                yield from word.split(_PUNCTUATION, SplitDelimiterBehavior.ISOLATED)

        return pretokenized.split(split_fn)


@dataclass
class Metaspace:
    """Replaces whitespace with a meta character and splits before it."""

    replacement: str = "▁"
    add_prefix_space: bool = True

    def pre_tokenize(self, pretokenized: PreTokenizedString) -> PreTokenizedString:
        def split_fn(_: int, normalized: NormalizedString) -> list[NormalizedString]:
            normalized = normalized.replace(_WHITESPACE, self.replacement)
            if self.add_prefix_space and not normalized.normalized.startswith(self.replacement):
                normalized = normalized.prepend(self.replacement)
            return normalized.split(
                StringPattern(self.replacement), SplitDelimiterBehavior.MERGED_WITH_NEXT
            )

        return pretokenized.split(split_fn)

    def decode_chain(self, tokens: Iterable[str]) -> list[str]:
        """Turn meta characters back into spaces, dropping the added prefix."""
        out: list[str] = []
        for i, token in enumerate(tokens):
            drop = i == 0 and self.add_prefix_space
            out.append(
                "".join(
                    ("" if drop else " ") if char == self.replacement else char
                    for char in token
                )
            )
        return out

    def decode(self, tokens: Iterable[str]) -> str:
        """Decode the tokens and join them."""
        return "".join(self.decode_chain(tokens))


_SCRIPT_NAMES = (
    "Common", "Latin", "Han", "Hiragana", "Katakana", "Inherited", "Greek", "Cyrillic",
    "Arabic", "Hebrew", "Hangul", "Thai", "Devanagari",
    "Adlam", "Ahom", "Anatolian_Hieroglyphs", "Armenian", "Avestan", "Balinese", "Bamum",
    "Bassa_Vah", "Batak", "Bengali", "Bhaiksuki", "Bopomofo", "Brahmi", "Braille",
    "Buginese", "Buhid", "Canadian_Aboriginal", "Carian", "Caucasian_Albanian", "Chakma",
    "Cham", "Cherokee", "Chorasmian", "Coptic", "Cuneiform", "Cypriot", "Cypro_Minoan",
    "Deseret", "Dives_Akuru", "Dogra", "Duployan", "Egyptian_Hieroglyphs", "Elbasan",
    "Elymaic", "Ethiopic", "Georgian", "Glagolitic", "Gothic", "Grantha", "Gujarati",
    "Gunjala_Gondi", "Gurmukhi", "Hanifi_Rohingya", "Hanunoo", "Hatran",
    "Imperial_Aramaic", "Inscriptional_Pahlavi", "Inscriptional_Parthian", "Javanese",
    "Kaithi", "Kannada", "Kawi", "Kayah_Li", "Kharoshthi", "Khitan_Small_Script", "Khmer",
    "Khojki", "Khudawadi", "Lao", "Lepcha", "Limbu", "Linear_A", "Linear_B", "Lisu",
    "Lycian", "Lydian", "Mahajani", "Makasar", "Malayalam", "Mandaic", "Manichaean",
    "Marchen", "Masaram_Gondi", "Medefaidrin", "Meetei_Mayek", "Mende_Kikakui",
    "Meroitic_Cursive", "Meroitic_Hieroglyphs", "Miao", "Modi", "Mongolian", "Mro",
    "Multani", "Myanmar", "Nabataean", "Nag_Mundari", "Nandinagari", "New_Tai_Lue", "Newa",
    "Nko", "Nushu", "Nyiakeng_Puachue_Hmong", "Ogham", "Ol_Chiki", "Old_Hungarian",
    "Old_Italic", "Old_North_Arabian", "Old_Permic", "Old_Persian", "Old_Sogdian",
    "Old_South_Arabian", "Old_Turkic", "Old_Uyghur", "Oriya", "Osage", "Osmanya",
    "Pahawh_Hmong", "Palmyrene", "Pau_Cin_Hau", "Phags_Pa", "Phoenician",
    "Psalter_Pahlavi", "Rejang", "Runic", "Samaritan", "Saurashtra", "Sharada", "Shavian",
    "Siddham", "SignWriting", "Sinhala", "Sogdian", "Sora_Sompeng", "Soyombo", "Sundanese",
    "Syloti_Nagri", "Syriac", "Tagalog", "Tagbanwa", "Tai_Le", "Tai_Tham", "Tai_Viet",
    "Takri", "Tamil", "Tangsa", "Tangut", "Telugu", "Thaana", "Tibetan", "Tifinagh",
    "Tirhuta", "Toto", "Ugaritic", "Vai", "Vithkuqi", "Wancho", "Warang_Citi", "Yezidi",
    "Yi", "Zanabazar_Square",
)


@functools.lru_cache(maxsize=None)
def _script_matcher() -> regex.Pattern:
    groups = []
    for name in _SCRIPT_NAMES:
        expr = rf"\p{{Script={name}}}"
        try:
            regex.compile(expr)
        except regex.error:
            continue
        groups.append(f"(?P<{name}>{expr})")
    return regex.compile("|".join(groups))


@functools.lru_cache(maxsize=4096)
def get_script(c: str) -> str:
    """The name of the Unicode script ``c`` belongs to, or ``""`` if none."""
    m = _script_matcher().match(c)
    return m.lastgroup if m is not None and m.lastgroup else ""


def fixed_script(c: str) -> str:
    """The script used for splitting: kana count as Han and a space as ``Any``."""
    if c == "\u30fc":
        return "Han"
    if c == " ":
        return "Any"
    script = get_script(c)
    if script in ("Hiragana", "Katakana"):
        return "Han"
    return script


class UnicodeScript:
    """Splits wherever the Unicode script changes."""

    def pre_tokenize(self, pretokenized: PreTokenizedString) -> PreTokenizedString:
        return pretokenized.split(self._split)

    @staticmethod
    def _split(_: int, normalized: NormalizedString) -> list[NormalizedString]:
        text = normalized.normalized
        last_script = ""
        offset = 0
        ranges: list[int] = []
        for char in text:
            script = fixed_script(char)
            if script != "Any" and last_script != "Any" and last_script != script:
                ranges.append(offset)
            offset += len(char.encode("utf-8", "surrogatepass"))
            if script != "Any":
                last_script = script
        ranges.append(len(normalized))

        pieces: list[NormalizedString] = []
        for start, end in zip(ranges, ranges[1:]):
            piece = normalized.slice(Range(start, end, IndexOn.NORMALIZED))
            if piece is None:
                raise ValueError(f"bad split at ({start}, {end})")
            pieces.append(piece)
        return pieces