import pytest

from tokenkit.bytelevel import BYTES_CHAR, CHAR_BYTES, ByteLevel, generate_bytes_char
from tokenkit.pretokenized import OffsetType, PreTokenizedString
from tokenkit.ranges import IndexOn


def _pieces(pretok, ref=IndexOn.ORIGINAL):
    return [(p.value, tuple(p.offsets)) for p in pretok.get_splits(ref, OffsetType.BYTE)]


def test_bytes_char():
    assert generate_bytes_char()[33] == "!"
    assert BYTES_CHAR[33] == "!"
    assert CHAR_BYTES["!"] == 33


def test_bytes_char_control_codes():
    assert BYTES_CHAR[32] == "Ġ"
    assert BYTES_CHAR[10] == "Ċ"
    assert len(set(BYTES_CHAR.values())) == 256


def test_alphabet_has_every_byte():
    alphabet = ByteLevel().alphabet()
    assert len(alphabet) == 256
    assert "Ġ" in alphabet


def test_decoding():
    bytelevel = ByteLevel(add_prefix_space=False)
    toks = ["Hello", "Ġmy", "Ġfriend", ",", "Ġhow", "Ġis", "Ġyour", "Ġday", "Ġgoing", "?"]
    assert bytelevel.decode(toks) == "Hello my friend, how is your day going?"


def test_decode_chain():
    bytelevel = ByteLevel(add_prefix_space=False)
    assert bytelevel.decode_chain(["Ġmy", "Hello"]) == [" my", "Hello"]


@pytest.mark.parametrize(
    "line",
    [
        " Hello my friend, how is your day going?",
        "Hello my friend, how is your day going?",
    ],
)
def test_add_prefix_space(line):
    bytelevel = ByteLevel(add_prefix_space=True)
    pretok = bytelevel.pre_tokenize(PreTokenizedString.from_str(line))
    assert _pieces(pretok, IndexOn.NORMALIZED) == [
        ("ĠHello", (0, 7)),
        ("Ġmy", (7, 11)),
        ("Ġfriend", (11, 19)),
        (",", (19, 20)),
        ("Ġhow", (20, 25)),
        ("Ġis", (25, 29)),
        ("Ġyour", (29, 35)),
        ("Ġday", (35, 40)),
        ("Ġgoing", (40, 47)),
        ("?", (47, 48)),
    ]


@pytest.mark.parametrize(
    "line",
    [
        "A Nuskhuri abbreviation of იესუ ქრისტე ( iesu kriste ) \" Jesus Christ \"",
        "An equal number have descenders , like p or q in English : "
        "გ , დ , ე , ვ , კ , ლ , ჟ , ტ , უ , ფ , ღ , ყ , ც",
    ],
)
def test_decode_works_on_separated_tokens(line):
    bytelevel = ByteLevel(add_prefix_space=False)
    pretok = bytelevel.pre_tokenize(PreTokenizedString.from_str(line))
    separated = [char for p in pretok.get_splits(IndexOn.ORIGINAL, OffsetType.BYTE) for char in p.value]
    assert bytelevel.decode(separated) == line


def test_handling_of_new_lines():
    bytelevel = ByteLevel(add_prefix_space=False)
    pretok = bytelevel.pre_tokenize(PreTokenizedString.from_str("Hello there\nHello there"))
    assert _pieces(pretok) == [
        ("Hello", (0, 5)),
        ("Ġthere", (5, 11)),
        ("Ċ", (11, 12)),
        ("Hello", (12, 17)),
        ("Ġthere", (17, 23)),
    ]


def test_handling_of_multiple_spaces():
    bytelevel = ByteLevel(add_prefix_space=False)
    pretok = bytelevel.pre_tokenize(PreTokenizedString.from_str("Hello there       dear"))
    assert _pieces(pretok) == [
        ("Hello", (0, 5)),
        ("Ġthere", (5, 11)),
        ("ĠĠĠĠĠĠ", (11, 17)),
        ("Ġdear", (17, 22)),
    ]


def test_offsets_when_char_split_up():
    bytelevel = ByteLevel(add_prefix_space=False)
    text = "i⭢j"
    pretok = bytelevel.pre_tokenize(PreTokenizedString.from_str(text))

    assert _pieces(pretok, IndexOn.ORIGINAL) == [
        ("i", (0, 1)),
        ("âŃ¢", (1, 4)),
        ("j", (4, 5)),
    ]
    assert _pieces(pretok, IndexOn.NORMALIZED) == [
        ("i", (0, 1)),
        ("âŃ¢", (1, 7)),
        ("j", (7, 8)),
    ]

    data = text.encode("utf-8")
    pieces = [
        data[p.offsets[0]:p.offsets[1]].decode("utf-8")
        for p in pretok.get_splits(IndexOn.ORIGINAL, OffsetType.BYTE)
    ]
    assert pieces == ["i", "⭢", "j"]