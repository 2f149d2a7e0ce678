import unicodedata

import pytest

from tokenkit.normalized import NormalizedString
from tokenkit.pattern import CharPattern, RegexPattern, SplitDelimiterBehavior, StringPattern
from tokenkit.ranges import IndexOn, Range


def tuples(pairs):
    return [tuple(p) for p in pairs]


def test_nfd_adds_new_chars():
    n = NormalizedString.from_str("élégant").nfd()
    assert n.alignments == tuples(
        [[0, 2], [0, 2], [0, 2], [2, 3], [3, 5], [3, 5], [3, 5], [5, 6], [6, 7], [7, 8], [8, 9]]
    )
    assert n.alignments_original == tuples(
        [[0, 3], [0, 3], [3, 4], [4, 7], [4, 7], [7, 8], [8, 9], [9, 10], [10, 11]]
    )


def test_remove_chars_added_by_nfd():
    n = NormalizedString.from_str("élégant").nfd().remove_accents()
    assert n.alignments == tuples([[0, 2], [2, 3], [3, 5], [5, 6], [6, 7], [7, 8], [8, 9]])
    assert n.alignments_original == tuples(
        [[0, 1], [0, 1], [1, 2], [2, 3], [2, 3], [3, 4], [4, 5], [5, 6], [6, 7]]
    )


def test_remove_chars():
    n = NormalizedString.from_str("élégant").filter(lambda c: c != "n")
    assert n.alignments == tuples(
        [[0, 2], [0, 2], [2, 3], [3, 5], [3, 5], [5, 6], [6, 7], [8, 9]]
    )
    assert n.alignments_original == tuples(
        [[0, 2], [0, 2], [2, 3], [3, 5], [3, 5], [5, 6], [6, 7], [7, 7], [7, 8]]
    )


def test_mixed_addition_removal():
    n = NormalizedString.from_str("élégant").nfd()
    n = n.filter(lambda c: c != "n" and unicodedata.category(c) != "Mn")
    assert n.alignments == tuples([[0, 2], [2, 3], [3, 5], [5, 6], [6, 7], [8, 9]])
    assert n.alignments_original == tuples(
        [[0, 1], [0, 1], [1, 2], [2, 3], [2, 3], [3, 4], [4, 5], [5, 5], [5, 6]]
    )


def test_range_conversion():
    n = NormalizedString.from_str("    __Hello__   ")
    n = n.filter(lambda c: c != " ").lowercase()

    hello = n.convert_offset(Range(6, 11, IndexOn.ORIGINAL))
    assert hello.values() == (2, 7)
    assert n.range(hello) == "hello"
    assert n.range_original(hello) == "Hello"


@pytest.mark.parametrize(
    "start, end_delta, index_on, expected",
    [
        (0, None, IndexOn.ORIGINAL, (0, 0)),
        (3, None, IndexOn.ORIGINAL, (3, 3)),
        (15, 0, IndexOn.ORIGINAL, (9, 9)),
        (16, 1, IndexOn.ORIGINAL, (16, 16)),
        (17, 1, IndexOn.ORIGINAL, None),
        (0, None, IndexOn.NORMALIZED, (0, 0)),
        (3, None, IndexOn.NORMALIZED, (3, 3)),
        (9, 1, IndexOn.NORMALIZED, (9, 9)),
        (10, 1, IndexOn.NORMALIZED, None),
    ],
)
def test_range_conversion_edges(start, end_delta, index_on, expected):
    n = NormalizedString.from_str("    __Hello__   ")
    n = n.filter(lambda c: c != " ").lowercase()
    if end_delta is None:
        end = start
    elif index_on is IndexOn.ORIGINAL:
        end = n.len_original() + end_delta
    else:
        end = len(n) + end_delta
    got = n.convert_offset(Range(start, end, index_on))
    if expected is None:
        assert got is None
    else:
        assert got.values() == expected


def test_remove_at_beginning():
    n = NormalizedString.from_str("     Hello")
    n.filter(lambda c: c != " ")
    assert n.range_original(Range(1, len("Hello"), IndexOn.NORMALIZED)) == "ello"
    assert n.range_original(Range(0, len(n), IndexOn.NORMALIZED)) == "Hello"


def test_remove_at_end():
    n = NormalizedString.from_str("Hello    ")
    n.filter(lambda c: c != " ")
    assert n.range_original(Range(0, 4, IndexOn.NORMALIZED)) == "Hell"
    assert n.range_original(Range(0, len(n), IndexOn.NORMALIZED)) == "Hello"


def test_around_both_edges():
    n = NormalizedString.from_str("  Hello  ")
    n.filter(lambda c: c != " ")
    assert n.normalized == "Hello"
    assert n.range_original(Range(0, len("Hello"), IndexOn.NORMALIZED)) == "Hello"
    assert n.range_original(Range(1, len("Hell"), IndexOn.NORMALIZED)) == "ell"


def test_lstrip():
    n = NormalizedString.from_str("  This is an example  ")
    n.lstrip()
    assert n.normalized == "This is an example  "
    assert n.range_original(Range(0, len(n), IndexOn.NORMALIZED)) == "This is an example  "


def test_rstrip():
    n = NormalizedString.from_str("  This is an example  ")
    n.rstrip()
    assert n.normalized == "  This is an example"
    assert n.range_original(Range(0, len(n), IndexOn.NORMALIZED)) == "  This is an example"


def test_strip():
    n = NormalizedString.from_str("  This is an example  ")
    n.strip()
    assert n.normalized == "This is an example"
    assert n.range_original(Range(0, len(n), IndexOn.NORMALIZED)) == "This is an example"


def test_strip_only_whitespace():
    n = NormalizedString.from_str("   ").strip()
    assert n.normalized == ""


def test_prepend():
    n = NormalizedString.from_str("there")
    n.prepend("Hey ")
    assert n.alignments == tuples(
        [[0, 1], [0, 1], [0, 1], [0, 1], [0, 1], [1, 2], [2, 3], [3, 4], [4, 5]]
    )
    assert n.convert_offset(Range(0, 4, IndexOn.NORMALIZED)).values() == (0, 1)
    assert n.normalized == "Hey there"


def test_prepend_on_empty_leaves_string():
    n = NormalizedString.from_str("")
    assert n.prepend("x").normalized == ""


def test_append():
    n = NormalizedString.from_str("Hey")
    n.append(" there")
    assert n.alignments == tuples(
        [[0, 1], [1, 2], [2, 3], [2, 3], [2, 3], [2, 3], [2, 3], [2, 3], [2, 3]]
    )
    assert n.convert_offset(Range(3, len(" there"), IndexOn.NORMALIZED)).values() == (2, 3)
    assert n.normalized == "Hey there"


def test_slice():
    n = NormalizedString.from_str("𝔾𝕠𝕠𝕕 𝕞𝕠𝕣𝕟𝕚𝕟𝕘").nfkc()

    o_slice = n.slice(Range(0, 4, IndexOn.ORIGINAL))
    assert o_slice.normalized == "G"
    assert o_slice.original == "𝔾"

    n_slice = n.slice(Range(0, 4, IndexOn.NORMALIZED))
    assert n_slice.normalized == "Good"
    assert n_slice.original == "𝔾𝕠𝕠𝕕"

    n1 = NormalizedString.from_str("   Good Morning!   ").strip()

    slice_o = n1.slice(Range(0, len(n1.original), IndexOn.ORIGINAL))
    assert slice_o.range_original(Range(0, 4, IndexOn.NORMALIZED)) == "Good"

    slice_n = n1.slice(Range(0, len(n1.original), IndexOn.NORMALIZED))
    assert slice_n.range_original(Range(0, 4, IndexOn.ORIGINAL)) == "Good"

    slice_am = n1.slice(Range(4, 15, IndexOn.ORIGINAL))
    assert slice_am.range_original(Range(0, 3, IndexOn.NORMALIZED)) == "ood"

    slice_m = n1.slice(Range(3, 16, IndexOn.ORIGINAL))
    assert slice_m.range_original(Range(0, 4, IndexOn.NORMALIZED)) == "Good"


def test_slice_is_normalized_string():
    n = NormalizedString.from_str("Hello friend")
    piece = n.slice(Range(0, 5, IndexOn.NORMALIZED))
    assert isinstance(piece, NormalizedString)
    assert piece.lowercase().normalized == "hello"


@pytest.mark.parametrize(
    "text, pattern, content, expected",
    [
        (" Hello   friend ", CharPattern(" "), "_", "_Hello___friend_"),
        ("aaaab", CharPattern("a"), "b", "bbbbb"),
        ("aaaab", StringPattern("aaa"), "b", "bab"),
        (" Hello   friend ", RegexPattern(r"\s+"), "_", "_Hello_friend_"),
    ],
)
def test_replace(text, pattern, content, expected):
    n = NormalizedString.from_str(text).replace(pattern, content)
    assert n.normalized == expected


@pytest.mark.parametrize(
    "behavior, expected",
    [
        (SplitDelimiterBehavior.REMOVED, ["The", "final", "countdown"]),
        (SplitDelimiterBehavior.ISOLATED, ["The", "-", "final", "-", "-", "countdown"]),
        (SplitDelimiterBehavior.MERGED_WITH_PREVIOUS, ["The-", "final-", "-", "countdown"]),
        (SplitDelimiterBehavior.MERGED_WITH_NEXT, ["The", "-final", "-", "-countdown"]),
        (SplitDelimiterBehavior.CONTIGUOUS, ["The", "-", "final", "--", "countdown"]),
    ],
)
def test_split(behavior, expected):
    n = NormalizedString.from_str("The-final--countdown")
    splits = n.split(StringPattern("-"), behavior)
    assert [s.normalized for s in splits] == expected


def test_split_keeps_original_offsets():
    n = NormalizedString.from_str("The-final--countdown")
    splits = n.split(StringPattern("-"), SplitDelimiterBehavior.REMOVED)
    assert [s.offsets_original() for s in splits] == [(0, 3), (4, 9), (11, 20)]


def test_nfc_keeps_composed_string():
    n = NormalizedString.from_str("élégant")
    assert n.nfc() is n
    assert n.normalized == "élégant"


def test_nfkd_decomposes_ligature():
    n = NormalizedString.from_str("\ufb01ne").nfkd()
    assert n.normalized == "fine"
    assert n.original == "\ufb01ne"


def test_map_applies_function():
    n = NormalizedString.from_str("hello").map(str.upper)
    assert n.normalized == "HELLO"
    assert n.range_original(Range(1, 3, IndexOn.NORMALIZED)) == "el"


def test_for_each_keeps_alignments():
    n = NormalizedString.from_str("abc")
    before = list(n.alignments)
    n.for_each(lambda c: "x")
    assert n.normalized == "xxx"
    assert n.alignments == before


def test_uppercase():
    assert NormalizedString.from_str("Hey").uppercase().normalized == "HEY"


def test_clear():
    n = NormalizedString.from_str("Hello")
    n.clear()
    assert n.normalized == ""
    assert n.is_empty()
    assert n.original == "Hello"