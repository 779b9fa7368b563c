"""Unit tests for the merge table and merge application."""

import pytest

from mergetok import MergeRule, MergeTable
from mergetok._bpe import apply_merges, merge_pair, slow_apply_merges
from mergetok.errors import InvalidModelError


# Merge table
# ---------------------------------------------------------------------------


def test_lookup_and_rank():
    """Ranks follow input order."""
    table = MergeTable([("a", "b", "ab"), ("ab", "c", "abc")])
    assert table.lookup("a", "b") == (0, "ab")
    assert table.lookup("ab", "c") == (1, "abc")
    assert table.lookup("b", "c") is None
    assert table.rank(("ab", "c")) == 1
    assert ("a", "b") in table
    assert len(table) == 2


def test_pairs_imply_concatenation():
    """Two-element rules get the concatenated symbol."""
    table = MergeTable([("a", "b")])
    assert table.rules() == [MergeRule("a", "b", "ab")]


def test_atomic_multichar_symbols():
    """Declared atomic symbols may be used without a producing rule."""
    table = MergeTable([("##", "a", "##a")], atomic=["##"])
    assert table.lookup("##", "a") == (0, "##a")
    with pytest.raises(InvalidModelError):
        MergeTable([("##", "a", "##a")])


def test_atomic_symbols_listed_in_order():
    """atomic() keeps the first occurrence order and drops repeats."""
    assert MergeTable([], atomic=["<x>", "##", "<x>"]).atomic() == ["<x>", "##"]
    with pytest.raises(InvalidModelError):
        MergeTable([], atomic=[""])


def test_input_must_come_from_earlier_rule():
    """A rule may only use outputs of lower-ranked rules."""
    with pytest.raises(InvalidModelError) as exc_info:
        MergeTable([("ab", "c", "abc"), ("a", "b", "ab")])
    assert exc_info.value.rank == 0


def test_merged_must_concatenate():
    """The merged symbol must spell its pair."""
    with pytest.raises(InvalidModelError):
        MergeTable([("a", "b", "ba")])


def test_duplicate_pair_rejected():
    """A pair cannot have two ranks."""
    with pytest.raises(InvalidModelError) as exc_info:
        MergeTable([("a", "b", "ab"), ("a", "b", "ab")])
    assert exc_info.value.rank == 1


@pytest.mark.parametrize("bad", ["ab", ("a",), ("a", "", "a"), (1, 2, 3), ("a", "b", "c", "d")])
def test_malformed_rules_rejected(bad):
    """Malformed triples are invalid models."""
    with pytest.raises(InvalidModelError):
        MergeTable([bad])


# Merge application
# ---------------------------------------------------------------------------


def test_apply_merges_by_rank():
    """The lowest rank wins regardless of position."""
    table = MergeTable([("b", "c", "bc"), ("a", "b", "ab")])
    assert apply_merges(list("abc"), table) == ["a", "bc"]


def test_apply_merges_repeated_pair():
    """Overlapping occurrences merge leftmost first."""
    table = MergeTable([("a", "a", "aa")])
    assert apply_merges(list("aaa"), table) == ["aa", "a"]
    assert apply_merges(list("aaaa"), table) == ["aa", "aa"]


def test_apply_merges_chains():
    """Merged symbols feed later rules."""
    table = MergeTable([("a", "a", "aa"), ("aa", "aa", "aaaa")])
    assert apply_merges(list("aaaaa"), table) == ["aaaa", "a"]


def test_apply_merges_short_input():
    """Zero or one symbol is returned unchanged."""
    table = MergeTable([("a", "b", "ab")])
    assert apply_merges([], table) == []
    assert apply_merges(["a"], table) == ["a"]


def test_merge_pair():
    """All non-overlapping occurrences of the pair merge left to right."""
    assert merge_pair(list("abab"), ("a", "b"), "ab") == ["ab", "ab"]
    assert merge_pair(list("bab"), ("a", "b"), "ab") == ["b", "ab"]


@pytest.mark.parametrize(
    "word", ["hello", "hellohello", "lllll", "abcabcab", "mississippi", "x"]
)
def test_heap_matches_rescan(word):
    """The heap-driven merge loop agrees with the rescan reference."""
    table = MergeTable(
        [
            ("l", "l", "ll"),
            ("s", "s", "ss"),
            ("h", "e", "he"),
            ("i", "ss", "iss"),
            ("he", "ll", "hell"),
            ("a", "b", "ab"),
            ("ab", "c", "abc"),
            ("hell", "o", "hello"),
            ("p", "p", "pp"),
            ("iss", "iss", "ississ"),
            ("ll", "l", "lll"),
        ]
    )
    with pytest.deprecated_call():
        expected = slow_apply_merges(list(word), table)
    assert apply_merges(list(word), table) == expected
