"""Unit tests for batch padding."""

import pytest

from mergetok import Side, Tokenizer, TokenizerConfig, pad_batch, pad_sequences
from mergetok.errors import PaddingError

from conftest import HELLO_RULES, HELLO_TOKENS


def test_pad_example():
    """Shorter sequences are extended with the pad index."""
    assert pad_sequences([[2], [5, 7]], 3, 0) == [[2, 0, 0], [5, 7, 0]]


@pytest.mark.parametrize("n", range(0, 7))
def test_pad_length_property(n):
    """Every row has exactly n entries; prefix or truncation matches the input."""
    seq = [4, 8, 15, 16]
    (row,) = pad_sequences([seq], n, 0)
    assert len(row) == n
    if n >= len(seq):
        assert row[: len(seq)] == seq
        assert row[len(seq) :] == [0] * (n - len(seq))
    else:
        assert row == seq[:n]


def test_zero_length_gives_empty_rows():
    """max_len 0 empties every sequence."""
    assert pad_sequences([[1, 2], [], [3]], 0, 9) == [[], [], []]


def test_preserves_count_and_order():
    """Empty inputs and empty rows are kept in place."""
    assert pad_sequences([], 4, 0) == []
    assert pad_sequences([[], [1]], 2, 0) == [[0, 0], [1, 0]]


def test_left_sides():
    """Left padding and left truncation work from the start of the row."""
    assert pad_sequences([[1, 2]], 4, 0, padding_side=Side.LEFT) == [[0, 0, 1, 2]]
    assert pad_sequences([[1, 2, 3]], 2, 0, truncation_side=Side.LEFT) == [[2, 3]]


@pytest.mark.parametrize("max_len", [-1, 2.0, "3", True])
def test_invalid_max_len(max_len):
    """max_len must be a non-negative int."""
    with pytest.raises(PaddingError):
        pad_sequences([[1]], max_len, 0)


def test_pad_batch_mask():
    """The mask marks real tokens with 1 and padding with 0."""
    batch = pad_batch([[1, 2, 3], [4]], None, 0)
    assert batch.ids == [[1, 2, 3], [4, 0, 0]]
    assert batch.mask == [[1, 1, 1], [1, 0, 0]]
    assert batch.length == 3
    assert len(batch) == 2


def test_tokenizer_uses_config_pad_index(hello_tokenizer):
    """The tokenizer pads with its own pad index."""
    ids = hello_tokenizer.tokenize_batch(["hello world", "hello"])
    assert hello_tokenizer.pad_sequences(ids, 3) == [[13, 19, 0], [13, 0, 0]]


def test_tokenizer_sides_from_config():
    """Padding and truncation sides are fixed by the config."""
    config = TokenizerConfig(padding_side=Side.LEFT, truncation_side=Side.LEFT)
    tok = Tokenizer(HELLO_TOKENS, HELLO_RULES, config)
    assert tok.pad_sequences([[13], [3, 4, 5]], 2) == [[0, 13], [4, 5]]
    batch = tok.pad_batch([[13], [3, 4]])
    assert batch.mask == [[0, 1], [1, 1]]
