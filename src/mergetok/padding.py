"""Batch padding and truncation of index sequences."""

from collections.abc import Sequence
from dataclasses import dataclass

from .config import Side
from .errors import PaddingError
from .types import Index, IndexList


@dataclass(frozen=True)
class PaddedBatch:
    """Rectangular batch of sequences plus a mask of real (1) vs padding (0) slots."""

    ids: list[IndexList]
    mask: list[list[int]]

    def __len__(self) -> int:
        return len(self.ids)

    @property
    def length(self) -> int:
        """Common length of every row."""
        return len(self.ids[0]) if self.ids else 0


def _check_max_len(max_len: object) -> int:
    if not isinstance(max_len, int) or isinstance(max_len, bool):
        raise PaddingError("max_len must be an integer", max_len=max_len)
    if max_len < 0:
        raise PaddingError("max_len must be non-negative", max_len=max_len)
    return max_len


def _fit(
    seq: Sequence[Index],
    max_len: int,
    pad_index: Index,
    padding_side: Side,
    truncation_side: Side,
) -> tuple[IndexList, list[int]]:
    """Truncate or extend one sequence to ``max_len`` and build its mask."""
    row = list(seq)
    if len(row) > max_len:
        row = row[:max_len] if truncation_side is Side.RIGHT else row[len(row) - max_len :]
        return row, [1] * max_len

    n_pad = max_len - len(row)
    if padding_side is Side.RIGHT:
        return row + [pad_index] * n_pad, [1] * len(row) + [0] * n_pad
    return [pad_index] * n_pad + row, [0] * n_pad + [1] * len(row)


def pad_sequences(
    sequences: Sequence[Sequence[Index]],
    max_len: int,
    pad_index: Index,
    *,
    padding_side: Side = Side.RIGHT,
    truncation_side: Side = Side.RIGHT,
) -> list[IndexList]:
    """
    Align sequences to exactly ``max_len`` entries.

    Longer sequences are truncated, shorter ones are extended with
    ``pad_index``. Order and count of the input are preserved.

    :param sequences: Index sequences to align.
    :param max_len: Target length, must be a non-negative integer.
    :param pad_index: Index written into padding slots.
    :param padding_side: End that receives padding.
    :param truncation_side: End that is cut off when truncating.
    :raises PaddingError: If ``max_len`` is negative or not an integer.
    """
    return pad_batch(
        sequences,
        max_len,
        pad_index,
        padding_side=padding_side,
        truncation_side=truncation_side,
    ).ids


def pad_batch(
    sequences: Sequence[Sequence[Index]],
    max_len: int | None,
    pad_index: Index,
    *,
    padding_side: Side = Side.RIGHT,
    truncation_side: Side = Side.RIGHT,
) -> PaddedBatch:
    """
    Like :func:`pad_sequences` but also return the validity mask.

    ``max_len=None`` pads every sequence to the longest one in the batch.
    """
    if max_len is None:
        max_len = max((len(seq) for seq in sequences), default=0)
    max_len = _check_max_len(max_len)

    ids: list[IndexList] = []
    mask: list[list[int]] = []
    for seq in sequences:
        row, row_mask = _fit(seq, max_len, pad_index, padding_side, truncation_side)
        ids.append(row)
        mask.append(row_mask)
    return PaddedBatch(ids=ids, mask=mask)


__all__ = ["PaddedBatch", "pad_sequences", "pad_batch"]
