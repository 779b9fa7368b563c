"""Bidirectional token <-> index store."""

import logging
from collections.abc import Iterable, Iterator

from .errors import IndexOutOfRangeError, InvalidModelError, UnknownTokenError
from .types import Index, IndexList, Token, TokenList

log = logging.getLogger(__name__)


class Vocabulary:
    """
    Dense bijection between token strings and indices ``[0, len)``.

    The index of a token is its position in the list the store is built from.
    Instances are read-only after construction.
    """

    __slots__ = ("_tokens", "_index")

    def __init__(self, tokens: Iterable[Token]) -> None:
        """
        :param tokens: Token strings in index order.
        :raises InvalidModelError: If an entry is not a non-empty string or appears twice.
        """
        self._tokens: tuple[Token, ...] = tuple(tokens)
        self._index: dict[Token, Index] = {}

        for idx, tok in enumerate(self._tokens):
            if not isinstance(tok, str) or not tok:
                raise InvalidModelError(
                    f"vocabulary entry {idx} must be a non-empty string", token=tok
                )
            # first occurrence wins the slot, so report both positions
            seen = self._index.setdefault(tok, idx)
            if seen != idx:
                raise InvalidModelError(
                    "duplicate token in vocabulary", token=tok, indices=(seen, idx)
                )

        log.debug(f"built vocabulary with {len(self._tokens)} tokens")

    def __len__(self) -> int:
        return len(self._tokens)

    def __contains__(self, token: object) -> bool:
        return isinstance(token, str) and token in self._index

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vocabulary):
            return NotImplemented
        return self._tokens == other._tokens

    def __hash__(self) -> int:
        return hash(self._tokens)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(size={len(self)})"

    def get_token(self, index: Index) -> Token:
        """
        Return the token stored at ``index``.

        :raises IndexOutOfRangeError: If ``index`` is not an int in ``[0, len)``.
        """
        # bool is an int subclass but never a meaningful index
        if not isinstance(index, int) or isinstance(index, bool):
            raise IndexOutOfRangeError(
                "index must be an integer", index=index, vocab_size=len(self)
            )
        if not 0 <= index < len(self._tokens):
            raise IndexOutOfRangeError(
                "index out of vocabulary range", index=index, vocab_size=len(self)
            )
        return self._tokens[index]

    def get_index(self, token: Token) -> Index:
        """
        Return the index of ``token``.

        :raises UnknownTokenError: If ``token`` is not in the vocabulary.
        """
        try:
            return self._index[token]
        except (KeyError, TypeError):
            raise UnknownTokenError("token not found in vocabulary", token=token) from None

    def find(self, token: Token) -> Index | None:
        """Return the index of ``token`` or ``None`` when it is absent."""
        return self._index.get(token)

    def get_tokens(self, indices: Iterable[Index]) -> TokenList:
        """
        Resolve indices element-wise, preserving order.

        Fails at the first invalid element; the raised error's ``position``
        is that element's offset in ``indices``.

        :raises IndexOutOfRangeError: If any index is out of range.
        """
        out: TokenList = []
        for pos, index in enumerate(indices):
            try:
                out.append(self.get_token(index))
            except IndexOutOfRangeError:
                raise IndexOutOfRangeError(
                    "index out of vocabulary range",
                    index=index,
                    vocab_size=len(self),
                    position=pos,
                ) from None
        return out

    def get_indices(self, tokens: Iterable[Token]) -> IndexList:
        """
        Resolve tokens element-wise, preserving order.

        Fails at the first unknown token with its ``position`` reported.

        :raises UnknownTokenError: If any token is absent.
        """
        out: IndexList = []
        for pos, tok in enumerate(tokens):
            idx = self._index.get(tok) if isinstance(tok, str) else None
            if idx is None:
                raise UnknownTokenError(
                    "token not found in vocabulary", token=tok, position=pos
                )
            out.append(idx)
        return out

    def tokens(self) -> TokenList:
        """Return all tokens in index order."""
        return list(self._tokens)

    def items(self) -> list[tuple[Index, Token]]:
        """Return ``(index, token)`` pairs in index order."""
        return list(enumerate(self._tokens))

    def extended(self, extra: Iterable[Token]) -> "Vocabulary":
        """Return a new vocabulary with missing ``extra`` tokens appended."""
        additions = [tok for tok in dict.fromkeys(extra) if tok not in self._index]
        if not additions:
            return self
        return Vocabulary(self._tokens + tuple(additions))


__all__ = ["Vocabulary"]
