"""
Handling of reserved tokens written literally in input text.

A strategy looks at the raw text and the tokenizer's reserved tokens and
decides which of them are matched as single indices. Everything else in the
text, reserved-looking or not, goes through normal encoding.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
import logging
from typing import Final, Literal, overload

from typing_extensions import TypeAliasType, override

import regex as re

from .errors import SpecialTokenError, StrategyError
from .types import Index, Token

log = logging.getLogger(__name__)


class SpecialTokenStrategy(ABC):
    """Base strategy deciding which literal reserved tokens encode atomically."""

    def handle(self, text: str, special_toks: Mapping[Token, Index]) -> dict[Token, Index]:
        """
        Return the reserved tokens to match as single indices in ``text``.

        :param text: Raw text about to be encoded.
        :param special_toks: Reserved token to index map of the tokenizer.
        """
        present = {tok for tok in special_toks if tok in text}
        chosen = self._select(present, special_toks)
        return {tok: special_toks[tok] for tok in chosen}

    @abstractmethod
    def _select(self, present: set[Token], special_toks: Mapping[Token, Index]) -> set[Token]:
        """Pick the reserved tokens to match, given those present in the text."""


class AllowAllStrategy(SpecialTokenStrategy):
    """Match every reserved token."""

    @override
    def _select(self, present: set[Token], special_toks: Mapping[Token, Index]) -> set[Token]:
        return set(special_toks)


class AllowNoneRaiseStrategy(SpecialTokenStrategy):
    """Reject text that contains any reserved token."""

    @override
    def _select(self, present: set[Token], special_toks: Mapping[Token, Index]) -> set[Token]:
        if present:
            raise SpecialTokenError(
                "special tokens found in text but not allowed", found_tokens=present
            )
        return set()


class AllowNoneStrategy(SpecialTokenStrategy):
    """Encode reserved tokens as ordinary characters."""

    @override
    def _select(self, present: set[Token], special_toks: Mapping[Token, Index]) -> set[Token]:
        if present:
            log.warning(
                f"special tokens found in text but not allowed, encoding as text: "
                f"{sorted(present)}"
            )
        return set()


class AllowCustomStrategy(SpecialTokenStrategy):
    """Match only the reserved tokens named in ``allowed_subset``."""

    def __init__(self, allowed_subset: set[str]) -> None:
        super().__init__()
        self.allowed_subset = frozenset(allowed_subset)

    @override
    def _select(self, present: set[Token], special_toks: Mapping[Token, Index]) -> set[Token]:
        unknown = self.allowed_subset.difference(special_toks)
        if unknown:
            log.debug(f"allowed tokens are not reserved by this tokenizer: {sorted(unknown)}")
        return self.allowed_subset.intersection(special_toks)


def split_special(text: str, allowed: Mapping[Token, Index]) -> Iterator[str]:
    """
    Split ``text`` around occurrences of the ``allowed`` tokens.

    Matched tokens are yielded as their own chunks; empty chunks are skipped.
    Longer tokens win over tokens that are their prefix.
    """
    if not allowed:
        if text:
            yield text
        return
    alternatives = [re.escape(tok) for tok in sorted(allowed, key=len, reverse=True)]
    # capturing group keeps the tokens in the split result
    for chunk in re.split("(" + "|".join(alternatives) + ")", text):
        if chunk:
            yield chunk


StrategyName = TypeAliasType("StrategyName", Literal["all", "none", "none-raise", "custom"])

_STRATEGIES: Final[dict[str, type[SpecialTokenStrategy]]] = {
    "all": AllowAllStrategy,
    "none": AllowNoneStrategy,
    "none-raise": AllowNoneRaiseStrategy,
    "custom": AllowCustomStrategy,
}


def list_strategies() -> list[str]:
    """Return available special token strategy names."""
    return list(_STRATEGIES)


@overload
def get_strategy(
    name: Literal["all", "none", "none-raise"] = "all",
) -> SpecialTokenStrategy: ...


@overload
def get_strategy(
    name: Literal["custom"], allowed_subset: set[str]
) -> AllowCustomStrategy: ...


def get_strategy(
    name: str = "all", allowed_subset: set[str] | None = None
) -> SpecialTokenStrategy:
    """
    Create a special token strategy by name.

    :param name: One of :func:`list_strategies`.
    :param allowed_subset: Reserved tokens to match; required for "custom".
    :raises StrategyError: If name is unknown or allowed_subset is missing for custom.

    .. code-block:: python

        tok.tokenize("hi </s>", get_strategy("custom", allowed_subset={"</s>"}))
    """
    try:
        cls = _STRATEGIES[name]
    except KeyError:
        raise StrategyError(
            "unknown strategy name",
            invalid_name=name,
            available_strats=list_strategies(),
        )

    if cls is AllowCustomStrategy:
        if allowed_subset is None:
            raise StrategyError("allowed_subset is required for custom strategy")
        return AllowCustomStrategy(allowed_subset)
    return cls()


__all__ = [
    "StrategyName",
    "SpecialTokenStrategy",
    "AllowAllStrategy",
    "AllowNoneStrategy",
    "AllowNoneRaiseStrategy",
    "AllowCustomStrategy",
    "split_special",
    "list_strategies",
    "get_strategy",
]
