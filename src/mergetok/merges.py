"""Rank-ordered merge rule table."""

import logging
from collections.abc import Iterable, Iterator, Sequence
from typing import NamedTuple

from .errors import InvalidModelError
from .types import Token, TokenPair

log = logging.getLogger(__name__)


class MergeRule(NamedTuple):
    """A learned instruction to merge two adjacent symbols into ``merged``."""

    left: Token
    right: Token
    merged: Token

    @property
    def pair(self) -> TokenPair:
        return (self.left, self.right)


def _coerce_rule(raw: object, rank: int) -> MergeRule:
    """Turn a ``(left, right[, merged])`` sequence into a :class:`MergeRule`."""
    if isinstance(raw, MergeRule):
        rule = raw
    elif isinstance(raw, Sequence) and not isinstance(raw, str) and len(raw) in (2, 3):
        # pairs imply the concatenation as merged symbol
        left, right = raw[0], raw[1]
        merged = raw[2] if len(raw) == 3 else None
        if merged is None and isinstance(left, str) and isinstance(right, str):
            merged = left + right
        rule = MergeRule(left, right, merged)
    else:
        raise InvalidModelError(
            "merge rule must be a (left, right, merged) triple", rank=rank
        )

    for sym in rule:
        if not isinstance(sym, str) or not sym:
            raise InvalidModelError(
                "merge rule symbols must be non-empty strings", token=sym, rank=rank
            )
    return rule


class MergeTable:
    """
    Merge rules indexed by symbol pair.

    A rule's rank is its position in the input; lower rank is applied first.
    Every input symbol of a rule must be atomic (a single character or one of
    ``atomic``) or the output of a rule with a lower rank.
    """

    __slots__ = ("_rules", "_ranks", "_atomic")

    def __init__(self, rules: Iterable[object], atomic: Iterable[Token] = ()) -> None:
        """
        :param rules: Rules in rank order, as :class:`MergeRule` or plain sequences.
        :param atomic: Multi-character symbols treated as part of the base alphabet.
        :raises InvalidModelError: If any rule is malformed or unresolvable.
        """
        # insertion order is kept so the table can be persisted as built
        self._atomic: tuple[Token, ...] = tuple(dict.fromkeys(atomic))
        for sym in self._atomic:
            if not isinstance(sym, str) or not sym:
                raise InvalidModelError("atomic symbols must be non-empty strings", token=sym)
        atoms = set(self._atomic)
        produced: set[Token] = set()
        ranks: dict[TokenPair, tuple[int, Token]] = {}
        checked: list[MergeRule] = []

        for rank, raw in enumerate(rules):
            rule = _coerce_rule(raw, rank)

            if rule.merged != rule.left + rule.right:
                raise InvalidModelError(
                    "merged symbol must be the concatenation of its pair",
                    token=rule.merged,
                    rank=rank,
                )
            if rule.pair in ranks:
                raise InvalidModelError(
                    f"duplicate merge pair {rule.pair!r}",
                    rank=rank,
                )
            for sym in rule.pair:
                if len(sym) > 1 and sym not in atoms and sym not in produced:
                    raise InvalidModelError(
                        "merge input is not reachable from the base alphabet "
                        "or an earlier rule",
                        token=sym,
                        rank=rank,
                    )

            ranks[rule.pair] = (rank, rule.merged)
            produced.add(rule.merged)
            checked.append(rule)

        self._rules: tuple[MergeRule, ...] = tuple(checked)
        self._ranks = ranks
        log.debug(f"built merge table with {len(self._rules)} rules")

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[MergeRule]:
        return iter(self._rules)

    def __contains__(self, pair: object) -> bool:
        return isinstance(pair, tuple) and pair in self._ranks

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MergeTable):
            return NotImplemented
        return self._rules == other._rules

    def __hash__(self) -> int:
        return hash(self._rules)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(rules={len(self)})"

    def lookup(self, left: Token, right: Token) -> tuple[int, Token] | None:
        """Return ``(rank, merged)`` for the pair, or ``None`` if no rule merges it."""
        return self._ranks.get((left, right))

    def rank(self, pair: TokenPair) -> int | None:
        """Return the rank of ``pair`` or ``None``."""
        hit = self._ranks.get(pair)
        return None if hit is None else hit[0]

    def rules(self) -> list[MergeRule]:
        """Return all rules in rank order."""
        return list(self._rules)

    def outputs(self) -> set[Token]:
        """Return every symbol some rule can produce."""
        return {rule.merged for rule in self._rules}

    def atomic(self) -> list[Token]:
        """Return the multi-character symbols accepted as base alphabet."""
        return list(self._atomic)


__all__ = ["MergeRule", "MergeTable"]
