"""Tokenizer configuration and policy enums."""

import logging
import os
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Final

from .errors import InvalidModelError

log = logging.getLogger(__name__)

UNICODE_FORMS: Final[tuple[str, ...]] = ("NFC", "NFKC", "NFD", "NFKD")

CACHE_SIZE_ENV: Final[str] = "MERGETOK_CACHE_SIZE"
DEFAULT_CACHE_SIZE: Final[int] = 10_000


class BoundaryPolicy(str, Enum):
    """
    How word boundaries are marked in the symbol stream.

    ``PREFIX`` puts the marker in front of every word except the first one,
    ``SUFFIX`` appends it to every word and ``NONE`` leaves words unmarked.
    """

    NONE = "none"
    PREFIX = "prefix"
    SUFFIX = "suffix"

    @classmethod
    def get(cls, name: str) -> "BoundaryPolicy":
        """Get boundary policy by name (case-insensitive)."""
        try:
            return cls[name.upper()]
        except KeyError:
            raise InvalidModelError(
                f"unknown boundary policy, expected one of {list_policies()}",
                token=name,
            )


class Side(str, Enum):
    """Which end of a sequence padding or truncation applies to."""

    LEFT = "left"
    RIGHT = "right"


def list_policies() -> list[str]:
    """Return available boundary policy names."""
    return [policy.value for policy in BoundaryPolicy]


@dataclass(frozen=True)
class TokenizerConfig:
    """
    Options shared by normalization, encoding, decoding and padding.

    Instances are immutable and validated on creation; invalid combinations
    raise :class:`InvalidModelError`.
    """

    unknown_token: str = "<unk>"
    pad_token: str = "<pad>"
    lowercase: bool = True
    collapse_whitespace: bool = True
    unicode_form: str | None = "NFC"
    isolate_punctuation: bool = False
    # False processes the whole text as one symbol stream
    split_words: bool = True
    # encode each sentence on its own so no merge spans a sentence end
    split_sentences: bool = False
    boundary_policy: BoundaryPolicy = BoundaryPolicy.PREFIX
    boundary_marker: str = "##"
    padding_side: Side = Side.RIGHT
    truncation_side: Side = Side.RIGHT
    special_tokens: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for name in ("unknown_token", "pad_token", "boundary_marker"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise InvalidModelError(f"{name} must be a non-empty string")

        if self.unknown_token == self.pad_token:
            raise InvalidModelError(
                "unknown and pad tokens must differ", token=self.pad_token
            )

        for name in (
            "lowercase",
            "collapse_whitespace",
            "isolate_punctuation",
            "split_words",
            "split_sentences",
        ):
            if not isinstance(getattr(self, name), bool):
                raise InvalidModelError(f"{name} must be a bool")

        if self.unicode_form is not None and self.unicode_form not in UNICODE_FORMS:
            raise InvalidModelError(
                f"unicode_form must be one of {', '.join(UNICODE_FORMS)} or None",
                token=self.unicode_form,
            )

        if not isinstance(self.boundary_policy, BoundaryPolicy):
            raise InvalidModelError("boundary_policy must be a BoundaryPolicy")
        for name in ("padding_side", "truncation_side"):
            if not isinstance(getattr(self, name), Side):
                raise InvalidModelError(f"{name} must be a Side")

        if not isinstance(self.special_tokens, tuple) or not all(
            isinstance(tok, str) and tok for tok in self.special_tokens
        ):
            raise InvalidModelError("special_tokens must be a tuple of non-empty strings")

        if self.marks_boundaries and self.boundary_marker in (
            self.unknown_token,
            self.pad_token,
        ):
            raise InvalidModelError(
                "boundary marker collides with a special token",
                token=self.boundary_marker,
            )

    @property
    def marks_boundaries(self) -> bool:
        """Whether encoding inserts boundary markers at all."""
        return self.split_words and self.boundary_policy is not BoundaryPolicy.NONE

    def reserved_tokens(self) -> list[str]:
        """
        Return the reserved tokens in the order they are appended to a vocabulary.

        The boundary marker is only reserved when a boundary policy is active.
        """
        reserved = [self.unknown_token, self.pad_token]
        if self.marks_boundaries:
            reserved.append(self.boundary_marker)
        for tok in self.special_tokens:
            if tok not in reserved:
                reserved.append(tok)
        return reserved

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible mapping of all options."""
        out: dict[str, Any] = {}
        for field in fields(self):
            value = getattr(self, field.name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, tuple):
                value = list(value)
            out[field.name] = value
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TokenizerConfig":
        """
        Build a config from a mapping produced by :meth:`to_dict`.

        Missing keys take their defaults. Unknown keys and invalid values raise
        :class:`InvalidModelError`.
        """
        known = {field.name for field in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidModelError(
                f"unknown config options: {', '.join(sorted(unknown))}"
            )

        kwargs = dict(data)
        try:
            if "boundary_policy" in kwargs:
                kwargs["boundary_policy"] = BoundaryPolicy(kwargs["boundary_policy"])
            for name in ("padding_side", "truncation_side"):
                if name in kwargs:
                    kwargs[name] = Side(kwargs[name])
        except ValueError as e:
            raise InvalidModelError("invalid config value") from e

        if "special_tokens" in kwargs:
            if not isinstance(kwargs["special_tokens"], (list, tuple)):
                raise InvalidModelError("special_tokens must be a list of strings")
            kwargs["special_tokens"] = tuple(kwargs["special_tokens"])

        return cls(**kwargs)


def cache_size_from_env() -> int:
    """Read the per-tokenizer word cache capacity from the environment."""
    raw = os.environ.get(CACHE_SIZE_ENV, "").strip()
    if not raw:
        return DEFAULT_CACHE_SIZE
    try:
        size = int(raw)
        if size < 0:
            raise ValueError()
    except ValueError:
        log.warning(
            f"ignoring invalid {CACHE_SIZE_ENV}={raw!r}, using {DEFAULT_CACHE_SIZE}"
        )
        return DEFAULT_CACHE_SIZE
    return size


__all__ = [
    "BoundaryPolicy",
    "Side",
    "TokenizerConfig",
    "list_policies",
    "cache_size_from_env",
]
