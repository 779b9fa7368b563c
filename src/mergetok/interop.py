"""
Thin adapter exposing the tokenizer through a host-style camelCase interface.

Hosts hand over loosely typed values (JSON-like lists, tuples and dicts).
This module converts them into the typed structures the engine accepts and
rejects anything else with ``TypeError``; it adds no tokenization logic.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .config import TokenizerConfig
from .merges import MergeRule
from .normalize import clean_text
from .serialization import load_model
from .tokenizer import Tokenizer
from .types import IndexList, TokenList


def _as_list(value: Any, name: str) -> list[Any]:
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
        raise TypeError(f"{name} must be a list, got {type(value).__name__}")
    return list(value)


def _as_str_list(value: Any, name: str) -> TokenList:
    items = _as_list(value, name)
    for pos, item in enumerate(items):
        if not isinstance(item, str):
            raise TypeError(f"{name}[{pos}] must be a str, got {type(item).__name__}")
    return items


def _as_index_list(value: Any, name: str) -> IndexList:
    items = _as_list(value, name)
    for pos, item in enumerate(items):
        if not isinstance(item, int) or isinstance(item, bool):
            raise TypeError(f"{name}[{pos}] must be an int, got {type(item).__name__}")
    return items


def _as_rules(value: Any) -> list[MergeRule]:
    rules: list[MergeRule] = []
    for rank, raw in enumerate(_as_list(value, "merge_rules")):
        parts = _as_str_list(raw, f"merge_rules[{rank}]")
        if len(parts) == 2:
            parts.append(parts[0] + parts[1])
        if len(parts) != 3:
            raise TypeError(f"merge_rules[{rank}] must have 2 or 3 symbols")
        rules.append(MergeRule(*parts))
    return rules


def _as_config(value: Any) -> TokenizerConfig | None:
    if value is None or isinstance(value, TokenizerConfig):
        return value
    if not isinstance(value, Mapping):
        raise TypeError(f"config must be a mapping, got {type(value).__name__}")
    return TokenizerConfig.from_dict(dict(value))


class TokenizerWrapper:
    """Host-facing wrapper around one :class:`Tokenizer` instance."""

    def __init__(self, vocabulary: Any, merge_rules: Any, config: Any = None) -> None:
        self._tokenizer = Tokenizer(
            _as_str_list(vocabulary, "vocabulary"),
            _as_rules(merge_rules),
            _as_config(config),
        )

    @classmethod
    def _wrap(cls, tokenizer: Tokenizer) -> "TokenizerWrapper":
        wrapper = cls.__new__(cls)
        wrapper._tokenizer = tokenizer
        return wrapper

    @property
    def getVocabulary(self) -> TokenList:
        return self._tokenizer.vocabulary.tokens()

    @property
    def getMergeRules(self) -> list[list[str]]:
        return [list(rule) for rule in self._tokenizer.merge_rules]

    def getToken(self, index: Any) -> str:
        return self._tokenizer.get_token(index)

    def getIndex(self, token: Any) -> int:
        if not isinstance(token, str):
            raise TypeError(f"token must be a str, got {type(token).__name__}")
        return self._tokenizer.get_index(token)

    def getTokens(self, indices: Any) -> TokenList:
        return self._tokenizer.get_tokens(_as_index_list(indices, "indices"))

    def getIndices(self, tokens: Any) -> IndexList:
        return self._tokenizer.get_indices(_as_str_list(tokens, "tokens"))

    def tokenize(self, text: Any) -> IndexList:
        return self._tokenizer.tokenize(text)

    def detokenize(self, indices: Any) -> str:
        return self._tokenizer.detokenize(_as_index_list(indices, "indices"))

    @staticmethod
    def cleanText(text: Any) -> str:
        if not isinstance(text, str):
            raise TypeError(f"text must be a str, got {type(text).__name__}")
        return clean_text(text)

    def save(self, path: Any) -> None:
        self._tokenizer.save(Path(path))

    @staticmethod
    def load(path: Any) -> "TokenizerWrapper":
        return TokenizerWrapper._wrap(load_model(Path(path)))

    def padSequences(self, sequences: Any, max_len: Any) -> list[IndexList]:
        rows = [
            _as_index_list(seq, f"sequences[{pos}]")
            for pos, seq in enumerate(_as_list(sequences, "sequences"))
        ]
        return self._tokenizer.pad_sequences(rows, max_len)

    def free(self) -> None:
        """Release the wrapped tokenizer; later calls raise ``TokenizerClosedError``."""
        self._tokenizer.close()


__all__ = ["TokenizerWrapper"]
