"""
BPE tokenizer: vocabulary lookups, encoding, decoding and padding.
"""

import functools
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Self

from ._bpe import apply_merges
from ._decorators import requires_open
from .config import BoundaryPolicy, TokenizerConfig, cache_size_from_env
from .errors import InvalidModelError
from .merges import MergeRule, MergeTable
from .normalize import clean_text, split_sentences, split_words
from .padding import PaddedBatch, pad_batch, pad_sequences
from .strategy import SpecialTokenStrategy, split_special
from .types import Index, IndexList, Token, TokenList
from .vocab import Vocabulary

log = logging.getLogger(__name__)

SEPARATOR = " "


class Tokenizer:
    """
    Applies a trained BPE model: a vocabulary plus rank-ordered merge rules.

    The model is validated on construction and never changes afterwards.
    Reserved tokens (unknown, pad, boundary marker, extra special tokens)
    that are missing from ``vocabulary`` are appended after its last index.
    """

    def __init__(
        self,
        vocabulary: Iterable[Token] | Vocabulary,
        merge_rules: Iterable[MergeRule | Sequence[Token]] | MergeTable,
        config: TokenizerConfig | None = None,
    ) -> None:
        """
        :param vocabulary: Token strings in index order, or a built :class:`Vocabulary`.
        :param merge_rules: Rules in rank order, or a built :class:`MergeTable`.
        :param config: Tokenizer options; defaults to :class:`TokenizerConfig()`.
        :raises InvalidModelError: If the vocabulary, rules or config are inconsistent.
        """
        if config is None:
            config = TokenizerConfig()
        elif not isinstance(config, TokenizerConfig):
            raise InvalidModelError("config must be a TokenizerConfig")
        if isinstance(vocabulary, (str, bytes)):
            raise InvalidModelError("vocabulary must be a sequence of token strings")
        self._config = config

        vocab = vocabulary if isinstance(vocabulary, Vocabulary) else Vocabulary(vocabulary)
        missing = [tok for tok in config.reserved_tokens() if tok not in vocab]
        if missing:
            log.debug(f"appending reserved tokens to vocabulary: {missing}")
            vocab = vocab.extended(missing)
        self._vocab = vocab

        if isinstance(merge_rules, MergeTable):
            self._merges = merge_rules
        else:
            atomic = [config.boundary_marker] if config.marks_boundaries else []
            self._merges = MergeTable(merge_rules, atomic=atomic)

        orphans = self._merges.outputs().difference(self._vocab)
        if orphans:
            log.warning(
                f"{len(orphans)} merge outputs are not in the vocabulary and will "
                "encode as the unknown token when left unmerged"
            )

        self._unk_index = vocab.get_index(config.unknown_token)
        self._pad_index = vocab.get_index(config.pad_token)
        self._marker_index: Index | None = (
            vocab.get_index(config.boundary_marker) if config.marks_boundaries else None
        )
        # reserved tokens that strategies may match literally; the marker is text
        self._special_toks: dict[str, Index] = {
            tok: vocab.get_index(tok)
            for tok in config.reserved_tokens()
            if not (config.marks_boundaries and tok == config.boundary_marker)
        }

        cache_size = cache_size_from_env()
        self._encode_word = functools.lru_cache(maxsize=cache_size)(
            self._encode_word_uncached
        )
        self._closed = False

        log.debug(
            f"tokenizer ready: {len(self._vocab)} tokens, {len(self._merges)} merge "
            f"rules, word cache {cache_size}"
        )

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return (
            f"{self.__class__.__name__}(vocab_size={len(self._vocab)}, "
            f"merges={len(self._merges)}, {state})"
        )

    # Lifecycle
    # ---------------------------------------------------------------------------

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the word cache; any later operation raises ``TokenizerClosedError``."""
        if not self._closed:
            self._encode_word.cache_clear()
            self._closed = True

    # Model introspection
    # ---------------------------------------------------------------------------

    @property
    @requires_open
    def config(self) -> TokenizerConfig:
        return self._config

    @property
    @requires_open
    def vocabulary(self) -> Vocabulary:
        """Read-only vocabulary store, tokens in index order."""
        return self._vocab

    @property
    @requires_open
    def merge_table(self) -> MergeTable:
        return self._merges

    @property
    @requires_open
    def merge_rules(self) -> list[MergeRule]:
        """All merge rules in rank order."""
        return self._merges.rules()

    @property
    @requires_open
    def unknown_index(self) -> Index:
        return self._unk_index

    @property
    @requires_open
    def pad_index(self) -> Index:
        return self._pad_index

    @property
    @requires_open
    def special_tokens(self) -> dict[str, Index]:
        """Reserved tokens a special token strategy may match in raw text."""
        return dict(self._special_toks)

    @requires_open
    def vocab_size(self) -> int:
        """Return the number of tokens in the vocabulary."""
        return len(self._vocab)

    # Lookups
    # ---------------------------------------------------------------------------

    @requires_open
    def get_token(self, index: Index) -> Token:
        """:raises IndexOutOfRangeError: If ``index`` is outside the vocabulary."""
        return self._vocab.get_token(index)

    @requires_open
    def get_index(self, token: Token) -> Index:
        """:raises UnknownTokenError: If ``token`` is not in the vocabulary."""
        return self._vocab.get_index(token)

    @requires_open
    def get_tokens(self, indices: Iterable[Index]) -> TokenList:
        """Batch :meth:`get_token`; fails at the first bad index with its position."""
        return self._vocab.get_tokens(indices)

    @requires_open
    def get_indices(self, tokens: Iterable[Token]) -> IndexList:
        """Batch :meth:`get_index`; fails at the first unknown token with its position."""
        return self._vocab.get_indices(tokens)

    # Normalization
    # ---------------------------------------------------------------------------

    @staticmethod
    def clean_text(text: str, config: TokenizerConfig | None = None) -> str:
        """Normalize ``text`` without needing a tokenizer instance."""
        return clean_text(text, config)

    @requires_open
    def normalize(self, text: str) -> str:
        """Normalize ``text`` with this tokenizer's config."""
        return clean_text(text, self._config)

    # Encoding
    # ---------------------------------------------------------------------------

    @requires_open
    def tokenize(
        self,
        text: str,
        strategy: SpecialTokenStrategy | None = None,
    ) -> IndexList:
        """
        Encode text into a sequence of indices.

        Symbols that end up outside the vocabulary encode as the unknown index;
        this never raises for out-of-vocabulary content.

        If ``strategy`` is ``None`` reserved tokens written in ``text`` are
        plain text. Otherwise the tokens the strategy allows are matched in the
        raw text and emitted as their own index, and the spans between them are
        encoded normally.

        :param text: Text to encode.
        :param strategy: Strategy selecting which reserved tokens match literally.
        :returns: Encoded index sequence.
        :raises SpecialTokenError: If the strategy rejects the text.
        """
        if not isinstance(text, str):
            raise TypeError(f"text must be str, got {type(text).__name__}")

        if strategy is None:
            return self._encode_text(text)

        special_toks = strategy.handle(text, self._special_toks)
        if not special_toks:
            return self._encode_text(text)

        policy = self._config.boundary_policy
        marker = self._marker_index
        chunks = list(split_special(text, special_toks))

        out: IndexList = []
        for pos, chunk in enumerate(chunks):
            before = chunks[pos - 1] if pos > 0 else ""
            after = chunks[pos + 1] if pos + 1 < len(chunks) else ""
            if chunk in special_toks:
                # whitespace around a special token is kept as a standalone marker
                if marker is not None and policy is BoundaryPolicy.PREFIX:
                    if out and before[-1:].isspace():
                        out.append(marker)
                out.append(special_toks[chunk])
                if marker is not None and policy is BoundaryPolicy.SUFFIX:
                    if after[:1].isspace() and any(c.strip() for c in chunks[pos + 1 :]):
                        out.append(marker)
            else:
                # a span is a new word only after whitespace, and closes its
                # last word only when whitespace or the end of text follows
                out.extend(
                    self._encode_text(
                        chunk,
                        continues=bool(out) and chunk[0].isspace(),
                        ends=not after or chunk[-1].isspace(),
                    )
                )
        return out

    @requires_open
    def tokenize_batch(
        self,
        texts: list[str],
        strategy: SpecialTokenStrategy | None = None,
    ) -> list[IndexList]:
        """Encode multiple texts, preserving input order."""
        return [self.tokenize(text, strategy) for text in texts]

    @requires_open
    def tokenize_to_tokens(self, text: str) -> TokenList:
        """Encode ``text`` and return token strings instead of indices."""
        return self._vocab.get_tokens(self.tokenize(text))

    def _encode_text(
        self, text: str, continues: bool = False, ends: bool = True
    ) -> IndexList:
        """
        Normalize, split and encode one span of text.

        ``continues`` marks a span whose first word follows another word;
        ``ends=False`` leaves the last word open because text is glued to it.
        """
        cfg = self._config
        normalized = clean_text(text, cfg)
        if not normalized:
            return []

        spans = split_sentences(normalized) if cfg.split_sentences else [normalized]

        if not cfg.split_words:
            # one stream per sentence; too long to be worth caching
            out: IndexList = []
            for span in spans:
                out.extend(self._encode_word_uncached(span, False, True))
            return out

        out = []
        last = len(spans) - 1
        for pos, span in enumerate(spans):
            # sentences glued without whitespace continue the same word
            span_continues = continues if pos == 0 else span[0].isspace()
            span_ends = ends if pos == last else spans[pos + 1][0].isspace()
            words = split_words(span)
            for i, word in enumerate(words):
                out.extend(
                    self._encode_word(
                        word, i > 0 or span_continues, i < len(words) - 1 or span_ends
                    )
                )
        return out

    def _encode_word_uncached(
        self, word: str, continues: bool, ends: bool
    ) -> tuple[Index, ...]:
        """
        Encode one word.

        ``continues`` marks a word that follows another one and ``ends`` a word
        followed by a boundary; they select the prefix and suffix markers.
        """
        symbols: list[Token] = list(word)

        cfg = self._config
        if cfg.marks_boundaries:
            if cfg.boundary_policy is BoundaryPolicy.PREFIX and continues:
                symbols.insert(0, cfg.boundary_marker)
            elif cfg.boundary_policy is BoundaryPolicy.SUFFIX and ends:
                symbols.append(cfg.boundary_marker)

        merged = apply_merges(symbols, self._merges)

        find = self._vocab.find
        unk = self._unk_index
        return tuple(unk if (idx := find(sym)) is None else idx for sym in merged)

    # Decoding
    # ---------------------------------------------------------------------------

    @requires_open
    def detokenize(
        self, indices: Iterable[Index], skip_special_tokens: bool = False
    ) -> str:
        """
        Decode indices back into text.

        Boundary markers become single spaces. Normalization is not undone, so
        text that lost case or whitespace while encoding comes back normalized.

        A token that starts (``PREFIX``) or ends (``SUFFIX``) with the marker
        text always decodes as a boundary, so input that literally contained
        the marker, e.g. ``"##a"``, cannot be told apart from a word break.

        :param indices: Index sequence to decode.
        :param skip_special_tokens: Drop unknown, pad and extra special tokens.
        :raises IndexOutOfRangeError: If any index is outside the vocabulary.
        """
        tokens = self._vocab.get_tokens(indices)
        if skip_special_tokens:
            tokens = [tok for tok in tokens if tok not in self._special_toks]
        return self._join(tokens)

    @requires_open
    def detokenize_batch(
        self, sequences: Iterable[Iterable[Index]], skip_special_tokens: bool = False
    ) -> list[str]:
        """Decode multiple index sequences, preserving input order."""
        return [self.detokenize(seq, skip_special_tokens) for seq in sequences]

    def _join(self, tokens: TokenList) -> str:
        """Concatenate tokens, turning boundary markers back into separators."""
        cfg = self._config
        if not cfg.marks_boundaries:
            return "".join(tokens)

        marker = cfg.boundary_marker
        parts: list[str] = []
        if cfg.boundary_policy is BoundaryPolicy.PREFIX:
            for tok in tokens:
                if tok.startswith(marker):
                    parts.append(SEPARATOR)
                    parts.append(tok[len(marker) :])
                else:
                    parts.append(tok)
            return "".join(parts)

        for tok in tokens:
            if tok.endswith(marker):
                parts.append(tok[: -len(marker)])
                parts.append(SEPARATOR)
            else:
                parts.append(tok)
        # the last word's marker has no following word
        if tokens and tokens[-1].endswith(marker):
            parts.pop()
        return "".join(parts)

    # Padding
    # ---------------------------------------------------------------------------

    @requires_open
    def pad_sequences(
        self, sequences: Sequence[Sequence[Index]], max_len: int
    ) -> list[IndexList]:
        """
        Truncate or pad every sequence to ``max_len`` using the pad index.

        Sides come from the config.

        :raises PaddingError: If ``max_len`` is negative or not an integer.
        """
        return pad_sequences(
            sequences,
            max_len,
            self._pad_index,
            padding_side=self._config.padding_side,
            truncation_side=self._config.truncation_side,
        )

    @requires_open
    def pad_batch(
        self, sequences: Sequence[Sequence[Index]], max_len: int | None = None
    ) -> PaddedBatch:
        """Like :meth:`pad_sequences` with a validity mask; ``None`` pads to the longest."""
        return pad_batch(
            sequences,
            max_len,
            self._pad_index,
            padding_side=self._config.padding_side,
            truncation_side=self._config.truncation_side,
        )

    # Persistence
    # ---------------------------------------------------------------------------

    @requires_open
    def save(self, path: str | Path) -> None:
        """
        Serialize vocabulary, merge rules and config into one file.

        :raises ModelIOError: If the file cannot be written.
        """
        from .serialization import save_model

        save_model(self, path)

    @classmethod
    def load(cls, path: str | Path) -> Self:
        """
        Build a tokenizer from a file written by :meth:`save`.

        :raises ModelIOError: If the file cannot be read.
        :raises CorruptModelError: If the file content is not a valid model.
        """
        from .serialization import load_model

        return load_model(path, factory=cls)

    @requires_open
    def export_vocab(self, path: str | Path) -> None:
        """Write a human-readable listing of the vocabulary and merge derivations."""
        from .serialization import export_vocab

        export_vocab(self, path)


__all__ = ["Tokenizer"]
