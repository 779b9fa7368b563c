"""
Text normalization applied before encoding.

Every step is idempotent on its own output and the steps run in a fixed
order, so ``clean_text(clean_text(s)) == clean_text(s)`` for any config.
"""

import unicodedata

import regex as re

from .config import TokenizerConfig

_DEFAULT_CONFIG = TokenizerConfig()

# zero-width positions between a punctuation mark and an adjacent non-space char
_PUNCT_BOUNDARY = re.compile(r"(?<=\S)(?=\p{P})|(?<=\p{P})(?=\S)")
_WHITESPACE = re.compile(r"\s+")
# a run up to and including a sentence mark, or a trailing run without one
_SENTENCE = re.compile(r"[^.!?]*[.!?]|[^.!?]+")


def clean_text(text: str, config: TokenizerConfig | None = None) -> str:
    """
    Normalize raw text into the canonical form the encoder expects.

    Steps, each controlled by ``config``: Unicode normalization, lowercasing,
    punctuation isolation and whitespace collapsing.

    :param text: Raw input text.
    :param config: Normalization options; defaults to :class:`TokenizerConfig()`.
    :returns: Normalized text.
    """
    cfg = config or _DEFAULT_CONFIG

    if cfg.unicode_form is not None:
        text = unicodedata.normalize(cfg.unicode_form, text)

    if cfg.lowercase:
        text = text.lower()
        # lowercasing can produce decomposed sequences (e.g. "İ")
        if cfg.unicode_form is not None:
            text = unicodedata.normalize(cfg.unicode_form, text)

    if cfg.isolate_punctuation:
        text = _PUNCT_BOUNDARY.sub(" ", text)

    if cfg.collapse_whitespace:
        text = _WHITESPACE.sub(" ", text).strip()

    return text


def split_words(text: str) -> list[str]:
    """Split normalized text into whitespace-delimited words."""
    return text.split()


def split_sentences(text: str) -> list[str]:
    """
    Cut text after every ``.``, ``!`` or ``?``.

    Each mark stays with the sentence it ends; whitespace after it starts the
    next sentence. Joining the result gives back ``text``.
    """
    return _SENTENCE.findall(text)


__all__ = ["clean_text", "split_words", "split_sentences"]
