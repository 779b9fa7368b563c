"""Shared fixtures: small hand-built BPE models."""

import pytest

from mergetok import BoundaryPolicy, Tokenizer, TokenizerConfig

HELLO_TOKENS = [
    "<pad>",
    "<unk>",
    "##",
    "h",
    "e",
    "l",
    "o",
    "w",
    "r",
    "d",
    "he",
    "ll",
    "hell",
    "hello",
    "##w",
    "##wo",
    "or",
    "##wor",
    "##worl",
    "##world",
]

HELLO_RULES = [
    ("h", "e", "he"),
    ("l", "l", "ll"),
    ("he", "ll", "hell"),
    ("hell", "o", "hello"),
    ("##", "w", "##w"),
    ("o", "r", "or"),
    ("##w", "or", "##wor"),
    ("##wor", "l", "##worl"),
    ("##worl", "d", "##world"),
]


@pytest.fixture
def hello_tokenizer():
    """Return a tokenizer whose model knows "hello" and word-internal "world"."""
    return Tokenizer(HELLO_TOKENS, HELLO_RULES)


@pytest.fixture
def example_tokenizer():
    """Return the minimal a/b/ab model with the default config."""
    return Tokenizer(["a", "b", "ab", "c", "##"], [("a", "b", "ab")])


@pytest.fixture
def suffix_tokenizer():
    """Return a model that marks word ends with "</w>"."""
    config = TokenizerConfig(
        boundary_policy=BoundaryPolicy.SUFFIX, boundary_marker="</w>"
    )
    tokens = ["<unk>", "<pad>", "</w>", "a", "b", "b</w>", "ab</w>"]
    rules = [("b", "</w>", "b</w>"), ("a", "b</w>", "ab</w>")]
    return Tokenizer(tokens, rules, config)


@pytest.fixture
def stream_tokenizer():
    """Return a model that treats the whole text, spaces included, as one stream."""
    config = TokenizerConfig(
        lowercase=False, collapse_whitespace=False, split_words=False
    )
    tokens = ["<unk>", "<pad>", "a", " ", "b", "a "]
    return Tokenizer(tokens, [("a", " ", "a ")], config)
