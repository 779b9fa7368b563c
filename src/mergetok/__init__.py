"""MergeTok: rank-driven BPE tokenizer core."""

from .config import BoundaryPolicy, Side, TokenizerConfig, list_policies
from .errors import (
    CorruptModelError,
    IndexOutOfRangeError,
    InvalidModelError,
    MergeTokError,
    ModelIOError,
    PaddingError,
    SpecialTokenError,
    StrategyError,
    TokenizerClosedError,
    UnknownTokenError,
)
from .interop import TokenizerWrapper
from .merges import MergeRule, MergeTable
from .normalize import clean_text
from .padding import PaddedBatch, pad_batch, pad_sequences
from .serialization import export_vocab, load_model, save_model
from .strategy import (
    AllowAllStrategy,
    AllowCustomStrategy,
    AllowNoneRaiseStrategy,
    AllowNoneStrategy,
    SpecialTokenStrategy,
    get_strategy,
    list_strategies,
    split_special,
)
from .tokenizer import Tokenizer
from .vocab import Vocabulary

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("mergetok")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "Tokenizer",
    "TokenizerConfig",
    "TokenizerWrapper",
    "BoundaryPolicy",
    "Side",
    "Vocabulary",
    "MergeRule",
    "MergeTable",
    "PaddedBatch",
    "SpecialTokenStrategy",
    "AllowAllStrategy",
    "AllowNoneStrategy",
    "AllowNoneRaiseStrategy",
    "AllowCustomStrategy",
    "MergeTokError",
    "IndexOutOfRangeError",
    "UnknownTokenError",
    "InvalidModelError",
    "CorruptModelError",
    "ModelIOError",
    "PaddingError",
    "SpecialTokenError",
    "StrategyError",
    "TokenizerClosedError",
    "clean_text",
    "load_model",
    "save_model",
    "export_vocab",
    "pad_sequences",
    "pad_batch",
    "get_strategy",
    "list_strategies",
    "split_special",
    "list_policies",
]
