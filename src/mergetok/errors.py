"""Custom exception hierarchy for mergetok errors."""

from .types import Index, Token


class MergeTokError(Exception):
    """Base exception for all mergetok errors."""


class IndexOutOfRangeError(MergeTokError, IndexError):
    """Raised when an index lookup falls outside the vocabulary."""

    def __init__(
        self,
        message: str,
        *,
        index: object = None,
        vocab_size: int | None = None,
        position: int | None = None,
    ) -> None:
        """Initialize with optional lookup context that gets appended to the message."""
        extra = " "
        if index is not None:
            extra += f"(index: {index!r}) "
        if vocab_size is not None:
            extra += f"(vocab size: {vocab_size}) "
        # batch lookups: offset of the failing element
        if position is not None:
            extra += f"(position: {position}) "
        super().__init__(message + extra)
        self.index = index
        self.vocab_size = vocab_size
        self.position = position


class UnknownTokenError(MergeTokError, LookupError):
    """Raised when a token string is not part of the vocabulary."""

    def __init__(
        self,
        message: str,
        *,
        token: Token | None = None,
        position: int | None = None,
    ) -> None:
        extra = " "
        if token is not None:
            extra += f"(token: {token!r}) "
        if position is not None:
            extra += f"(position: {position}) "
        super().__init__(message + extra)
        self.token = token
        self.position = position


class InvalidModelError(MergeTokError):
    """Raised when a vocabulary, merge table or config is inconsistent."""

    def __init__(
        self,
        message: str,
        *,
        token: Token | None = None,
        rank: int | None = None,
        indices: tuple[Index, Index] | None = None,
    ) -> None:
        """
        Initialize InvalidModelError with the offending model element.

        Args:
            message: Error message.
            token: The token or symbol that failed validation.
            rank: Rank of the merge rule that failed validation.
            indices: Both positions of a duplicated vocabulary entry.
        """
        extra = " "
        if token is not None:
            extra += f"(token: {token!r}) "
        if rank is not None:
            extra += f"(rank: {rank}) "
        if indices is not None:
            extra += f"(indices: {indices[0]}, {indices[1]}) "
        super().__init__(message + extra)
        self.token = token
        self.rank = rank
        self.indices = indices


class CorruptModelError(MergeTokError):
    """Raised when a persisted model artifact is structurally invalid."""

    def __init__(
        self,
        message: str,
        *,
        model_path: str | None = None,
        version_mismatch: tuple[object, object] | None = None,
    ) -> None:
        extra = " "
        if model_path:
            extra += f"(path: {model_path}) "
        if version_mismatch is not None:
            extra += f"(expected: {version_mismatch[1]}) (got {version_mismatch[0]}) "
        super().__init__(message + extra)
        self.model_path = model_path
        self.version_mismatch = version_mismatch


class ModelIOError(MergeTokError):
    """Raised when a model file cannot be read or written."""

    def __init__(self, message: str, *, model_path: str | None = None) -> None:
        extra = " "
        if model_path:
            extra += f"(path: {model_path}) "
        super().__init__(message + extra)
        self.model_path = model_path


class PaddingError(MergeTokError, ValueError):
    """Raised when batch padding arguments are invalid."""

    def __init__(self, message: str, *, max_len: object = None) -> None:
        extra = " "
        if max_len is not None:
            extra += f"(max_len: {max_len!r}) "
        super().__init__(message + extra)
        self.max_len = max_len


class SpecialTokenError(MergeTokError):
    """Raised when special token handling fails."""

    def __init__(self, message: str, *, found_tokens: set[str] | None = None) -> None:
        """Initialize with optional found_tokens that get appended to the message."""
        if found_tokens:
            message = f"{message} (found: {', '.join(sorted(found_tokens))})"
        super().__init__(message)
        self.found_tokens = found_tokens


class StrategyError(MergeTokError):
    """Raised when strategy operations fail."""

    def __init__(
        self,
        message: str,
        *,
        invalid_name: str | None = None,
        available_strats: list[str] | None = None,
    ) -> None:
        extra = " "
        if invalid_name:
            extra += f"(available: {available_strats}) (got {invalid_name}) "
        super().__init__(message + extra)
        self.invalid_name = invalid_name
        self.available_strats = available_strats


class TokenizerClosedError(MergeTokError):
    """Raised when a tokenizer is used after ``close()``."""
