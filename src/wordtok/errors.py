"""Custom exception hierarchy for wordtok tokenization errors."""

from .types import Token


class WordTokError(Exception):
    """Base exception for all wordtok errors."""


class NotBuiltError(WordTokError):
    """Raised when a tokenizer is used before ``build`` or ``load`` completes."""

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        if operation:
            message = f"{message} (operation: {operation})"
        super().__init__(message)
        self.operation = operation


class VocabularyError(WordTokError):
    """Raised when vocabulary operations fail."""

    def __init__(
        self,
        message: str,
        *,
        vocab_size: int | None = None,
        invalid_tok: Token | None = None,
    ) -> None:
        """Initialize with optional token and vocab_size that get appended to the message."""
        extra = " "
        # configuration: vocab size < 256
        if vocab_size is not None:
            extra += f"(vocab size: {vocab_size}) "
        # decoding: token not in vocab
        if invalid_tok is not None:
            extra += f"(invalid token: {invalid_tok}) "
        super().__init__(message + extra)
        self.vocab_size = vocab_size
        self.invalid_tok = invalid_tok


class SpecialTokenError(WordTokError):
    """Raised when special token lookup or decoding fails."""

    def __init__(
        self,
        message: str,
        *,
        name: str | None = None,
        tag: int | None = None,
        available: list[str] | None = None,
    ) -> None:
        extra = " "
        if name is not None:
            extra += f"(got {name!r}) "
        if tag is not None:
            extra += f"(tag: {tag}) "
        if available:
            extra += f"(available: {', '.join(available)}) "
        super().__init__(message + extra)
        self.name = name
        self.tag = tag
        self.available = available


class ModelLoadError(WordTokError):
    """Raised when loading a tokenizer model fails."""

    def __init__(
        self,
        message: str,
        *,
        model_path: str | None = None,
        offset: int | None = None,
    ) -> None:
        extra = " "
        if model_path:
            extra += f"(path: {model_path}) "
        if offset is not None:
            extra += f"(offset: {offset}) "
        super().__init__(message + extra)
        self.model_path = model_path
        self.offset = offset


__all__ = [
    "WordTokError",
    "NotBuiltError",
    "VocabularyError",
    "SpecialTokenError",
    "ModelLoadError",
]
