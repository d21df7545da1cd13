"""WordTok: word-bounded byte-level BPE tokenization library."""

from importlib.metadata import PackageNotFoundError, version

from ._progress import disable_progress, enable_progress
from .config import BPEConfig
from .errors import (
    ModelLoadError,
    NotBuiltError,
    SpecialTokenError,
    VocabularyError,
    WordTokError,
)
from .factory import from_pretrained, get_tokenizer
from .special import SpecialToken, list_special_tokens
from .tokenizer import BPETokenizer

try:
    __version__ = version("wordtok")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "BPETokenizer",
    "BPEConfig",
    "SpecialToken",
    "WordTokError",
    "NotBuiltError",
    "VocabularyError",
    "SpecialTokenError",
    "ModelLoadError",
    "get_tokenizer",
    "from_pretrained",
    "list_special_tokens",
    "enable_progress",
    "disable_progress",
]
