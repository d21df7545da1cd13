"""Tokenizer configuration."""

from dataclasses import dataclass, field
from typing import Final

from .errors import VocabularyError
from .special import SpecialToken

# smallest vocabulary that still holds every raw byte
MIN_VOCAB_SIZE: Final[int] = 256
DEFAULT_VOCAB_SIZE: Final[int] = 50257


@dataclass
class BPEConfig:
    """
    Build-time configuration of a :class:`~wordtok.tokenizer.BPETokenizer`.

    :param vocab_size: Target vocabulary size, including the 256 byte tokens
                       and the special tokens.
    :param special_tokens: Special token kinds to register, in id order. Names
                           such as ``"eos"`` are accepted and normalised.
    :raises VocabularyError: If ``vocab_size`` is below 256.
    :raises SpecialTokenError: If a special token name is unknown.
    """

    vocab_size: int = DEFAULT_VOCAB_SIZE
    special_tokens: list[SpecialToken] = field(
        default_factory=lambda: [SpecialToken.EOS]
    )

    def __post_init__(self) -> None:
        if self.vocab_size < MIN_VOCAB_SIZE:
            raise VocabularyError(
                f"vocab size must be at least {MIN_VOCAB_SIZE}",
                vocab_size=self.vocab_size,
            )
        self.special_tokens = [SpecialToken.get(name) for name in self.special_tokens]


__all__ = ["BPEConfig", "MIN_VOCAB_SIZE", "DEFAULT_VOCAB_SIZE"]
