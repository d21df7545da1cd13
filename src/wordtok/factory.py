"""Factory functions for creating tokenizers."""

from collections.abc import Iterable
from pathlib import Path

from .config import DEFAULT_VOCAB_SIZE, BPEConfig
from .special import SpecialToken
from .tokenizer import BPETokenizer


def get_tokenizer(
    vocab_size: int = DEFAULT_VOCAB_SIZE,
    special_tokens: Iterable[str | SpecialToken] = ("eos",),
) -> BPETokenizer:
    """
    Create an unbuilt tokenizer.

    :param vocab_size: Target vocabulary size, at least 256.
    :param special_tokens: Special token names ("eos", "unk", "eow") in id order.
    :return: Configured tokenizer instance; call ``build()`` before use.
    :raises VocabularyError: If ``vocab_size`` is below 256.
    :raises SpecialTokenError: If a special token name is unknown.

    .. code-block:: python

        tokenizer = get_tokenizer(1000, special_tokens=["eos", "eow"])
        tokenizer.build(b"hello world hello world")
    """
    config = BPEConfig(
        vocab_size=vocab_size,
        special_tokens=[SpecialToken.get(name) for name in special_tokens],
    )
    return BPETokenizer(config)


def from_pretrained(model_path: str | Path) -> BPETokenizer:
    """
    Load a built tokenizer from a binary model file.

    :param model_path: Path written by ``BPETokenizer.save_to_binary()``.
    :return: Built tokenizer with vocabulary, special tokens and merge rules.
    :raises ModelLoadError: If the file is missing or malformed.

    .. code-block:: python

        tokenizer = from_pretrained("path/to/tokenizer.bin")
        tokens = tokenizer.encode(b"Hello world")
    """
    tokenizer = BPETokenizer()
    tokenizer.load_from_binary(model_path)
    return tokenizer


__all__ = ["get_tokenizer", "from_pretrained"]
