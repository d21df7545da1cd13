"""
Split raw bytes into words of base tokens.
"""

from typing import Final

import regex as re

from .types import Token, Word

# runs of ASCII alphanumerics, or any other single byte on its own.
# bytes >= 0x80 never match the class, so multi-byte UTF-8 characters
# become one word per byte.
WORD_PATTERN: Final = re.compile(rb"[A-Za-z0-9]+|[^A-Za-z0-9]")


def pretokenize(
    data: bytes,
    eow: Token | None = None,
    eos: Token | None = None,
) -> list[Word]:
    """
    Split ``data`` into words of raw byte tokens.

    Every word is closed with ``eow`` when given, and a final word holding
    only ``eos`` is appended when given. Empty input yields no words apart
    from the optional end-of-sequence word.

    :param data: Raw input bytes.
    :param eow: Token id of the end-of-word marker, if registered.
    :param eos: Token id of the end-of-sequence marker, if registered.
    :returns: Words in input order, each a fresh mutable list of token ids.
    """
    words: list[Word] = []
    for m in WORD_PATTERN.finditer(data):
        word = list(m.group(0))
        if eow is not None:
            word.append(eow)
        words.append(word)

    if eos is not None:
        words.append([eos])

    return words


__all__ = ["pretokenize", "WORD_PATTERN"]
