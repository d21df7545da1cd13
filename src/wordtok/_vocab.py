"""
Paired id <-> byte-sequence interning table.
"""

from collections.abc import Iterator

from .types import Token, TokenBytes


class ByteVocab:
    """
    Bidirectional mapping between token ids and their byte sequences.

    Both directions are only ever changed together through :meth:`intern` or
    :meth:`reset`, so they stay exact inverses of each other. Ids are dense:
    the length of the table is always the next id to be assigned.
    """

    def __init__(self) -> None:
        # token -> bytes
        self._id2bytes: list[TokenBytes] = []
        # bytes -> token
        self._bytes2id: dict[TokenBytes, Token] = {}

    def __len__(self) -> int:
        return len(self._id2bytes)

    def __contains__(self, seq: object) -> bool:
        return seq in self._bytes2id

    def __iter__(self) -> Iterator[TokenBytes]:
        return iter(self._id2bytes)

    def reset(self) -> None:
        """Drop every entry and re-seed ids 0-255 with the single bytes."""
        self._id2bytes.clear()
        self._bytes2id.clear()
        for b in range(256):
            self.intern(bytes([b]))

    def intern(self, seq: TokenBytes) -> Token:
        """Return the id of ``seq``, assigning the next id if it is new."""
        tok = self._bytes2id.get(seq)
        if tok is None:
            tok = len(self._id2bytes)
            self._id2bytes.append(seq)
            self._bytes2id[seq] = tok
        return tok

    def token_bytes(self, tok: Token) -> TokenBytes | None:
        """Return the byte sequence of ``tok`` or ``None`` if it is unknown."""
        if 0 <= tok < len(self._id2bytes):
            return self._id2bytes[tok]
        return None

    def token_id(self, seq: TokenBytes) -> Token | None:
        return self._bytes2id.get(seq)
