"""Special token kinds and their fixed byte representations."""

from enum import Enum

from .errors import SpecialTokenError


class SpecialToken(str, Enum):
    """
    Closed set of special token kinds a tokenizer can register.

    Each kind has a constant marker (``<|eos|>`` etc.) that is interned into
    the vocabulary independently of training data, and a one-byte tag used by
    the binary model format. Tags follow declaration order and must never be
    reordered.
    """

    EOS = "eos"
    UNK = "unk"
    EOW = "eow"

    @property
    def tag(self) -> int:
        """Numeric tag written to binary model files."""
        return _TAGS[self]

    @property
    def repr_bytes(self) -> bytes:
        """Fixed byte representation of this special token."""
        return f"<|{self.value}|>".encode("ascii")

    @classmethod
    def from_tag(cls, tag: int) -> "SpecialToken":
        """Resolve a binary tag back into a special token kind."""
        try:
            return _BY_TAG[tag]
        except KeyError:
            raise SpecialTokenError("invalid special token", tag=tag)

    @classmethod
    def get(cls, name: "str | SpecialToken") -> "SpecialToken":
        """Get special token kind by name (case-insensitive)."""
        if isinstance(name, SpecialToken):
            return name
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise SpecialTokenError(
                "unknown special token",
                name=name,
                available=list_special_tokens(),
            )


_TAGS: dict[SpecialToken, int] = {kind: idx for idx, kind in enumerate(SpecialToken)}
_BY_TAG: dict[int, SpecialToken] = {idx: kind for kind, idx in _TAGS.items()}


def list_special_tokens() -> list[str]:
    """Return names of all supported special token kinds."""
    return [kind.value for kind in SpecialToken]


__all__ = ["SpecialToken", "list_special_tokens"]
