"""
Binary model format.

All integers are little-endian and there is no padding. Sections, in order:

1. ``u32`` configured special count, ``u32`` target vocab size, then one
   ``u8`` tag per configured special token.
2. ``u32`` vocabulary count, then per id ``u32`` length and the raw bytes.
3. ``u32`` registered special count, then ``u8`` tag and ``u32`` id per
   entry, sorted by tag.
4. ``u32`` rank count, then ``u32`` a, ``u32`` b, ``u32`` rank, sorted by rank.
5. ``u32`` merge count, then ``u32`` a, ``u32`` b, ``u32`` merged id, sorted
   by merged id.
"""

from dataclasses import dataclass, field
import io
import struct
from typing import BinaryIO, Final

from .errors import ModelLoadError
from .special import SpecialToken
from .types import MergeRanks, MergeTable, Token, TokenBytes

_U8: Final = struct.Struct("<B")
_U32: Final = struct.Struct("<I")
_SPECIAL: Final = struct.Struct("<BI")
_TRIPLE: Final = struct.Struct("<III")


@dataclass
class ModelState:
    """Everything a built tokenizer needs, in file order."""

    vocab_size: int
    config_specials: list[SpecialToken]
    id2bytes: list[TokenBytes]
    specials: dict[SpecialToken, Token] = field(default_factory=dict)
    ranks: MergeRanks = field(default_factory=dict)
    merges: MergeTable = field(default_factory=dict)


def write_model(f: BinaryIO, state: ModelState) -> None:
    """Serialize ``state`` into ``f``."""
    # section 1: configuration
    f.write(_U32.pack(len(state.config_specials)))
    f.write(_U32.pack(state.vocab_size))
    for kind in state.config_specials:
        f.write(_U8.pack(kind.tag))

    # section 2: id -> bytes
    f.write(_U32.pack(len(state.id2bytes)))
    for seq in state.id2bytes:
        f.write(_U32.pack(len(seq)))
        f.write(seq)

    # section 3: registered special tokens
    f.write(_U32.pack(len(state.specials)))
    for kind, tok in sorted(state.specials.items(), key=lambda x: x[0].tag):
        f.write(_SPECIAL.pack(kind.tag, tok))

    # section 4: merge ranks
    f.write(_U32.pack(len(state.ranks)))
    for (tok_a, tok_b), rank in sorted(state.ranks.items(), key=lambda x: x[1]):
        f.write(_TRIPLE.pack(tok_a, tok_b, rank))

    # section 5: pair -> merged token, ties on merged id kept in rank order
    f.write(_U32.pack(len(state.merges)))
    ordered = sorted(
        state.merges.items(),
        key=lambda x: (x[1], state.ranks.get(x[0], 0)),
    )
    for (tok_a, tok_b), mtok in ordered:
        f.write(_TRIPLE.pack(tok_a, tok_b, mtok))


class _Reader:
    """Sequential reader that reports truncation as a load error."""

    def __init__(self, f: BinaryIO, model_path: str | None = None) -> None:
        self.f = f
        self.model_path = model_path
        self.offset = 0
        # bytes left in the stream, so corrupt lengths fail before allocating
        start = f.tell()
        self.remaining = f.seek(0, io.SEEK_END) - start
        f.seek(start)

    def read(self, n: int) -> bytes:
        if n > self.remaining:
            raise ModelLoadError(
                f"unexpected end of file (wanted {n} bytes, {self.remaining} left)",
                model_path=self.model_path,
                offset=self.offset,
            )
        buf = self.f.read(n)
        if len(buf) != n:
            raise ModelLoadError(
                f"unexpected end of file (wanted {n} bytes, got {len(buf)})",
                model_path=self.model_path,
                offset=self.offset,
            )
        self.offset += n
        self.remaining -= n
        return buf

    def unpack(self, fmt: struct.Struct) -> tuple[int, ...]:
        return fmt.unpack(self.read(fmt.size))

    def u32(self) -> int:
        return self.unpack(_U32)[0]

    def at_end(self) -> bool:
        return self.remaining == 0


def read_model(f: BinaryIO, model_path: str | None = None) -> ModelState:
    """
    Deserialize a model written by :func:`write_model`.

    :raises ModelLoadError: If the data is truncated or has trailing bytes.
    :raises SpecialTokenError: If a special token tag is not recognised.
    """
    r = _Reader(f, model_path)

    # section 1: configuration
    n_config = r.u32()
    vocab_size = r.u32()
    config_specials = [SpecialToken.from_tag(r.unpack(_U8)[0]) for _ in range(n_config)]

    # section 2: id -> bytes
    n_vocab = r.u32()
    id2bytes: list[TokenBytes] = []
    for _ in range(n_vocab):
        id2bytes.append(r.read(r.u32()))

    state = ModelState(
        vocab_size=vocab_size,
        config_specials=config_specials,
        id2bytes=id2bytes,
    )

    # section 3: registered special tokens
    for _ in range(r.u32()):
        tag, tok = r.unpack(_SPECIAL)
        state.specials[SpecialToken.from_tag(tag)] = tok

    # section 4: merge ranks
    for _ in range(r.u32()):
        tok_a, tok_b, rank = r.unpack(_TRIPLE)
        state.ranks[(tok_a, tok_b)] = rank

    # section 5: pair -> merged token
    for _ in range(r.u32()):
        tok_a, tok_b, mtok = r.unpack(_TRIPLE)
        state.merges[(tok_a, tok_b)] = mtok

    if not r.at_end():
        raise ModelLoadError(
            "trailing data after model", model_path=model_path, offset=r.offset
        )

    return state


__all__ = ["ModelState", "write_model", "read_model"]
