"""
Word-bounded byte-level BPE tokenizer.
"""

import logging
from pathlib import Path
from typing import Final, TypeAlias

from typing_extensions import deprecated

from ._bpe import lowest_rank_pair, merge_pair
from ._codec import ModelState, read_model, write_model
from ._decorators import measure_time
from ._pretokenize import pretokenize
from ._sanitise import render_bytes
from ._vocab import ByteVocab
from .config import MIN_VOCAB_SIZE, BPEConfig
from .errors import ModelLoadError, NotBuiltError, VocabularyError
from .special import SpecialToken
from .trainer import train_bpe
from .types import MergeRanks, MergeTable, Token, Word

VOCAB_SUFFIX: Final[str] = ".vocab"

log = logging.getLogger(__name__)

Corpus: TypeAlias = bytes | str | list[bytes] | list[str]


def _to_bytes(data: Corpus) -> bytes:
    """Normalise text or lists of documents into one byte string."""
    if isinstance(data, list):
        if all(isinstance(doc, str) for doc in data):
            return "".join(data).encode("utf-8")
        return b"".join(
            doc.encode("utf-8") if isinstance(doc, str) else doc for doc in data
        )
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


class BPETokenizer:
    """
    Byte-pair-encoding tokenizer that merges only inside pretokenized words.

    Input is split into runs of ASCII alphanumerics and single other bytes,
    optionally closed by an end-of-word marker, and merge rules learned by
    :meth:`build` are replayed by rank during :meth:`encode`.

    A tokenizer is created empty and becomes usable once :meth:`build` or
    :meth:`load_from_binary` completes. After that its state is read-only
    until the next build or load replaces it.
    """

    def __init__(self, config: BPEConfig | None = None) -> None:
        """
        Initialize an unbuilt tokenizer.

        :raises VocabularyError: If the configured vocab size is below 256.
        """
        self.config: BPEConfig = config if config is not None else BPEConfig()
        if self.config.vocab_size < MIN_VOCAB_SIZE:
            raise VocabularyError(
                f"vocab size must be at least {MIN_VOCAB_SIZE}",
                vocab_size=self.config.vocab_size,
            )
        # token <-> bytes
        self._vocab = ByteVocab()
        # special token kind -> token
        self.special_toks: dict[SpecialToken, Token] = {}
        # byte pair -> merge order
        self.ranks: MergeRanks = {}
        # byte pair -> merge token
        self.merges: MergeTable = {}
        self._built: bool = False

    @property
    def built(self) -> bool:
        """Whether the tokenizer has been built or loaded."""
        return self._built

    def vocab_size(self) -> int:
        """Return the number of tokens actually in the vocabulary."""
        return len(self._vocab)

    def special_token_id(self, kind: SpecialToken | str) -> Token | None:
        """Return the id of a registered special token, or ``None``."""
        return self.special_toks.get(SpecialToken.get(kind))

    def token_bytes(self, tok: Token) -> bytes:
        """
        Return the byte sequence of a single token.

        :raises VocabularyError: If ``tok`` is not in the vocabulary.
        """
        seq = self._vocab.token_bytes(tok)
        if seq is None:
            raise VocabularyError("token not found in vocabulary", invalid_tok=tok)
        return seq

    # Training
    # -----------------------------------------------------------------------

    @measure_time("vocabulary build")
    def build(
        self,
        corpus: Corpus,
        verbose: bool = False,
        show_progress: bool = True,
    ) -> None:
        """
        Learn a vocabulary from ``corpus``, replacing any previous state.

        Ids 0-255 are the raw bytes, followed by the configured special
        tokens in order, followed by merged tokens until the configured
        vocab size is reached or no word has two tokens left. Stopping early
        is not an error.

        :param corpus: Training data as bytes, text, or a list of either.
        :param verbose: Log each learned merge when ``True``.
        :param show_progress: Log periodic progress during training.
        """
        self._built = False
        self._vocab.reset()
        self.special_toks = {}
        for kind in self.config.special_tokens:
            self.special_toks[kind] = self._vocab.intern(kind.repr_bytes)

        words = self._pretokenize(_to_bytes(corpus))
        log.debug(f"pretokenized corpus into {len(words)} words")

        result = train_bpe(
            words,
            self._vocab,
            self.config.vocab_size,
            verbose=verbose,
            show_progress=show_progress,
        )

        if len(self._vocab) < self.config.vocab_size:
            log.warning(
                f"no more pairs to merge after {result.n_merges_completed} merges "
                f"(vocab {len(self._vocab)}/{self.config.vocab_size}) stopping early"
            )

        self.ranks = result.ranks
        self.merges = result.merges
        self._built = True

        log.info(
            f"built vocabulary: {len(self.special_toks)} special tokens, "
            f"{len(self.ranks)} merge rules, {len(self._vocab)} total tokens"
        )

    @deprecated("Use `build()` instead.")
    def train(
        self,
        corpus: Corpus,
        verbose: bool = False,
        show_progress: bool = True,
    ) -> None:
        """Alias of :meth:`build`."""
        self.build(corpus, verbose=verbose, show_progress=show_progress)

    # Encoding / decoding
    # -----------------------------------------------------------------------

    def encode(self, data: bytes | str) -> list[Token]:
        """
        Encode bytes (or UTF-8 text) into token ids.

        Every word is merged by replaying the learned rules in rank order:
        the earliest-learned pair present is merged everywhere in the word
        until no learned pair remains.

        :raises NotBuiltError: If the tokenizer has not been built yet.
        """
        self._check_built("encode")

        tokens: list[Token] = []
        for word in self._pretokenize(_to_bytes(data)):
            tokens.extend(self._encode_word(word))
        return tokens

    def encode_batch(self, texts: list[bytes] | list[str]) -> list[list[Token]]:
        """Encode each input independently, preserving order."""
        self._check_built("encode")
        return [self.encode(text) for text in texts]

    def decode(self, tokens: list[Token], skip_special_tokens: bool = False) -> bytes:
        """
        Decode token ids into the concatenation of their byte sequences.

        With ``skip_special_tokens`` registered special tokens are dropped and
        the end-of-word marker is stripped from merged tokens that absorbed
        it, which gives back the raw input bytes.

        :param skip_special_tokens: Drop special tokens and end-of-word markers.
        :raises NotBuiltError: If the tokenizer has not been built yet.
        :raises VocabularyError: If any token id is not in the vocabulary.
        """
        self._check_built("decode")

        skipped: set[Token] = set()
        eow_bytes = b""
        if skip_special_tokens:
            skipped = set(self.special_toks.values())
            if SpecialToken.EOW in self.special_toks:
                eow_bytes = SpecialToken.EOW.repr_bytes

        parts: list[bytes] = []
        for tok in tokens:
            seq = self._vocab.token_bytes(tok)
            if seq is None:
                raise VocabularyError("token not found in vocabulary", invalid_tok=tok)
            if tok in skipped:
                continue
            # the marker closes every word, so it can only be a suffix
            if eow_bytes:
                seq = seq.removesuffix(eow_bytes)
            parts.append(seq)
        return b"".join(parts)

    def decode_text(
        self,
        tokens: list[Token],
        errors: str = "replace",
        skip_special_tokens: bool = False,
    ) -> str:
        """
        Decode token ids into text.

        :param errors: How to handle invalid UTF-8, as in :meth:`bytes.decode`.
        """
        return self.decode(tokens, skip_special_tokens=skip_special_tokens).decode(
            "utf-8", errors=errors
        )

    def decode_batch(
        self, token_batch: list[list[Token]], skip_special_tokens: bool = False
    ) -> list[bytes]:
        """Decode each token sequence independently, preserving order."""
        self._check_built("decode")
        return [
            self.decode(tokens, skip_special_tokens=skip_special_tokens)
            for tokens in token_batch
        ]

    # Persistence
    # -----------------------------------------------------------------------

    def save_to_binary(self, path: str | Path) -> None:
        """
        Write the full tokenizer state to a binary model file.

        Parent directories are created as needed.

        :raises NotBuiltError: If the tokenizer has not been built yet.
        :raises OSError: If the file cannot be written.
        """
        self._check_built("save")

        model_path = Path(path)
        model_path.parent.mkdir(parents=True, exist_ok=True)

        log.info(f"saving tokenizer to {model_path}")
        log.debug(
            f"saving {len(self._vocab)} tokens, {len(self.special_toks)} special tokens "
            f"and {len(self.ranks)} merge rules"
        )

        state = ModelState(
            vocab_size=self.config.vocab_size,
            config_specials=list(self.config.special_tokens),
            id2bytes=list(self._vocab),
            specials=self.special_toks,
            ranks=self.ranks,
            merges=self.merges,
        )
        with model_path.open("wb") as f:
            write_model(f, state)

        log.info("tokenizer saved successfully")

    def load_from_binary(self, path: str | Path) -> None:
        """
        Replace this tokenizer's state with a binary model file.

        The bytes -> id table is rebuilt from the stored vocabulary and the
        tokenizer is marked as built.

        :raises ModelLoadError: If the file is missing, unreadable, truncated or inconsistent.
        :raises SpecialTokenError: If the file holds an unknown special token tag.
        """
        model_path = Path(path)

        if not model_path.exists():
            raise ModelLoadError("model filepath does not exist", model_path=str(model_path))

        log.info(f"loading model from {model_path}")

        try:
            with model_path.open("rb") as f:
                state = read_model(f, model_path=str(model_path))
        except OSError as e:
            raise ModelLoadError("failed to read model", model_path=str(model_path)) from e

        try:
            config = BPEConfig(
                vocab_size=state.vocab_size, special_tokens=state.config_specials
            )
        except VocabularyError as e:
            raise ModelLoadError("invalid configuration", model_path=str(model_path)) from e

        vocab = ByteVocab()
        for idx, seq in enumerate(state.id2bytes):
            if vocab.intern(seq) != idx:
                raise ModelLoadError(
                    f"duplicate vocabulary entry for token {idx}",
                    model_path=str(model_path),
                )

        n_vocab = len(vocab)
        referenced = list(state.specials.values())
        for (tok_a, tok_b), mtok in state.merges.items():
            referenced.extend((tok_a, tok_b, mtok))
        for tok_a, tok_b in state.ranks:
            referenced.extend((tok_a, tok_b))
        if any(tok >= n_vocab for tok in referenced):
            raise ModelLoadError(
                "token id out of vocabulary range", model_path=str(model_path)
            )
        if state.ranks.keys() != state.merges.keys():
            raise ModelLoadError(
                "merge ranks and merge table disagree", model_path=str(model_path)
            )

        # Atomically update tokenizer state after successful read.
        self.config = config
        self._vocab = vocab
        self.special_toks = state.specials
        self.ranks = state.ranks
        self.merges = state.merges
        self._built = True

        log.info(
            f"model loaded successfully: {len(self.special_toks)} special tokens, "
            f"{len(self.ranks)} merge rules, {len(self._vocab)} total tokens"
        )

    def save_vocab(self, path: str | Path) -> None:
        """
        Write a human-readable listing of the vocabulary.

        One line per token id; merged tokens show the pair they were first
        learned from and special tokens are prefixed with ``ST``.

        :raises NotBuiltError: If the tokenizer has not been built yet.
        """
        self._check_built("save")

        vocab_path = Path(path)
        if not vocab_path.suffix:
            vocab_path = vocab_path.with_suffix(VOCAB_SUFFIX)
        vocab_path.parent.mkdir(parents=True, exist_ok=True)

        log.debug(f"saving vocab to {vocab_path}")

        # several pairs can resolve to one token; show the earliest
        inverted_merges: dict[Token, tuple[Token, Token]] = {}
        for pair, _ in sorted(self.ranks.items(), key=lambda x: x[1]):
            inverted_merges.setdefault(self.merges[pair], pair)
        special_ids = set(self.special_toks.values())

        with vocab_path.open("w", encoding="utf-8", newline="\n") as f:
            for tok, seq in enumerate(self._vocab):
                subword = render_bytes(seq)
                if tok in special_ids:
                    f.write(f"ST [{tok}] {subword}\n")
                elif tok in inverted_merges:
                    ctok0, ctok1 = inverted_merges[tok]
                    subword0 = render_bytes(self.token_bytes(ctok0))
                    subword1 = render_bytes(self.token_bytes(ctok1))
                    f.write(f"[{tok}] [{subword0}][{subword1}] -> {subword}\n")
                else:
                    # one of base 256 tokens: no merging
                    f.write(f"[{tok}] {subword}\n")

    # Internals
    # -----------------------------------------------------------------------

    def _check_built(self, operation: str) -> None:
        if not self._built:
            raise NotBuiltError(
                f"{self.__class__.__name__} must be built before use",
                operation=operation,
            )

    def _pretokenize(self, data: bytes) -> list[Word]:
        return pretokenize(
            data,
            eow=self.special_toks.get(SpecialToken.EOW),
            eos=self.special_toks.get(SpecialToken.EOS),
        )

    def _encode_word(self, word: Word) -> Word:
        while len(word) >= 2:
            pair = lowest_rank_pair(word, self.ranks)
            if pair is None:
                break
            word = merge_pair(word, pair, self.merges[pair])
        return word


__all__ = ["BPETokenizer", "Corpus"]
