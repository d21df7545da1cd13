"""Standalone BPE training module."""

from dataclasses import dataclass, field
import logging

from ._bpe import best_pair, merge_pair, pair_counts
from ._progress import MergeProgress
from ._vocab import ByteVocab
from .types import MergeRanks, MergeTable, Word

log = logging.getLogger(__name__)


@dataclass
class BPETrainingResult:
    """Results from one BPE training run."""

    ranks: MergeRanks = field(default_factory=dict)
    merges: MergeTable = field(default_factory=dict)
    n_merges_completed: int = 0


def train_bpe(
    words: list[Word],
    vocab: ByteVocab,
    vocab_size: int,
    verbose: bool = False,
    show_progress: bool = True,
) -> BPETrainingResult:
    """
    Learn merge rules from pretokenized words until ``vocab`` reaches ``vocab_size``.

    Each iteration counts adjacent pairs inside words, merges the most
    frequent one everywhere and records it. If the merged byte sequence is
    already interned its existing id is reused, so an iteration may add a
    rule without growing the vocabulary. A pair picked a second time keeps
    the rank of its first selection. Training stops early, without error,
    once no word holds two tokens.

    ``words`` are rewritten in place and ``vocab`` is extended in place.

    :param words: Pretokenized words of token ids.
    :param vocab: Interning table already seeded with bytes and special tokens.
    :param vocab_size: Target number of interned ids.
    :param verbose: Log each learned merge when ``True``.
    :param show_progress: Log periodic progress when ``True`` and progress is enabled.
    :returns: Merge ranks, pair -> token table and number of merge iterations.
    """
    result = BPETrainingResult()
    n_target = max(0, vocab_size - len(vocab))
    progress = MergeProgress(log, n_target, show=show_progress)

    while len(vocab) < vocab_size:
        pair = best_pair(pair_counts(words))
        if pair is None:
            break

        tok_a, tok_b = pair
        # both tokens come from the vocab, so their bytes always exist
        merged = vocab.token_bytes(tok_a) + vocab.token_bytes(tok_b)
        new_tok = vocab.intern(merged)

        if pair not in result.ranks:
            result.ranks[pair] = len(result.ranks)
            result.merges[pair] = new_tok

        for idx, word in enumerate(words):
            words[idx] = merge_pair(word, pair, new_tok)

        result.n_merges_completed += 1

        if verbose:
            log.info(
                "merge %d/%d: %s -> %d",
                result.n_merges_completed,
                n_target,
                pair,
                new_tok,
            )
        else:
            progress.update(result.n_merges_completed, len(vocab), vocab_size)

    return result


__all__ = ["BPETrainingResult", "train_bpe"]
