"""
Core Byte Pair Encoding (BPE) operations on pretokenized words.
"""

from collections import Counter
from collections.abc import Iterable

from .types import MergeRanks, Token, TokenPair, Word


def pair_counts(words: Iterable[Word]) -> Counter[TokenPair]:
    """
    Count every adjacent token pair inside each word.

    Pairs never span two words, and overlapping windows are all counted,
    so ``[a, a, a]`` contributes ``(a, a)`` twice.
    """
    counts: Counter[TokenPair] = Counter()
    for word in words:
        counts.update(zip(word, word[1:]))
    return counts


def best_pair(counts: Counter[TokenPair]) -> TokenPair | None:
    """
    Return the most frequent pair, or ``None`` if there are no pairs.

    Equal counts are resolved in favour of the smallest pair, comparing the
    left token id first, so training is deterministic for a given corpus.
    """
    if not counts:
        return None
    pair, _ = min(counts.items(), key=lambda item: (-item[1], item[0]))
    return pair


def merge_pair(word: Word, target: TokenPair, new_tok: Token) -> Word:
    """
    Merge all occurrences of a target token pair into a single new token.

    One left-to-right pass: occurrences do not overlap, and tokens produced
    by this pass are never merged again within it.
    """
    if len(word) < 2:
        return word

    newtoks: Word = []

    i = 0
    n = len(word)
    while i < n:
        # check if we can form a pair and it matches the target
        if i < n - 1 and word[i] == target[0] and word[i + 1] == target[1]:
            newtoks.append(new_tok)
            i += 2
        else:
            newtoks.append(word[i])
            i += 1

    return newtoks


def lowest_rank_pair(word: Word, ranks: MergeRanks) -> TokenPair | None:
    """Return the adjacent pair of ``word`` learned earliest, or ``None``."""
    best: TokenPair | None = None
    best_rank = 0
    for pair in zip(word, word[1:]):
        rank = ranks.get(pair)
        if rank is not None and (best is None or rank < best_rank):
            best, best_rank = pair, rank
    return best


__all__ = ["pair_counts", "best_pair", "merge_pair", "lowest_rank_pair"]
