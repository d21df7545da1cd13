"""Train a wordtok tokenizer on a dataset and save the binary model."""

import argparse
import logging
import time
from pathlib import Path

import wordtok as wtok

log = logging.getLogger("wordtok.train")


def format_bytes(num_bytes: float) -> str:
    """Format bytes to human-readable string."""
    for unit in ["B", "KB", "MB", "GB"]:
        if num_bytes < 1024.0:
            return f"{num_bytes:.2f} {unit}"
        num_bytes /= 1024.0
    return f"{num_bytes:.2f} TB"


def load_corpus(args: argparse.Namespace) -> bytes:
    """Read the training corpus from a local file or a Hugging Face dataset."""
    if args.file is not None:
        return Path(args.file).read_bytes()

    # only needed for dataset downloads
    from datasets import load_dataset

    ds = load_dataset(args.dataset, split="train")
    rows = ds[: args.rows][args.column] if args.rows else ds[:][args.column]
    return "".join(rows).encode("utf-8")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    src = parser.add_mutually_exclusive_group()
    src.add_argument("--file", help="train on a local file instead of a dataset")
    src.add_argument("--dataset", default="stevez80/Sci-Fi-Books-gutenberg")
    parser.add_argument("--column", default="text")
    parser.add_argument("--rows", type=int, default=1000, help="0 for all rows")
    parser.add_argument("--vocab-size", type=int, default=10_000)
    parser.add_argument(
        "--special",
        nargs="*",
        default=["eos"],
        choices=wtok.list_special_tokens(),
    )
    parser.add_argument("--out", default="models/wordtok.bin")
    parser.add_argument("--verbose", action="store_true", help="log every merge")
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    corpus = load_corpus(args)
    log.info(f"corpus size: {format_bytes(len(corpus))}")

    tok = wtok.get_tokenizer(args.vocab_size, special_tokens=args.special)
    tok.build(corpus, verbose=args.verbose)

    start = time.perf_counter()
    encoded = tok.encode(corpus)
    elapsed = time.perf_counter() - start
    log.info(
        f"encoded {len(corpus):,} bytes into {len(encoded):,} tokens "
        f"in {elapsed:.2f}s (ratio {len(corpus) / max(1, len(encoded)):.2f}x)"
    )

    out = Path(args.out)
    tok.save_to_binary(out)
    tok.save_vocab(out.with_suffix(".vocab"))


if __name__ == "__main__":
    main()
