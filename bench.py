"""Benchmark wordtok build, encode, decode and save/load on synthetic text."""

import argparse
import tempfile
import time
from pathlib import Path

import wordtok as wtok


def format_bytes(num_bytes: float) -> str:
    """Format bytes into human-readable units."""
    for unit in ["B", "KB", "MB", "GB"]:
        if num_bytes < 1024.0:
            return f"{num_bytes:.2f} {unit}"
        num_bytes /= 1024.0
    return f"{num_bytes:.2f} TB"


def make_text(target_kb: int) -> bytes:
    """Build deterministic synthetic text close to target size."""
    target_bytes = target_kb * 1024
    seed = (
        b"The wormhole shimmered above Titan while engines hummed in sync. "
        b"Captain Rao logged coordinates and the archive AI cross-checked stellar drift. "
        b"Quantum relays pulsed, translating static into maps for the next jump. "
    )
    repeat = max(1, target_bytes // len(seed) + 1)
    return (seed * repeat)[:target_bytes]


def measure(name: str, fn, total_bytes: int):
    """Run one benchmark case and print throughput."""
    start = time.perf_counter()
    out = fn()
    elapsed = time.perf_counter() - start
    mbps = total_bytes / elapsed / (1024 * 1024)
    print(f"{name:<20} {elapsed:>10.3f}s  {mbps:>7.2f} MB/s")
    return out


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--size-kb", type=int, default=256, help="Synthetic corpus size.")
    parser.add_argument("--vocab-size", type=int, default=1000)
    parser.add_argument("--special", nargs="*", default=["eos", "eow"])
    args = parser.parse_args()

    wtok.disable_progress()
    text = make_text(args.size_kb)
    print(f"Corpus size: {format_bytes(len(text))}")

    tok = wtok.get_tokenizer(args.vocab_size, special_tokens=args.special)
    measure("build", lambda: tok.build(text), len(text))
    print(f"vocab size: {tok.vocab_size():,} ({len(tok.ranks):,} merge rules)")

    encoded = measure("encode", lambda: tok.encode(text), len(text))
    decoded = measure("decode", lambda: tok.decode(encoded, skip_special_tokens=True), len(text))
    assert decoded == text, "decode(encode(text)) does not match input"
    print(f"compression: {len(text) / len(encoded):.2f}x ({len(encoded):,} tokens)")

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "bench.bin"
        tok.save_to_binary(path)
        print(f"model size: {format_bytes(path.stat().st_size)}")
        loaded = measure("load", lambda: wtok.from_pretrained(path), path.stat().st_size)
        assert loaded.encode(text) == encoded, "loaded tokenizer encodes differently"


if __name__ == "__main__":
    main()
