"""Unit tests for WordTok tokenizer build, encode/decode, edge cases, and serialization."""

import logging

import pytest

import wordtok as wtok
from wordtok import BPEConfig, SpecialToken
from wordtok.errors import (
    ModelLoadError,
    NotBuiltError,
    SpecialTokenError,
    VocabularyError,
)


CORPUS = b"hello world, hello there! the world is low and lower, the lowest."


# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def plain_tokenizer():
    """Return a built tokenizer without special tokens."""
    tok = wtok.get_tokenizer(320, special_tokens=[])
    tok.build(CORPUS)
    return tok


@pytest.fixture
def marked_tokenizer():
    """Return a built tokenizer with end-of-word and end-of-sequence markers."""
    tok = wtok.get_tokenizer(320, special_tokens=["eos", "unk", "eow"])
    tok.build(CORPUS)
    return tok


# Configuration
# ---------------------------------------------------------------------------


def test_vocab_size_below_256_raises():
    """Configuration rejects vocabularies that cannot hold every byte."""
    with pytest.raises(VocabularyError):
        BPEConfig(vocab_size=255)
    with pytest.raises(VocabularyError):
        wtok.get_tokenizer(10)


def test_vocab_size_256_is_allowed():
    """A vocabulary of exactly 256 is valid and learns no merges."""
    tok = wtok.get_tokenizer(256, special_tokens=[])
    tok.build(b"aaaa")
    assert tok.vocab_size() == 256
    assert tok.ranks == {}


def test_special_token_names_are_normalised():
    """Special tokens may be given by name in any case."""
    config = BPEConfig(vocab_size=300, special_tokens=["EOW", SpecialToken.EOS])
    assert config.special_tokens == [SpecialToken.EOW, SpecialToken.EOS]


def test_unknown_special_token_raises():
    """Unknown special token names are rejected."""
    with pytest.raises(SpecialTokenError):
        wtok.get_tokenizer(300, special_tokens=["bos"])


def test_mutated_config_is_rechecked():
    """A config whose size was lowered after validation is still rejected."""
    config = BPEConfig(vocab_size=300)
    config.vocab_size = 10
    with pytest.raises(VocabularyError):
        wtok.BPETokenizer(config)


def test_default_config():
    """Defaults register only the end-of-sequence token."""
    config = BPEConfig()
    assert config.vocab_size == 50257
    assert config.special_tokens == [SpecialToken.EOS]


# Not built
# ---------------------------------------------------------------------------


def test_encode_before_build_raises():
    tok = wtok.get_tokenizer(300)
    with pytest.raises(NotBuiltError):
        tok.encode(b"hello")


def test_decode_before_build_raises():
    tok = wtok.get_tokenizer(300)
    with pytest.raises(NotBuiltError):
        tok.decode([0, 1, 2])


def test_save_before_build_raises(tmp_path):
    tok = wtok.get_tokenizer(300)
    with pytest.raises(NotBuiltError):
        tok.save_to_binary(tmp_path / "tok.bin")
    with pytest.raises(NotBuiltError):
        tok.save_vocab(tmp_path / "tok.vocab")
    assert not (tmp_path / "tok.bin").exists()


def test_built_flag():
    tok = wtok.get_tokenizer(300)
    assert not tok.built
    tok.build(b"")
    assert tok.built


# Build
# ---------------------------------------------------------------------------


def test_build_repeated_pair_scenario():
    """A run of one byte merges into doubling tokens until no pair is left."""
    tok = wtok.get_tokenizer(260, special_tokens=["eos"])
    tok.build(b"aaaa")

    assert tok.special_token_id("eos") == 256
    assert tok.token_bytes(256) == b"<|eos|>"
    assert tok.ranks == {(97, 97): 0, (257, 257): 1}
    assert tok.merges == {(97, 97): 257, (257, 257): 258}
    assert tok.token_bytes(257) == b"aa"
    assert tok.token_bytes(258) == b"aaaa"
    assert tok.vocab_size() == 259


def test_build_stops_at_vocab_size():
    """No merges are learned once the vocab size target is reached."""
    tok = wtok.get_tokenizer(257, special_tokens=["eos"])
    tok.build(b"aaaa")
    assert tok.vocab_size() == 257
    assert tok.ranks == {}
    assert tok.encode(b"ab") == [97, 98, 256]


def test_build_early_stop_logs_warning(caplog):
    tok = wtok.get_tokenizer(300, special_tokens=[])
    with caplog.at_level(logging.WARNING, logger="wordtok"):
        tok.build(b"aaaa")
    assert tok.built
    assert "stopping early" in caplog.text


def test_build_verbose_logs_merges(caplog):
    tok = wtok.get_tokenizer(258, special_tokens=["eos"])
    with caplog.at_level(logging.INFO, logger="wordtok"):
        tok.build(b"aa", verbose=True)
    assert "merge 1/1: (97, 97) -> 257" in caplog.text


def test_build_logs_elapsed_time(caplog):
    tok = wtok.get_tokenizer(260, special_tokens=["eos"])
    with caplog.at_level(logging.INFO, logger="wordtok"):
        tok.build(b"aaaa")
    assert "vocabulary build completed in" in caplog.text
    assert "(vocab size: 259)" in caplog.text


def test_special_tokens_registered_in_order():
    tok = wtok.get_tokenizer(300, special_tokens=["eow", "unk", "eos"])
    tok.build(b"")
    assert tok.special_toks == {
        SpecialToken.EOW: 256,
        SpecialToken.UNK: 257,
        SpecialToken.EOS: 258,
    }
    assert tok.special_token_id(SpecialToken.UNK) == 257


def test_absent_special_token_id_is_none(plain_tokenizer):
    assert plain_tokenizer.special_token_id("eos") is None


def test_vocab_size_invariant():
    """Vocabulary is seed bytes plus specials plus one id per merge."""
    tok = wtok.get_tokenizer(400, special_tokens=["eos", "eow"])
    tok.build(b"aaaa aaaaaaaa")
    assert tok.vocab_size() <= 400
    assert tok.vocab_size() == 256 + 2 + len(tok.ranks)


def test_vocab_size_never_exceeds_target(marked_tokenizer):
    assert marked_tokenizer.vocab_size() <= marked_tokenizer.config.vocab_size


def test_ranks_are_gap_free(marked_tokenizer):
    """Merge ranks count up from zero without gaps or repeats."""
    ranks = sorted(marked_tokenizer.ranks.values())
    assert ranks == list(range(len(ranks)))
    assert marked_tokenizer.ranks.keys() == marked_tokenizer.merges.keys()


def test_no_merges_across_words():
    """Pairs spanning a word boundary are never learned."""
    tok = wtok.get_tokenizer(300, special_tokens=[])
    tok.build(b"a.a.a.a.")
    assert tok.ranks == {}
    assert tok.vocab_size() == 256


def test_rebuild_replaces_state():
    tok = wtok.get_tokenizer(300, special_tokens=["eos"])
    tok.build(b"aaaa")
    assert tok.ranks
    tok.build(b"")
    assert tok.ranks == {}
    assert tok.merges == {}
    assert tok.vocab_size() == 257


def test_build_accepts_text_and_lists():
    tok = wtok.get_tokenizer(300, special_tokens=[])
    tok.build(["aa", "aa"])
    assert tok.token_bytes(256) == b"aa"
    tok.build([b"bb", b"bb"])
    assert tok.token_bytes(256) == b"bb"


def test_train_alias_is_deprecated():
    tok = wtok.get_tokenizer(300, special_tokens=[])
    with pytest.deprecated_call():
        tok.train(b"aaaa")
    assert tok.built


# Encode / decode
# ---------------------------------------------------------------------------


def test_encode_replays_rank_order():
    """Encoding applies learned merges earliest-first within each word."""
    tok = wtok.get_tokenizer(260, special_tokens=[])
    tok.build(b"aaaa")
    assert tok.encode(b"aaaaaa") == [257, 256]
    assert tok.encode(b"aaa") == [256, 97]


def test_encode_appends_eos(marked_tokenizer):
    eos = marked_tokenizer.special_token_id("eos")
    tokens = marked_tokenizer.encode(b"hello")
    assert tokens[-1] == eos


def test_encode_empty_input(plain_tokenizer, marked_tokenizer):
    """Empty input gives no tokens, or only the end-of-sequence token."""
    assert plain_tokenizer.encode(b"") == []
    assert marked_tokenizer.encode(b"") == [marked_tokenizer.special_token_id("eos")]


def test_encode_decode_roundtrip(plain_tokenizer):
    """Encode then decode returns the original bytes without markers."""
    for text in [CORPUS, b"the lowest world", b"  \n\t", b"x", b"\x00\xff\x80"]:
        assert plain_tokenizer.decode(plain_tokenizer.encode(text)) == text


def test_encode_decode_roundtrip_unicode(plain_tokenizer):
    """Multi-byte characters survive as individual byte tokens."""
    text = "café naïve 日本語"
    tokens = plain_tokenizer.encode(text)
    assert plain_tokenizer.decode_text(tokens) == text


def test_decode_with_markers(marked_tokenizer):
    """Markers decode to their fixed bytes unless skipped."""
    tokens = marked_tokenizer.encode(b"hello world")
    raw = marked_tokenizer.decode(tokens)
    assert raw.endswith(b"<|eos|>")
    assert b"<|eow|>" in raw
    assert marked_tokenizer.decode(tokens, skip_special_tokens=True) == b"hello world"


def test_repetitive_text_creates_merges(plain_tokenizer):
    """Text seen during training encodes into fewer tokens than bytes."""
    tokens = plain_tokenizer.encode(b"hello world hello")
    assert len(tokens) < len(b"hello world hello")


def test_encoded_ids_are_valid(marked_tokenizer):
    tokens = marked_tokenizer.encode(CORPUS + b" unseen words \xe2\x82\xac")
    assert all(0 <= tok < marked_tokenizer.vocab_size() for tok in tokens)


def test_decode_unknown_token_raises(plain_tokenizer):
    with pytest.raises(VocabularyError) as excinfo:
        plain_tokenizer.decode([9999])
    assert excinfo.value.invalid_tok == 9999


def test_decode_negative_token_raises(plain_tokenizer):
    with pytest.raises(VocabularyError):
        plain_tokenizer.decode([-1])


def test_decode_is_pure(marked_tokenizer):
    tokens = marked_tokenizer.encode(CORPUS)
    assert marked_tokenizer.decode(tokens) == marked_tokenizer.decode(tokens)


def test_encode_batch_decode_batch(marked_tokenizer):
    """Batch encode and decode match single-input results."""
    texts = [b"First.", b"Second document.", b""]
    encoded = marked_tokenizer.encode_batch(texts)
    decoded = marked_tokenizer.decode_batch(encoded, skip_special_tokens=True)

    for i, text in enumerate(texts):
        assert encoded[i] == marked_tokenizer.encode(text)
        assert decoded[i] == text


# Save and load round-trip
# ---------------------------------------------------------------------------


def test_save_load_roundtrip(marked_tokenizer, tmp_path):
    """Save and load preserves tokenizer state and behaviour."""
    path = tmp_path / "models" / "tok.bin"
    marked_tokenizer.save_to_binary(path)

    loaded = wtok.from_pretrained(path)
    assert loaded.built
    assert loaded.config == marked_tokenizer.config
    assert loaded.vocab_size() == marked_tokenizer.vocab_size()
    assert loaded.special_toks == marked_tokenizer.special_toks
    assert loaded.ranks == marked_tokenizer.ranks
    assert loaded.merges == marked_tokenizer.merges

    for text in [CORPUS, b"test string", b"", "日本".encode("utf-8")]:
        tokens = marked_tokenizer.encode(text)
        assert loaded.encode(text) == tokens
        assert loaded.decode(tokens) == marked_tokenizer.decode(tokens)


def test_save_is_reproducible(marked_tokenizer, tmp_path):
    """A loaded tokenizer saves back to identical bytes."""
    first = tmp_path / "first.bin"
    second = tmp_path / "second.bin"
    marked_tokenizer.save_to_binary(first)
    wtok.from_pretrained(first).save_to_binary(second)
    assert first.read_bytes() == second.read_bytes()


def test_save_load_empty_corpus(tmp_path):
    """A tokenizer without merges survives a save/load round-trip."""
    tok = wtok.get_tokenizer(300, special_tokens=["eos"])
    tok.build(b"")
    path = tmp_path / "empty.bin"
    tok.save_to_binary(path)

    loaded = wtok.from_pretrained(path)
    assert loaded.encode(b"hi") == tok.encode(b"hi") == [104, 105, 256]
    assert loaded.vocab_size() == 257


def test_load_replaces_existing_state(marked_tokenizer, tmp_path):
    path = tmp_path / "tok.bin"
    marked_tokenizer.save_to_binary(path)

    tok = wtok.get_tokenizer(260, special_tokens=[])
    tok.build(b"aaaa")
    tok.load_from_binary(path)
    assert tok.config.vocab_size == 320
    assert tok.encode(CORPUS) == marked_tokenizer.encode(CORPUS)


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(ModelLoadError):
        wtok.from_pretrained(tmp_path / "missing.bin")


def test_load_unreadable_path_raises(tmp_path):
    """Read failures surface as load errors chained to the OS error."""
    with pytest.raises(ModelLoadError) as excinfo:
        wtok.from_pretrained(tmp_path)
    assert isinstance(excinfo.value.__cause__, OSError)


def test_save_unwritable_path_raises(marked_tokenizer, tmp_path):
    """Write failures propagate as OS errors."""
    blocker = tmp_path / "not_a_dir"
    blocker.write_bytes(b"")
    with pytest.raises(OSError):
        marked_tokenizer.save_to_binary(blocker / "tok.bin")


def test_save_vocab(tmp_path):
    """The vocab dump lists bytes, specials and merge derivations."""
    tok = wtok.get_tokenizer(258, special_tokens=["eos"])
    tok.build(b"aa")
    tok.save_vocab(tmp_path / "tok")

    lines = (tmp_path / "tok.vocab").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 258
    assert lines[97] == "[97] a"
    assert lines[10] == "[10] \\u000a"
    assert lines[200] == "[200] \\xc8"
    assert lines[256] == "ST [256] <|eos|>"
    assert lines[257] == "[257] [a][a] -> aa"
