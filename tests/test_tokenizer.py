"""Unit tests for Tokenizer construction, encode/decode and special token policies."""

from concurrent.futures import ThreadPoolExecutor

import pytest

import ranktok.tokenizer as tokenizer_mod
from ranktok import (
    AllowExplicit,
    ConstructionError,
    DisallowExplicit,
    DisallowedSpecialTokenError,
    TokenPattern,
    TokenizationError,
    Tokenizer,
)

from conftest import ENDOFPROMPT, ENDOFTEXT, N_VOCAB, SPECIALS, build_ranks


# Construction
# ---------------------------------------------------------------------------


def test_construction_properties(tokenizer):
    assert tokenizer.max_token_value == 266
    assert tokenizer.n_vocab == N_VOCAB
    assert tokenizer.special_tokens_set == frozenset(SPECIALS)
    assert tokenizer.pat == TokenPattern.GPT2.value


def test_construction_count_mismatch_raises():
    with pytest.raises(ConstructionError) as exc_info:
        Tokenizer(TokenPattern.GPT2.value, build_ranks(), SPECIALS, explicit_n_vocab=N_VOCAB + 1)
    assert exc_info.value.expected == N_VOCAB + 1
    assert exc_info.value.actual == N_VOCAB


def test_construction_max_rank_mismatch_raises():
    """Counts agree but the specials leave a gap in the id range."""
    specials = {ENDOFTEXT: 265, ENDOFPROMPT: 300}
    with pytest.raises(ConstructionError):
        Tokenizer(TokenPattern.GPT2.value, build_ranks(), specials, explicit_n_vocab=N_VOCAB)


def test_construction_without_explicit_size_skips_checks():
    tok = Tokenizer(TokenPattern.GPT2.value, build_ranks(), {ENDOFTEXT: 50_000})
    assert tok.max_token_value == 50_000


def test_empty_tables_are_valid():
    tok = Tokenizer(TokenPattern.GPT2.value, None)
    assert tok.max_token_value == 0
    assert tok.encode("") == []
    assert tok.decode([1, 2, 3]) == ""


def test_empty_special_literal_raises():
    """An empty special literal would match everywhere, so construction rejects it."""
    with pytest.raises(ConstructionError):
        Tokenizer(TokenPattern.GPT2.value, build_ranks(), {"": 265})


# Encoding
# ---------------------------------------------------------------------------


def test_encode_known_words(tokenizer):
    assert tokenizer.encode("hello world") == [259, 264]


def test_encode_merges_unseen_chunks(tokenizer):
    """'help' is not a vocabulary entry and goes through the merge engine."""
    assert tokenizer.encode("help") == [256, ord("l"), ord("p")]


def test_encode_empty_text(tokenizer):
    assert tokenizer.encode("") == []


def test_encode_allowed_special(tokenizer):
    ids = tokenizer.encode(f"hello{ENDOFTEXT}", allowed_special=[ENDOFTEXT])
    assert ids == [259, 265]


def test_encode_allow_all(tokenizer):
    ids = tokenizer.encode(f"{ENDOFPROMPT}hello{ENDOFTEXT}", allowed_special="all")
    assert ids == [266, 259, 265]


def test_encode_special_at_each_boundary(tokenizer):
    ids = tokenizer.encode(
        f"{ENDOFTEXT}{ENDOFTEXT} world", allowed_special={ENDOFTEXT}
    )
    assert ids == [265, 265, 264]


def test_encode_default_disallows_specials(tokenizer):
    """With no arguments any special literal in the text is rejected."""
    with pytest.raises(DisallowedSpecialTokenError) as exc_info:
        tokenizer.encode(f"hello{ENDOFTEXT}")
    assert exc_info.value.token == ENDOFTEXT


def test_encode_default_disallows_specials_not_allowed(tokenizer):
    """Allowing one special still rejects the others by default."""
    with pytest.raises(DisallowedSpecialTokenError) as exc_info:
        tokenizer.encode(f"{ENDOFTEXT}{ENDOFPROMPT}", allowed_special=[ENDOFTEXT])
    assert exc_info.value.token == ENDOFPROMPT


def test_encode_disallow_arbitrary_literal(tokenizer):
    """Disallowed literals need not be registered special tokens."""
    with pytest.raises(DisallowedSpecialTokenError) as exc_info:
        tokenizer.encode("hello world", disallowed_special=["world"])
    assert exc_info.value.token == "world"


def test_encode_disallow_all_wildcard(tokenizer):
    with pytest.raises(DisallowedSpecialTokenError):
        tokenizer.encode(f"x{ENDOFPROMPT}", disallowed_special=["all"])


def test_encode_empty_disallow_encodes_specials_as_text(tokenizer):
    """An empty disallow list lets special literals through as ordinary text."""
    text = f"hello{ENDOFTEXT}"
    ids = tokenizer.encode(text, disallowed_special=[])
    assert 265 not in ids
    assert ids[0] == 259
    assert tokenizer.decode(ids) == text


def test_encode_not_allowed_special_is_plain_text(tokenizer):
    """A special that is neither allowed nor disallowed encodes as its bytes."""
    text = f"{ENDOFPROMPT}{ENDOFTEXT}"
    ids = tokenizer.encode(text, allowed_special=[ENDOFTEXT], disallowed_special=[])
    assert ids[-1] == 265
    assert 266 not in ids
    assert tokenizer.decode(ids) == text


def test_encode_accepts_policy_objects(tokenizer):
    ids = tokenizer.encode(
        f"hello{ENDOFTEXT}",
        allowed_special=AllowExplicit([ENDOFTEXT]),
        disallowed_special=DisallowExplicit([]),
    )
    assert ids == [259, 265]


def test_encode_ordinary_ignores_specials(tokenizer):
    text = f"hello{ENDOFTEXT}"
    assert tokenizer.encode_ordinary(text) == tokenizer.encode(text, disallowed_special=[])


def test_encode_incomplete_vocabulary_raises():
    """Text needing bytes the vocabulary lacks fails instead of dropping content."""
    tok = Tokenizer(TokenPattern.GPT2.value, {b"a": 0, b"b": 1})
    with pytest.raises(TokenizationError):
        tok.encode("abc")


@pytest.mark.parametrize("encode", ["encode", "encode_ordinary"])
def test_encode_lone_surrogate_becomes_replacement_char(tokenizer, encode):
    """A lone surrogate encodes as the UTF-8 bytes of U+FFFD instead of raising."""
    ids = getattr(tokenizer, encode)("a\ud800b")
    assert ids == [ord("a"), 0xEF, 0xBF, 0xBD, ord("b")]
    assert tokenizer.decode(ids) == "a\ufffdb"


def test_default_disallow_reuses_compiled_special_pattern(tokenizer, monkeypatch):
    """The default policy scans with the pattern built at construction."""
    calls = []
    original = tokenizer_mod.literal_alternation

    def counting(literals):
        calls.append(frozenset(literals))
        return original(literals)

    monkeypatch.setattr(tokenizer_mod, "literal_alternation", counting)
    with pytest.raises(DisallowedSpecialTokenError):
        tokenizer.encode(f"hello{ENDOFTEXT}")
    assert tokenizer.encode("hello world") == [259, 264]
    assert calls == []

    # a narrower disallow set still gets its own pattern
    with pytest.raises(DisallowedSpecialTokenError):
        tokenizer.encode(f"x{ENDOFPROMPT}", allowed_special=[ENDOFTEXT])
    assert calls == [frozenset({ENDOFPROMPT})]


# Decoding
# ---------------------------------------------------------------------------


def test_decode_known_ids(tokenizer):
    assert tokenizer.decode([259, 264]) == "hello world"


def test_decode_special_ids(tokenizer):
    assert tokenizer.decode([259, 265]) == f"hello{ENDOFTEXT}"


def test_decode_skips_unknown_ids(tokenizer):
    assert tokenizer.decode([259, 99_999, 264]) == "hello world"


def test_decode_invalid_utf8_degrades(tokenizer):
    """A lone continuation byte is replaced rather than raising."""
    assert tokenizer.decode([0x80]) == "\ufffd"
    assert tokenizer.decode_bytes([0x80]) == b"\x80"


def test_decode_single_token_bytes(tokenizer):
    assert tokenizer.decode_single_token_bytes(264) == b" world"
    assert tokenizer.decode_single_token_bytes(266) == ENDOFPROMPT.encode("utf-8")
    assert tokenizer.decode_single_token_bytes(-1) is None


def test_vocabulary_wins_over_overlapping_special():
    """Decode prefers the vocabulary when a special shares its rank."""
    tok = Tokenizer(TokenPattern.GPT2.value, build_ranks(), {"<|x|>": 97})
    assert tok.decode([97]) == "a"


# Round trip
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "text",
    [
        "hello world",
        "Hello, world!",
        "   \n\t  ",
        "café naïve 日本語 🎉",
        f"hello{ENDOFTEXT} world{ENDOFPROMPT}",
    ],
)
def test_encode_decode_roundtrip(tokenizer, text):
    ids = tokenizer.encode(text, allowed_special="all")
    assert tokenizer.decode(ids) == text


# Batch and concurrency
# ---------------------------------------------------------------------------


def test_encode_batch_decode_batch(tokenizer):
    texts = ["hello world", f"hi{ENDOFTEXT}", "help"]
    encoded = tokenizer.encode_batch(texts, allowed_special="all", num_workers=3)
    assert encoded == [tokenizer.encode(t, allowed_special="all") for t in texts]
    assert tokenizer.decode_batch(encoded, num_workers=3) == texts


def test_encode_batch_empty(tokenizer):
    assert tokenizer.encode_batch([]) == []
    assert tokenizer.decode_batch([]) == []


def test_encode_batch_propagates_disallowed(tokenizer):
    with pytest.raises(DisallowedSpecialTokenError):
        tokenizer.encode_batch(["ok", f"bad{ENDOFTEXT}"], num_workers=2)


def test_concurrent_encode_is_deterministic(tokenizer):
    """A shared tokenizer yields identical ids from many threads."""
    text = "hello world hello world"
    expected = tokenizer.encode(text)
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: tokenizer.encode(text), range(32)))
    assert all(r == expected for r in results)
