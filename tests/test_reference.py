"""Compatibility tests against the real cl100k_base vocabulary via tiktoken."""

import pytest

from ranktok import DisallowedSpecialTokenError, TokenPattern, Tokenizer

tiktoken = pytest.importorskip("tiktoken")


@pytest.fixture(scope="module")
def reference():
    """Return tiktoken's cl100k_base encoding; skip when its ranks cannot be fetched."""
    try:
        return tiktoken.get_encoding("cl100k_base")
    except Exception as e:
        pytest.skip(f"cl100k_base ranks unavailable: {e}")


@pytest.fixture(scope="module")
def cl100k(reference) -> Tokenizer:
    return Tokenizer(
        TokenPattern.GPT4.value,
        reference._mergeable_ranks,
        reference._special_tokens,
        name="cl100k_base",
    )


def test_custom_allowed_set(cl100k):
    ids = cl100k.encode("Some Text<|endofprompt|>", allowed_special=["<|endofprompt|>"])
    assert ids == [8538, 2991, 100276]


def test_default_disallows_specials(cl100k):
    with pytest.raises(DisallowedSpecialTokenError):
        cl100k.encode("Some Text<|endofprompt|>")


def test_disallowed_plain_word(cl100k):
    with pytest.raises(DisallowedSpecialTokenError):
        cl100k.encode("Some Text", disallowed_special=["Some"])


@pytest.mark.parametrize(
    "text",
    [
        "hello world",
        "The quick brown fox jumps over the lazy dog.",
        "def f(x):\n    return x ** 2\n",
        "1234567 apples, 89 pears",
        "café naïve 日本語 🎉",
    ],
)
def test_matches_tiktoken(reference, text):
    """Ids agree with tiktoken when both use the same split pattern."""
    tok = Tokenizer(reference._pat_str, reference._mergeable_ranks, reference._special_tokens)
    assert tok.encode(text) == reference.encode(text)
    assert tok.decode(tok.encode(text)) == text
