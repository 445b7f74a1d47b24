"""Shared fixtures: a small hand-built vocabulary with known merges."""

import pytest

from ranktok import MergeRankTable, TokenPattern, Tokenizer

ENDOFTEXT = "<|endoftext|>"
ENDOFPROMPT = "<|endofprompt|>"

# merged entries on top of the 256 single bytes, in merge order
MERGES: dict[bytes, int] = {
    b"he": 256,
    b"ll": 257,
    b"hell": 258,
    b"hello": 259,
    b" w": 260,
    b"or": 261,
    b" wor": 262,
    b"ld": 263,
    b" world": 264,
}

SPECIALS: dict[str, int] = {ENDOFTEXT: 265, ENDOFPROMPT: 266}

N_VOCAB = 256 + len(MERGES) + len(SPECIALS)


def build_ranks() -> dict[bytes, int]:
    ranks = {bytes([b]): b for b in range(256)}
    ranks.update(MERGES)
    return ranks


@pytest.fixture
def ranks() -> dict[bytes, int]:
    """Return the toy byte sequence -> rank mapping."""
    return build_ranks()


@pytest.fixture
def rank_table(ranks) -> MergeRankTable:
    """Return the toy vocabulary as a rank table."""
    return MergeRankTable(ranks)


@pytest.fixture
def tokenizer(ranks) -> Tokenizer:
    """Return a tokenizer over the toy vocabulary using the GPT-2 split pattern."""
    return Tokenizer(TokenPattern.GPT2.value, ranks, SPECIALS, explicit_n_vocab=N_VOCAB)
