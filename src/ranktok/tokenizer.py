"""Tokenizer combining rank tables, pre-tokenization and BPE merging."""

import logging
import os
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor

from ._bpe import byte_pair_encode
from .errors import ConstructionError, DisallowedSpecialTokenError
from .pattern import literal_alternation
from .ranks import MergeRankTable, SpecialTokenTable
from .splitter import PretokenizerSplitter
from .strategy import AllowSpec, DisallowSpec, allow_policy, disallow_policy
from .types import Token, TokenBytes

log = logging.getLogger(__name__)


class Tokenizer:
    """
    Byte-level BPE tokenizer over a fixed, pretrained rank table.

    All state is built in the constructor and never mutated afterwards, so a
    single instance can serve concurrent ``encode``/``decode`` calls.

    .. code-block:: python

        tok = Tokenizer(TokenPattern.GPT4, ranks, {"<|endoftext|>": 100257})
        ids = tok.encode("hello<|endoftext|>", allowed_special="all")
        assert tok.decode(ids) == "hello<|endoftext|>"
    """

    def __init__(
        self,
        pattern: str,
        mergeable_ranks: Mapping[TokenBytes, Token] | None,
        special_tokens: Mapping[str, Token] | None = None,
        explicit_n_vocab: int | None = None,
        name: str | None = None,
    ) -> None:
        """
        :param pattern: Regex used to split text before merging.
        :param mergeable_ranks: Byte sequence -> rank vocabulary.
        :param special_tokens: Special literal -> rank mapping.
        :param explicit_n_vocab: Expected total number of tokens, checked when given.
        :param name: Optional encoding name, informational only.
        :raises ConstructionError: If the tables disagree with ``explicit_n_vocab``
                                   or a special token literal is empty.
        :raises PatternError: If ``pattern`` does not compile.
        """
        self.name = name
        self.ranks = MergeRankTable(mergeable_ranks)
        self.special_toks = SpecialTokenTable(special_tokens)
        # an empty literal would match everywhere and stall the special scanner
        if "" in self.special_toks:
            raise ConstructionError("special token literals must be non-empty")
        self.max_token_value: Token = max(
            self.ranks.max_rank(), self.special_toks.max_rank()
        )

        if explicit_n_vocab is not None:
            n_tokens = len(self.ranks) + len(self.special_toks)
            if n_tokens != explicit_n_vocab:
                raise ConstructionError(
                    "number of mergeable and special tokens must equal explicit_n_vocab",
                    expected=explicit_n_vocab,
                    actual=n_tokens,
                )
            if self.max_token_value != explicit_n_vocab - 1:
                raise ConstructionError(
                    "maximum token value must equal explicit_n_vocab - 1",
                    expected=explicit_n_vocab - 1,
                    actual=self.max_token_value,
                )

        self.splitter = PretokenizerSplitter(pattern, self.special_toks.tokens())

        log.debug(
            f"built tokenizer {name or '<unnamed>'}: {len(self.ranks)} mergeable tokens, "
            f"{len(self.special_toks)} special tokens, max token {self.max_token_value}"
        )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name or '<unnamed>'!r}>"

    @property
    def pat(self) -> str:
        """Split pattern this tokenizer was built with."""
        return self.splitter.pat

    @property
    def special_tokens_set(self) -> frozenset[str]:
        """Every configured special token literal."""
        return self.special_toks.tokens()

    @property
    def n_vocab(self) -> int:
        """Number of ids the tokenizer can produce, i.e. ``max_token_value + 1``."""
        return self.max_token_value + 1

    # ---------------------------------------------------------------------------
    # encoding

    def encode(
        self,
        text: str,
        allowed_special: AllowSpec = None,
        disallowed_special: DisallowSpec = None,
    ) -> list[Token]:
        """
        Encode text into a sequence of token ids.

        ``allowed_special`` and ``disallowed_special`` take either a policy
        from :mod:`ranktok.strategy` or a raw collection of literals where
        ``"all"`` is a wildcard. Omitting ``allowed_special`` allows no
        special token. Omitting ``disallowed_special`` rejects every special
        token that is not allowed, whereas an empty collection rejects
        nothing and lets special literals encode as plain text.
        Lone surrogates, which UTF-8 cannot represent, encode as U+FFFD.

        :param text: Text to encode.
        :param allowed_special: Special tokens to emit as their reserved ids.
        :param disallowed_special: Literals whose presence makes encoding fail.
        :returns: Token ids in input order.
        :raises DisallowedSpecialTokenError: If ``text`` contains a disallowed literal.
        :raises TokenizationError: If a merged span is missing from the vocabulary.
        """
        universe = self.special_toks.tokens()
        allowed = allow_policy(allowed_special).resolve(universe)
        disallowed = disallow_policy(disallowed_special).resolve(universe, allowed)

        if disallowed:
            # the default policy with nothing allowed rejects exactly the configured specials
            if disallowed == universe:
                disallowed_pat = self.splitter.special_pat
            else:
                disallowed_pat = literal_alternation(disallowed)
            match = disallowed_pat.search(text)
            if match is not None:
                raise DisallowedSpecialTokenError(match.group(0))

        return self._encode_text(text, allowed)

    def encode_ordinary(self, text: str) -> list[Token]:
        """Encode text treating special token literals as plain text."""
        return self._encode_text(text, frozenset())

    def encode_batch(
        self,
        texts: list[str],
        allowed_special: AllowSpec = None,
        disallowed_special: DisallowSpec = None,
        num_workers: int | None = None,
    ) -> list[list[Token]]:
        """
        Encode many texts concurrently.

        :param num_workers: Thread count; defaults to the CPU count, "0" means 1.
        :returns: Encoded token sequences in input order.
        :raises DisallowedSpecialTokenError: If any text contains a disallowed literal.
        """
        if not texts:
            return []

        workers = _worker_count(num_workers)

        def encode_one(text: str) -> list[Token]:
            return self.encode(text, allowed_special, disallowed_special)

        if workers == 1 or len(texts) == 1:
            return [encode_one(text) for text in texts]

        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(encode_one, texts))

    def _encode_text(self, text: str, allowed: frozenset[str]) -> list[Token]:
        """Encode ``text``, replacing lone surrogates when it is not valid UTF-8."""
        try:
            return self._encode_native(text, allowed)
        except UnicodeEncodeError:
            # lone surrogates cannot be UTF-8 encoded: round-trip through UTF-16
            # so each one becomes U+FFFD, then encode again
            text = text.encode("utf-16", "surrogatepass").decode("utf-16", "replace")
            return self._encode_native(text, allowed)

    def _encode_native(self, text: str, allowed: frozenset[str]) -> list[Token]:
        """Walk ``text`` emitting allowed specials and BPE-encoding everything between them."""
        tokens: list[Token] = []
        start = 0

        while True:
            special = self.splitter.find_next_special(text, start, allowed)
            end = special.start() if special is not None else len(text)

            for chunk in self.splitter.split(text[start:end]):
                piece = chunk.encode("utf-8")
                # whole vocabulary entries skip merging
                rank = self.ranks.lookup_rank(piece)
                if rank is not None:
                    tokens.append(rank)
                else:
                    tokens.extend(byte_pair_encode(piece, self.ranks))

            if special is None:
                break

            tokens.append(self.special_toks.lookup_rank(special.group(0)))
            start = special.end()

        return tokens

    # ---------------------------------------------------------------------------
    # decoding

    def decode_single_token_bytes(self, token: Token) -> TokenBytes | None:
        """Return the bytes of one token id, or ``None`` for an unknown id."""
        seq = self.ranks.lookup_bytes(token)
        if seq is None:
            seq = self.special_toks.lookup_bytes(token)
        return seq

    def decode_bytes(self, tokens: list[Token]) -> bytes:
        """Concatenate token bytes, silently skipping ids in neither table."""
        txt_bytes = []
        for tok in tokens:
            seq = self.decode_single_token_bytes(tok)
            if seq is not None:
                txt_bytes.append(seq)
        return b"".join(txt_bytes)

    def decode(self, tokens: list[Token], errors: str = "replace") -> str:
        """
        Decode token ids back into text.

        Unknown ids are dropped rather than reported, so decoding never fails
        for bad input. Byte runs that are not valid UTF-8 are handled per
        ``errors`` ("replace" by default).

        :param tokens: Token ids to decode.
        :param errors: Codec error handler passed to ``bytes.decode``.
        """
        return self.decode_bytes(tokens).decode("utf-8", errors=errors)

    def decode_batch(
        self,
        token_batch: list[list[Token]],
        errors: str = "replace",
        num_workers: int | None = None,
    ) -> list[str]:
        """Decode many token sequences concurrently, preserving input order."""
        if not token_batch:
            return []

        workers = _worker_count(num_workers)

        def decode_one(tokens: list[Token]) -> str:
            return self.decode(tokens, errors=errors)

        if workers == 1 or len(token_batch) == 1:
            return [decode_one(tokens) for tokens in token_batch]

        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(decode_one, token_batch))


def _worker_count(num_workers: int | None) -> int:
    if num_workers is None:
        return os.cpu_count() or 1
    return max(1, num_workers)  # "0" interpreted as 1 worker
