"""
Immutable rank tables mapping vocabulary entries to token ids and back.
"""

from collections.abc import Iterator, Mapping

from .types import Token, TokenBytes


class RankTable[K: (bytes, str)]:
    """
    Read-only forward and inverse mapping between keys and ranks.

    The forward mapping is copied at construction and the inverse is built
    once from it. If the caller's mapping assigns one rank to several keys,
    the inverse keeps whichever key came last.
    """

    __slots__ = ("_encoder", "_decoder")

    def __init__(self, ranks: Mapping[K, Token] | None = None) -> None:
        self._encoder: dict[K, Token] = dict(ranks) if ranks else {}
        self._decoder: dict[Token, K] = {tok: key for key, tok in self._encoder.items()}

    def lookup_rank(self, key: K) -> Token | None:
        """Return the rank of ``key`` or ``None`` when absent."""
        return self._encoder.get(key)

    def lookup_key(self, rank: Token) -> K | None:
        """Return the key holding ``rank`` or ``None`` when absent."""
        return self._decoder.get(rank)

    def max_rank(self) -> Token:
        """Return the largest rank in the table, 0 for an empty table."""
        return max(self._encoder.values(), default=0)

    def __contains__(self, key: object) -> bool:
        return key in self._encoder

    def __iter__(self) -> Iterator[K]:
        return iter(self._encoder)

    def __len__(self) -> int:
        return len(self._encoder)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(size={len(self)})"


class MergeRankTable(RankTable[bytes]):
    """Byte sequence -> rank table used by the merge engine."""

    __slots__ = ()

    def lookup_bytes(self, rank: Token) -> TokenBytes | None:
        """Return the byte sequence holding ``rank`` or ``None`` when absent."""
        return self._decoder.get(rank)


class SpecialTokenTable(RankTable[str]):
    """Special token literal -> rank table."""

    __slots__ = ()

    def tokens(self) -> frozenset[str]:
        """Return every configured special token literal."""
        return frozenset(self._encoder)

    def lookup_bytes(self, rank: Token) -> TokenBytes | None:
        """Return the UTF-8 bytes of the literal holding ``rank``."""
        seq = self._decoder.get(rank)
        if seq is None:
            return None
        return seq.encode("utf-8")
