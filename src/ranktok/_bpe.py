"""
Core Byte Pair Encoding (BPE) operations against a fixed rank table.
"""

import sys
from typing import Final

from .errors import TokenizationError
from .ranks import MergeRankTable
from .types import Span, Token, TokenBytes

# rank of a boundary whose two-fragment span is not in the vocabulary
_INF: Final[int] = sys.maxsize


def byte_pair_merge(piece: TokenBytes, ranks: MergeRankTable) -> list[Span]:
    """
    Merge adjacent fragments of ``piece`` lowest rank first.

    The piece starts as N single-byte fragments described by N + 1 boundary
    positions. Every boundary except the trailing one caches the rank of the
    two-fragment span starting at it. Each step removes the boundary after the
    lowest ranked one (first occurrence wins on ties) and refreshes the
    cached ranks that touched the removed boundary. Merging stops once a
    single fragment remains or no adjacent pair is in the vocabulary.

    Each step costs O(n) for the minimum scan and at most n - 1 steps run, so
    a piece needs O(n^2) work at worst.

    :param piece: Byte chunk to merge.
    :param ranks: Vocabulary used to rank candidate spans.
    :return: ``(start, end)`` byte offsets of the final fragments, in order.
    """
    # [boundary start offset, rank of the span to the boundary after next]
    parts: list[list[int]] = [[i, _INF] for i in range(len(piece) + 1)]

    def get_rank(i: int) -> int:
        """Rank of the span covering the two fragments that start at boundary ``i``."""
        if i + 2 < len(parts):
            rank = ranks.lookup_rank(piece[parts[i][0] : parts[i + 2][0]])
            if rank is not None:
                return rank
        return _INF

    for i in range(len(parts) - 2):
        parts[i][1] = get_rank(i)

    while len(parts) > 1:
        min_rank, min_idx = _INF, -1
        for i in range(len(parts) - 1):
            if parts[i][1] < min_rank:
                min_rank, min_idx = parts[i][1], i

        if min_idx < 0:
            break

        # drop the boundary between the two merged fragments
        del parts[min_idx + 1]
        parts[min_idx][1] = get_rank(min_idx)
        if min_idx > 0:
            parts[min_idx - 1][1] = get_rank(min_idx - 1)

    return [(parts[i][0], parts[i + 1][0]) for i in range(len(parts) - 1)]


def byte_pair_encode(piece: TokenBytes, ranks: MergeRankTable) -> list[Token]:
    """
    Encode a byte chunk into ranks via BPE merging.

    A single byte never enters the merge loop and is looked up directly.

    :raises TokenizationError: If a merged span is not in the vocabulary.
    """
    if len(piece) == 1:
        return [_resolve(piece, ranks, 0)]

    return [
        _resolve(piece[start:end], ranks, start)
        for start, end in byte_pair_merge(piece, ranks)
    ]


def _resolve(span: TokenBytes, ranks: MergeRankTable, position: int) -> Token:
    """Look up a merged span, failing loudly when the vocabulary cannot represent it."""
    rank = ranks.lookup_rank(span)
    if rank is None:
        raise TokenizationError(
            "merged span missing from vocabulary", span=span, position=position
        )
    return rank
