"""
Core types for tokenization.
"""

type Token = int
type TokenBytes = bytes
type Span = tuple[int, int]
type Ranks = dict[TokenBytes, Token]
type SpecialTokens = dict[str, Token]
