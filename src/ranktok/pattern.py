from collections.abc import Iterable
from enum import Enum

import regex as re

from .errors import PatternError


class TokenPattern(str, Enum):
    """
    Pre-tokenization patterns used by the pretrained encodings.

    Source: https://github.com/openai/tiktoken/blob/main/tiktoken_ext/openai_public.py
    """

    # r50k_base, p50k_base, p50k_edit
    GPT2 = (
        r"'s|'t|'re|'ve|'m|'ll|'d|"
        r" ?\p{L}+|"
        r" ?\p{N}+|"
        r" ?[^\s\p{L}\p{N}]+|"
        r"\s+(?!\S)|"
        r"\s+"
    )

    # cl100k_base
    GPT4 = (
        r"(?i:'s|'t|'re|'ve|'m|'ll|'d)|"
        r"[^\r\n\p{L}\p{N}]?\p{L}+|"
        r"\p{N}{1,3}|"
        r" ?[^\s\p{L}\p{N}]+[\r\n]*|"
        r"\s*[\r\n]+|"
        r"\s+(?!\S)|"
        r"\s+"
    )

    @classmethod
    def get(cls, name: str) -> str:
        """Get patterns by name (case-insensitive)."""
        try:
            return cls[name.upper().replace("-", "_")].value
        except KeyError:
            raise PatternError(
                f"Unknown pattern: {name!r}. "
                f"Valid patterns: {', '.join(pat.name for pat in cls)}"
            )


def list_patterns() -> list[str]:
    """Return names of all available built-in split patterns."""
    return [pat.name for pat in TokenPattern]


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """
    Compile and validate a regex pattern.

    :param pattern: Regex pattern string to compile.
    :return: Compiled regex pattern.
    :raises PatternError: If pattern is invalid.
    """
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternError("invalid regex pattern", pattern=pattern, regex_err=e) from e


def literal_alternation(literals: Iterable[str]) -> re.Pattern[str]:
    """
    Compile an alternation matching any of ``literals`` verbatim.

    Longer literals are tried first so that a literal which is a prefix of
    another never shadows it.
    """
    # escape regex metachars like "|" in special tokens to avoid unwanted effects
    escaped = [re.escape(seq) for seq in sorted(literals, key=lambda s: (-len(s), s))]
    return re.compile("(" + "|".join(escaped) + ")")
