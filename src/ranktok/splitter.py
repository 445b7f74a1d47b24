"""Pattern-driven pre-tokenization and special token scanning."""

from collections.abc import Container, Iterable

import regex as re

from .pattern import compile_pattern, literal_alternation


class PretokenizerSplitter:
    """
    Split text into coarse chunks and locate allowed special tokens.

    Both compiled patterns are built once and never change, so a splitter can
    be shared across threads.
    """

    def __init__(self, pattern: str, special_tokens: Iterable[str] = ()) -> None:
        """
        :param pattern: Split pattern, e.g. one of :class:`~ranktok.pattern.TokenPattern`.
        :param special_tokens: Literals the special scanner recognizes.
        :raises PatternError: If ``pattern`` does not compile.
        """
        self.pat = pattern
        self.compiled_pat: re.Pattern[str] = compile_pattern(pattern)
        specials = frozenset(special_tokens)
        # no specials means nothing to scan for
        self.special_pat: re.Pattern[str] | None = (
            literal_alternation(specials) if specials else None
        )

    def split(self, text: str) -> list[str]:
        """Split ``text`` left to right into non-overlapping chunks."""
        return [m.group(0) for m in self.compiled_pat.finditer(text)]

    def find_next_special(
        self, text: str, start: int, allowed: Container[str]
    ) -> re.Match[str] | None:
        """
        Find the earliest allowed special token at or after ``start``.

        A special literal that is not in ``allowed`` is skipped: scanning
        resumes one character past the start of that match and the literal
        is left for :meth:`split` to consume as ordinary text.

        :param text: Full input text.
        :param start: Offset to begin scanning from.
        :param allowed: Special token literals that may be emitted as specials.
        :return: The match, or ``None`` when no allowed special remains.
        """
        if self.special_pat is None:
            return None

        pos = start
        while True:
            match = self.special_pat.search(text, pos)
            if match is None:
                return None
            if match.group(0) in allowed:
                return match
            pos = match.start() + 1
