"""Custom exception hierarchy for ranktok tokenization errors."""

import regex as re

from .types import TokenBytes


class RankTokError(Exception):
    """Base exception for all ranktok errors."""


class ConstructionError(RankTokError):
    """Raised when tokenizer tables disagree with an explicit vocabulary size."""

    def __init__(
        self,
        message: str,
        *,
        expected: int | None = None,
        actual: int | None = None,
    ) -> None:
        """Initialize with optional expected/actual values that get appended to the message."""
        extra = " "
        if expected is not None:
            extra += f"(expected: {expected}) (got {actual}) "
        super().__init__(message + extra)
        self.expected = expected
        self.actual = actual


class SpecialTokenError(RankTokError):
    """Raised when special token handling fails."""

    def __init__(self, message: str, *, found_tokens: set[str] | None = None) -> None:
        """Initialize with optional found_tokens that get appended to the message."""
        if found_tokens:
            message = f"{message} (found: {', '.join(sorted(found_tokens))})"
        super().__init__(message)
        self.found_tokens = found_tokens


class DisallowedSpecialTokenError(SpecialTokenError):
    """Raised when the input contains a literal the disallow policy rejects."""

    def __init__(self, token: str) -> None:
        super().__init__("disallowed special token found", found_tokens={token})
        self.token = token


class TokenizationError(RankTokError):
    """Raised when tokenization fails."""

    def __init__(
        self,
        message: str,
        *,
        span: TokenBytes | None = None,
        position: int | None = None,
    ) -> None:
        extra = " "
        if span is not None:
            extra += f"(span: {span!r}) "
        if position is not None:
            extra += f"(position: {position}) "
        super().__init__(message + extra)
        self.span = span
        self.position = position


class PatternError(RankTokError):
    """Raised when compiling and/or validating regex patterns."""

    def __init__(
        self,
        message: str,
        *,
        pattern: str | None = None,
        regex_err: re.error | None = None,
    ) -> None:
        """
        Initialize PatternError with pattern details.

        Args:
            message: Error message.
            pattern: The regex pattern that failed.
            regex_err: The underlying regex error from the regex library.
        """
        extra = " "
        if pattern:
            extra += f"(pattern: {pattern!r}) "
        if regex_err:
            extra += f"(reason: {regex_err}) "
        super().__init__(message + extra)
        self.pattern = pattern
        self.regex_err = regex_err


class EncodingError(RankTokError):
    """Raised when an encoding or model name cannot be resolved."""

    def __init__(
        self,
        message: str,
        *,
        invalid_name: str | None = None,
        available: list[str] | None = None,
    ) -> None:
        extra = " "
        if invalid_name:
            extra += f"(available: {available}) (got {invalid_name}) "
        super().__init__(message + extra)
        self.invalid_name = invalid_name
        self.available = available


class ModelLoadError(RankTokError):
    """Raised when loading a rank file fails."""

    def __init__(
        self,
        message: str,
        *,
        model_path: str | None = None,
        line_no: int | None = None,
    ) -> None:
        extra = " "
        if model_path:
            extra += f"(path: {model_path}) "
        if line_no is not None:
            extra += f"(line: {line_no}) "
        super().__init__(message + extra)
        self.model_path = model_path
        self.line_no = line_no
