"""Special token allow/deny policies for encoding."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Final, override

# wildcard literal accepted in raw allow/disallow lists
ALL: Final[str] = "all"

# =========================================================================================

# allow policies


class AllowPolicy(ABC):
    """Decides which special tokens are emitted as special ids."""

    @abstractmethod
    def resolve(self, universe: frozenset[str]) -> frozenset[str]:
        """Return the allowed literals given every configured special token."""


class AllowNone(AllowPolicy):
    """No special token is allowed; specials in text are plain content or rejected."""

    @override
    def resolve(self, universe: frozenset[str]) -> frozenset[str]:
        return frozenset()

    def __eq__(self, other: object) -> bool:
        return isinstance(other, AllowNone)

    def __hash__(self) -> int:
        return hash(AllowNone)


class AllowAll(AllowPolicy):
    """Every configured special token is allowed."""

    @override
    def resolve(self, universe: frozenset[str]) -> frozenset[str]:
        return universe

    def __eq__(self, other: object) -> bool:
        return isinstance(other, AllowAll)

    def __hash__(self) -> int:
        return hash(AllowAll)


class AllowExplicit(AllowPolicy):
    """Only the listed special tokens are allowed."""

    def __init__(self, tokens: Iterable[str]) -> None:
        self.tokens = frozenset(tokens)

    @override
    def resolve(self, universe: frozenset[str]) -> frozenset[str]:
        return self.tokens

    def __eq__(self, other: object) -> bool:
        return isinstance(other, AllowExplicit) and other.tokens == self.tokens

    def __hash__(self) -> int:
        return hash(self.tokens)

    def __repr__(self) -> str:
        return f"AllowExplicit({sorted(self.tokens)})"


# =========================================================================================

# disallow policies


class DisallowPolicy(ABC):
    """Decides which literals make encoding fail when found in the input."""

    @abstractmethod
    def resolve(
        self, universe: frozenset[str], allowed: frozenset[str]
    ) -> frozenset[str]:
        """Return the rejected literals given all specials and the allowed ones."""


class DisallowDefault(DisallowPolicy):
    """Used when the caller supplies nothing: every special not allowed is rejected."""

    @override
    def resolve(
        self, universe: frozenset[str], allowed: frozenset[str]
    ) -> frozenset[str]:
        return universe - allowed

    def __eq__(self, other: object) -> bool:
        return isinstance(other, DisallowDefault)

    def __hash__(self) -> int:
        return hash(DisallowDefault)


class DisallowAll(DisallowPolicy):
    """The caller asked for ``"all"``: every special not allowed is rejected."""

    @override
    def resolve(
        self, universe: frozenset[str], allowed: frozenset[str]
    ) -> frozenset[str]:
        return universe - allowed

    def __eq__(self, other: object) -> bool:
        return isinstance(other, DisallowAll)

    def __hash__(self) -> int:
        return hash(DisallowAll)


class DisallowExplicit(DisallowPolicy):
    """
    Only the listed literals are rejected.

    The literals need not be registered special tokens: any listed string
    found in the input makes encoding fail. An empty list rejects nothing.
    """

    def __init__(self, tokens: Iterable[str]) -> None:
        self.tokens = frozenset(tokens)

    @override
    def resolve(
        self, universe: frozenset[str], allowed: frozenset[str]
    ) -> frozenset[str]:
        return self.tokens

    def __eq__(self, other: object) -> bool:
        return isinstance(other, DisallowExplicit) and other.tokens == self.tokens

    def __hash__(self) -> int:
        return hash(self.tokens)

    def __repr__(self) -> str:
        return f"DisallowExplicit({sorted(self.tokens)})"


# =========================================================================================

# conversion from raw list arguments

type AllowSpec = AllowPolicy | Iterable[str] | None
type DisallowSpec = DisallowPolicy | Iterable[str] | None


def _as_set(value: Iterable[str]) -> frozenset[str]:
    # a bare string is a single literal, not an iterable of characters
    if isinstance(value, str):
        return frozenset((value,))
    return frozenset(value)


def allow_policy(value: AllowSpec) -> AllowPolicy:
    """
    Build an allow policy from a raw argument.

    ``None`` allows nothing, any collection containing ``"all"`` allows every
    special token, and any other collection allows exactly its members.
    """
    if isinstance(value, AllowPolicy):
        return value
    if value is None:
        return AllowNone()
    tokens = _as_set(value)
    if ALL in tokens:
        return AllowAll()
    return AllowExplicit(tokens)


def disallow_policy(value: DisallowSpec) -> DisallowPolicy:
    """
    Build a disallow policy from a raw argument.

    ``None`` rejects every special that is not allowed, as does any
    collection containing ``"all"``. An empty collection rejects nothing and
    any other collection rejects exactly its members.
    """
    if isinstance(value, DisallowPolicy):
        return value
    if value is None:
        return DisallowDefault()
    tokens = _as_set(value)
    if ALL in tokens:
        return DisallowAll()
    return DisallowExplicit(tokens)


__all__ = [
    "ALL",
    "AllowPolicy",
    "AllowNone",
    "AllowAll",
    "AllowExplicit",
    "DisallowPolicy",
    "DisallowDefault",
    "DisallowAll",
    "DisallowExplicit",
    "AllowSpec",
    "DisallowSpec",
    "allow_policy",
    "disallow_policy",
]
