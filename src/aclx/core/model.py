from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Hashable, Optional, TypeVar, Union

T = TypeVar("T", bound=Hashable)


class Wildcard(Enum):
    """Marker for a rule dimension that applies to every role, resource or privilege."""

    ALL = "*"

    def __repr__(self) -> str:
        return "ALL"


ALL = Wildcard.ALL


@dataclass(frozen=True)
class Specific(Generic[T]):
    """A rule dimension bound to one registered identifier."""

    id: T

    def __repr__(self) -> str:
        return f"Specific({self.id!r})"


Scope = Union[Specific[T], Wildcard]


def scope(value: Any) -> Scope[Any]:
    """Normalise caller input into a scope.

    ``None`` and ``ALL`` become the wildcard, a ``Specific`` is kept as is and
    any other value is wrapped in ``Specific``.
    """
    if value is None or value is ALL:
        return ALL
    if isinstance(value, Specific):
        return value
    return Specific(value)


def scope_id(s: Scope[Any]) -> Any:
    """Inverse of :func:`scope` for display: the identifier or ``None``."""
    return s.id if isinstance(s, Specific) else None


class Effect(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


@dataclass(frozen=True)
class Rule:
    resource: Scope[Any]
    role: Scope[Any]
    privilege: Scope[Any]
    effect: Effect
    assertion: Optional[Any] = None
    sequence: int = 0

    @property
    def key(self) -> tuple[Scope[Any], Scope[Any], Scope[Any]]:
        return (self.resource, self.role, self.privilege)

    def as_dict(self) -> dict[str, Any]:
        return {
            "resource": scope_id(self.resource),
            "role": scope_id(self.role),
            "privilege": scope_id(self.privilege),
            "effect": self.effect.value,
            "conditional": self.assertion is not None,
            "sequence": self.sequence,
        }


@dataclass(frozen=True)
class Decision:
    effect: Effect
    rule: Optional[Rule] = None
    reason: str = "default_deny"

    @property
    def allowed(self) -> bool:
        return self.effect is Effect.ALLOW

    def __bool__(self) -> bool:
        return self.allowed


DEFAULT_DENY = Decision(Effect.DENY, None, "default_deny")
