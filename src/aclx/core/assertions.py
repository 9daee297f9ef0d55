from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Callable, Hashable, Optional

from .ports import Assertion

AssertionFunc = Callable[[Optional[Hashable], Optional[Hashable], Optional[Hashable], Any], bool]


class CallableAssertion:
    """Adapts a plain function ``(role, resource, privilege, context) -> bool``."""

    __slots__ = ("func",)

    def __init__(self, func: AssertionFunc) -> None:
        self.func = func

    def evaluate(self, role, resource, privilege, context) -> bool:
        return bool(self.func(role, resource, privilege, context))

    def __repr__(self) -> str:
        name = getattr(self.func, "__qualname__", None) or repr(self.func)
        return f"CallableAssertion({name})"


def as_assertion(obj: Any) -> Assertion | None:
    """Return *obj* as an :class:`Assertion`, wrapping callables.

    ``None`` stays ``None`` (unconditional rule).
    """
    if obj is None:
        return None
    if isinstance(obj, Assertion):
        return obj
    if callable(obj):
        return CallableAssertion(obj)
    raise TypeError(f"assertion must provide evaluate() or be callable, got {type(obj).__name__}")


class _Aggregate:
    def __init__(self, *assertions: Any) -> None:
        if len(assertions) == 1 and not callable(assertions[0]) and isinstance(assertions[0], Iterable):
            assertions = tuple(assertions[0])
        items = [as_assertion(a) for a in assertions]
        if any(a is None for a in items):
            raise TypeError("None is not a valid member of an aggregate assertion")
        self.assertions: tuple[Assertion, ...] = tuple(items)  # type: ignore[arg-type]

    def __repr__(self) -> str:
        inner = ", ".join(repr(a) for a in self.assertions)
        return f"{type(self).__name__}({inner})"


class AllOf(_Aggregate):
    """Applies only when every member applies. Empty means always."""

    def evaluate(self, role, resource, privilege, context) -> bool:
        return all(a.evaluate(role, resource, privilege, context) for a in self.assertions)


class AnyOf(_Aggregate):
    """Applies when at least one member applies. Empty means never."""

    def evaluate(self, role, resource, privilege, context) -> bool:
        return any(a.evaluate(role, resource, privilege, context) for a in self.assertions)


class Not:
    def __init__(self, assertion: Any) -> None:
        inner = as_assertion(assertion)
        if inner is None:
            raise TypeError("Not() requires an assertion")
        self.assertion = inner

    def evaluate(self, role, resource, privilege, context) -> bool:
        return not self.assertion.evaluate(role, resource, privilege, context)

    def __repr__(self) -> str:
        return f"Not({self.assertion!r})"


__all__ = ["AllOf", "AnyOf", "AssertionFunc", "CallableAssertion", "Not", "as_assertion"]
