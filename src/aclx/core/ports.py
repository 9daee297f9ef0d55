from __future__ import annotations

from typing import Any, Dict, Hashable, Optional, Protocol, runtime_checkable


@runtime_checkable
class Assertion(Protocol):
    """Runtime predicate that decides whether a matched rule applies.

    ``role``, ``resource`` and ``privilege`` are the values of the query (``None``
    for a wildcard query), ``context`` is passed through untouched from the
    caller. Implementations must be side-effect free.
    """

    def evaluate(
        self,
        role: Optional[Hashable],
        resource: Optional[Hashable],
        privilege: Optional[Hashable],
        context: Any,
    ) -> bool: ...


class DecisionLogSink(Protocol):
    def log(self, payload: Dict[str, Any]) -> None: ...


class MetricsSink(Protocol):
    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None: ...


__all__ = ["Assertion", "DecisionLogSink", "MetricsSink"]
