from __future__ import annotations

from typing import Any, Dict, Optional

from aclx.core.ports import MetricsSink

try:
    from prometheus_client import Counter, Histogram  # type: ignore
except Exception:  # pragma: no cover
    Counter = Histogram = None  # type: ignore


class PrometheusMetrics(MetricsSink):
    """Prometheus-based MetricsSink.

    Exposes:
      - <namespace>_decisions_total{decision="allow|deny"}
      - <namespace>_decision_seconds{decision="allow|deny"} (Histogram)
    """

    _counter: Optional[Any]
    _hist: Optional[Any]

    def __init__(self, namespace: str = "aclx", registry: Any = None) -> None:
        self._counter = None
        self._hist = None

        if Counter is None or Histogram is None:  # pragma: no cover
            return

        extra: Dict[str, Any] = {}
        if registry is not None:
            extra["registry"] = registry
        self._counter = Counter(
            f"{namespace}_decisions_total",
            "Total ACL decisions by effect.",
            labelnames=("decision",),
            **extra,
        )
        self._hist = Histogram(
            f"{namespace}_decision_seconds",
            "ACL decision evaluation duration in seconds.",
            labelnames=("decision",),
            **extra,
        )

    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None:
        """Increment the decisions counter.

        *name* is accepted for protocol compatibility; this sink always
        increments its own counter.
        """
        if self._counter is None:  # pragma: no cover
            return
        decision = (labels or {}).get("decision", "unknown")
        try:
            self._counter.labels(decision=decision).inc()  # type: ignore[call-arg]
        except Exception:  # pragma: no cover
            pass

    def observe(self, name: str, value: float, labels: Dict[str, str] | None = None) -> None:
        if self._hist is None:  # pragma: no cover
            return
        decision = (labels or {}).get("decision", "unknown")
        try:
            self._hist.labels(decision=decision).observe(float(value))  # type: ignore[call-arg]
        except Exception:  # pragma: no cover
            pass
