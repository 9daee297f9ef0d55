from __future__ import annotations

from typing import Any, Dict, Optional

from aclx.core.ports import MetricsSink

try:
    from opentelemetry.metrics import get_meter  # type: ignore
except Exception:  # pragma: no cover
    get_meter = None  # type: ignore


class OpenTelemetryMetrics(MetricsSink):
    """OpenTelemetry-based MetricsSink.

    Creates:
      - Counter: aclx_decisions_total (attributes: decision)
      - Histogram: aclx_decision_seconds (unit: s)
    """

    _counter: Optional[Any]
    _hist: Optional[Any]

    def __init__(self, meter_name: str = "aclx.metrics") -> None:
        self._counter = None
        self._hist = None

        if get_meter is None:  # pragma: no cover
            return

        meter = get_meter(meter_name)
        try:
            self._counter = meter.create_counter(  # type: ignore[attr-defined]
                name="aclx_decisions_total",
                description="Total ACL decisions by effect.",
            )
        except Exception:  # pragma: no cover
            self._counter = None

        try:
            create_hist = getattr(meter, "create_histogram", None)
            if create_hist is not None:
                self._hist = create_hist(  # type: ignore[misc]
                    name="aclx_decision_seconds",
                    description="ACL decision evaluation duration in seconds.",
                    unit="s",
                )
        except Exception:  # pragma: no cover
            self._hist = None

    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None:
        if self._counter is None:  # pragma: no cover
            return
        decision = (labels or {}).get("decision", "unknown")
        try:
            self._counter.add(1, {"decision": decision})  # type: ignore[attr-defined]
        except Exception:  # pragma: no cover
            pass

    def observe(self, name: str, value: float, labels: Dict[str, str] | None = None) -> None:
        if self._hist is None:  # pragma: no cover
            return
        try:
            self._hist.record(float(value), {"decision": (labels or {}).get("decision", "unknown")})
        except Exception:  # pragma: no cover
            pass
