from __future__ import annotations

import json
import logging
import random
from typing import Any, Dict, Mapping, Optional

from aclx.core.ports import DecisionLogSink


class DecisionLogger(DecisionLogSink):
    """Audit sink that writes every (sampled) decision to a stdlib logger.

    Sampling:
      - ``sample_rate`` applies to every decision (``1.0`` logs all, ``0.0`` none).
      - With ``smart_sampling=True`` the rate is looked up per decision
        category (``"allow"``/``"deny"``) in ``category_sampling_rates``,
        falling back to ``sample_rate``. Defaults keep every deny.

    Payload keys are those emitted by :class:`aclx.core.engine.Acl`:
    ``role``, ``resource``, ``privilege``, ``decision``, ``allowed``,
    ``reason``, ``rule`` and ``duration_seconds``.
    """

    def __init__(
        self,
        *,
        logger_name: str = "aclx.audit",
        level: int = logging.INFO,
        as_json: bool = False,
        sample_rate: float = 1.0,
        smart_sampling: bool = False,
        category_sampling_rates: Optional[Mapping[str, float]] = None,
    ) -> None:
        self.logger = logging.getLogger(logger_name)
        self.level = level
        self.as_json = as_json
        self.sample_rate = _clamp(sample_rate)
        self.smart_sampling = smart_sampling
        rates = dict(category_sampling_rates) if category_sampling_rates is not None else {"deny": 1.0}
        self.category_sampling_rates = {k: _clamp(v) for k, v in rates.items()}

    def _rate_for(self, payload: Mapping[str, Any]) -> float:
        if not self.smart_sampling:
            return self.sample_rate
        category = str(payload.get("decision", ""))
        return self.category_sampling_rates.get(category, self.sample_rate)

    def _sampled(self, payload: Mapping[str, Any]) -> bool:
        rate = self._rate_for(payload)
        if rate >= 1.0:
            return True
        if rate <= 0.0:
            return False
        return random.random() < rate

    def _format(self, payload: Mapping[str, Any]) -> str:
        if self.as_json:
            return json.dumps(payload, default=repr, sort_keys=True)
        rule = payload.get("rule")
        where = "default" if not rule else (
            f"rule#{rule.get('sequence')} "
            f"(resource={rule.get('resource')!r}, role={rule.get('role')!r}, "
            f"privilege={rule.get('privilege')!r})"
        )
        return (
            f"decision={payload.get('decision')} role={payload.get('role')!r} "
            f"resource={payload.get('resource')!r} privilege={payload.get('privilege')!r} "
            f"via {where}"
        )

    def log(self, payload: Dict[str, Any]) -> None:
        if not self._sampled(payload):
            return
        self.logger.log(self.level, self._format(payload))


def _clamp(rate: float) -> float:
    return max(0.0, min(1.0, float(rate)))


__all__ = ["DecisionLogger"]
