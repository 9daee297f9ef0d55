from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from . import core, metrics
from .core.assertions import AllOf, AnyOf, CallableAssertion, Not
from .core.engine import Acl
from .core.errors import (
    AclError,
    AssertionFailure,
    CycleDetected,
    DuplicateResource,
    DuplicateRole,
    Locked,
    ResourceInUse,
    RoleInUse,
    UnknownParent,
    UnknownResource,
    UnknownRole,
)
from .core.model import ALL, Decision, Effect, Rule, Specific, scope
from .core.ports import Assertion, DecisionLogSink, MetricsSink
from .logging.decision_logger import DecisionLogger


def _detect_version() -> str:
    if version is None:
        return "0.1.0"
    try:
        return version("aclx")
    except PackageNotFoundError:
        return "0.1.0"


__version__ = _detect_version()

__all__ = [
    "ALL",
    "Acl",
    "AclError",
    "AllOf",
    "AnyOf",
    "Assertion",
    "AssertionFailure",
    "CallableAssertion",
    "CycleDetected",
    "Decision",
    "DecisionLogSink",
    "DecisionLogger",
    "DuplicateResource",
    "DuplicateRole",
    "Effect",
    "Locked",
    "MetricsSink",
    "Not",
    "ResourceInUse",
    "RoleInUse",
    "Rule",
    "Specific",
    "UnknownParent",
    "UnknownResource",
    "UnknownRole",
    "__version__",
    "core",
    "metrics",
    "scope",
]
