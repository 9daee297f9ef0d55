from __future__ import annotations

from typing import Any, Hashable


class AclError(Exception):
    """Base class for every error raised by aclx."""


class UnknownRole(AclError, LookupError):
    def __init__(self, role: Hashable) -> None:
        self.role = role
        super().__init__(f"unknown role: {role!r}")


class UnknownResource(AclError, LookupError):
    def __init__(self, resource: Hashable) -> None:
        self.resource = resource
        super().__init__(f"unknown resource: {resource!r}")


class UnknownParent(AclError, LookupError):
    """A role or resource names a parent that is not registered."""

    def __init__(self, parent: Hashable, *, kind: str = "role") -> None:
        self.parent = parent
        self.kind = kind
        super().__init__(f"unknown parent {kind}: {parent!r}")


class DuplicateRole(AclError, ValueError):
    def __init__(self, role: Hashable) -> None:
        self.role = role
        super().__init__(f"duplicate role: {role!r}")


class DuplicateResource(AclError, ValueError):
    def __init__(self, resource: Hashable) -> None:
        self.resource = resource
        super().__init__(f"duplicate resource: {resource!r}")


class CycleDetected(AclError, ValueError):
    """Adding ``parent`` to ``role`` would make ``role`` its own ancestor."""

    def __init__(self, role: Hashable, parent: Hashable) -> None:
        self.role = role
        self.parent = parent
        super().__init__(f"role {role!r} cannot inherit from {parent!r}: cycle detected")


class RoleInUse(AclError, ValueError):
    def __init__(self, role: Hashable, *, reason: str) -> None:
        self.role = role
        self.reason = reason
        super().__init__(f"role {role!r} is still in use: {reason}")


class ResourceInUse(AclError, ValueError):
    def __init__(self, resource: Hashable, *, reason: str) -> None:
        self.resource = resource
        self.reason = reason
        super().__init__(f"resource {resource!r} is still in use: {reason}")


class AssertionFailure(AclError):
    """An assertion raised instead of returning a boolean.

    The original exception is available as ``__cause__``.
    """

    def __init__(self, rule: Any, error: BaseException) -> None:
        self.rule = rule
        self.error = error
        super().__init__(f"assertion of rule {rule!r} failed: {error!r}")


class Locked(AclError):
    def __init__(self) -> None:
        super().__init__("acl is locked, no mutations are allowed until unlock()")


__all__ = [
    "AclError",
    "AssertionFailure",
    "CycleDetected",
    "DuplicateResource",
    "DuplicateRole",
    "Locked",
    "ResourceInUse",
    "RoleInUse",
    "UnknownParent",
    "UnknownResource",
    "UnknownRole",
]
