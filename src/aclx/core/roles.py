from __future__ import annotations

import logging
from typing import Dict, Hashable, Iterable, Iterator, List

from .errors import CycleDetected, DuplicateRole, RoleInUse, UnknownParent, UnknownRole
from .model import ALL

logger = logging.getLogger("aclx.core.roles")


class RoleGraph:
    """Registry of roles and their (multiple) inheritance.

    Each role maps to an ordered list of parent ids; the order fixes search
    precedence between siblings. The graph is kept acyclic on every mutation.
    Not thread-safe on its own: :class:`aclx.core.engine.Acl` guards it.
    """

    def __init__(self) -> None:
        # Insertion order of the dict is registration order.
        self._parents: Dict[Hashable, List[Hashable]] = {}

    def __contains__(self, role: object) -> bool:
        return role in self._parents

    def __len__(self) -> int:
        return len(self._parents)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(list(self._parents))

    def _require(self, role: Hashable) -> List[Hashable]:
        try:
            return self._parents[role]
        except KeyError:
            raise UnknownRole(role) from None

    # --- mutation ------------------------------------------------------------

    def add(self, role: Hashable, parents: Iterable[Hashable] = ()) -> None:
        if role is None or role is ALL:
            raise TypeError("role id must be a concrete identifier, not a wildcard")
        if isinstance(parents, (str, bytes)):
            raise TypeError("parents must be a sequence of role ids, not a single string")
        if role in self._parents:
            logger.warning("aclx: duplicate role %r", role)
            raise DuplicateRole(role)
        ordered: List[Hashable] = []
        for parent in parents:
            if parent not in self._parents:
                logger.warning("aclx: unknown parent %r for new role %r", parent, role)
                raise UnknownParent(parent, kind="role")
            if parent not in ordered:
                ordered.append(parent)
        self._parents[role] = ordered
        logger.debug("aclx: added role %r with parents %r", role, ordered)

    def add_parent(self, role: Hashable, parent: Hashable) -> bool:
        """Append *parent* to *role* at the lowest precedence.

        Returns False when *parent* is already a parent of *role*.
        """
        parents = self._require(role)
        if parent not in self._parents:
            raise UnknownParent(parent, kind="role")
        if parent in parents:
            return False
        if parent == role or self.inherits(parent, role):
            logger.warning("aclx: rejecting %r -> %r, would create a cycle", role, parent)
            raise CycleDetected(role, parent)
        parents.append(parent)
        logger.debug("aclx: role %r now inherits from %r", role, parent)
        return True

    def remove_parent(self, role: Hashable, parent: Hashable) -> bool:
        parents = self._require(role)
        if parent not in parents:
            return False
        parents.remove(parent)
        logger.debug("aclx: role %r no longer inherits from %r", role, parent)
        return True

    def remove(self, role: Hashable) -> None:
        self._require(role)
        children = self.children_of(role)
        if children:
            raise RoleInUse(role, reason=f"parent of {children!r}")
        del self._parents[role]
        logger.debug("aclx: removed role %r", role)

    def detach(self, role: Hashable) -> List[Hashable]:
        """Remove *role* from every parent list; returns the affected children."""
        children = self.children_of(role)
        for child in children:
            self._parents[child].remove(role)
        return children

    # --- queries -------------------------------------------------------------

    def parents_of(self, role: Hashable) -> List[Hashable]:
        return list(self._require(role))

    def children_of(self, role: Hashable) -> List[Hashable]:
        return [child for child, parents in self._parents.items() if role in parents]

    def ancestors_of(self, role: Hashable) -> Iterator[Hashable]:
        """Depth-first, pre-order walk over the ancestors of *role*.

        Parents are visited in registration order and every ancestor is yielded
        once. *role* itself is not included. Each call starts a fresh walk;
        ``UnknownRole`` is raised eagerly.
        """
        root = self._require(role)
        return self._walk(role, root)

    def _walk(self, role: Hashable, parents: List[Hashable]) -> Iterator[Hashable]:
        seen = {role}
        # Explicit stack, reversed so the first parent is popped first.
        stack = list(reversed(parents))
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            yield current
            stack.extend(reversed(self._parents.get(current, ())))

    def lineage(self, role: Hashable) -> List[Hashable]:
        """*role* followed by its ancestors in search order."""
        return [role, *self.ancestors_of(role)]

    def inherits(self, role: Hashable, ancestor: Hashable, only_parents: bool = False) -> bool:
        parents = self._require(role)
        if ancestor not in self._parents:
            raise UnknownRole(ancestor)
        if only_parents:
            return ancestor in parents
        return any(a == ancestor for a in self._walk(role, parents))


__all__ = ["RoleGraph"]
