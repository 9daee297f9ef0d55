from __future__ import annotations

import logging
from typing import Dict, Hashable, Iterator, List, Optional

from .errors import DuplicateResource, ResourceInUse, UnknownParent, UnknownResource
from .model import ALL

logger = logging.getLogger("aclx.core.resources")


class ResourceTree:
    """Forest of resources; every resource has at most one parent."""

    def __init__(self) -> None:
        self._parent: Dict[Hashable, Optional[Hashable]] = {}

    def __contains__(self, resource: object) -> bool:
        return resource in self._parent

    def __len__(self) -> int:
        return len(self._parent)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(list(self._parent))

    def add(self, resource: Hashable, parent: Optional[Hashable] = None) -> None:
        if resource is None or resource is ALL:
            raise TypeError("resource id must be a concrete identifier, not a wildcard")
        if resource in self._parent:
            logger.warning("aclx: duplicate resource %r", resource)
            raise DuplicateResource(resource)
        if parent is not None and parent not in self._parent:
            logger.warning("aclx: unknown parent %r for new resource %r", parent, resource)
            raise UnknownParent(parent, kind="resource")
        self._parent[resource] = parent
        logger.debug("aclx: added resource %r with parent %r", resource, parent)

    def remove(self, resource: Hashable) -> None:
        self._require(resource)
        children = self.children_of(resource)
        if children:
            raise ResourceInUse(resource, reason=f"parent of {children!r}")
        del self._parent[resource]
        logger.debug("aclx: removed resource %r", resource)

    def _require(self, resource: Hashable) -> Optional[Hashable]:
        try:
            return self._parent[resource]
        except KeyError:
            raise UnknownResource(resource) from None

    def parent_of(self, resource: Hashable) -> Optional[Hashable]:
        return self._require(resource)

    def children_of(self, resource: Hashable) -> List[Hashable]:
        return [child for child, parent in self._parent.items() if parent == resource]

    def descendants_of(self, resource: Hashable) -> List[Hashable]:
        """All resources below *resource*, deepest first (safe removal order)."""
        self._require(resource)
        found: List[Hashable] = []
        frontier = [resource]
        while frontier:
            level = [c for r in frontier for c in self.children_of(r)]
            found.extend(level)
            frontier = level
        found.reverse()
        return found

    def ancestor_chain(self, resource: Hashable) -> List[Hashable]:
        """``[resource, parent, grandparent, ..., root]``."""
        chain = [resource]
        current = self._require(resource)
        while current is not None:
            chain.append(current)
            current = self._parent[current]
        return chain

    def inherits(self, resource: Hashable, ancestor: Hashable, only_parent: bool = False) -> bool:
        parent = self._require(resource)
        self._require(ancestor)
        if only_parent:
            return parent is not None and parent == ancestor
        return ancestor in self.ancestor_chain(resource)[1:]


__all__ = ["ResourceTree"]
