from __future__ import annotations

import itertools
import logging
from typing import Any, Dict, Hashable, Iterator, List, Optional, Tuple

from .model import ALL, Effect, Rule, Scope, Specific

logger = logging.getLogger("aclx.core.rules")

RuleKey = Tuple[Scope[Any], Scope[Any], Scope[Any]]


class RuleIndex:
    """Allow/deny rules keyed by ``(resource, role, privilege)`` scopes.

    At most one rule occupies a key: setting an existing key replaces the rule
    and gives it a new, larger sequence number. The index does not know about
    the registries; the engine validates identifiers before calling ``set``.
    """

    def __init__(self) -> None:
        self._rules: Dict[RuleKey, Rule] = {}
        self._seq = itertools.count(1)

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(sorted(self._rules.values(), key=lambda r: r.sequence))

    def set(
        self,
        resource: Scope[Any],
        role: Scope[Any],
        privilege: Scope[Any],
        effect: Effect,
        assertion: Optional[Any] = None,
    ) -> Rule:
        key = (resource, role, privilege)
        rule = Rule(resource, role, privilege, Effect(effect), assertion, next(self._seq))
        previous = self._rules.get(key)
        self._rules[key] = rule
        if previous is not None:
            logger.debug("aclx: overwrote rule %r (%s -> %s)", key, previous.effect.value, rule.effect.value)
        else:
            logger.debug("aclx: set rule %r = %s", key, rule.effect.value)
        return rule

    def unset(self, resource: Scope[Any], role: Scope[Any], privilege: Scope[Any]) -> Optional[Rule]:
        removed = self._rules.pop((resource, role, privilege), None)
        if removed is not None:
            logger.debug("aclx: unset rule %r", removed.key)
        return removed

    def lookup(self, resource: Scope[Any], role: Scope[Any], privilege: Scope[Any]) -> Optional[Rule]:
        return self._rules.get((resource, role, privilege))

    def rules_for(
        self, resource: Scope[Any], role: Scope[Any], privilege: Scope[Any] = ALL
    ) -> Tuple[Optional[Rule], Optional[Rule]]:
        """The privilege-specific and wildcard-privilege rules at ``(resource, role)``.

        The first item is always None for a wildcard *privilege*.
        """
        specific = self._rules.get((resource, role, privilege)) if privilege is not ALL else None
        return specific, self._rules.get((resource, role, ALL))

    # --- reference tracking used by removal policies -------------------------

    def _matching(self, position: int, ident: Hashable) -> List[RuleKey]:
        target = Specific(ident)
        return [key for key in self._rules if key[position] == target]

    def references_role(self, role: Hashable) -> List[Rule]:
        return [self._rules[k] for k in self._matching(1, role)]

    def references_resource(self, resource: Hashable) -> List[Rule]:
        return [self._rules[k] for k in self._matching(0, resource)]

    def purge_role(self, role: Hashable) -> int:
        keys = self._matching(1, role)
        for key in keys:
            del self._rules[key]
        return len(keys)

    def purge_resource(self, resource: Hashable) -> int:
        keys = self._matching(0, resource)
        for key in keys:
            del self._rules[key]
        return len(keys)


__all__ = ["RuleIndex", "RuleKey"]
