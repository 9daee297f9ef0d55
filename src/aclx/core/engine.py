from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Dict, Hashable, Iterable, Iterator, List, Optional, Tuple

from .assertions import as_assertion
from .errors import AssertionFailure, Locked, ResourceInUse, RoleInUse, UnknownResource, UnknownRole
from .model import ALL, DEFAULT_DENY, Decision, Effect, Rule, Scope, Specific, scope, scope_id
from .ports import DecisionLogSink, MetricsSink
from .resources import ResourceTree
from .roles import RoleGraph
from .rules import RuleIndex
from .rwlock import ReadWriteLock

logger = logging.getLogger("aclx.core.engine")

_MemoKey = Tuple[Optional[Hashable], Optional[Hashable], Optional[Hashable]]


class Acl:
    """Access control list: roles, resources, rules and the query engine.

    Roles form a DAG (multiple inheritance), resources a forest (single
    parent). A query walks resources from the most specific to ``ALL`` in the
    outer loop and roles (own role, then ancestors depth-first, then ``ALL``)
    in the inner loop; the first applicable rule decides. Nothing applicable
    means deny.

    All three structures are guarded together by one readers/writer lock:
    queries run concurrently, mutations are exclusive and atomic.

    Args:
        metrics: optional sink receiving ``aclx_decisions_total`` and
            ``aclx_decision_seconds`` for every decision.
        logger_sink: optional audit sink receiving one payload per decision.
    """

    def __init__(
        self,
        *,
        metrics: MetricsSink | None = None,
        logger_sink: DecisionLogSink | None = None,
    ) -> None:
        self._roles = RoleGraph()
        self._resources = ResourceTree()
        self._rules = RuleIndex()
        self._rw = ReadWriteLock()
        self._locked = False
        self._memo: Dict[_MemoKey, Decision] = {}
        self._memo_lock = threading.Lock()
        self.metrics = metrics
        self.logger_sink = logger_sink
        logger.debug("aclx: created acl")

    def __repr__(self) -> str:
        with self._rw.read():
            return (
                f"Acl(roles={len(self._roles)}, resources={len(self._resources)}, "
                f"rules={len(self._rules)}, locked={self._locked})"
            )

    # ------------------------------------------------------------------ #
    # Locking
    # ------------------------------------------------------------------ #

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        with self._rw.write():
            if self._locked:
                raise Locked()
            yield

    def lock(self) -> None:
        """Freeze rules and inheritance: changes raise ``Locked``, decisions are memoised.

        Registering new roles and resources stays possible; nothing refers to a
        new id yet, so no memoised decision can change.
        """
        with self._rw.write():
            self._locked = True
        logger.debug("aclx: acl locked")

    def unlock(self) -> None:
        with self._rw.write():
            self._locked = False
            with self._memo_lock:
                self._memo.clear()
        logger.debug("aclx: acl unlocked")

    @property
    def locked(self) -> bool:
        return self._locked

    # ------------------------------------------------------------------ #
    # Roles
    # ------------------------------------------------------------------ #

    def add_role(self, role: Hashable, parents: Iterable[Hashable] = ()) -> None:
        """Register *role*. Allowed while locked: a new id changes no decision."""
        if isinstance(parents, (str, bytes)):
            raise TypeError("parents must be a sequence of role ids, not a single string")
        parents = list(parents)
        with self._rw.write():
            self._roles.add(role, parents)

    def add_role_parent(self, role: Hashable, parent: Hashable) -> bool:
        with self._mutation():
            return self._roles.add_parent(role, parent)

    def remove_role_parent(self, role: Hashable, parent: Hashable) -> bool:
        with self._mutation():
            return self._roles.remove_parent(role, parent)

    def remove_role(self, role: Hashable, *, cascade: bool = False) -> None:
        """Remove *role*.

        By default a role that is a parent of another role or is referenced by
        a rule is rejected with ``RoleInUse``. With ``cascade=True`` it is
        detached from its children and its rules are dropped.
        """
        with self._mutation():
            if role not in self._roles:
                raise UnknownRole(role)
            if not cascade:
                children = self._roles.children_of(role)
                if children:
                    logger.warning("aclx: refusing to remove role %r, parent of %r", role, children)
                    raise RoleInUse(role, reason=f"parent of {children!r}")
                rules = self._rules.references_role(role)
                if rules:
                    logger.warning("aclx: refusing to remove role %r, used by %d rule(s)", role, len(rules))
                    raise RoleInUse(role, reason=f"referenced by {len(rules)} rule(s)")
            else:
                detached = self._roles.detach(role)
                purged = self._rules.purge_role(role)
                logger.debug("aclx: cascade for role %r: detached %r, purged %d rule(s)", role, detached, purged)
            self._roles.remove(role)

    # ------------------------------------------------------------------ #
    # Resources
    # ------------------------------------------------------------------ #

    def add_resource(self, resource: Hashable, parent: Optional[Hashable] = None) -> None:
        """Register *resource*. Allowed while locked, like ``add_role``."""
        with self._rw.write():
            self._resources.add(resource, parent)

    def remove_resource(self, resource: Hashable, *, cascade: bool = False) -> None:
        """Remove *resource*.

        By default a resource with children or rules is rejected with
        ``ResourceInUse``. With ``cascade=True`` the whole subtree is removed
        together with every rule defined on it.
        """
        with self._mutation():
            if resource not in self._resources:
                raise UnknownResource(resource)
            if not cascade:
                children = self._resources.children_of(resource)
                if children:
                    logger.warning("aclx: refusing to remove resource %r, parent of %r", resource, children)
                    raise ResourceInUse(resource, reason=f"parent of {children!r}")
                rules = self._rules.references_resource(resource)
                if rules:
                    logger.warning(
                        "aclx: refusing to remove resource %r, used by %d rule(s)", resource, len(rules)
                    )
                    raise ResourceInUse(resource, reason=f"referenced by {len(rules)} rule(s)")
                self._resources.remove(resource)
                return
            for victim in [*self._resources.descendants_of(resource), resource]:
                self._rules.purge_resource(victim)
                self._resources.remove(victim)
                logger.debug("aclx: cascade removed resource %r", victim)

    # ------------------------------------------------------------------ #
    # Rules
    # ------------------------------------------------------------------ #

    def _rule_key(
        self, role: Any, resource: Any, privilege: Any
    ) -> Tuple[Scope[Any], Scope[Any], Scope[Any]]:
        role_s, resource_s, privilege_s = scope(role), scope(resource), scope(privilege)
        if isinstance(role_s, Specific) and role_s.id not in self._roles:
            logger.warning("aclx: rule references unknown role %r", role_s.id)
            raise UnknownRole(role_s.id)
        if isinstance(resource_s, Specific) and resource_s.id not in self._resources:
            logger.warning("aclx: rule references unknown resource %r", resource_s.id)
            raise UnknownResource(resource_s.id)
        return resource_s, role_s, privilege_s

    def set_rule(
        self,
        effect: Effect | str,
        role: Any = None,
        resource: Any = None,
        privilege: Any = None,
        assertion: Any = None,
    ) -> Rule:
        """Store a rule, replacing any rule with the same exact key.

        ``None`` (or ``ALL``) for role, resource or privilege means "applies
        to all". *assertion* is an object with ``evaluate(role, resource,
        privilege, context)`` or a plain function of the same signature.
        """
        effect = Effect(effect)
        checked = as_assertion(assertion)
        with self._mutation():
            resource_s, role_s, privilege_s = self._rule_key(role, resource, privilege)
            return self._rules.set(resource_s, role_s, privilege_s, effect, checked)

    def allow(self, role: Any = None, resource: Any = None, privilege: Any = None, assertion: Any = None) -> Rule:
        return self.set_rule(Effect.ALLOW, role, resource, privilege, assertion)

    def deny(self, role: Any = None, resource: Any = None, privilege: Any = None, assertion: Any = None) -> Rule:
        return self.set_rule(Effect.DENY, role, resource, privilege, assertion)

    def unset_rule(self, role: Any = None, resource: Any = None, privilege: Any = None) -> Optional[Rule]:
        """Remove the rule at the exact key; a missing rule is not an error."""
        with self._mutation():
            key = (scope(resource), scope(role), scope(privilege))
            return self._rules.unset(*key)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def is_allowed(self, role: Any = None, resource: Any = None, privilege: Any = None, context: Any = None) -> bool:
        return self.evaluate(role, resource, privilege, context).allowed

    def is_denied(self, role: Any = None, resource: Any = None, privilege: Any = None, context: Any = None) -> bool:
        return not self.evaluate(role, resource, privilege, context).allowed

    def evaluate(
        self, role: Any = None, resource: Any = None, privilege: Any = None, context: Any = None
    ) -> Decision:
        """Decide whether *role* may exercise *privilege* on *resource*.

        ``None`` for role, resource or privilege queries the wildcard directly.
        *context* is handed unchanged to assertions.

        Raises:
            UnknownRole, UnknownResource: the query names an unregistered id.
            AssertionFailure: an assertion raised.
        """
        role, resource, privilege = scope_id(scope(role)), scope_id(scope(resource)), scope_id(scope(privilege))
        start = time.perf_counter()
        with self._rw.read():
            decision = self._decide(role, resource, privilege, context)
        self._emit(role, resource, privilege, decision, time.perf_counter() - start)
        return decision

    def _decide(self, role: Any, resource: Any, privilege: Any, context: Any) -> Decision:
        key = (role, resource, privilege)
        if self._locked:
            with self._memo_lock:
                cached = self._memo.get(key)
            if cached is not None:
                logger.debug("aclx: memo hit for %r", key)
                return cached
        decision, conditional = self._resolve(role, resource, privilege, context)
        if self._locked and not conditional:
            with self._memo_lock:
                self._memo[key] = decision
        return decision

    def _resolve(self, role: Any, resource: Any, privilege: Any, context: Any) -> Tuple[Decision, bool]:
        """Walk the search positions; returns the decision and whether an assertion was consulted."""
        roles: List[Scope[Any]] = []
        if role is not None:
            if role not in self._roles:
                raise UnknownRole(role)
            roles = [Specific(r) for r in self._roles.lineage(role)]
        roles.append(ALL)

        resources: List[Scope[Any]] = []
        if resource is not None:
            if resource not in self._resources:
                raise UnknownResource(resource)
            resources = [Specific(r) for r in self._resources.ancestor_chain(resource)]
        resources.append(ALL)

        privilege_s = scope(privilege)
        conditional = False
        for resource_s in resources:
            for role_s in roles:
                for rule in self._rules.rules_for(resource_s, role_s, privilege_s):
                    if rule is None:
                        continue
                    if rule.assertion is not None:
                        conditional = True
                        if not self._applies(rule, role, resource, privilege, context):
                            logger.debug("aclx: assertion of %r does not apply, continuing", rule.key)
                            continue
                    logger.debug(
                        "aclx: %r on %r to %r matched %r -> %s",
                        role, resource, privilege, rule.key, rule.effect.value,
                    )
                    return Decision(rule.effect, rule, "matched"), conditional
        logger.debug("aclx: %r on %r to %r: no applicable rule, deny", role, resource, privilege)
        return DEFAULT_DENY, conditional

    @staticmethod
    def _applies(rule: Rule, role: Any, resource: Any, privilege: Any, context: Any) -> bool:
        try:
            return bool(rule.assertion.evaluate(role, resource, privilege, context))
        except Exception as e:
            logger.error("aclx: assertion of rule %r raised %r", rule.key, e)
            raise AssertionFailure(rule, e) from e

    def _emit(self, role: Any, resource: Any, privilege: Any, decision: Decision, elapsed: float) -> None:
        # Observability must never change a decision.
        label = decision.effect.value
        if self.metrics is not None:
            try:
                self.metrics.inc("aclx_decisions_total", {"decision": label})
                observe = getattr(self.metrics, "observe", None)
                if callable(observe):
                    observe("aclx_decision_seconds", elapsed, {"decision": label})
            except Exception:
                logger.debug("aclx: metrics sink failed", exc_info=True)
        if self.logger_sink is not None:
            payload = {
                "role": role,
                "resource": resource,
                "privilege": privilege,
                "decision": label,
                "allowed": decision.allowed,
                "reason": decision.reason,
                "rule": decision.rule.as_dict() if decision.rule is not None else None,
                "duration_seconds": elapsed,
            }
            try:
                self.logger_sink.log(payload)
            except Exception:
                logger.debug("aclx: decision log sink failed", exc_info=True)

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    def has_role(self, role: Hashable) -> bool:
        with self._rw.read():
            return role in self._roles

    def has_resource(self, resource: Hashable) -> bool:
        with self._rw.read():
            return resource in self._resources

    def roles(self) -> List[Hashable]:
        with self._rw.read():
            return list(self._roles)

    def resources(self) -> List[Hashable]:
        with self._rw.read():
            return list(self._resources)

    def rules(self) -> List[Rule]:
        with self._rw.read():
            return list(self._rules)

    def get_rule(self, role: Any = None, resource: Any = None, privilege: Any = None) -> Optional[Rule]:
        with self._rw.read():
            return self._rules.lookup(scope(resource), scope(role), scope(privilege))

    def role_parents(self, role: Hashable) -> List[Hashable]:
        with self._rw.read():
            return self._roles.parents_of(role)

    def role_ancestors(self, role: Hashable) -> List[Hashable]:
        # Materialised inside the read lock; the graph may change afterwards.
        with self._rw.read():
            return list(self._roles.ancestors_of(role))

    def role_lineage(self, role: Hashable) -> List[Hashable]:
        with self._rw.read():
            return self._roles.lineage(role)

    def inherits_role(self, role: Hashable, ancestor: Hashable, only_parents: bool = False) -> bool:
        with self._rw.read():
            return self._roles.inherits(role, ancestor, only_parents)

    def resource_parent(self, resource: Hashable) -> Optional[Hashable]:
        with self._rw.read():
            return self._resources.parent_of(resource)

    def resource_lineage(self, resource: Hashable) -> List[Hashable]:
        with self._rw.read():
            return self._resources.ancestor_chain(resource)

    def resource_ancestors(self, resource: Hashable) -> List[Hashable]:
        with self._rw.read():
            return self._resources.ancestor_chain(resource)[1:]

    def inherits_resource(self, resource: Hashable, ancestor: Hashable, only_parent: bool = False) -> bool:
        with self._rw.read():
            return self._resources.inherits(resource, ancestor, only_parent)


__all__ = ["Acl"]
