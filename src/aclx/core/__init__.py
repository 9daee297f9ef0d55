from .engine import Acl
from .model import ALL, Decision, Effect, Rule, Scope, Specific, Wildcard, scope

__all__ = ["Acl", "ALL", "Decision", "Effect", "Rule", "Scope", "Specific", "Wildcard", "scope"]
