#!/usr/bin/env python3
"""
DecisionLogger configuration demo.

Run:
  python examples/logging/decision_logger_demo.py

Shows plain text audit lines, JSON lines and smart sampling (denies always
kept, allows dropped) on the 'aclx.audit' logger.
"""

import logging

from aclx import Acl
from aclx.logging.decision_logger import DecisionLogger


def setup_logging() -> None:
    """Configure logging so 'aclx.audit' emits to stdout."""
    root = logging.getLogger()
    if not root.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(h)
    root.setLevel(logging.INFO)


def make_acl(sink: DecisionLogger) -> Acl:
    acl = Acl(logger_sink=sink)
    acl.add_role("reader")
    acl.add_resource("doc")
    acl.allow("reader", "doc", "read")
    return acl


def run(acl: Acl) -> None:
    acl.is_allowed("reader", "doc", "read")
    acl.is_allowed("reader", "doc", "delete")


def main() -> None:
    setup_logging()

    print("\n=== 1) Text lines ===")
    run(make_acl(DecisionLogger()))

    print("\n=== 2) JSON lines ===")
    run(make_acl(DecisionLogger(as_json=True)))

    print("\n=== 3) Smart sampling: every deny, no allow ===")
    run(make_acl(DecisionLogger(as_json=True, smart_sampling=True, sample_rate=0.0)))


if __name__ == "__main__":
    main()
