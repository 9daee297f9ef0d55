import importlib


def test_public_api_imports():
    names = [
        "Acl",
        "ALL",
        "Specific",
        "Effect",
        "Decision",
        "Rule",
        "DecisionLogger",
        "AllOf",
        "AnyOf",
        "Not",
        "AclError",
        "UnknownRole",
        "UnknownResource",
        "UnknownParent",
        "DuplicateRole",
        "DuplicateResource",
        "CycleDetected",
        "RoleInUse",
        "ResourceInUse",
        "AssertionFailure",
        "Locked",
        "core",
        "metrics",
        "__version__",
    ]
    mod = importlib.import_module("aclx")
    for n in names:
        assert hasattr(mod, n), f"Missing public import: aclx.{n}"


def test_error_hierarchy():
    import aclx

    assert issubclass(aclx.UnknownRole, LookupError)
    assert issubclass(aclx.DuplicateRole, ValueError)
    for n in ("CycleDetected", "RoleInUse", "ResourceInUse", "AssertionFailure", "Locked"):
        assert issubclass(getattr(aclx, n), aclx.AclError)


def test_ports_surface():
    from aclx.core import ports

    assert sorted(ports.__all__) == ["Assertion", "DecisionLogSink", "MetricsSink"]
    assert not hasattr(ports, "MetricsObserve")
