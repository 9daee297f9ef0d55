import aclx as amod


def test_version_detect_ok(monkeypatch):
    class DummyExc(Exception):
        pass

    calls = {}

    def fake_version(name):
        calls["name"] = name
        return "9.9.9"

    monkeypatch.setattr(amod, "PackageNotFoundError", DummyExc, raising=False)
    monkeypatch.setattr(amod, "version", fake_version, raising=False)
    assert amod._detect_version() == "9.9.9"
    assert calls["name"] == "aclx"


def test_version_detect_fallback(monkeypatch):
    monkeypatch.setattr(amod, "version", None, raising=False)
    assert amod._detect_version() == "0.1.0"


def test_version_detect_not_installed(monkeypatch):
    class DummyExc(Exception):
        pass

    def raising(name):
        raise DummyExc("nope")

    monkeypatch.setattr(amod, "PackageNotFoundError", DummyExc, raising=False)
    monkeypatch.setattr(amod, "version", raising, raising=False)
    assert amod._detect_version() == "0.1.0"
