import importlib
import sys
import types


def _install_fake_prometheus(monkeypatch):
    class _Child:
        def __init__(self, obj, labels):
            self._obj, self._labels = obj, labels

        def inc(self, *args, **kwargs):
            self._obj.calls.append(("inc", self._labels))

        def observe(self, v):
            self._obj.calls.append(("observe", self._labels, float(v)))

    class _Metric:
        def __init__(self, name, doc, labelnames=None, registry=None):
            self.name, self.doc = name, doc
            self.labelnames = tuple(labelnames or [])
            self.registry = registry
            self.calls = []

        def labels(self, **kw):
            return _Child(self, kw)

    fake = types.ModuleType("prometheus_client")
    fake.Counter = _Metric
    fake.Histogram = _Metric
    monkeypatch.setitem(sys.modules, "prometheus_client", fake)
    if "aclx.metrics.prometheus" in sys.modules:
        importlib.reload(sys.modules["aclx.metrics.prometheus"])


def _install_fake_otel(monkeypatch):
    class _Hist:
        def __init__(self):
            self.vals = []

        def record(self, v, attributes=None):
            self.vals.append((float(v), attributes))

    class _Counter:
        def __init__(self):
            self.adds = []

        def add(self, v, attributes=None):
            self.adds.append((int(v), attributes))

    class _Meter:
        def create_counter(self, name, **kw):
            return _Counter()

        def create_histogram(self, name, **kw):
            return _Hist()

    def get_meter(*args, **kwargs):
        return _Meter()

    fake = types.ModuleType("opentelemetry.metrics")
    fake.get_meter = get_meter
    monkeypatch.setitem(sys.modules, "opentelemetry.metrics", fake)
    if "aclx.metrics.otel" in sys.modules:
        importlib.reload(sys.modules["aclx.metrics.otel"])


def test_prometheus_metrics_inc_and_observe(monkeypatch):
    _install_fake_prometheus(monkeypatch)
    from aclx.metrics.prometheus import PrometheusMetrics

    m = PrometheusMetrics(namespace="aclx_test", registry="reg")
    assert m._counter.name == "aclx_test_decisions_total"
    assert m._counter.registry == "reg"
    m.inc("aclx_decisions_total", {"decision": "allow"})
    m.observe("aclx_decision_seconds", 0.125, {"decision": "allow"})
    m.inc("aclx_decisions_total")
    assert m._counter.calls == [("inc", {"decision": "allow"}), ("inc", {"decision": "unknown"})]
    assert m._hist.calls == [("observe", {"decision": "allow"}, 0.125)]


def test_otel_metrics_inc_and_observe(monkeypatch):
    _install_fake_otel(monkeypatch)
    from aclx.metrics.otel import OpenTelemetryMetrics

    m = OpenTelemetryMetrics()
    m.inc("aclx_decisions_total", {"decision": "deny"})
    m.observe("aclx_decision_seconds", 0.2, {"decision": "deny"})
    assert m._counter.adds == [(1, {"decision": "deny"})]
    assert m._hist.vals == [(0.2, {"decision": "deny"})]


def test_prometheus_sink_wired_into_acl(monkeypatch):
    _install_fake_prometheus(monkeypatch)
    from aclx import Acl
    from aclx.metrics.prometheus import PrometheusMetrics

    m = PrometheusMetrics(namespace="aclx_wired")
    acl = Acl(metrics=m)
    acl.add_role("guest")
    acl.allow("guest", None, "view")
    acl.is_allowed("guest", None, "view")
    acl.is_allowed("guest", None, "edit")
    assert m._counter.calls == [("inc", {"decision": "allow"}), ("inc", {"decision": "deny"})]
    assert len(m._hist.calls) == 2
