import pytest

from aclx.core.errors import CycleDetected, DuplicateRole, RoleInUse, UnknownParent, UnknownRole
from aclx.core.roles import RoleGraph


def _graph() -> RoleGraph:
    g = RoleGraph()
    g.add("guest")
    g.add("staff", ["guest"])
    g.add("editor", ["staff"])
    g.add("publisher", ["editor"])
    g.add("supervisor", ["editor"])
    return g


def test_add_and_contains():
    g = _graph()
    assert "guest" in g and "staff" in g
    assert "admin" not in g
    assert len(g) == 5
    assert list(g) == ["guest", "staff", "editor", "publisher", "supervisor"]


def test_duplicate_role_rejected():
    g = _graph()
    with pytest.raises(DuplicateRole) as ei:
        g.add("guest")
    assert ei.value.role == "guest"


def test_unknown_parent_rejected_and_graph_unchanged():
    g = _graph()
    with pytest.raises(UnknownParent) as ei:
        g.add("intern", ["staff", "nobody"])
    assert ei.value.parent == "nobody"
    assert "intern" not in g


def test_wildcard_ids_rejected():
    g = RoleGraph()
    with pytest.raises(TypeError):
        g.add(None)


def test_parents_are_ordered_and_deduplicated():
    g = _graph()
    g.add("lead", ["supervisor", "guest", "supervisor"])
    assert g.parents_of("lead") == ["supervisor", "guest"]


def test_lineage_and_ancestors():
    g = _graph()
    assert g.lineage("guest") == ["guest"]
    assert g.lineage("staff") == ["staff", "guest"]
    assert g.lineage("publisher") == ["publisher", "editor", "staff", "guest"]
    assert list(g.ancestors_of("guest")) == []
    assert list(g.ancestors_of("supervisor")) == ["editor", "staff", "guest"]


def test_ancestors_unknown_role_raises_eagerly():
    g = _graph()
    with pytest.raises(UnknownRole):
        g.ancestors_of("admin")


def test_ancestors_depth_first_in_parent_order_visits_once():
    g = RoleGraph()
    g.add("a")
    g.add("b", ["a"])
    g.add("c", ["a"])
    g.add("e")
    g.add("d", ["b", "c", "e"])
    # b's branch is exhausted (reaching a) before c; a is not repeated
    assert list(g.ancestors_of("d")) == ["b", "a", "c", "e"]


def test_ancestors_is_lazy_and_restartable():
    g = _graph()
    it = g.ancestors_of("publisher")
    assert next(it) == "editor"
    assert list(g.ancestors_of("publisher")) == ["editor", "staff", "guest"]
    assert list(it) == ["staff", "guest"]


def test_add_parent_appends_with_lowest_precedence():
    g = _graph()
    g.add("admin")
    assert g.add_parent("staff", "admin") is True
    assert g.parents_of("staff") == ["guest", "admin"]
    assert g.add_parent("staff", "admin") is False


def test_add_parent_cycle_detected_leaves_graph_unchanged():
    g = _graph()
    with pytest.raises(CycleDetected) as ei:
        g.add_parent("guest", "publisher")
    assert (ei.value.role, ei.value.parent) == ("guest", "publisher")
    assert g.parents_of("guest") == []
    with pytest.raises(CycleDetected):
        g.add_parent("staff", "staff")


def test_add_parent_unknowns():
    g = _graph()
    with pytest.raises(UnknownRole):
        g.add_parent("admin", "guest")
    with pytest.raises(UnknownParent):
        g.add_parent("guest", "admin")


def test_remove_parent():
    g = _graph()
    assert g.remove_parent("staff", "guest") is True
    assert g.remove_parent("staff", "guest") is False
    assert g.lineage("editor") == ["editor", "staff"]


def test_remove_rejects_role_in_use():
    g = _graph()
    with pytest.raises(RoleInUse):
        g.remove("editor")
    g.remove("publisher")
    g.remove("supervisor")
    g.remove("editor")
    assert "editor" not in g


def test_detach_then_remove():
    g = _graph()
    assert g.detach("editor") == ["publisher", "supervisor"]
    g.remove("editor")
    assert g.parents_of("publisher") == []


def test_inherits():
    g = _graph()
    assert g.inherits("publisher", "guest") is True
    assert g.inherits("publisher", "guest", only_parents=True) is False
    assert g.inherits("publisher", "editor", only_parents=True) is True
    assert g.inherits("guest", "publisher") is False
    with pytest.raises(UnknownRole):
        g.inherits("guest", "admin")


def test_string_parents_rejected():
    g = _graph()
    with pytest.raises(TypeError):
        g.add("intern", "staff")
    assert "intern" not in g
