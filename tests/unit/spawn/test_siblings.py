import pytest

from iam.spawn.siblings import SiblingRegistry


def test_siblings_of_children_under_same_parent():
    siblings = SiblingRegistry()
    siblings.register("c1", "p")
    siblings.register("c2", "p")
    siblings.register("c3", "p")

    assert siblings.siblings_of("c1") == ["c2", "c3"]
    assert siblings.siblings_of("c2") == ["c1", "c3"]
    assert siblings.children_of("p") == ["c1", "c2", "c3"]


def test_no_parent_no_siblings():
    siblings = SiblingRegistry()
    siblings.register("c1", "p")

    assert siblings.siblings_of("p") == []
    assert siblings.siblings_of("unknown") == []
    assert siblings.parent_of("p") is None


def test_register_is_idempotent_and_keeps_description():
    siblings = SiblingRegistry()
    siblings.register("c1", "p", "explore api")
    siblings.register("c1", "p")

    assert siblings.children_of("p") == ["c1"]
    assert siblings.description_of("c1") == "explore api"


def test_reregister_moves_child():
    siblings = SiblingRegistry()
    siblings.register("c1", "p1")
    siblings.register("c1", "p2")

    assert siblings.parent_of("c1") == "p2"
    assert siblings.children_of("p1") == []
    assert siblings.children_of("p2") == ["c1"]


def test_register_rejects_bad_edges():
    siblings = SiblingRegistry()
    with pytest.raises(ValueError):
        siblings.register("", "p")
    with pytest.raises(ValueError):
        siblings.register("c", "c")


def test_cleanup_removes_edge_and_orphans_children():
    siblings = SiblingRegistry()
    siblings.register("mid", "root")
    siblings.register("other", "root")
    siblings.register("leaf1", "mid")
    siblings.register("leaf2", "mid")

    siblings.cleanup("mid")

    assert siblings.parent_of("mid") is None
    assert siblings.children_of("root") == ["other"]
    assert siblings.siblings_of("other") == []
    assert siblings.parent_of("leaf1") is None
    assert siblings.siblings_of("leaf1") == []
