"""Tests for the line contract: tracing, cycle detection and caching."""

import pytest

from taxcore.errors import LineCycleError
from taxcore.lines import evaluation_cache, line, line_names, trace_lines


class Parent:
    tag = "parent"

    def __init__(self):
        self.calls = 0
        self.child = Child(self)

    @line
    def l1(self):
        self.calls += 1
        return 100

    @line
    def l2(self):
        return self.l1() + self.child.l1()


class Child:
    tag = "child"

    def __init__(self, parent):
        self.parent = parent

    @line
    def l1(self):
        return self.parent.l1() * 2


class Loop:
    tag = "loop"

    @line
    def a(self):
        return self.b() + 1

    @line
    def b(self):
        return self.a() + 1


class Extended(Parent):
    @line
    def l3(self):
        return self.l2() + 1


def test_lines_compute_without_any_context():
    parent = Parent()
    assert parent.l2() == 300
    assert parent.calls == 2


def test_trace_records_cross_form_edges():
    parent = Parent()
    with trace_lines() as trace:
        parent.l2()
    assert trace.dependencies("parent", "l2") == {("parent", "l1"), ("child", "l1")}
    assert trace.dependencies("child", "l1") == {("parent", "l1")}
    assert trace.is_acyclic()


def test_cycle_raises_with_path():
    with trace_lines():
        with pytest.raises(LineCycleError) as excinfo:
            Loop().a()
    assert excinfo.value.path == [("loop", "a"), ("loop", "b"), ("loop", "a")]
    assert "loop.a -> loop.b -> loop.a" in str(excinfo.value)


def test_trace_resets_after_error():
    with trace_lines():
        with pytest.raises(LineCycleError):
            Loop().a()
    parent = Parent()
    with trace_lines() as trace:
        assert parent.l2() == 300
    assert trace.is_acyclic()


def test_cache_computes_each_line_once():
    parent = Parent()
    with evaluation_cache() as cache:
        assert parent.l2() == 300
        assert parent.l2() == 300
        assert parent.calls == 1
    assert len(cache) == 3
    # Outside the block every call recomputes again
    parent.l1()
    assert parent.calls == 2


def test_cache_keeps_forms_apart():
    first, second = Parent(), Parent()
    with evaluation_cache():
        first.l1()
        second.l1()
    assert first.calls == 1
    assert second.calls == 1


def test_trace_sees_cached_lines():
    parent = Parent()
    with evaluation_cache(), trace_lines() as trace:
        parent.l2()
        parent.l2()
    assert ("parent", "l1") in trace.lines


def test_line_names_in_declaration_order():
    assert line_names(Parent()) == ["l1", "l2"]
    assert line_names(Extended()) == ["l1", "l2", "l3"]
    assert line_names(Loop()) == ["a", "b"]
