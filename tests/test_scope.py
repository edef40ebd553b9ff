"""Tests for lexical scopes and the control signal slot."""

import pytest

from taolang.evaluate import NIL, Context, NotDefinedError, Value


def _n(n):
    return Value.from_number(n)


class TestLookup:
    def test_local_binding(self):
        ctx = Context()
        ctx.define("x", _n(1))
        assert ctx.lookup("x") == _n(1)

    def test_walks_parent_chain(self):
        root = Context()
        root.define("x", _n(1))
        inner = Context(parent=Context(parent=root))
        assert inner.lookup("x") == _n(1)

    def test_shadowing(self):
        root = Context()
        root.define("x", _n(1))
        inner = root.child()
        inner.define("x", _n(2))
        assert inner.lookup("x") == _n(2)
        assert root.lookup("x") == _n(1)

    def test_missing_name(self):
        with pytest.raises(NotDefinedError, match="`nope' is not defined"):
            Context().lookup("nope")

    def test_find_returns_none_when_missing(self):
        assert Context().find("nope") is None

    def test_define_overwrites_local(self):
        ctx = Context()
        ctx.define("x", _n(1))
        ctx.define("x", _n(2))
        assert ctx.lookup("x") == _n(2)


class TestAssign:
    def test_assign_updates_owning_scope(self):
        root = Context()
        root.define("x", _n(1))
        inner = root.child()
        inner.assign("x", _n(5))
        assert root.symbols["x"] == _n(5)
        assert "x" not in inner.symbols

    def test_assign_undefined(self):
        with pytest.raises(NotDefinedError):
            Context().assign("x", _n(1))


class TestSignal:
    def test_child_shares_signal(self):
        root = Context()
        inner = root.child().child()
        inner.set_return(_n(9))
        assert root.signal.returned
        assert root.signal.return_value == _n(9)

    def test_fresh_context_has_own_signal(self):
        root = Context()
        call_ctx = Context()
        call_ctx.set_parent(root)
        call_ctx.set_break()
        assert call_ctx.signal.broke
        assert not root.signal.broke

    def test_pending(self):
        ctx = Context()
        assert not ctx.signal.pending
        ctx.set_break()
        assert ctx.signal.pending

    def test_default_return_value_is_nil(self):
        assert Context().signal.return_value is NIL
