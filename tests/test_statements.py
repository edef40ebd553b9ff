"""Tests for statement execution and non-local control flow."""

import pytest

from conftest import assign, binop, block, call, fn, let, lit, num, recorder, ret, run, stmt, var

from taolang.evaluate import NIL, Interpreter, NotDefinedError
from taolang.model.expressions import IncrementExpr, IncrementOp
from taolang.model.statements import (
    BreakStatement,
    EmptyStatement,
    ForStatement,
    FunctionStatement,
    IfStatement,
    SwitchCase,
    SwitchStatement,
    WhileStatement,
)


def _inc(name):
    return IncrementExpr(op=IncrementOp.INC, operand=var(name))


def _count_loop(limit, *body, name="i"):
    """for (let i = 0; i < limit; i++) { body }"""
    return ForStatement(
        init=let(name, lit(0)),
        condition=binop("<", var(name), lit(limit)),
        step=_inc(name),
        body=block(*body),
    )


# ---------------------------------------------------------------------------
# Simple statements
# ---------------------------------------------------------------------------

class TestSimple:
    def test_empty_program_is_nil(self):
        value, _ = run([])
        assert value is NIL

    def test_empty_statement(self):
        value, _ = run([EmptyStatement(), stmt(lit(1)), EmptyStatement()])
        assert value == num(1)

    def test_let_defines(self):
        _, interp = run([let("x", lit(3))])
        assert interp.x == num(3)

    def test_let_without_value_is_nil(self):
        _, interp = run([let("x")])
        assert interp.x is NIL

    def test_last_expression_is_program_value(self):
        value, _ = run([stmt(lit(1)), let("y", lit(2)), stmt(lit(3)), let("z", lit(4))])
        assert value == num(3)

    def test_function_definition_binds_name(self):
        value, _ = run([
            FunctionStatement(function=fn(["a", "b"], ret(binop("+", var("a"), var("b"))), name="f")),
            stmt(call("f", lit(2), lit(3))),
        ])
        assert value == num(5)

    def test_block_scope(self):
        _, interp = run([
            let("x", lit(1)),
            block(let("x", lit(2)), let("inner", lit(3))),
        ])
        assert interp.x == num(1)
        with pytest.raises(NotDefinedError):
            interp.globals.lookup("inner")

    def test_block_assignment_reaches_outer(self):
        _, interp = run([
            let("x", lit(1)),
            block(stmt(assign(var("x"), lit(2)))),
        ])
        assert interp.x == num(2)


# ---------------------------------------------------------------------------
# if / else
# ---------------------------------------------------------------------------

class TestIf:
    @pytest.mark.parametrize("n, expected", [(-5, "neg"), (0, "zero"), (9, "pos")])
    def test_else_if_chain(self, n, expected):
        interp = Interpreter()
        interp.n = n
        interp.sign = ""
        interp.run([
            IfStatement(
                condition=binop("<", var("n"), lit(0)),
                then=block(stmt(assign(var("sign"), lit("neg")))),
                otherwise=IfStatement(
                    condition=binop("==", var("n"), lit(0)),
                    then=block(stmt(assign(var("sign"), lit("zero")))),
                    otherwise=block(stmt(assign(var("sign"), lit("pos")))),
                ),
            ),
        ])
        assert interp.sign.to_python() == expected

    def test_no_else(self):
        interp = Interpreter()
        calls = recorder(interp)
        interp.run([IfStatement(condition=lit(0), then=block(stmt(call("mark"))))])
        assert calls == []

    def test_branch_scope_is_local(self):
        _, interp = run([
            IfStatement(condition=lit(True), then=block(let("tmp", lit(1)))),
        ])
        assert "tmp" not in interp.globals.symbols


# ---------------------------------------------------------------------------
# Loops
# ---------------------------------------------------------------------------

class TestLoops:
    def test_for_counts(self):
        interp = Interpreter()
        calls = recorder(interp)
        interp.run([_count_loop(3, stmt(call("mark", var("i"))))])
        assert calls == [[0], [1], [2]]

    def test_for_variable_scoped_to_loop(self):
        _, interp = run([_count_loop(2)])
        assert "i" not in interp.globals.symbols

    def test_for_break(self):
        interp = Interpreter()
        calls = recorder(interp)
        interp.run([
            _count_loop(
                10,
                IfStatement(condition=binop("==", var("i"), lit(2)), then=block(BreakStatement())),
                stmt(call("mark", var("i"))),
            ),
        ])
        assert calls == [[0], [1]]

    def test_for_without_condition_needs_break(self):
        _, interp = run([
            let("n", lit(0)),
            ForStatement(body=block(
                stmt(_inc("n")),
                IfStatement(condition=binop(">=", var("n"), lit(5)), then=block(BreakStatement())),
            )),
        ])
        assert interp.n == num(5)

    def test_while(self):
        _, interp = run([
            let("n", lit(1)),
            WhileStatement(
                condition=binop("<", var("n"), lit(100)),
                body=block(stmt(assign(var("n"), binop("*", var("n"), lit(2))))),
            ),
        ])
        assert interp.n == num(128)

    def test_while_break(self):
        _, interp = run([
            let("n", lit(0)),
            WhileStatement(condition=lit(True), body=block(
                stmt(_inc("n")),
                BreakStatement(),
                stmt(assign(var("n"), lit(99))),
            )),
        ])
        assert interp.n == num(1)

    def test_break_leaves_only_inner_loop(self):
        interp = Interpreter()
        calls = recorder(interp)
        interp.run([
            _count_loop(2, _count_loop(
                5,
                IfStatement(condition=binop("==", var("j"), lit(1)), then=block(BreakStatement())),
                stmt(call("mark", var("i"), var("j"))),
                name="j",
            )),
        ])
        assert calls == [[0, 0], [1, 0]]

    def test_loop_body_gets_fresh_scope_per_iteration(self):
        interp = Interpreter()
        calls = recorder(interp)
        interp.run([
            _count_loop(2, let("seen", var("i")), stmt(call("mark", var("seen")))),
        ])
        assert calls == [[0], [1]]


# ---------------------------------------------------------------------------
# switch
# ---------------------------------------------------------------------------

class TestSwitch:
    def _switch(self, subject):
        return SwitchStatement(
            discriminant=lit(subject),
            cases=[
                SwitchCase(values=[lit(1), lit(2)], body=[stmt(call("mark", lit("low")))]),
                SwitchCase(values=[lit("x")], body=[
                    stmt(call("mark", lit("x"))),
                    BreakStatement(),
                    stmt(call("mark", lit("unreachable"))),
                ]),
            ],
            default=[stmt(call("mark", lit("default")))],
        )

    @pytest.mark.parametrize("subject, expected", [
        (1, [["low"]]),
        (2, [["low"]]),
        ("x", [["x"]]),
        (3, [["default"]]),
        (True, [["default"]]),
    ])
    def test_dispatch(self, subject, expected):
        interp = Interpreter()
        calls = recorder(interp)
        interp.run([self._switch(subject)])
        assert calls == expected

    def test_no_fallthrough(self):
        interp = Interpreter()
        calls = recorder(interp)
        interp.run([
            SwitchStatement(discriminant=lit(1), cases=[
                SwitchCase(values=[lit(1)], body=[stmt(call("mark", lit("one")))]),
                SwitchCase(values=[lit(2)], body=[stmt(call("mark", lit("two")))]),
            ]),
        ])
        assert calls == [["one"]]

    def test_no_match_without_default(self):
        interp = Interpreter()
        calls = recorder(interp)
        interp.run([
            SwitchStatement(discriminant=lit(5), cases=[
                SwitchCase(values=[lit(1)], body=[stmt(call("mark"))]),
            ]),
        ])
        assert calls == []

    def test_case_values_stop_at_first_match(self):
        interp = Interpreter()
        calls = recorder(interp)
        interp.run([
            SwitchStatement(discriminant=lit(1), cases=[
                SwitchCase(values=[lit(1), call("mark", lit("probe"))], body=[]),
            ]),
        ])
        assert calls == []

    def test_break_in_switch_does_not_leave_loop(self):
        interp = Interpreter()
        calls = recorder(interp)
        interp.run([
            _count_loop(3,
                SwitchStatement(discriminant=var("i"), cases=[
                    SwitchCase(values=[lit(1)], body=[BreakStatement()]),
                ]),
                stmt(call("mark", var("i"))),
            ),
        ])
        assert calls == [[0], [1], [2]]


# ---------------------------------------------------------------------------
# return
# ---------------------------------------------------------------------------

class TestReturn:
    def _define(self, interp, name, params, *body):
        interp.run([FunctionStatement(function=fn(params, *body, name=name))])

    def test_return_from_nested_block(self):
        interp = Interpreter()
        self._define(interp, "f", [], block(block(ret(lit(7)))), ret(lit(0)))
        assert interp.call("f") == num(7)

    def test_return_from_loop(self):
        interp = Interpreter()
        calls = recorder(interp)
        self._define(
            interp, "find", ["target"],
            _count_loop(
                10,
                stmt(call("mark", var("i"))),
                IfStatement(condition=binop("==", var("i"), var("target")), then=block(ret(var("i")))),
            ),
            ret(lit(-1)),
        )
        assert interp.call("find", 2) == num(2)
        assert calls == [[0], [1], [2]]

    def test_return_from_switch(self):
        interp = Interpreter()
        self._define(
            interp, "name", ["n"],
            SwitchStatement(discriminant=var("n"), cases=[
                SwitchCase(values=[lit(1)], body=[ret(lit("one"))]),
            ], default=[ret(lit("many"))]),
            ret(lit("unreachable")),
        )
        assert interp.call("name", 1).to_python() == "one"
        assert interp.call("name", 4).to_python() == "many"

    def test_bare_return_is_nil(self):
        interp = Interpreter()
        self._define(interp, "f", [], ret(), ret(lit(1)))
        assert interp.call("f") is NIL

    def test_return_does_not_leak_into_caller(self):
        interp = Interpreter()
        calls = recorder(interp)
        self._define(interp, "inner", [], ret(lit(1)))
        self._define(interp, "outer", [], stmt(call("inner")), stmt(call("mark")), ret(lit(2)))
        assert interp.call("outer") == num(2)
        assert calls == [[]]

    def test_top_level_return(self):
        interp = Interpreter()
        calls = recorder(interp)
        value = interp.run([stmt(lit(1)), ret(lit("done")), stmt(call("mark"))])
        assert value.to_python() == "done"
        assert calls == []

    def test_top_level_break_stops_program(self):
        interp = Interpreter()
        calls = recorder(interp)
        value = interp.run([stmt(lit(4)), BreakStatement(), stmt(call("mark"))])
        assert value == num(4)
        assert calls == []

    def test_signal_cleared_between_runs(self):
        interp = Interpreter()
        interp.run([ret(lit(1))])
        assert interp.run([stmt(lit(2))]) == num(2)
