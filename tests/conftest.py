"""Shared test helpers for the taolang test suite."""

from taolang.evaluate import Interpreter, Value
from taolang.model.expressions import (
    AssignmentExpr,
    BinaryExpr,
    BinaryOp,
    CallExpr,
    FunctionExpr,
    IndexExpr,
    LiteralExpr,
    VariableRef,
)
from taolang.model.statements import (
    BlockStatement,
    ExpressionStatement,
    LetStatement,
    ReturnStatement,
)


def lit(value=None):
    """Shorthand for LiteralExpr(value=...). No argument means nil."""
    return LiteralExpr(value=value)


def var(name):
    return VariableRef(name=name)


def binop(op, left, right):
    return BinaryExpr(op=BinaryOp(op), left=left, right=right)


def call(callee, *args):
    if isinstance(callee, str):
        callee = var(callee)
    return CallExpr(callee=callee, args=list(args))


def index(indexable, key):
    return IndexExpr(indexable=indexable, key=key)


def assign(target, value):
    return AssignmentExpr(target=target, value=value)


def let(name, value=None):
    return LetStatement(name=name, value=value)


def ret(value=None):
    return ReturnStatement(value=value)


def stmt(expr):
    return ExpressionStatement(expr=expr)


def block(*stmts):
    return BlockStatement(statements=list(stmts))


def fn(params, *body, name=None):
    return FunctionExpr(name=name, params=list(params), body=list(body))


def recorder(interp, name="mark", result=True):
    """Install a builtin that records its arguments and returns *result*.

    Returns the list the calls are appended to.
    """
    calls = []

    def _mark(args):
        calls.append([a.to_python() for a in args])
        return result

    interp.register_builtin(name, _mark)
    return calls


def run(stmts, **kwargs):
    """Run statements in a fresh Interpreter; return (value, interpreter)."""
    interp = Interpreter(**kwargs)
    value = interp.run(list(stmts))
    return value, interp


def num(n):
    return Value.from_number(n)
