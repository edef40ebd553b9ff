"""Execution engine: tree-walking interpreter for taolang syntax trees.

The ``ExecutionEngine`` evaluates expressions and executes statements
against ``Context`` scopes. Non-local control flow (``return`` and
``break``) travels through the scope's ``ControlSignal`` rather than
through exceptions: every sequencing construct checks the signal after
each child statement and stops early when it is set.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from taolang.model.expressions import (
    ArrayExpr,
    AssignmentExpr,
    BinaryExpr,
    BinaryOp,
    CallExpr,
    Expression,
    FunctionExpr,
    IncrementExpr,
    IncrementOp,
    IndexExpr,
    LiteralExpr,
    NewExpr,
    ObjectExpr,
    TernaryExpr,
    UnaryExpr,
    UnaryOp,
    VariableRef,
)
from taolang.model.statements import (
    BlockStatement,
    ExpressionStatement,
    ForStatement,
    FunctionStatement,
    IfStatement,
    LetStatement,
    ReturnStatement,
    Statement,
    SwitchStatement,
    WhileStatement,
)

from ._callables import Closure
from ._config import ArityPolicy, EvaluatorConfig, resolve_config
from ._errors import (
    CallDepthError,
    NotAssignableError,
    NotCallableError,
    TaoError,
    TaoSyntaxError,
    TaoTypeError,
)
from ._protocols import TaoCallable
from ._scope import Context
from ._values import (
    FALSE,
    NIL,
    TRUE,
    TaoArray,
    TaoObject,
    Value,
    ValueKind,
    int_pow,
    shift_left,
    shift_right,
    trunc_div,
    trunc_mod,
    wrap_int64,
)

logger = logging.getLogger(__name__)

_ASSIGNABLE_KINDS = frozenset({"variable_ref", "index"})


def values_equal(left: Value, right: Value) -> bool:
    """Equality used by ``switch``: same kind and same value.

    Containers and closures compare by identity, builtins by the native
    callable they wrap.
    """
    if left.kind is not right.kind:
        return False
    if left.kind is ValueKind.BUILTIN:
        return left.payload.same_native(right.payload)
    if left.kind in (ValueKind.OBJECT, ValueKind.ARRAY, ValueKind.FUNCTION):
        return left.payload is right.payload
    return left.payload == right.payload


# ---------------------------------------------------------------------------
# ExecutionEngine
# ---------------------------------------------------------------------------

class ExecutionEngine:
    """Tree-walking interpreter.

    Parameters
    ----------
    config : EvaluatorConfig | dict | None
        Behaviour switches (arity policy, call depth limit, legacy
        compatibility flags). Defaults to ``EvaluatorConfig()``.
    """

    def __init__(self, config: EvaluatorConfig | dict | None = None) -> None:
        self.config = resolve_config(config)
        self.depth = 0

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def run_program(self, statements: Sequence[Statement], ctx: Context) -> Value:
        """Execute top-level statements and return the program's value.

        The value is the operand of a top-level ``return`` if one runs,
        otherwise the value of the last top-level expression statement
        (nil if there is none). A top-level ``break`` stops the program.
        The signal slot of *ctx* is cleared afterwards so the scope can
        be reused.
        """
        result = NIL
        signal = ctx.signal
        logger.debug("program start in %r", ctx)
        try:
            for stmt in statements:
                if stmt.kind == "expression":
                    result = self.evaluate(stmt.expr, ctx)
                else:
                    self.execute(stmt, ctx)
                if signal.returned:
                    result = signal.return_value
                    break
                if signal.broke:
                    break
        finally:
            signal.returned = False
            signal.broke = False
            signal.return_value = NIL
        logger.debug("program done -> %s", result)
        return result

    def execute(self, stmt: Statement, ctx: Context) -> None:
        handler = self._STMT_DISPATCH.get(stmt.kind)
        if handler is None:
            raise TaoError(f"unsupported statement kind: {stmt.kind}")
        handler(self, stmt, ctx)

    def execute_body(self, stmts: Sequence[Statement], ctx: Context) -> None:
        """Execute *stmts* in order, stopping once a signal is pending."""
        for stmt in stmts:
            self.execute(stmt, ctx)
            if ctx.signal.pending:
                return

    def evaluate(self, expr: Expression, ctx: Context) -> Value:
        handler = self._EXPR_DISPATCH.get(expr.kind)
        if handler is None:
            raise TaoError(f"unsupported expression kind: {expr.kind}")
        return handler(self, expr, ctx)

    def assign(self, target: Expression, ctx: Context, value: Value) -> None:
        """Store *value* through the assignment path of *target*."""
        if target.kind == "variable_ref":
            ctx.assign(target.name, value)
        elif target.kind == "index":
            self._assign_index(target, ctx, value)
        else:
            raise NotAssignableError(
                f"`{self.evaluate(target, ctx)}' is not assignable"
            )

    def invoke(self, callee: Value, args: list[Value]) -> Value:
        """Invoke a Function or Builtin value in a fresh, parentless scope."""
        target = callee.payload
        if not callee.is_callable or not isinstance(target, TaoCallable):
            raise NotCallableError(f"`{callee}' is not callable")
        if self.depth >= self.config.max_call_depth:
            raise CallDepthError(
                f"maximum call depth ({self.config.max_call_depth}) exceeded"
            )
        self.depth += 1
        try:
            return target.execute(Context(name=target.name or ""), args)
        finally:
            self.depth -= 1

    def run_function(
        self, function: FunctionExpr, ctx: Context, args: list[Value],
    ) -> Value:
        """Bind *args* into *ctx* and run the function body there."""
        params = function.params
        if len(args) != len(params) and self.config.arity is ArityPolicy.STRICT:
            raise TaoTypeError(
                f"function {function.name or '(anonymous)'} expects "
                f"{len(params)} argument(s), got {len(args)}"
            )
        for i, param in enumerate(params):
            ctx.define(param, args[i] if i < len(args) else NIL)

        logger.debug(
            "call %s depth=%d args=%d", function.name or "(anonymous)",
            self.depth, len(args),
        )
        self.execute_body(function.body, ctx)
        result = ctx.signal.return_value if ctx.signal.returned else NIL
        logger.debug("return %s -> %s", function.name or "(anonymous)", result)
        return result

    # -----------------------------------------------------------------------
    # Statement dispatch
    # -----------------------------------------------------------------------

    def _exec_empty(self, _stmt: Statement, _ctx: Context) -> None:
        pass

    def _exec_let(self, stmt: LetStatement, ctx: Context) -> None:
        value = self.evaluate(stmt.value, ctx) if stmt.value is not None else NIL
        ctx.define(stmt.name, value)

    def _exec_function_def(self, stmt: FunctionStatement, ctx: Context) -> None:
        self.evaluate(stmt.function, ctx)

    def _exec_return(self, stmt: ReturnStatement, ctx: Context) -> None:
        value = self.evaluate(stmt.value, ctx) if stmt.value is not None else NIL
        ctx.set_return(value)

    def _exec_block(self, stmt: BlockStatement, ctx: Context) -> None:
        self.execute_body(stmt.statements, ctx.child())

    def _exec_expression(self, stmt: ExpressionStatement, ctx: Context) -> None:
        self.evaluate(stmt.expr, ctx)

    def _exec_for(self, stmt: ForStatement, ctx: Context) -> None:
        loop_ctx = ctx.child("--for--")
        if stmt.init is not None:
            self.execute(stmt.init, loop_ctx)

        while stmt.condition is None or self.evaluate(stmt.condition, loop_ctx).truth(loop_ctx):
            self._exec_block(stmt.body, loop_ctx)
            if self._consume_break(loop_ctx):
                break
            if loop_ctx.signal.returned:
                return
            if stmt.step is not None:
                self.evaluate(stmt.step, loop_ctx)

    def _exec_while(self, stmt: WhileStatement, ctx: Context) -> None:
        while self.evaluate(stmt.condition, ctx).truth(ctx):
            self._exec_block(stmt.body, ctx)
            if self._consume_break(ctx):
                break
            if ctx.signal.returned:
                return

    def _exec_break(self, _stmt: Statement, ctx: Context) -> None:
        ctx.set_break()

    def _exec_if(self, stmt: IfStatement, ctx: Context) -> None:
        if self.evaluate(stmt.condition, ctx).truth(ctx):
            self._exec_block(stmt.then, ctx)
        elif stmt.otherwise is not None:
            self.execute(stmt.otherwise, ctx)

    def _exec_switch(self, stmt: SwitchStatement, ctx: Context) -> None:
        value = self.evaluate(stmt.discriminant, ctx)

        body = stmt.default
        for case in stmt.cases:
            if any(values_equal(value, self.evaluate(v, ctx)) for v in case.values):
                body = case.body
                break

        if body is None:
            return
        self.execute_body(body, ctx.child("--switch--"))
        self._consume_break(ctx)

    @staticmethod
    def _consume_break(ctx: Context) -> bool:
        if ctx.signal.broke:
            ctx.signal.broke = False
            return True
        return False

    # Statement dispatch table
    _STMT_DISPATCH: dict[str, Callable[[ExecutionEngine, Statement, Context], None]] = {
        "empty": _exec_empty,
        "let": _exec_let,
        "function_def": _exec_function_def,
        "return": _exec_return,
        "block": _exec_block,
        "expression": _exec_expression,
        "for": _exec_for,
        "while": _exec_while,
        "break": _exec_break,
        "if": _exec_if,
        "switch": _exec_switch,
    }

    # -----------------------------------------------------------------------
    # Expression dispatch
    # -----------------------------------------------------------------------

    def _eval_literal(self, expr: LiteralExpr, _ctx: Context) -> Value:
        value = expr.value
        if value is None:
            return NIL
        if isinstance(value, bool):
            return Value.from_boolean(value)
        if isinstance(value, int):
            return Value.from_number(value)
        return Value.from_string(value)

    def _eval_variable_ref(self, expr: VariableRef, ctx: Context) -> Value:
        return ctx.lookup(expr.name)

    def _eval_unary(self, expr: UnaryExpr, ctx: Context) -> Value:
        value = self.evaluate(expr.operand, ctx)
        op = expr.op
        if op is UnaryOp.NOT:
            return Value.from_boolean(not value.truth(ctx))
        if op is UnaryOp.POS:
            if not value.is_number:
                raise TaoTypeError("+value is invalid")
            return value
        if op is UnaryOp.NEG:
            if not value.is_number:
                raise TaoTypeError("-value is invalid")
            if self.config.legacy_unary_minus:
                return value
            return Value.from_number(-value.number)
        if op is UnaryOp.BIT_NOT:
            if not value.is_number:
                raise TaoTypeError("^value is invalid")
            return Value.from_number(~value.number)
        raise TaoSyntaxError(f"unknown unary operator: {op}")

    def _eval_increment(self, expr: IncrementExpr, ctx: Context) -> Value:
        old = self.evaluate(expr.operand, ctx)
        if not old.is_number or expr.operand.kind not in _ASSIGNABLE_KINDS:
            raise NotAssignableError(f"`{old}' is not assignable")

        if expr.op is IncrementOp.INC:
            new = Value.from_number(old.number + 1)
        elif expr.op is IncrementOp.DEC:
            new = Value.from_number(old.number - 1)
        else:
            raise TaoError(f"unknown increment operator: {expr.op}")

        self.assign(expr.operand, ctx, new)
        return new if expr.prefix else old

    def _eval_binary(self, expr: BinaryExpr, ctx: Context) -> Value:
        op = expr.op

        # Logical operators short-circuit and never reach the kind table.
        if op is BinaryOp.AND:
            if not self.evaluate(expr.left, ctx).truth(ctx):
                return FALSE
            return Value.from_boolean(self.evaluate(expr.right, ctx).truth(ctx))
        if op is BinaryOp.OR:
            left = self.evaluate(expr.left, ctx)
            if left.truth(ctx):
                return left
            return self.evaluate(expr.right, ctx)

        left = self.evaluate(expr.left, ctx)
        right = self.evaluate(expr.right, ctx)
        lk, rk = left.kind, right.kind

        if lk is ValueKind.NIL and rk is ValueKind.NIL:
            if op is BinaryOp.EQ:
                return TRUE
            if op is BinaryOp.NE:
                return FALSE

        elif lk is ValueKind.BOOLEAN and rk is ValueKind.BOOLEAN:
            if op is BinaryOp.EQ:
                return Value.from_boolean(left.boolean == right.boolean)
            if op is BinaryOp.NE:
                return Value.from_boolean(left.boolean != right.boolean)

        elif lk is ValueKind.NUMBER and rk is ValueKind.NUMBER:
            result = self._apply_number_op(op, left.number, right.number)
            if result is not None:
                return result

        elif lk is ValueKind.STRING and rk is ValueKind.STRING:
            if op is BinaryOp.ADD:
                return Value.from_string(left.string + right.string)
            if op is BinaryOp.EQ:
                return Value.from_boolean(left.string == right.string)
            if op is BinaryOp.NE:
                return Value.from_boolean(left.string != right.string)
            raise TaoSyntaxError("not supported operator on two strings")

        elif lk is ValueKind.BUILTIN and rk is ValueKind.BUILTIN:
            same = left.payload.same_native(right.payload)
            if op is BinaryOp.EQ:
                return Value.from_boolean(same)
            if op is BinaryOp.NE:
                return Value.from_boolean(not same)
            raise TaoSyntaxError("not supported operator on two builtins")

        raise TaoSyntaxError("unknown binary operator and operands")

    def _apply_number_op(self, op: BinaryOp, a: int, b: int) -> Value | None:
        if op is BinaryOp.ADD:
            return Value.from_number(a + b)
        if op is BinaryOp.SUB:
            return Value.from_number(a - b)
        if op is BinaryOp.MUL:
            return Value.from_number(a * b)
        if op is BinaryOp.DIV:
            if b == 0:
                raise TaoTypeError("divide by zero")
            return Value.from_number(trunc_div(a, b))
        if op is BinaryOp.MOD:
            if b == 0:
                raise TaoTypeError("divide by zero")
            return Value.from_number(trunc_mod(a, b))
        if op is BinaryOp.POW:
            if self.config.legacy_exponent_shift:
                return Value.from_number(shift_left(a, b))
            if a == 0 and b < 0:
                raise TaoTypeError("divide by zero")
            return Value.from_number(int_pow(a, b))

        # Shift
        if op is BinaryOp.SHL:
            return Value.from_number(shift_left(a, b))
        if op is BinaryOp.SHR:
            return Value.from_number(shift_right(a, b))

        # Bitwise
        if op is BinaryOp.BIT_AND:
            return Value.from_number(a & b)
        if op is BinaryOp.BIT_OR:
            return Value.from_number(a | b)
        if op is BinaryOp.BIT_XOR:
            return Value.from_number(a ^ b)
        if op is BinaryOp.BIT_AND_NOT:
            return Value.from_number(wrap_int64(a & ~b))

        # Comparison
        if op is BinaryOp.EQ:
            return Value.from_boolean(a == b)
        if op is BinaryOp.NE:
            return Value.from_boolean(a != b)
        if op is BinaryOp.GT:
            return Value.from_boolean(a > b)
        if op is BinaryOp.GE:
            return Value.from_boolean(a >= b)
        if op is BinaryOp.LT:
            return Value.from_boolean(a < b)
        if op is BinaryOp.LE:
            return Value.from_boolean(a <= b)

        return None

    def _eval_ternary(self, expr: TernaryExpr, ctx: Context) -> Value:
        if self.evaluate(expr.condition, ctx).truth(ctx):
            return self.evaluate(expr.if_true, ctx)
        return self.evaluate(expr.if_false, ctx)

    def _eval_assignment(self, expr: AssignmentExpr, ctx: Context) -> Value:
        value = self.evaluate(expr.value, ctx)
        self.assign(expr.target, ctx, value)
        return value

    def _eval_new(self, expr: NewExpr, _ctx: Context) -> Value:
        raise TaoError("new()")

    def _eval_function(self, expr: FunctionExpr, ctx: Context) -> Value:
        value = Value.from_function(Closure(expr, ctx, self))
        # Anonymous functions bind nothing.
        if expr.name:
            ctx.define(expr.name, value)
        return value

    def _eval_object(self, expr: ObjectExpr, ctx: Context) -> Value:
        obj = TaoObject()
        for prop in expr.properties:
            obj.set_key(prop.key, self.evaluate(prop.value, ctx))
        return Value.from_object(obj)

    def _eval_array(self, expr: ArrayExpr, ctx: Context) -> Value:
        if self.config.legacy_array_literal:
            return NIL
        return Value.from_array(
            TaoArray([self.evaluate(e, ctx) for e in expr.elements])
        )

    def _eval_call(self, expr: CallExpr, ctx: Context) -> Value:
        callee = self.evaluate(expr.callee, ctx)
        if callee.is_variable:
            callee = callee.resolve(ctx)
        if not callee.is_callable:
            raise NotCallableError(f"`{callee}' is not callable")

        args = [self.evaluate(a, ctx) for a in expr.args]
        return self.invoke(callee, args)

    def _eval_index(self, expr: IndexExpr, ctx: Context) -> Value:
        indexable = self.evaluate(expr.indexable, ctx)
        key = self.evaluate(expr.key, ctx)

        if indexable.is_object and key.is_string:
            return indexable.payload.get_key(key.string)
        if indexable.is_array and key.is_number:
            return indexable.payload.get_elem(key.number)

        raise TaoTypeError(f"cannot use `{key}' (type: {key.type_name}) as key")

    # Expression dispatch table
    _EXPR_DISPATCH: dict[str, Callable[[ExecutionEngine, Expression, Context], Value]] = {
        "literal": _eval_literal,
        "variable_ref": _eval_variable_ref,
        "unary": _eval_unary,
        "increment": _eval_increment,
        "binary": _eval_binary,
        "ternary": _eval_ternary,
        "assignment": _eval_assignment,
        "new": _eval_new,
        "function": _eval_function,
        "object": _eval_object,
        "array": _eval_array,
        "call": _eval_call,
        "index": _eval_index,
    }

    # -----------------------------------------------------------------------
    # Write helpers
    # -----------------------------------------------------------------------

    def _assign_index(self, target: IndexExpr, ctx: Context, value: Value) -> None:
        indexable = self.evaluate(target.indexable, ctx)
        if not (indexable.is_object or indexable.is_array):
            raise NotAssignableError(f"`{indexable}' is not assignable")

        key = self.evaluate(target.key, ctx)
        if indexable.is_object and key.is_string:
            indexable.payload.set_key(key.string, value)
        elif indexable.is_array and key.is_number:
            indexable.payload.set_elem(key.number, value)
        else:
            raise TaoTypeError(f"cannot use `{key}' (type: {key.type_name}) as key")
