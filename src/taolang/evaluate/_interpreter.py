"""Interpreter: the host-facing object for running taolang trees.

Owns the global scope and the execution engine, installs host
builtins, and provides attribute-style access to global bindings.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, get_args

from taolang.model.expressions import Expression
from taolang.model.program import Program
from taolang.model.statements import Statement

from ._callables import Builtin, BuiltinFunction
from ._config import EvaluatorConfig
from ._errors import CallDepthError
from ._executor import ExecutionEngine
from ._scope import Context
from ._values import Value

logger = logging.getLogger(__name__)

_EXPRESSION_TYPES = get_args(get_args(Expression)[0])
_STATEMENT_TYPES = get_args(get_args(Statement)[0])


class Interpreter:
    """A global scope plus the engine that evaluates against it.

    Parameters
    ----------
    builtins : Mapping[str, callable | Value] | None
        Native functions (or ready-made Values) installed into the global
        scope before anything runs.
    config : EvaluatorConfig | dict | None
        Evaluation behaviour switches.
    """

    def __init__(
        self,
        builtins: Mapping[str, BuiltinFunction | Value] | None = None,
        config: EvaluatorConfig | dict | None = None,
    ) -> None:
        object.__setattr__(self, "_engine", ExecutionEngine(config))
        object.__setattr__(self, "_globals", Context(name="--global--"))

        for name, fn in (builtins or {}).items():
            self.register_builtin(name, fn)

    # -----------------------------------------------------------------------
    # Setup
    # -----------------------------------------------------------------------

    @property
    def engine(self) -> ExecutionEngine:
        return self._engine

    @property
    def globals(self) -> Context:
        return self._globals

    @property
    def config(self) -> EvaluatorConfig:
        return self._engine.config

    def register_builtin(self, name: str, fn: BuiltinFunction | Value) -> Value:
        """Install a native callable under *name* in the global scope."""
        if isinstance(fn, Value):
            value = fn
        else:
            value = Value.from_builtin(Builtin(fn, name=name))
        self._globals.define(name, value)
        return value

    def define(self, name: str, value: Any) -> Value:
        """Bind *name* globally to *value* (converted from Python data)."""
        converted = Value.from_python(value)
        self._globals.define(name, converted)
        return converted

    # -----------------------------------------------------------------------
    # Execution
    # -----------------------------------------------------------------------

    def run(self, target: Program | Sequence[Statement] | Statement | Expression) -> Value:
        """Evaluate *target* against the global scope.

        - a ``Program`` or a list of statements runs as a program and
          yields its value (see ``ExecutionEngine.run_program``);
        - a single statement runs as a one-statement program;
        - an expression is evaluated and its value returned.
        """
        if isinstance(target, Program):
            logger.debug("run program %s (%d statements)", target.name, len(target.statements))
            return self._guard(self._engine.run_program, target.statements, self._globals)
        if isinstance(target, _EXPRESSION_TYPES):
            return self._guard(self._engine.evaluate, target, self._globals)
        if isinstance(target, _STATEMENT_TYPES):
            return self._guard(self._engine.run_program, [target], self._globals)
        if isinstance(target, (list, tuple)):
            return self._guard(self._engine.run_program, list(target), self._globals)
        raise TypeError(
            f"run() expects a Program, statement(s) or expression, "
            f"got {type(target).__name__}"
        )

    def call(self, callee: str | Value, *args: Any) -> Value:
        """Invoke a global function (by name) or a callable Value from the host."""
        if isinstance(callee, str):
            callee = self._globals.lookup(callee)
        values = [Value.from_python(a) for a in args]
        return self._guard(self._engine.invoke, callee, values)

    @staticmethod
    def _guard(fn, *args):
        try:
            return fn(*args)
        except RecursionError as exc:
            raise CallDepthError("maximum recursion depth exceeded") from exc

    # -----------------------------------------------------------------------
    # Attribute access
    # -----------------------------------------------------------------------

    def __getattr__(self, name: str) -> Value:
        globals_ = object.__getattribute__(self, "_globals")
        if name in globals_.symbols:
            return globals_.symbols[name]
        raise AttributeError(
            f"'{type(self).__name__}' has no global '{name}'. "
            f"Available: {sorted(globals_.symbols)}"
        )

    def __setattr__(self, name: str, value: object) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
        else:
            self.define(name, value)


def interpret(
    target: Program | Sequence[Statement] | Statement | Expression,
    *,
    builtins: Mapping[str, BuiltinFunction | Value] | None = None,
    config: EvaluatorConfig | dict | None = None,
) -> Value:
    """Run *target* in a fresh ``Interpreter`` and return its value."""
    return Interpreter(builtins=builtins, config=config).run(target)
