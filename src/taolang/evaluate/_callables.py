"""Callable payloads: user-defined closures and native builtins."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from ._errors import TaoTypeError
from ._values import NIL, Value

if TYPE_CHECKING:
    from taolang.model.expressions import FunctionExpr

    from ._executor import ExecutionEngine
    from ._scope import Context

logger = logging.getLogger(__name__)

BuiltinFunction = Callable[[list[Value]], "Value | object"]


class Closure:
    """A function literal paired with the scope it was evaluated in.

    The captured scope is shared, never copied: every invocation sees
    bindings as they are at call time.
    """

    def __init__(
        self,
        function: FunctionExpr,
        env: Context,
        engine: ExecutionEngine,
    ) -> None:
        self.function = function
        self.env = env
        self.engine = engine

    @property
    def name(self) -> str | None:
        return self.function.name

    def execute(self, ctx: Context, args: list[Value]) -> Value:
        # Lexical scoping: the call scope hangs off the defining scope,
        # not off the caller's.
        ctx.set_parent(self.env)
        return self.engine.run_function(self.function, ctx, args)

    def __repr__(self) -> str:
        return f"Closure({self.name or 'anonymous'})"


class Builtin:
    """A host-provided native callable.

    *fn* receives the evaluated argument list. It may return a ``Value``
    or plain Python data (converted with ``Value.from_python``);
    returning ``None`` yields nil.
    """

    def __init__(self, fn: BuiltinFunction, name: str | None = None) -> None:
        self.fn = fn
        self._name = name or getattr(fn, "__name__", "builtin")

    @property
    def name(self) -> str:
        return self._name

    def same_native(self, other: Builtin) -> bool:
        """Identity used by ``==``/``!=`` on two builtins."""
        return self.fn == other.fn

    def execute(self, ctx: Context, args: list[Value]) -> Value:
        logger.debug("builtin %s(%d args)", self._name, len(args))
        result = self.fn(args)
        if result is None:
            return NIL
        try:
            return Value.from_python(result)
        except TypeError as exc:
            raise TaoTypeError(
                f"builtin {self._name} returned unsupported {type(result).__name__}"
            ) from exc

    def __repr__(self) -> str:
        return f"Builtin({self._name})"
