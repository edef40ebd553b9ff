"""taolang evaluator -- tree-walking execution of taolang syntax trees.

Entry point::

    from taolang.evaluate import Interpreter

    interp = Interpreter(builtins={"print": lambda args: print(*args)})
    result = interp.run(program)       # Program, statement list or expression
    interp.total                       # global bindings as attributes
    interp.call("area", 3, 4)          # invoke a taolang function from Python
"""

from __future__ import annotations

from ._callables import Builtin, Closure
from ._config import ArityPolicy, EvaluatorConfig
from ._errors import (
    CallDepthError,
    NotAssignableError,
    NotCallableError,
    NotDefinedError,
    TaoError,
    TaoSyntaxError,
    TaoTypeError,
)
from ._executor import ExecutionEngine
from ._interpreter import Interpreter, interpret
from ._protocols import TaoCallable
from ._scope import Context, ControlSignal
from ._values import NIL, TaoArray, TaoObject, Value, ValueKind

__all__ = [
    "interpret",
    "Interpreter",
    "ExecutionEngine",
    "EvaluatorConfig",
    "ArityPolicy",
    "Context",
    "ControlSignal",
    "Value",
    "ValueKind",
    "NIL",
    "TaoObject",
    "TaoArray",
    "Closure",
    "Builtin",
    "TaoCallable",
    "TaoError",
    "TaoSyntaxError",
    "TaoTypeError",
    "NotAssignableError",
    "NotCallableError",
    "NotDefinedError",
    "CallDepthError",
]
