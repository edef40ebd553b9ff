"""Error taxonomy for evaluation failures.

All errors are fatal to the evaluation that raised them and propagate
unchanged to the host.
"""

from __future__ import annotations


class TaoError(Exception):
    """Generic evaluation error (reserved constructs, broken invariants)."""

    kind = "Error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        if not self.message:
            return self.kind
        return f"{self.kind}: {self.message}"


class TaoSyntaxError(TaoError):
    """An operator or construct has no defined semantics for its operands."""

    kind = "SyntaxError"


class TaoTypeError(TaoError):
    """A value's kind is incompatible with the requested operation."""

    kind = "TypeError"


class NotAssignableError(TaoError):
    kind = "NotAssignableError"


class NotCallableError(TaoError):
    kind = "NotCallableError"


class NotDefinedError(TaoError):
    """Lookup or assignment of a name that no enclosing scope binds."""

    kind = "NotDefinedError"


class CallDepthError(TaoError):
    """Call nesting exceeded the configured limit."""

    kind = "CallDepthError"
