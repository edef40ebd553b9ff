"""Invocation protocol shared by user functions and native builtins.

The ``@runtime_checkable`` protocol lets the engine test callability with
``isinstance`` instead of special-casing each callable type.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ._scope import Context
    from ._values import Value


@runtime_checkable
class TaoCallable(Protocol):
    """Anything a call expression can invoke."""

    @property
    def name(self) -> str | None: ...

    def execute(self, ctx: Context, args: list[Value]) -> Value: ...
