"""Lexical scopes and the control-signal channel."""

from __future__ import annotations

from dataclasses import dataclass

from ._errors import NotDefinedError
from ._values import NIL, Value


@dataclass
class ControlSignal:
    """Return/break flags shared by a call scope and its nested blocks."""

    returned: bool = False
    return_value: Value = NIL
    broke: bool = False

    @property
    def pending(self) -> bool:
        return self.returned or self.broke


class Context:
    """A lexical scope: local bindings, a parent link and a signal slot.

    Lookup walks the local table and then the parent chain. Block scopes
    created with ``child()`` share their creator's ``ControlSignal`` so a
    ``return`` deep inside nested blocks is seen by the call that owns
    them; a fresh ``Context`` always starts with its own signal.
    """

    def __init__(
        self,
        parent: Context | None = None,
        name: str = "",
        signal: ControlSignal | None = None,
    ) -> None:
        self.parent = parent
        self.name = name
        self.symbols: dict[str, Value] = {}
        self.signal = signal if signal is not None else ControlSignal()

    def child(self, name: str = "--block--") -> Context:
        return Context(parent=self, name=name, signal=self.signal)

    def set_parent(self, parent: Context | None) -> None:
        self.parent = parent

    # -- bindings -----------------------------------------------------------

    def define(self, name: str, value: Value) -> None:
        self.symbols[name] = value

    def find(self, name: str) -> Value | None:
        ctx: Context | None = self
        while ctx is not None:
            if name in ctx.symbols:
                return ctx.symbols[name]
            ctx = ctx.parent
        return None

    def lookup(self, name: str) -> Value:
        value = self.find(name)
        if value is None:
            raise NotDefinedError(f"`{name}' is not defined")
        return value

    def assign(self, name: str, value: Value) -> None:
        ctx: Context | None = self
        while ctx is not None:
            if name in ctx.symbols:
                ctx.symbols[name] = value
                return
            ctx = ctx.parent
        raise NotDefinedError(f"`{name}' is not defined")

    # -- control signal -----------------------------------------------------

    def set_return(self, value: Value) -> None:
        self.signal.returned = True
        self.signal.return_value = value

    def set_break(self) -> None:
        self.signal.broke = True

    def __repr__(self) -> str:
        return f"Context({self.name or 'anonymous'}, {sorted(self.symbols)})"
