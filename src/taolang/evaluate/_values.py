"""Value system for the evaluator.

Provides the tagged ``Value`` type, the mutable Object/Array containers
it can reference, and 64-bit integer helpers used by the operator
tables.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterator

from taolang.model.expressions import INT64_MAX

from ._errors import TaoTypeError

if TYPE_CHECKING:
    from ._scope import Context


class ValueKind(str, Enum):
    NIL = "nil"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    OBJECT = "object"
    ARRAY = "array"
    FUNCTION = "function"
    BUILTIN = "builtin"
    VARIABLE = "variable"


# ---------------------------------------------------------------------------
# 64-bit integer arithmetic
# ---------------------------------------------------------------------------

_MASK64 = (1 << 64) - 1


def wrap_int64(n: int) -> int:
    """Wrap an arbitrary Python int into the signed 64-bit range."""
    n &= _MASK64
    if n > INT64_MAX:
        return n - (1 << 64)
    return n


def trunc_div(a: int, b: int) -> int:
    """Integer division truncating toward zero. *b* must be non-zero."""
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    return wrap_int64(q)


def trunc_mod(a: int, b: int) -> int:
    """Remainder of truncating division; takes the sign of *a*."""
    r = abs(a) % abs(b)
    return -r if a < 0 else r


def shift_left(a: int, count: int) -> int:
    # Counts are reinterpreted as unsigned, so negative counts are huge.
    n = count & _MASK64
    if n >= 64:
        return 0
    return wrap_int64(a << n)


def shift_right(a: int, count: int) -> int:
    n = count & _MASK64
    if n >= 64:
        return -1 if a < 0 else 0
    return a >> n


def int_pow(base: int, exp: int) -> int:
    """Integer power with wraparound.

    Negative exponents give the truncated real result. The caller
    rejects ``0 ** negative``.
    """
    if exp < 0:
        if base == 1:
            return 1
        if base == -1:
            return 1 if exp % 2 == 0 else -1
        return 0
    return wrap_int64(pow(base, exp, 1 << 64))


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------

class TaoObject:
    """Mutable string-keyed mapping referenced by Object values."""

    __slots__ = ("props",)

    def __init__(self, props: dict[str, Value] | None = None) -> None:
        self.props: dict[str, Value] = dict(props or {})

    def get_key(self, key: str) -> Value:
        return self.props.get(key, NIL)

    def set_key(self, key: str, value: Value) -> None:
        self.props[key] = value

    def __len__(self) -> int:
        return len(self.props)

    def __iter__(self) -> Iterator[str]:
        return iter(self.props)


class TaoArray:
    """Mutable ordered sequence referenced by Array values."""

    __slots__ = ("elements",)

    def __init__(self, elements: list[Value] | None = None) -> None:
        self.elements: list[Value] = list(elements or [])

    def _check(self, index: int) -> None:
        if index < 0 or index >= len(self.elements):
            raise TaoTypeError(f"array index {index} out of range")

    def get_elem(self, index: int) -> Value:
        self._check(index)
        return self.elements[index]

    def set_elem(self, index: int, value: Value) -> None:
        self._check(index)
        self.elements[index] = value

    def push(self, value: Value) -> None:
        self.elements.append(value)

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.elements)


# ---------------------------------------------------------------------------
# Value
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Value:
    """A tagged runtime value. The kind never changes after construction.

    Payloads by kind: ``None`` (nil), ``bool``, ``int`` (signed 64-bit),
    ``str``, ``TaoObject``, ``TaoArray``, ``Closure``, ``Builtin`` and
    the bound name (``str``) for variables.
    """

    kind: ValueKind
    payload: object = None

    # -- constructors -------------------------------------------------------

    @classmethod
    def nil(cls) -> Value:
        return NIL

    @classmethod
    def from_boolean(cls, value: bool) -> Value:
        return TRUE if value else FALSE

    @classmethod
    def from_number(cls, value: int) -> Value:
        return cls(ValueKind.NUMBER, wrap_int64(int(value)))

    @classmethod
    def from_string(cls, value: str) -> Value:
        return cls(ValueKind.STRING, value)

    @classmethod
    def from_object(cls, obj: TaoObject | None = None) -> Value:
        return cls(ValueKind.OBJECT, obj if obj is not None else TaoObject())

    @classmethod
    def from_array(cls, arr: TaoArray | None = None) -> Value:
        return cls(ValueKind.ARRAY, arr if arr is not None else TaoArray())

    @classmethod
    def from_function(cls, closure: object) -> Value:
        return cls(ValueKind.FUNCTION, closure)

    @classmethod
    def from_builtin(cls, builtin: object) -> Value:
        return cls(ValueKind.BUILTIN, builtin)

    @classmethod
    def from_variable(cls, name: str) -> Value:
        return cls(ValueKind.VARIABLE, name)

    @classmethod
    def from_python(cls, value: object) -> Value:
        """Convert a plain Python object into a Value.

        - None -> nil, bool -> boolean, int -> number, str -> string
        - dict -> object (string keys only), list/tuple -> array
        - a Python callable -> builtin
        """
        from ._callables import Builtin, Closure

        if isinstance(value, Value):
            return value
        if value is None:
            return NIL
        if isinstance(value, bool):
            return cls.from_boolean(value)
        if isinstance(value, int):
            return cls.from_number(value)
        if isinstance(value, str):
            return cls.from_string(value)
        if isinstance(value, TaoObject):
            return cls.from_object(value)
        if isinstance(value, TaoArray):
            return cls.from_array(value)
        if isinstance(value, dict):
            obj = TaoObject()
            for key, item in value.items():
                if not isinstance(key, str):
                    raise TypeError(
                        f"object keys must be str, got {type(key).__name__}"
                    )
                obj.set_key(key, cls.from_python(item))
            return cls.from_object(obj)
        if isinstance(value, (list, tuple)):
            return cls.from_array(TaoArray([cls.from_python(v) for v in value]))
        if isinstance(value, Closure):
            return cls.from_function(value)
        if isinstance(value, Builtin):
            return cls.from_builtin(value)
        if callable(value):
            return cls.from_builtin(Builtin(value))
        raise TypeError(f"cannot convert {type(value).__name__} to a Value")

    # -- predicates ---------------------------------------------------------

    @property
    def is_nil(self) -> bool:
        return self.kind is ValueKind.NIL

    @property
    def is_boolean(self) -> bool:
        return self.kind is ValueKind.BOOLEAN

    @property
    def is_number(self) -> bool:
        return self.kind is ValueKind.NUMBER

    @property
    def is_string(self) -> bool:
        return self.kind is ValueKind.STRING

    @property
    def is_object(self) -> bool:
        return self.kind is ValueKind.OBJECT

    @property
    def is_array(self) -> bool:
        return self.kind is ValueKind.ARRAY

    @property
    def is_variable(self) -> bool:
        return self.kind is ValueKind.VARIABLE

    @property
    def is_callable(self) -> bool:
        return self.kind in (ValueKind.FUNCTION, ValueKind.BUILTIN)

    # -- accessors ----------------------------------------------------------

    @property
    def boolean(self) -> bool:
        return self.payload

    @property
    def number(self) -> int:
        return self.payload

    @property
    def string(self) -> str:
        return self.payload

    @property
    def type_name(self) -> str:
        return self.kind.value

    # -- semantics ----------------------------------------------------------

    def resolve(self, ctx: Context) -> Value:
        """Look a Variable up in *ctx*; every other kind is returned as-is."""
        if self.kind is ValueKind.VARIABLE:
            return ctx.lookup(self.payload)
        return self

    def truth(self, ctx: Context | None = None) -> bool:
        kind = self.kind
        if kind is ValueKind.NIL:
            return False
        if kind is ValueKind.BOOLEAN:
            return self.payload
        if kind is ValueKind.NUMBER:
            return self.payload != 0
        if kind is ValueKind.STRING:
            return self.payload != ""
        if kind is ValueKind.VARIABLE:
            if ctx is None:
                raise TaoTypeError(
                    f"variable `{self.payload}' needs a scope to be tested"
                )
            return self.resolve(ctx).truth(ctx)
        return True

    def to_python(self) -> object:
        """Convert to plain Python data. Callables come back unwrapped."""
        kind = self.kind
        if kind is ValueKind.OBJECT:
            return {k: v.to_python() for k, v in self.payload.props.items()}
        if kind is ValueKind.ARRAY:
            return [v.to_python() for v in self.payload.elements]
        if kind is ValueKind.VARIABLE:
            return self
        return self.payload

    def __str__(self) -> str:
        return _format(self, quote=False, seen=set())

    def __repr__(self) -> str:
        return f"Value({self.kind.value}, {_format(self, quote=True, seen=set())})"


NIL = Value(ValueKind.NIL)
TRUE = Value(ValueKind.BOOLEAN, True)
FALSE = Value(ValueKind.BOOLEAN, False)


def _format(value: Value, quote: bool, seen: set[int]) -> str:
    kind = value.kind
    payload = value.payload
    if kind is ValueKind.NIL:
        return "nil"
    if kind is ValueKind.BOOLEAN:
        return "true" if payload else "false"
    if kind is ValueKind.NUMBER:
        return str(payload)
    if kind is ValueKind.STRING:
        return f'"{payload}"' if quote else payload
    if kind is ValueKind.VARIABLE:
        return payload
    if kind is ValueKind.FUNCTION:
        name = payload.name
        return f"function {name}" if name else "function (anonymous)"
    if kind is ValueKind.BUILTIN:
        return f"builtin {payload.name}"

    # Containers may reference themselves.
    if id(payload) in seen:
        return "{...}" if kind is ValueKind.OBJECT else "[...]"
    seen.add(id(payload))
    try:
        if kind is ValueKind.OBJECT:
            items = ", ".join(
                f"{k}: {_format(v, True, seen)}"
                for k, v in payload.props.items()
            )
            return "{" + items + "}"
        items = ", ".join(
            _format(v, True, seen) for v in payload.elements
        )
        return "[" + items + "]"
    finally:
        seen.discard(id(payload))
