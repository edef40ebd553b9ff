"""Expression AST nodes for taolang syntax trees."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Annotated, Literal, Union

from pydantic import BaseModel, Field, model_validator

if TYPE_CHECKING:
    from .statements import Statement


INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


class BinaryOp(str, Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    POW = "**"
    SHL = "<<"
    SHR = ">>"
    BIT_AND = "&"
    BIT_OR = "|"
    BIT_XOR = "^"
    BIT_AND_NOT = "&^"
    EQ = "=="
    NE = "!="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="
    AND = "&&"
    OR = "||"


class UnaryOp(str, Enum):
    NOT = "!"
    POS = "+"
    NEG = "-"
    BIT_NOT = "^"


class IncrementOp(str, Enum):
    INC = "++"
    DEC = "--"


class LiteralExpr(BaseModel):
    """A constant: nil (``value=None``), a boolean, a number or a string."""

    kind: Literal["literal"] = "literal"
    value: bool | int | str | None = None

    @model_validator(mode="after")
    def _number_range(self):
        if isinstance(self.value, int) and not isinstance(self.value, bool):
            if not INT64_MIN <= self.value <= INT64_MAX:
                raise ValueError(
                    f"number literal {self.value} does not fit in 64 bits"
                )
        return self


class VariableRef(BaseModel):
    """Reference to a binding by name. Assignable."""

    kind: Literal["variable_ref"] = "variable_ref"
    name: str = Field(min_length=1)


class UnaryExpr(BaseModel):
    kind: Literal["unary"] = "unary"
    op: UnaryOp
    operand: Expression


class IncrementExpr(BaseModel):
    """``++x`` / ``x++`` / ``--x`` / ``x--``."""

    kind: Literal["increment"] = "increment"
    op: IncrementOp
    prefix: bool = False
    operand: Expression


class BinaryExpr(BaseModel):
    kind: Literal["binary"] = "binary"
    op: BinaryOp
    left: Expression
    right: Expression


class TernaryExpr(BaseModel):
    """``condition ? if_true : if_false``."""

    kind: Literal["ternary"] = "ternary"
    condition: Expression
    if_true: Expression
    if_false: Expression


class AssignmentExpr(BaseModel):
    kind: Literal["assignment"] = "assignment"
    target: Expression
    value: Expression


class NewExpr(BaseModel):
    """``new Type(args)``. Reserved: evaluating it is an error."""

    kind: Literal["new"] = "new"
    class_name: str
    args: list[Expression] = []


class FunctionExpr(BaseModel):
    """Function literal.

    A named literal binds its own name in the defining scope when
    evaluated, so the body can refer to itself.
    """

    kind: Literal["function"] = "function"
    name: str | None = Field(default=None, min_length=1)
    params: list[str] = []
    body: list[Statement] = []

    @model_validator(mode="after")
    def _unique_params(self):
        seen: set[str] = set()
        for param in self.params:
            if param in seen:
                raise ValueError(f"duplicate parameter name: {param!r}")
            seen.add(param)
        return self


class ObjectProperty(BaseModel):
    key: str
    value: Expression


class ObjectExpr(BaseModel):
    """Object literal. Properties are kept in source order."""

    kind: Literal["object"] = "object"
    properties: list[ObjectProperty] = []


class ArrayExpr(BaseModel):
    kind: Literal["array"] = "array"
    elements: list[Expression] = []


class CallExpr(BaseModel):
    kind: Literal["call"] = "call"
    callee: Expression
    args: list[Expression] = []


class IndexExpr(BaseModel):
    """``indexable[key]``. Assignable."""

    kind: Literal["index"] = "index"
    indexable: Expression
    key: Expression


Expression = Annotated[
    Union[
        LiteralExpr,
        VariableRef,
        UnaryExpr,
        IncrementExpr,
        BinaryExpr,
        TernaryExpr,
        AssignmentExpr,
        NewExpr,
        FunctionExpr,
        ObjectExpr,
        ArrayExpr,
        CallExpr,
        IndexExpr,
    ],
    Field(discriminator="kind"),
]

# FunctionExpr refers to Statement, so these models are rebuilt in
# statements.py once both unions exist.
EXPRESSION_MODELS = (
    FunctionExpr,
    UnaryExpr,
    IncrementExpr,
    BinaryExpr,
    TernaryExpr,
    AssignmentExpr,
    NewExpr,
    ObjectProperty,
    ObjectExpr,
    ArrayExpr,
    CallExpr,
    IndexExpr,
)
