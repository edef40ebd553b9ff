"""Statement AST nodes for taolang syntax trees."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, model_validator

from .expressions import EXPRESSION_MODELS, Expression, FunctionExpr


class EmptyStatement(BaseModel):
    kind: Literal["empty"] = "empty"


class LetStatement(BaseModel):
    """``let name = value;`` -- *value* defaults to nil."""

    kind: Literal["let"] = "let"
    name: str = Field(min_length=1)
    value: Expression | None = None


class FunctionStatement(BaseModel):
    """``function name(params) { ... }`` at statement level."""

    kind: Literal["function_def"] = "function_def"
    function: FunctionExpr

    @model_validator(mode="after")
    def _requires_name(self):
        if not self.function.name:
            raise ValueError("function statement requires a named function")
        return self


class ReturnStatement(BaseModel):
    kind: Literal["return"] = "return"
    value: Expression | None = None


class BlockStatement(BaseModel):
    """A braced statement list. Executes in its own scope."""

    kind: Literal["block"] = "block"
    statements: list[Statement] = []


class ExpressionStatement(BaseModel):
    """Evaluate an expression and discard the result."""

    kind: Literal["expression"] = "expression"
    expr: Expression


class ForStatement(BaseModel):
    """``for init; condition; step { body }``.

    Every clause is optional; a missing *condition* loops until
    ``break`` or ``return``.
    """

    kind: Literal["for"] = "for"
    init: Statement | None = None
    condition: Expression | None = None
    step: Expression | None = None
    body: BlockStatement = Field(default_factory=BlockStatement)


class WhileStatement(BaseModel):
    kind: Literal["while"] = "while"
    condition: Expression
    body: BlockStatement = Field(default_factory=BlockStatement)


class BreakStatement(BaseModel):
    kind: Literal["break"] = "break"


class IfStatement(BaseModel):
    """``if condition { then } else otherwise``.

    *otherwise* is a block or another ``if`` for else-if chains.
    """

    kind: Literal["if"] = "if"
    condition: Expression
    then: BlockStatement
    otherwise: BlockStatement | IfStatement | None = None


class SwitchCase(BaseModel):
    """One ``case v1, v2: ...`` arm of a switch."""

    values: list[Expression] = Field(min_length=1)
    body: list[Statement] = []


class SwitchStatement(BaseModel):
    kind: Literal["switch"] = "switch"
    discriminant: Expression
    cases: list[SwitchCase] = []
    default: list[Statement] | None = None


Statement = Annotated[
    Union[
        EmptyStatement,
        LetStatement,
        FunctionStatement,
        ReturnStatement,
        BlockStatement,
        ExpressionStatement,
        ForStatement,
        WhileStatement,
        BreakStatement,
        IfStatement,
        SwitchStatement,
    ],
    Field(discriminator="kind"),
]

# Rebuild models with recursive Expression/Statement references.
for _model in EXPRESSION_MODELS:
    _model.model_rebuild()
LetStatement.model_rebuild()
FunctionStatement.model_rebuild()
ReturnStatement.model_rebuild()
BlockStatement.model_rebuild()
ExpressionStatement.model_rebuild()
ForStatement.model_rebuild()
WhileStatement.model_rebuild()
IfStatement.model_rebuild()
SwitchCase.model_rebuild()
SwitchStatement.model_rebuild()
