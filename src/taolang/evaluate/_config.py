"""Evaluator configuration."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class ArityPolicy(str, Enum):
    LENIENT = "lenient"  # missing parameters bind nil, extra arguments dropped
    STRICT = "strict"    # any count mismatch is a TypeError


class EvaluatorConfig(BaseModel):
    """Knobs that change observable evaluation behaviour.

    The ``legacy_*`` flags reproduce historical interpreter quirks for
    programs that depend on them.
    """

    arity: ArityPolicy = ArityPolicy.LENIENT
    max_call_depth: int = Field(default=64, ge=1)
    legacy_exponent_shift: bool = False
    legacy_unary_minus: bool = False
    legacy_array_literal: bool = False


def resolve_config(config: EvaluatorConfig | dict | None) -> EvaluatorConfig:
    if config is None:
        return EvaluatorConfig()
    if isinstance(config, EvaluatorConfig):
        return config
    return EvaluatorConfig.model_validate(config)
