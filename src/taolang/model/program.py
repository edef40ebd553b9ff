"""Top-level Program container for taolang syntax trees."""

from __future__ import annotations

from pydantic import BaseModel

from .statements import Statement


class Program(BaseModel):
    """A parsed source unit: top-level statements in execution order."""

    name: str = "<main>"
    statements: list[Statement] = []
