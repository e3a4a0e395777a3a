"""Source spans and structured findings with workflow source position tracking."""

from __future__ import annotations

from typing import Any, Self

from pydantic import BaseModel, Field, model_validator


class GhastlyError(Exception):
    """Base class for errors raised by ghastly."""


class Position(BaseModel):
    """A 1-based line/column location in the workflow source."""

    line: int = Field(ge=1)
    column: int = Field(ge=1)

    model_config = {"frozen": True}

    @classmethod
    def from_mark(cls, mark: Any) -> Position:
        """Build a position from a 0-based YAML mark."""
        return cls(line=mark.line + 1, column=mark.column + 1)

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


class Span(BaseModel):
    """Points to an exact range of workflow source text.

    A span without a start is *unlocated*: the value it belongs to was not
    read from the document (for example a default filled in by code), so
    there is nothing to point at.  Consumers must tolerate that rather than
    invent a location.
    """

    start: Position | None = None
    end: Position | None = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _end_requires_start(self) -> Self:
        if self.start is None and self.end is not None:
            raise ValueError("a span without a start position cannot have an end position")
        return self

    @classmethod
    def from_marks(cls, start_mark: Any, end_mark: Any | None = None) -> Span:
        """Build a span from 0-based ruamel.yaml marks."""
        end = Position.from_mark(end_mark) if end_mark is not None else None
        return cls(start=Position.from_mark(start_mark), end=end)

    @property
    def located(self) -> bool:
        return self.start is not None

    @property
    def sort_key(self) -> tuple[int, int]:
        """``(line, column)`` of the start, ``(0, 0)`` when unlocated."""
        if self.start is None:
            return (0, 0)
        return (self.start.line, self.start.column)

    def __str__(self) -> str:
        return str(self.start) if self.start is not None else "?"


class PolicyViolation(BaseModel):
    """A located, human-readable finding produced by a policy."""

    source: Span = Span()
    message: str

    model_config = {"frozen": True}
