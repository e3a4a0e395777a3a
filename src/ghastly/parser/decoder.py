"""Decoding: validates a spanned YAML tree into the typed workflow model."""

from __future__ import annotations

import os
from pathlib import Path
from typing import IO, Any

from pydantic import ValidationError

from ghastly.models.errors import Span
from ghastly.models.spanned import Spanned
from ghastly.models.workflow import Workflow
from ghastly.parser.loader import TrackedLoader, WorkflowDecodeError


class WorkflowDecoder:
    """Resolves a raw spanned tree into a fully-typed :class:`Workflow`.

    Either the whole document decodes or a :class:`WorkflowDecodeError` is
    raised; a partially populated workflow is never returned.
    """

    def decode(self, tree: Spanned[Any] | None, filename: str | None = None) -> Workflow:
        if tree is None or tree.value is None:
            raise WorkflowDecodeError("workflow document is empty", filename=filename)
        if not isinstance(tree.value, dict):
            raise WorkflowDecodeError(
                "workflow must be a YAML mapping, not a list or scalar",
                span=tree.span,
                filename=filename,
            )
        try:
            return Workflow.model_validate(tree.value)
        except ValidationError as exc:
            raise self._to_decode_error(exc, tree, filename) from exc

    def _to_decode_error(
        self, exc: ValidationError, tree: Spanned[Any], filename: str | None
    ) -> WorkflowDecodeError:
        errors = exc.errors()
        first = errors[0]
        path, span = _locate(tree, first["loc"], missing=first["type"] == "missing")
        message = first["msg"].removeprefix("Value error, ")
        if path:
            message = f"{path}: {message}"
        if len(errors) > 1:
            message += f" (and {len(errors) - 1} more error{'s' if len(errors) > 2 else ''})"
        return WorkflowDecodeError(message, path=path, span=span, filename=filename)


def _locate(tree: Spanned[Any], loc: tuple[Any, ...], missing: bool = False) -> tuple[str, Span]:
    """Follow a pydantic error location through the spanned tree.

    Location parts that do not name a key or index of the tree (union member
    tags, validator names) are skipped.  Returns the dotted path of the
    deepest node reached and that node's span.
    """
    node: Any = tree
    span = tree.span
    parts: list[str] = []
    for part in loc:
        value = node.value if isinstance(node, Spanned) else node
        if isinstance(value, dict) and isinstance(part, str) and part in value:
            node = value[part]
            parts.append(f".{part}" if parts else part)
        elif isinstance(value, list) and isinstance(part, int) and 0 <= part < len(value):
            node = value[part]
            parts.append(f"[{part}]")
        else:
            continue
        if isinstance(node, Spanned) and node.span.located:
            span = node.span
    if missing and loc and isinstance(loc[-1], str):
        parts.append(f".{loc[-1]}" if parts else loc[-1])
    return "".join(parts), span


def parse_workflow(source: str | os.PathLike[str] | IO[str] | IO[bytes]) -> Workflow:
    """Load and decode a workflow from a file path or an open stream."""
    loader = TrackedLoader()
    if isinstance(source, (str, os.PathLike)):
        path = Path(source)
        return WorkflowDecoder().decode(loader.load(path), filename=str(path))
    filename = getattr(source, "name", None)
    filename = filename if isinstance(filename, str) else "<stream>"
    return WorkflowDecoder().decode(loader.load_stream(source, filename), filename=filename)


def parse_workflow_string(content: str, filename: str = "<string>") -> Workflow:
    """Load and decode a workflow held in memory."""
    tree = TrackedLoader().load_string(content, filename=filename)
    return WorkflowDecoder().decode(tree, filename=filename)
