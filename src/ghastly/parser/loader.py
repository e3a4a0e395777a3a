"""YAML loader with position tracking for located policy violations."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from ruamel.yaml.events import CollectionEndEvent, CollectionStartEvent
from ruamel.yaml.nodes import MappingNode, Node, ScalarNode, SequenceNode

from ghastly.models.errors import GhastlyError, Span
from ghastly.models.spanned import Spanned

logger = logging.getLogger("ghastly.parser")

# ---------------------------------------------------------------------------
# Safety limits
# ---------------------------------------------------------------------------

_MAX_DOCUMENT_SIZE = 5_000_000  # 5M characters
_MAX_NODE_COUNT = 50_000
_MAX_DEPTH = 20

# Plain scalars that YAML 1.2 resolves to null.
_NULL_SCALARS = frozenset({"", "~", "null", "Null", "NULL"})


class WorkflowDecodeError(GhastlyError):
    """Raised when workflow text cannot be turned into a workflow model.

    Covers malformed YAML, input that does not match the workflow schema and
    unrecognized values such as an unknown permission shorthand.  I/O errors
    are never wrapped in this type.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        span: Span | None = None,
        filename: str | None = None,
    ) -> None:
        self.message = message
        self.path = path
        self.span = span if span is not None else Span()
        self.filename = filename
        super().__init__(message)

    def __str__(self) -> str:
        location = [part for part in (self.filename, self._position()) if part]
        prefix = ":".join(location)
        return f"{prefix}: {self.message}" if prefix else self.message

    def _position(self) -> str | None:
        return str(self.span) if self.span.located else None


class YAMLSafetyError(WorkflowDecodeError):
    """Raised when YAML input violates safety constraints.

    Distinct from parse errors: these indicate potentially malicious input
    (e.g., alias bombs, excessive nesting, oversized documents).
    """


class _NodeConverter:
    """Turns a composed ruamel.yaml node graph into nested ``Spanned`` values."""

    def __init__(self, max_nodes: int = _MAX_NODE_COUNT, max_depth: int = _MAX_DEPTH) -> None:
        self._max_nodes = max_nodes
        self._max_depth = max_depth
        self._count = 0

    def convert(self, node: Node, depth: int = 0) -> Spanned[Any]:
        self._count += 1
        if self._count > self._max_nodes:
            raise YAMLSafetyError(f"YAML document exceeds maximum node count ({self._max_nodes:,})")
        if depth > self._max_depth:
            raise YAMLSafetyError(
                f"YAML document exceeds maximum nesting depth ({self._max_depth})",
                span=_span_of(node),
            )

        if isinstance(node, MappingNode):
            return Spanned(self._convert_mapping(node, depth), _span_of(node))
        if isinstance(node, SequenceNode):
            items = [self.convert(item, depth + 1) for item in node.value]
            return Spanned(items, _span_of(node))
        return Spanned(_scalar_value(node), _span_of(node))

    def _convert_mapping(self, node: MappingNode, depth: int) -> dict[str, Spanned[Any]]:
        mapping: dict[str, Spanned[Any]] = {}
        for key_node, value_node in node.value:
            if not isinstance(key_node, ScalarNode):
                raise WorkflowDecodeError(
                    "mapping keys must be scalars", span=_span_of(key_node)
                )
            key = key_node.value
            if key in mapping:
                raise WorkflowDecodeError(f"duplicate key {key!r}", span=_span_of(key_node))
            mapping[key] = self.convert(value_node, depth + 1)
        return mapping


def _span_of(node: Node) -> Span:
    return Span.from_marks(node.start_mark, node.end_mark)


def _scalar_value(node: ScalarNode) -> str | None:
    # Leaves keep their source text; only plain nulls are resolved.
    if node.style is None and node.value in _NULL_SCALARS:
        return None
    return str(node.value)


class TrackedLoader:
    """YAML loader that tracks source positions for every parsed value.

    Uses ruamel.yaml's composer, which records a start and end mark on every
    node, and converts the node graph into ``Spanned`` dicts, lists and
    strings.  The result is what :class:`~ghastly.parser.decoder.WorkflowDecoder`
    validates into the typed workflow model.
    """

    def __init__(self) -> None:
        self._yaml = YAML()

    # -- safety checks -------------------------------------------------------

    @staticmethod
    def _check_yaml_safety(content: str) -> None:
        """Pre-parse safety checks on raw YAML text."""
        if len(content) > _MAX_DOCUMENT_SIZE:
            raise YAMLSafetyError(
                f"YAML document exceeds maximum size "
                f"({len(content):,} chars > {_MAX_DOCUMENT_SIZE:,} limit)"
            )

    def _check_nesting(self, content: str) -> None:
        """Reject deep nesting from the event stream, before the recursive composer runs."""
        depth = 0
        for event in self._yaml.parse(content):
            if isinstance(event, CollectionStartEvent):
                depth += 1
                # the root collection is depth 0 for the node converter
                if depth > _MAX_DEPTH + 1:
                    raise YAMLSafetyError(
                        f"YAML document exceeds maximum nesting depth ({_MAX_DEPTH})",
                        span=Span.from_marks(event.start_mark),
                    )
            elif isinstance(event, CollectionEndEvent):
                depth -= 1

    # -- public loading API --------------------------------------------------

    def load(self, path: Path) -> Spanned[Any] | None:
        """Load a workflow file.  Returns ``None`` for an empty document."""
        with path.open("rb") as handle:
            data = handle.read()
        return self.load_string(_decode(data, str(path)), filename=str(path))

    def load_stream(self, stream: IO[str] | IO[bytes], filename: str = "<stream>") -> Spanned[Any] | None:
        """Read a text or binary stream to the end and load it."""
        data = stream.read()
        if isinstance(data, bytes):
            data = _decode(data, filename)
        return self.load_string(data, filename=filename)

    def load_string(self, content: str, filename: str = "<string>") -> Spanned[Any] | None:
        """Load YAML from a string."""
        logger.debug("loading %s (%d chars)", filename, len(content))
        try:
            self._check_yaml_safety(content)
        except YAMLSafetyError as exc:
            exc.filename = filename
            raise
        try:
            self._check_nesting(content)
            root = self._yaml.compose(content)
        except YAMLSafetyError as exc:
            exc.filename = filename
            raise
        except YAMLError as exc:
            mark = getattr(exc, "problem_mark", None)
            problem = getattr(exc, "problem", None) or str(exc)
            raise WorkflowDecodeError(
                f"invalid YAML: {problem}",
                span=Span.from_marks(mark) if mark is not None else None,
                filename=filename,
            ) from exc
        if root is None:
            return None
        try:
            return _NodeConverter().convert(root)
        except WorkflowDecodeError as exc:
            exc.filename = filename
            raise


def _decode(data: bytes, filename: str) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise WorkflowDecodeError(f"file is not valid UTF-8: {exc}", filename=filename) from exc
