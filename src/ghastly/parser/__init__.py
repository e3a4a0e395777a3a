"""YAML parsing with line fidelity and expression tokenizing for ghastly."""

from ghastly.parser.decoder import WorkflowDecoder, parse_workflow, parse_workflow_string
from ghastly.parser.expression import Token, TokenKind, tokenize
from ghastly.parser.loader import TrackedLoader, WorkflowDecodeError, YAMLSafetyError

__all__ = [
    "Token",
    "TokenKind",
    "TrackedLoader",
    "WorkflowDecodeError",
    "WorkflowDecoder",
    "YAMLSafetyError",
    "parse_workflow",
    "parse_workflow_string",
    "tokenize",
]
