"""Pydantic domain models for ghastly."""

from ghastly.models.errors import GhastlyError, PolicyViolation, Position, Span
from ghastly.models.spanned import Spanned
from ghastly.models.workflow import (
    GlobalPermission,
    Job,
    PermissionLevel,
    Permissions,
    PermissionSet,
    Step,
    Workflow,
)

__all__ = [
    "GhastlyError",
    "GlobalPermission",
    "Job",
    "PermissionLevel",
    "PermissionSet",
    "Permissions",
    "PolicyViolation",
    "Position",
    "Span",
    "Spanned",
    "Step",
    "Workflow",
]
