"""Workflow policies and the default policy registry."""

from __future__ import annotations

from collections.abc import Iterator
from functools import cache

from ghastly.policies.base import (
    Policy,
    PolicyCheckOutput,
    PolicyCrashedError,
    PolicyError,
    PolicyTimeoutError,
    policy,
)
from ghastly.policies.expressions import no_github_expr_in_run
from ghastly.policies.permissions import no_all_permissions, permissions_set
from ghastly.policies.registry import (
    DuplicatePolicyError,
    PolicyRegistry,
    RegistryFrozenError,
    UnknownPolicyError,
)

# New policies are added here; the registry and checker need no changes.
DEFAULT_POLICIES: tuple[Policy, ...] = (
    no_all_permissions,
    permissions_set,
    no_github_expr_in_run,
)


@cache
def default_registry() -> PolicyRegistry:
    """The process-wide registry of built-in policies, frozen after creation."""
    return PolicyRegistry(DEFAULT_POLICIES).freeze()


def get_policies() -> Iterator[Policy]:
    return iter(default_registry())


__all__ = [
    "DEFAULT_POLICIES",
    "DuplicatePolicyError",
    "Policy",
    "PolicyCheckOutput",
    "PolicyCrashedError",
    "PolicyError",
    "PolicyRegistry",
    "PolicyTimeoutError",
    "RegistryFrozenError",
    "UnknownPolicyError",
    "default_registry",
    "get_policies",
    "no_all_permissions",
    "no_github_expr_in_run",
    "permissions_set",
    "policy",
]
