"""Policy contract: a named, documented check over a parsed workflow."""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from ghastly.models.errors import GhastlyError, PolicyViolation
from ghastly.models.workflow import Workflow

PolicyCheck = Callable[[Workflow], Iterable[PolicyViolation]]


class PolicyError(GhastlyError):
    """A policy failed to produce a result."""

    def __init__(self, policy_name: str, message: str) -> None:
        self.policy_name = policy_name
        super().__init__(f"Policy '{policy_name}' {message}")


class PolicyCrashedError(PolicyError):
    """Raised (or recorded) when a policy's check function throws."""

    def __init__(self, policy_name: str, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(policy_name, f"crashed: {type(cause).__name__}: {cause}")


class PolicyTimeoutError(PolicyError):
    """Raised (or recorded) when a policy overruns its deadline."""

    def __init__(self, policy_name: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(policy_name, f"did not finish within {timeout:g}s")


@dataclass(frozen=True)
class Policy:
    """A named check.  Identity is the name; the check must not mutate its input."""

    name: str
    check: PolicyCheck = field(repr=False, compare=False)
    documentation: str | None = field(default=None, repr=False, compare=False)

    def __call__(self, workflow: Workflow) -> list[PolicyViolation]:
        return list(self.check(workflow))

    def run(self, workflow: Workflow) -> PolicyCheckOutput:
        return PolicyCheckOutput(policy=self, violations=tuple(self(workflow)))

    @property
    def summary(self) -> str | None:
        """First line of the documentation."""
        if not self.documentation:
            return None
        return self.documentation.splitlines()[0]


@dataclass(frozen=True)
class PolicyCheckOutput:
    """What one policy reported for one workflow.

    A policy that crashed or timed out carries its ``error`` and no
    violations; that is not the same as passing, check :attr:`ok`.
    """

    policy: Policy
    violations: tuple[PolicyViolation, ...] = ()
    error: PolicyError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def passed(self) -> bool:
        return self.ok and not self.violations


def policy(check: PolicyCheck) -> Policy:
    """Turn a check function into a :class:`Policy`.

    The policy is named after the function and documented by its docstring.
    """
    return Policy(name=check.__name__, check=check, documentation=inspect.getdoc(check) or None)
