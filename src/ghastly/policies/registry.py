"""Policy registry: an explicit, name-unique collection of policies."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Self

from ghastly.models.errors import GhastlyError
from ghastly.policies.base import Policy


class UnknownPolicyError(GhastlyError):
    """Raised when a requested policy is not registered."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.policy_name = name
        self.available = available
        super().__init__(f"Unknown policy '{name}'. Available: {', '.join(available)}")


class DuplicatePolicyError(GhastlyError):
    """Raised when a policy name is registered twice."""

    def __init__(self, name: str) -> None:
        self.policy_name = name
        super().__init__(f"Policy '{name}' is already registered")


class RegistryFrozenError(GhastlyError):
    """Raised when registering into a registry that has been frozen."""

    def __init__(self, name: str) -> None:
        self.policy_name = name
        super().__init__(f"Cannot register policy '{name}': registry is frozen")


class PolicyRegistry:
    """Registry for workflow policies.

    Iteration follows registration order.  Once :meth:`freeze` is called the
    registry is read-only and may be shared between concurrent checks.
    """

    def __init__(self, policies: Iterable[Policy] = ()) -> None:
        self._policies: dict[str, Policy] = {}
        self._frozen = False
        for item in policies:
            self.register(item)

    def register(self, policy: Policy) -> Policy:
        """Register a policy.  Can be used as a decorator on top of ``@policy``."""
        if self._frozen:
            raise RegistryFrozenError(policy.name)
        if policy.name in self._policies:
            raise DuplicatePolicyError(policy.name)
        self._policies[policy.name] = policy
        return policy

    def get(self, name: str) -> Policy:
        """Get the named policy."""
        if name not in self._policies:
            raise UnknownPolicyError(name, available=self.names())
        return self._policies[name]

    def names(self) -> list[str]:
        """List registered policy names."""
        return sorted(self._policies)

    def freeze(self) -> Self:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __iter__(self) -> Iterator[Policy]:
        return iter(self._policies.values())

    def __len__(self) -> int:
        return len(self._policies)

    def __contains__(self, name: object) -> bool:
        return name in self._policies
