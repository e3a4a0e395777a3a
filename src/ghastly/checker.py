"""Orchestrates a check run: Load → Decode → every registered policy → outputs."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from ghastly.models.errors import PolicyViolation
from ghastly.models.workflow import Workflow
from ghastly.parser.decoder import WorkflowDecoder
from ghastly.parser.loader import TrackedLoader
from ghastly.policies import default_registry
from ghastly.policies.base import (
    Policy,
    PolicyCheckOutput,
    PolicyCrashedError,
    PolicyTimeoutError,
)
from ghastly.policies.registry import PolicyRegistry
from ghastly.settings import Settings

logger = logging.getLogger("ghastly.checker")


class WorkflowChecker:
    """Runs every policy of a registry against a workflow.

    A load or decode failure aborts the run before any policy executes.
    Each policy then runs on its own: with ``isolate_policy_failures`` on,
    an exception or an overrun of ``policy_timeout_seconds`` is recorded on
    that policy's output and the remaining policies still run.
    """

    def __init__(
        self,
        registry: PolicyRegistry | None = None,
        settings: Settings | None = None,
    ) -> None:
        if settings is None:
            settings = Settings()
        self._registry = registry if registry is not None else default_registry()
        self._timeout = settings.policy_timeout_seconds
        self._isolate = settings.isolate_policy_failures
        self._loader = TrackedLoader()
        self._decoder = WorkflowDecoder()

    @property
    def registry(self) -> PolicyRegistry:
        return self._registry

    def check_path(self, path: str | os.PathLike[str]) -> list[PolicyCheckOutput]:
        path = Path(path)
        workflow = self._decoder.decode(self._loader.load(path), filename=str(path))
        return self.check(workflow)

    def check_string(self, content: str, filename: str = "<string>") -> list[PolicyCheckOutput]:
        tree = self._loader.load_string(content, filename=filename)
        return self.check(self._decoder.decode(tree, filename=filename))

    def check(self, workflow: Workflow) -> list[PolicyCheckOutput]:
        """One output per registered policy, in registry order, empty ones included."""
        return [self._run(policy, workflow) for policy in self._registry]

    # -- per-policy execution -------------------------------------------------

    def _run(self, policy: Policy, workflow: Workflow) -> PolicyCheckOutput:
        logger.debug("running policy %s", policy.name)
        if not self._isolate:
            return self._invoke(policy, workflow)
        try:
            return self._invoke(policy, workflow)
        except PolicyTimeoutError as exc:
            logger.warning("%s", exc)
            return PolicyCheckOutput(policy=policy, error=exc)
        except Exception as exc:
            logger.exception("policy %s crashed", policy.name)
            return PolicyCheckOutput(policy=policy, error=PolicyCrashedError(policy.name, exc))

    def _invoke(self, policy: Policy, workflow: Workflow) -> PolicyCheckOutput:
        if self._timeout is None:
            return policy.run(workflow)
        return _run_with_deadline(policy, workflow, self._timeout)


def _run_with_deadline(policy: Policy, workflow: Workflow, timeout: float) -> PolicyCheckOutput:
    # A daemon thread: an overrunning check cannot be killed, only abandoned.
    outcome: dict[str, Any] = {}

    def _target() -> None:
        try:
            outcome["output"] = policy.run(workflow)
        except BaseException as exc:
            outcome["error"] = exc

    worker = threading.Thread(target=_target, name=f"ghastly-policy-{policy.name}", daemon=True)
    worker.start()
    worker.join(timeout)
    if worker.is_alive():
        raise PolicyTimeoutError(policy.name, timeout)
    if "error" in outcome:
        raise outcome["error"]
    return outcome["output"]


def check_workflow(
    path: str | os.PathLike[str],
    registry: PolicyRegistry | None = None,
    settings: Settings | None = None,
) -> list[PolicyCheckOutput]:
    """Check a workflow file against every registered policy."""
    return WorkflowChecker(registry, settings).check_path(path)


def sorted_violations(
    outputs: Iterable[PolicyCheckOutput],
) -> list[tuple[Policy, PolicyViolation]]:
    """Flatten outputs into ``(policy, violation)`` pairs ordered by location.

    Unlocated violations sort first; ties keep registry order.
    """
    pairs = [(output.policy, violation) for output in outputs for violation in output.violations]
    pairs.sort(key=lambda pair: pair[1].source.sort_key)
    return pairs
