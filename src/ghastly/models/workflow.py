"""Typed GitHub Actions workflow model: workflow, jobs, steps and token permissions.

Every field that a policy may want to point at is declared as ``Spanned[...]``
so its source location survives decoding.  Keys the model does not know are
ignored, which keeps decoding forward compatible with new workflow syntax.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, field_validator, model_validator

from ghastly.models.spanned import Spanned, unwrap


class PermissionLevel(StrEnum):
    READ = "read"
    WRITE = "write"
    NONE = "none"


class GlobalPermission(StrEnum):
    """Shorthand token permissions that apply to every scope at once."""

    READ_ALL = "read-all"
    WRITE_ALL = "write-all"


class WorkflowNode(BaseModel):
    """Base for workflow mappings; YAML nulls count as absent keys."""

    model_config = {"frozen": True, "populate_by_name": True}

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if unwrap(value) is not None}
        return data


class PermissionSet(WorkflowNode):
    """Fine-grained ``GITHUB_TOKEN`` permissions.

    Scopes not mentioned in the workflow default to ``none``.
    """

    actions: PermissionLevel = PermissionLevel.NONE
    attestations: PermissionLevel = PermissionLevel.NONE
    checks: PermissionLevel = PermissionLevel.NONE
    contents: PermissionLevel = PermissionLevel.NONE
    deployments: PermissionLevel = PermissionLevel.NONE
    discussions: PermissionLevel = PermissionLevel.NONE
    id_token: PermissionLevel = Field(PermissionLevel.NONE, alias="id-token")
    issues: PermissionLevel = PermissionLevel.NONE
    packages: PermissionLevel = PermissionLevel.NONE
    pages: PermissionLevel = PermissionLevel.NONE
    pull_requests: PermissionLevel = Field(PermissionLevel.NONE, alias="pull-requests")
    repository_projects: PermissionLevel = Field(PermissionLevel.NONE, alias="repository-projects")
    security_events: PermissionLevel = Field(PermissionLevel.NONE, alias="security-events")
    statuses: PermissionLevel = PermissionLevel.NONE

    @field_validator("*", mode="before")
    @classmethod
    def _strip_span(cls, value: Any) -> Any:
        return unwrap(value)

    def items(self) -> Iterator[tuple[str, PermissionLevel]]:
        """Yield ``(scope, level)`` pairs using the workflow's scope names."""
        for name, info in type(self).model_fields.items():
            yield info.alias or name, getattr(self, name)

    @property
    def is_empty(self) -> bool:
        """True when no scope grants any access."""
        return all(level is PermissionLevel.NONE for _, level in self.items())


def _parse_permissions(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return GlobalPermission(value)
        except ValueError:
            raise ValueError(f"unknown global permission {value!r}") from None
    return value


# ``read-all`` / ``write-all`` or a fine-grained mapping.
Permissions = Annotated[GlobalPermission | PermissionSet, BeforeValidator(_parse_permissions)]

def _null_to_empty(value: Any) -> Any:
    return "" if value is None else value


# ``env`` / ``with`` entries; an entry without a value is an empty string.
StringMap = dict[str, Spanned[Annotated[str, BeforeValidator(_null_to_empty)]]]

# ``runs-on`` accepts a label, a list of labels or a ``{group, labels}`` mapping.
RunnerSpec = str | list[Spanned[str]] | dict[str, Any]


class Step(WorkflowNode):
    """A task run as part of a job: a shell command or an action."""

    id: Spanned[str] | None = None
    condition: Spanned[str] | None = Field(None, alias="if")
    name: Spanned[str] | None = None
    uses: Spanned[str] | None = None
    run: Spanned[str] | None = None
    working_directory: Spanned[str] | None = Field(None, alias="working-directory")
    shell: Spanned[str] | None = None
    with_: Spanned[StringMap] | None = Field(None, alias="with")
    env: Spanned[StringMap] | None = None


class Job(WorkflowNode):
    """A named unit of work within a workflow."""

    permissions: Spanned[Permissions] | None = None
    runs_on: Spanned[RunnerSpec] = Field(alias="runs-on")
    shell: Spanned[str] | None = None
    steps: Spanned[list[Spanned[Step]]] | None = None


class Workflow(WorkflowNode):
    """A GitHub Actions workflow document."""

    name: Spanned[str] | None = None
    run_name: Spanned[str] | None = Field(None, alias="run-name")
    permissions: Spanned[Permissions] | None = None
    env: Spanned[StringMap] | None = None
    jobs: Spanned[dict[str, Spanned[Job]]]

    def steps(self) -> Iterator[tuple[str, int, Spanned[Step]]]:
        """Yield ``(job_name, step_index, step)`` for every step of every job."""
        for job_name, job in self.jobs.value.items():
            if job.value.steps is None:
                continue
            for index, step in enumerate(job.value.steps.value):
                yield job_name, index, step
