"""Policies on ``GITHUB_TOKEN`` permissions."""

from __future__ import annotations

from ghastly.models.errors import PolicyViolation
from ghastly.models.workflow import GlobalPermission, PermissionSet, Workflow
from ghastly.policies.base import policy


@policy
def no_all_permissions(workflow: Workflow) -> list[PolicyViolation]:
    """Jobs must not use the `read-all` or `write-all` token permissions.

    Granting every scope at once is almost always more than a job needs and
    violates the principle of least privilege.

    # Examples

    ## Not OK: job with `read-all` token permission

    ```yaml
    jobs:
      foo:
        runs-on: ubuntu-latest
        permissions: read-all
        steps:
          - run: echo "Too many permissions"
    ```

    ## Not OK: job with `write-all` token permission

    ```yaml
    jobs:
      foo:
        runs-on: ubuntu-latest
        permissions: write-all
        steps:
          - run: echo "Way too many permissions"
    ```

    ## OK: job with fine-grained token permissions

    ```yaml
    jobs:
      foo:
        runs-on: ubuntu-latest
        permissions:
          contents: read
        steps:
          - run: echo "This is okay"
    ```

    # References

    - <https://docs.github.com/en/actions/writing-workflows/workflow-syntax-for-github-actions#defining-access-for-the-github_token-scopes>
    - <https://en.wikipedia.org/wiki/Principle_of_least_privilege>
    """
    violations: list[PolicyViolation] = []
    for job_name, job in workflow.jobs.items():
        permissions = job.permissions
        if permissions is None or not isinstance(permissions.value, GlobalPermission):
            continue
        violations.append(
            PolicyViolation(
                source=permissions.span,
                message=f"Job {job_name} should not use the '{permissions.value}' permission.",
            )
        )
    return violations


@policy
def permissions_set(workflow: Workflow) -> list[PolicyViolation]:
    """Every job should declare its own token permissions.

    Without a `permissions` key a job inherits the workflow default, or the
    repository default when the workflow sets none, which is often broader
    than the job needs.  Declaring permissions per job keeps each job's
    access explicit.

    Nothing is reported when the workflow default grants no access at all
    (`permissions: {}`), or when the workflow sets a default and has only one
    job, since the default then already describes that job.

    # Examples

    ## Not OK: two jobs, one relying on the workflow default

    ```yaml
    permissions:
      contents: read
    jobs:
      build:
        runs-on: ubuntu-latest
        permissions:
          contents: read
        steps:
          - run: make
      release:
        runs-on: ubuntu-latest
        steps:
          - run: make release
    ```

    ## OK: single job covered by the workflow default

    ```yaml
    permissions:
      contents: read
    jobs:
      build:
        runs-on: ubuntu-latest
        steps:
          - run: make
    ```

    # References

    - <https://docs.github.com/en/actions/writing-workflows/workflow-syntax-for-github-actions#jobsjob_idpermissions>
    """
    default = workflow.permissions
    if default is not None:
        if isinstance(default.value, PermissionSet) and default.value.is_empty:
            return []
        if len(workflow.jobs) <= 1:
            return []
    return [
        PolicyViolation(
            source=job.span,
            message=f"Job {job_name} should set its own token permissions.",
        )
        for job_name, job in workflow.jobs.items()
        if job.permissions is None
    ]
