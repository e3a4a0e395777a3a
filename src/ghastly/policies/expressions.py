"""Policies on GitHub expressions embedded in workflow strings."""

from __future__ import annotations

from ghastly.models.errors import PolicyViolation
from ghastly.models.workflow import Workflow
from ghastly.parser.expression import contains_expression
from ghastly.policies.base import policy


@policy
def no_github_expr_in_run(workflow: Workflow) -> list[PolicyViolation]:
    """No step should use a GitHub expression in its `run` field.

    The result of an expression is pasted into the script as-is before the
    shell sees it.  Values an attacker controls, such as a pull request
    title, can then break out of their quoting and run arbitrary commands
    (script injection).  Pass the value through an environment variable
    instead and reference the variable from the script.

    # Examples

    ## Not OK: expression in the `run` field

    A pull request titled `a"; ls "$GITHUB_WORKSPACE"; echo "b` turns the
    script below into `echo "a"; ls "$GITHUB_WORKSPACE"; echo "b"`.

    ```yaml
    on: [pull_request]
    jobs:
      job-with-expression-in-run:
        runs-on: ubuntu-latest
        steps:
          - run: echo "${{ github.event.pull_request.title }}"
    ```

    ## OK: expression passed via `env`

    ```yaml
    on: [pull_request]
    jobs:
      job-with-expression-in-env:
        runs-on: ubuntu-latest
        steps:
          - run: echo "${PULL_REQUEST_TITLE}"
            env:
              PULL_REQUEST_TITLE: ${{ github.event.pull_request.title }}
    ```

    # References

    - <https://docs.github.com/en/actions/security-for-github-actions/security-guides/security-hardening-for-github-actions#understanding-the-risk-of-script-injections>
    - <https://docs.github.com/en/actions/security-for-github-actions/security-guides/security-hardening-for-github-actions#good-practices-for-mitigating-script-injection-attacks>
    """
    violations: list[PolicyViolation] = []
    for job_name, step_index, step in workflow.steps():
        run = step.run
        if run is None or not contains_expression(run.value):
            continue
        violations.append(
            PolicyViolation(
                source=run.span,
                message=(
                    f"Step {step_index + 1} of job {job_name} should not directly include "
                    f"GitHub expression in the 'run' field."
                ),
            )
        )
    return violations
