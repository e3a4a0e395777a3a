"""ghastly: static policy checks for GitHub Actions workflows."""

__version__ = "0.1.0"

from ghastly.checker import WorkflowChecker, check_workflow, sorted_violations  # noqa: E402
from ghastly.models.errors import GhastlyError  # noqa: E402
from ghastly.parser.loader import WorkflowDecodeError  # noqa: E402
from ghastly.policies import PolicyCheckOutput, get_policies  # noqa: E402

__all__ = [
    "GhastlyError",
    "PolicyCheckOutput",
    "WorkflowChecker",
    "WorkflowDecodeError",
    "__version__",
    "check_workflow",
    "get_policies",
    "sorted_violations",
]
