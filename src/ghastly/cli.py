"""Command line entry point: check workflows, list and show policies."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from ghastly import __version__
from ghastly.checker import WorkflowChecker, sorted_violations
from ghastly.parser.loader import WorkflowDecodeError
from ghastly.policies import default_registry
from ghastly.policies.registry import UnknownPolicyError
from ghastly.settings import Settings

EXIT_OK = 0
EXIT_VIOLATIONS = 1
EXIT_ERROR = 2

logger = logging.getLogger("ghastly.cli")


def _check(args: argparse.Namespace, settings: Settings) -> int:
    checker = WorkflowChecker(default_registry(), settings)
    status = EXIT_OK
    for path in args.files:
        try:
            outputs = checker.check_path(path)
        except OSError as exc:
            print(f"{path}: {exc.strerror or exc}", file=sys.stderr)
            status = EXIT_ERROR
            continue
        except WorkflowDecodeError as exc:
            print(exc, file=sys.stderr)
            status = EXIT_ERROR
            continue

        for output in outputs:
            if output.error is not None:
                print(f"{path}: {output.error}", file=sys.stderr)
                status = EXIT_ERROR
        for policy, violation in sorted_violations(outputs):
            line, column = violation.source.sort_key
            print(f"{path}:{line}:{column}: [{policy.name}] {violation.message}")
            if status == EXIT_OK:
                status = EXIT_VIOLATIONS
    return status


def _list(args: argparse.Namespace, settings: Settings) -> int:
    for policy in default_registry():
        if args.long and policy.summary:
            print(f"{policy.name}: {policy.summary}")
        else:
            print(policy.name)
    return EXIT_OK


def _show(args: argparse.Namespace, settings: Settings) -> int:
    try:
        policy = default_registry().get(args.name)
    except UnknownPolicyError as exc:
        print(exc, file=sys.stderr)
        return EXIT_VIOLATIONS
    if policy.documentation is None:
        print(f"Policy {policy.name} has no documentation", file=sys.stderr)
        return EXIT_VIOLATIONS
    print(policy.documentation)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ghastly",
        description="Check GitHub Actions workflows against security policies.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", help="Override the configured log level")
    subcommands = parser.add_subparsers(dest="command", required=True)

    check = subcommands.add_parser("check", help="Check workflow files")
    check.add_argument("files", nargs="+", type=Path, metavar="FILE", help="Workflow file to check")
    check.set_defaults(handler=_check)

    listing = subcommands.add_parser("list", help="List policies")
    listing.add_argument("-l", "--long", action="store_true", help="Include policy summaries")
    listing.set_defaults(handler=_list)

    show = subcommands.add_parser("show", help="Show information about a policy")
    show.add_argument("name", help="Policy name")
    show.set_defaults(handler=_show)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()
    logging.basicConfig(level=(args.log_level or settings.log_level).upper())
    logger.debug("ghastly v%s running %s", __version__, args.command)
    return args.handler(args, settings)


if __name__ == "__main__":
    sys.exit(main())
