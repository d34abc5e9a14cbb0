"""Command line interface for introspecting Go module dependencies."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Sequence

from zeitgeist.gomod import DependencyCheckError, check, float_refs, release_status
from zeitgeist.modules import modules
from zeitgeist.ruleset import RulesetType, ruleset, rulesets

_FLOAT_DESCRIPTION = """\
The goal of the float command is to find the best reference for a given release.
Float will select a ref for found dependencies, in this order (for the Any
ruleset, default):

1. A release tag with matching major and minor; choosing the one with the
   highest patch version, ex: "v0.1.2"
2. If no tags, choose the release branch, ex: "release-0.1"
3. Finally, the default branch, ex: "master"

The selection process for float can be modified by providing a ruleset.

Rulesets,
  Any              tagged releases, release branches, default branch
  Release          tagged releases
  Branch           release branches
  ReleaseOrBranch  tagged releases, release branch

For rulesets that that restrict the selection process, no ref is selected.
"""

_CHECK_DESCRIPTION = """\
The check command is used to evaluate if each dependency for the given module
meets the requirements for cutting a release branch. If the requirements are
met based on the ruleset selected, the command will exit with code 0, otherwise
an error message is generated and the with the failed dependencies and exit
code 1. Errors are written to stderr. Verbose output is written to stdout.

Rulesets,
  Release          check requires all dependencies to have tagged releases.
  Branch           check requires all dependencies to have a release branch.
  ReleaseOrBranch  check will use rule (Release || Branch).
"""

_RELEASE_HELP = "release should be '<major>.<minor>' (i.e.: 1.23 or v1.23) [required]"


class _InvalidRuleset(ValueError):
    pass


def _ruleset_help() -> str:
    return f"The ruleset to evaluate the dependency refs. Rulesets: [{', '.join(rulesets())}]"


def _parse_ruleset(flag: str) -> RulesetType:
    rule = ruleset(flag)
    if rule is RulesetType.INVALID:
        raise _InvalidRuleset(
            f"invalid ruleset, please select one of: [{', '.join(rulesets())}]"
        )
    return rule


def _run_float(args: argparse.Namespace) -> int:
    rule = _parse_ruleset(args.ruleset)
    for ref in float_refs(args.gomod, args.release, args.domain, rule):
        if ref:
            print(ref)
    return 0


def _run_needs(args: argparse.Namespace) -> int:
    _, packages = modules(args.gomods, args.domain)
    for package in packages:
        if package:
            print(package)
    return 0


def _run_check(args: argparse.Namespace) -> int:
    rule = _parse_ruleset(args.ruleset)
    out = sys.stderr if args.verbose else None
    try:
        check(args.gomod, args.release, args.domain, rule, out)
    except DependencyCheckError as exc:
        print(exc)
        return 1
    return 0


def _run_exists(args: argparse.Namespace) -> int:
    out = sys.stderr if args.verbose else None
    meta = release_status(args.gomod, args.release, out)
    if args.next:
        print(meta.release)
    return 0 if meta.release_branch_exists else 1


def _add_command(
    subparsers: argparse._SubParsersAction,
    name: str,
    summary: str,
    handler: Callable[[argparse.Namespace], int],
    description: str | None = None,
) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        name,
        help=summary,
        description=description or summary,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.set_defaults(handler=handler)
    return parser


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all sub-commands."""
    parser = argparse.ArgumentParser(prog="buoy", description="Introspect go module dependencies.")
    subparsers = parser.add_subparsers(dest="command", metavar="command")

    float_cmd = _add_command(
        subparsers,
        "float",
        "Find latest versions of dependencies based on a release.",
        _run_float,
        _FLOAT_DESCRIPTION,
    )
    float_cmd.add_argument("gomod", metavar="go.mod")
    float_cmd.add_argument(
        "-d", "--domain", default="knative.dev", help="domain filter (i.e. knative.dev) [required]"
    )
    float_cmd.add_argument("-r", "--release", required=True, help=_RELEASE_HELP)
    float_cmd.add_argument("--ruleset", default=str(RulesetType.ANY), help=_ruleset_help())

    needs_cmd = _add_command(
        subparsers,
        "needs",
        "Find dependencies based on a base import domain.",
        _run_needs,
    )
    needs_cmd.add_argument("gomods", metavar="go.mod", nargs="+")
    needs_cmd.add_argument(
        "-d", "--domain", required=True, help="domain filter (i.e. knative.dev) [required]"
    )

    check_cmd = _add_command(
        subparsers,
        "check",
        "Determine if this module has a ref for each dependency for a given release "
        "based on a ruleset.",
        _run_check,
        _CHECK_DESCRIPTION,
    )
    check_cmd.add_argument("gomod", metavar="go.mod")
    check_cmd.add_argument(
        "-d", "--domain", required=True, help="domain filter (i.e. knative.dev) [required]"
    )
    check_cmd.add_argument("-r", "--release", required=True, help=_RELEASE_HELP)
    check_cmd.add_argument(
        "--ruleset",
        default=str(RulesetType.RELEASE_OR_RELEASE_BRANCH),
        help=_ruleset_help(),
    )
    check_cmd.add_argument("-v", "--verbose", action="store_true", help="Print verbose output.")

    exists_cmd = _add_command(
        subparsers,
        "exists",
        "Determine if the release branch exists for a given module.",
        _run_exists,
    )
    exists_cmd.add_argument("gomod", metavar="go.mod")
    exists_cmd.add_argument("-r", "--release", required=True, help=_RELEASE_HELP)
    exists_cmd.add_argument(
        "-v", "--verbose", action="store_true", help="Print verbose output (stderr)"
    )
    exists_cmd.add_argument(
        "-t", "--next", action="store_true", help="Print the next release tag (stdout)"
    )

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line and return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 0
    try:
        return handler(args)
    except (OSError, ValueError) as exc:
        print(f"Error during command execution: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())