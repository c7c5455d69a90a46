#!/usr/bin/env python3
"""
tftoolkit CLI

Command-line interfaces: the standalone `tf-plan-summary` renderer and the
`tftk` command that wraps the everyday terraform workflow.
"""

import argparse
import os
import sys
from typing import List, Optional

from . import __version__
from .checks import QualityChecker, any_failed
from .config import ToolkitConfig, load_config
from .cost import CostReportGenerator, InfracostParser, run_breakdown
from .errors import PlanFileNotFoundError, ToolkitError
from .runner import CommandRunner
from .style import Style
from .workflow import TerraformWorkflow, summarize_plan


def plan_summary_main(argv: Optional[List[str]] = None) -> int:
    """Entry point for tf-plan-summary"""
    parser = create_plan_summary_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"tf-plan-summary {__version__}")
        return 0

    try:
        if not args.plan_file or not os.path.isfile(args.plan_file):
            raise PlanFileNotFoundError(args.plan_file or "")

        summarize_plan(args.plan_file, Style.for_terminal(color=not args.no_color))
        return 0

    except PlanFileNotFoundError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        print("", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1
    except ToolkitError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        _print_traceback(args)
        return 1
    except KeyboardInterrupt:
        print("\n❌ Operation cancelled by user.", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"ERROR: {str(e)}", file=sys.stderr)
        _print_traceback(args)
        return 1


def create_plan_summary_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tf-plan-summary",
        description="Parse any terraform plan into a clean, module-grouped summary",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  terraform plan -out=plan.tfplan
  tf-plan-summary plan.tfplan

  terraform show -json plan.tfplan > plan.json
  tf-plan-summary --no-color plan.json > summary.txt
        """
    )

    parser.add_argument(
        "plan_file",
        nargs="?",
        help="Path to a terraform plan file or its JSON form (from 'terraform show -json')"
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable color output (for piping to files)"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show debug information and stack traces"
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for tftk"""
    parser = create_argument_parser()
    args, extra = parser.parse_known_args(argv)

    if args.version:
        print(f"tftk {__version__}")
        return 0

    if not args.command:
        parser.print_help()
        return 1

    if extra and args.command != "plan":
        parser.error(f"unrecognized arguments: {' '.join(extra)}")

    try:
        config = load_config(args.config)
        if args.verbose and args.config:
            print(f"📋 Loaded configuration from: {args.config}")

        style = Style.for_terminal(color=config.color and not args.no_color)
        runner = CommandRunner(cwd=args.directory, verbose=args.verbose)

        return run_command(args, extra, config, style, runner)

    except PlanFileNotFoundError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        print("Run 'tftk plan' first, or specify a plan file.", file=sys.stderr)
        return 1
    except ToolkitError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        _print_traceback(args)
        return 1
    except KeyboardInterrupt:
        print("\n❌ Operation cancelled by user.", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"❌ Error: {str(e)}", file=sys.stderr)
        _print_traceback(args)
        return 1


def run_command(args, extra: List[str], config: ToolkitConfig, style: Style, runner: CommandRunner) -> int:
    """Dispatch a parsed tftk command"""
    workflow = TerraformWorkflow(runner=runner, style=style)
    directory = args.directory or os.getcwd()

    if args.command == "plan":
        terraform_args = [arg for arg in extra if arg != "--"]
        return workflow.plan(config.plan_file, terraform_args)

    if args.command == "summary":
        return workflow.summary(args.plan_file or config.plan_file)

    if args.command == "cost":
        cost_parser = InfracostParser()
        if args.file:
            breakdown = cost_parser.parse_file(args.file)
        else:
            breakdown = cost_parser.parse_text(run_breakdown(runner, args.path))
        generator = CostReportGenerator(style, config.cost_thresholds)
        sys.stdout.write(generator.generate_report(breakdown, directory=directory, full=args.full))
        return 0

    if args.command == "check":
        checker = QualityChecker(runner=runner, style=style)
        results = checker.run_all()
        sys.stdout.write(checker.generate_report(results))
        return 1 if any_failed(results) else 0

    if args.command == "lint":
        return workflow.lint()

    if args.command == "lint-sec":
        return workflow.lint_sec()

    if args.command == "fmt":
        return workflow.fmt()

    if args.command == "validate":
        return workflow.validate()

    if args.command == "diff":
        return workflow.diff(config.diff_patterns, staged=args.staged)

    raise ToolkitError(f"Unknown command: {args.command}")


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser"""
    parser = argparse.ArgumentParser(
        prog="tftk",
        description="Terraform helper commands: plan summaries, cost estimates, checks and diffs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Usage: cd into any terraform directory, then run a command.

Examples:
  cd envs/dev && tftk plan
  tftk plan -target=module.gke
  tftk cost
  tftk cost --full
  tftk check
  tftk diff --staged
        """
    )

    parser.add_argument(
        "--config", "-c",
        help="Path to configuration JSON file"
    )

    parser.add_argument(
        "--directory", "-C",
        help="Terraform directory to run in (default: current directory)"
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable color output (for piping to files)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show the external commands being run"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show debug information and stack traces"
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information"
    )

    commands = parser.add_subparsers(dest="command", title="Commands", metavar="<command>")

    # Planning & review
    commands.add_parser(
        "plan",
        help="Plan + colored summary (auto-inits if needed); extra arguments go to terraform plan"
    )

    summary = commands.add_parser("summary", help="Show summary of an existing plan file")
    summary.add_argument("plan_file", nargs="?", help="Plan file (default: .tfplan.out)")

    cost = commands.add_parser("cost", help="Estimate monthly cost with infracost")
    cost.add_argument("--full", "-f", action="store_true", help="Expanded resource names and sub-costs")
    cost.add_argument("--file", help="Read an existing 'infracost breakdown --format json' file")
    cost.add_argument("--path", default=".", help="Path passed to infracost (default: .)")

    # Validation & linting
    commands.add_parser("check", help="Run all checks: fmt + validate + tflint + tfsec")
    commands.add_parser("validate", help="Run terraform validate")
    commands.add_parser("fmt", help="Format .tf files recursively")
    commands.add_parser("lint", help="Run tflint linter")
    commands.add_parser("lint-sec", help="Run tfsec security scan")

    # Git & diff
    diff = commands.add_parser("diff", help="Show .tf/.yaml changes since last commit")
    diff.add_argument("--staged", action="store_true", help="Show staged changes instead")

    return parser


def _print_traceback(args) -> None:
    if getattr(args, "debug", False):
        import traceback
        traceback.print_exc()


if __name__ == "__main__":
    sys.exit(main())
