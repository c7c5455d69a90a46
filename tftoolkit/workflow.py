"""
Terraform Workflow Commands

Pass-through wrappers that run terraform, tflint, tfsec, pre-commit and git
with the terminal attached, plus the plan-then-summarize workflow.
"""

import os
import sys
from typing import List, Optional, Sequence, TextIO

from .analyzer import PlanAnalyzer, PlanAnalysis
from .errors import PlanFileNotFoundError, ToolNotFoundError
from .generator import SummaryGenerator
from .parser import TerraformPlanParser
from .runner import CommandRunner
from .style import Style


def warn_unclassified(analysis: PlanAnalysis, stream: Optional[TextIO] = None) -> None:
    """Report records whose action sequence matched no known bucket"""
    if not analysis.unclassified:
        return
    stream = stream or sys.stderr
    print(
        f"Warning: {len(analysis.unclassified)} resource change(s) with unrecognized "
        f"actions were not counted in the totals:",
        file=stream,
    )
    for record in analysis.unclassified:
        print(f"  {record.address} [{', '.join(record.actions)}]", file=stream)


def summarize_plan(
    plan_file: str,
    style: Style,
    stream: Optional[TextIO] = None,
    runner: Optional[CommandRunner] = None,
    err_stream: Optional[TextIO] = None,
    directory: Optional[str] = None,
) -> PlanAnalysis:
    """
    Parse, classify and render one plan file.

    Parsing completes before anything is written, so an invalid plan produces
    no partial report.
    """
    parser = TerraformPlanParser(runner=runner)
    plan = parser.parse_file(plan_file)
    analysis = PlanAnalyzer().analyze(plan)

    generator = SummaryGenerator(style)
    generator.write_report(analysis, stream or sys.stdout, plan_file=plan.source,
                           directory=directory or os.getcwd())
    warn_unclassified(analysis, err_stream)
    return analysis


class TerraformWorkflow:
    """The everyday terraform commands, run in the runner's directory"""

    def __init__(self, runner: Optional[CommandRunner] = None, style: Optional[Style] = None):
        self.runner = runner or CommandRunner()
        self.style = style or Style.plain()

    def _directory(self) -> str:
        return self.runner.cwd or os.getcwd()

    def plan(self, plan_file: str, extra_args: Sequence[str] = (), stream: Optional[TextIO] = None) -> int:
        """Init when needed, write a plan to `plan_file`, then summarize it"""
        stream = stream or sys.stdout
        self.runner.require("terraform")

        if not os.path.isdir(os.path.join(self._directory(), ".terraform")):
            print("--- No .terraform/ found, running terraform init ---", file=stream)
            result = self.runner.run(["terraform", "init"], capture=False)
            if not result.ok:
                return result.returncode
            print("", file=stream)

        print("--- Running terraform plan ---", file=stream)
        result = self.runner.run(
            ["terraform", "plan", "-input=false", f"-out={plan_file}", *extra_args],
            capture=False,
        )
        if not result.ok:
            print(f"terraform plan failed (exit {result.returncode})", file=stream)
            return result.returncode

        print("", file=stream)
        summarize_plan(os.path.join(self._directory(), plan_file), self.style, stream,
                       runner=self.runner, directory=self._directory())
        return 0

    def summary(self, plan_file: str, stream: Optional[TextIO] = None) -> int:
        """Summarize a plan written by an earlier `plan` run"""
        stream = stream or sys.stdout
        path = os.path.join(self._directory(), plan_file)
        if not os.path.isfile(path):
            raise PlanFileNotFoundError(plan_file)
        summarize_plan(path, self.style, stream, runner=self.runner, directory=self._directory())
        return 0

    def fmt(self) -> int:
        self.runner.require("terraform")
        return self.runner.run(["terraform", "fmt", "-recursive", "."], capture=False).returncode

    def validate(self) -> int:
        self.runner.require("terraform")
        return self.runner.run(["terraform", "validate"], capture=False).returncode

    def lint(self, stream: Optional[TextIO] = None) -> int:
        """tflint, falling back to the pre-commit tflint hook"""
        stream = stream or sys.stdout
        if self.runner.is_installed("tflint"):
            print("--- Running tflint ---", file=stream)
            return self.runner.run(["tflint", "--recursive"], capture=False).returncode
        if self.runner.is_installed("pre-commit"):
            print("--- Running pre-commit terraform hooks ---", file=stream)
            return self.runner.run(
                ["pre-commit", "run", "terraform_tflint", "--all-files"], capture=False
            ).returncode
        raise ToolNotFoundError("tflint", "Neither tflint nor pre-commit found in PATH.")

    def lint_sec(self, stream: Optional[TextIO] = None) -> int:
        """tfsec, falling back to the pre-commit tfsec hook"""
        stream = stream or sys.stdout
        if self.runner.is_installed("tfsec"):
            print("--- Running tfsec ---", file=stream)
            return self.runner.run(["tfsec", "."], capture=False).returncode
        if self.runner.is_installed("pre-commit"):
            print("--- Running pre-commit tfsec hook ---", file=stream)
            return self.runner.run(["pre-commit", "run", "tfsec", "--all-files"], capture=False).returncode
        raise ToolNotFoundError("tfsec", "Neither tfsec nor pre-commit found in PATH.")

    def diff(self, patterns: List[str], staged: bool = False, stream: Optional[TextIO] = None) -> int:
        """Show the diffstat and the diff of infrastructure files"""
        stream = stream or sys.stdout
        self.runner.require("git")
        base = ["git", "diff"]
        if staged:
            base.append("--cached")

        print("", file=stream)
        result = self.runner.run([*base, "--stat", "--", *patterns], capture=False)
        if not result.ok:
            return result.returncode

        print("", file=stream)
        color_flag = "--no-color" if self.style.is_plain else "--color"
        return self.runner.run([*base, color_flag, "--", *patterns], capture=False).returncode
