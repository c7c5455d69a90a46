"""
Terraform Quality Checks

Runs terraform fmt, terraform validate, tflint and tfsec and reports each as
PASS, FAIL, WARN or SKIP. Only FAIL makes the overall check fail; tools that
are not installed are skipped.
"""

from typing import List, Optional
from dataclasses import dataclass
from enum import Enum

from .runner import CommandRunner
from .style import Style


class CheckStatus(Enum):
    """Outcome of one check"""
    PASS = "PASS"
    FAIL = "FAIL"
    WARN = "WARN"
    SKIP = "SKIP"


@dataclass
class CheckResult:
    """Result of a single quality check"""
    name: str
    status: CheckStatus
    detail: str = ""

    @property
    def failed(self) -> bool:
        return self.status == CheckStatus.FAIL


class QualityChecker:
    """Runs the quality checks for the terraform directory of the runner"""

    def __init__(self, runner: Optional[CommandRunner] = None, style: Optional[Style] = None):
        self.runner = runner or CommandRunner()
        self.style = style or Style.plain()

    def run_all(self) -> List[CheckResult]:
        return [
            self.check_fmt(),
            self.check_validate(),
            self.check_tflint(),
            self.check_tfsec(),
        ]

    def check_fmt(self) -> CheckResult:
        name = "terraform fmt"
        if not self.runner.is_installed("terraform"):
            return CheckResult(name, CheckStatus.FAIL, "terraform not installed")
        result = self.runner.run(["terraform", "fmt", "-check", "-recursive", "."])
        if result.ok:
            return CheckResult(name, CheckStatus.PASS)
        return CheckResult(name, CheckStatus.FAIL, "run 'tftk fmt' to fix")

    def check_validate(self) -> CheckResult:
        name = "terraform validate"
        if not self.runner.is_installed("terraform"):
            return CheckResult(name, CheckStatus.FAIL, "terraform not installed")
        result = self.runner.run(["terraform", "validate", "-no-color"])
        if result.ok:
            return CheckResult(name, CheckStatus.PASS)
        return CheckResult(name, CheckStatus.FAIL, "run 'tftk validate' for details")

    def check_tflint(self) -> CheckResult:
        name = "tflint"
        if not self.runner.is_installed("tflint"):
            return CheckResult(name, CheckStatus.SKIP, "not installed")
        result = self.runner.run(["tflint", "--recursive", "--no-color"])
        if result.ok:
            return CheckResult(name, CheckStatus.PASS)
        return CheckResult(name, CheckStatus.FAIL, "run 'tftk lint' for details")

    def check_tfsec(self) -> CheckResult:
        """tfsec findings only warn; --soft-fail keeps its exit code at zero"""
        name = "tfsec"
        if not self.runner.is_installed("tfsec"):
            return CheckResult(name, CheckStatus.SKIP, "not installed")
        result = self.runner.run(["tfsec", ".", "--no-color", "--soft-fail"])
        issue_count = count_tfsec_issues(result.stdout + result.stderr)
        if issue_count == 0:
            return CheckResult(name, CheckStatus.PASS)
        return CheckResult(
            name,
            CheckStatus.WARN,
            f"{issue_count} issue(s), run 'tftk lint-sec' for details",
        )

    def generate_report(self, results: List[CheckResult]) -> str:
        s = self.style
        colors = {
            CheckStatus.PASS: s.green,
            CheckStatus.FAIL: s.red,
            CheckStatus.WARN: s.red,
            CheckStatus.SKIP: s.yellow,
        }

        lines = ["", s.paint("--- Terraform Quality Check ---", s.bold), ""]
        for result in results:
            tag = s.paint(f"  [{result.status.value}]", colors[result.status])
            line = f"{tag} {result.name}"
            if result.detail:
                line = f"{line} -- {result.detail}"
            lines.append(line)

        lines.append("")
        if any_failed(results):
            lines.append(s.paint("  Some checks failed.", s.red, s.bold))
        else:
            lines.append(s.paint("  All checks passed.", s.green, s.bold))

        return "\n".join(lines) + "\n"


def count_tfsec_issues(output: str) -> int:
    """Count result blocks in tfsec's default text output"""
    return sum(1 for line in output.splitlines() if "Result" in line)


def any_failed(results: List[CheckResult]) -> bool:
    return any(result.failed for result in results)
