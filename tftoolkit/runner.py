"""
External Command Runner

Thin wrapper around subprocess for the terraform, infracost, tflint, tfsec,
pre-commit and git binaries.
"""

import shutil
import subprocess
from typing import List, Optional, Sequence
from dataclasses import dataclass

from .errors import ToolNotFoundError


@dataclass
class CommandResult:
    """Outcome of one external command"""
    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Runs external tools in a working directory"""

    def __init__(self, cwd: Optional[str] = None, verbose: bool = False):
        self.cwd = cwd
        self.verbose = verbose

    def is_installed(self, tool: str) -> bool:
        return shutil.which(tool) is not None

    def require(self, tool: str, hint: str = "") -> None:
        if not self.is_installed(tool):
            raise ToolNotFoundError(tool, hint)

    def run(self, args: Sequence[str], capture: bool = True) -> CommandResult:
        """
        Run a command and return its result.

        With `capture=False` the command inherits the terminal so its own
        colored output reaches the user unchanged.
        """
        args = list(args)
        if self.verbose:
            print(f"$ {' '.join(args)}")

        try:
            completed = subprocess.run(
                args,
                cwd=self.cwd,
                capture_output=capture,
                text=True,
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(args[0]) from e

        return CommandResult(
            args=args,
            returncode=completed.returncode,
            stdout=(completed.stdout or "") if capture else "",
            stderr=(completed.stderr or "") if capture else "",
        )
