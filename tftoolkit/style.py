"""
Terminal Styling

ANSI styling passed explicitly to every renderer. `Style.plain()` renders the
same text with every escape sequence empty, for pipes and log files.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Style:
    """ANSI escape codes used by the text renderers"""
    red: str = ""
    green: str = ""
    yellow: str = ""
    cyan: str = ""
    bold: str = ""
    dim: str = ""
    reset: str = ""

    @classmethod
    def styled(cls) -> "Style":
        return cls(
            red="\033[0;31m",
            green="\033[0;32m",
            yellow="\033[0;33m",
            cyan="\033[0;36m",
            bold="\033[1m",
            dim="\033[2m",
            reset="\033[0m",
        )

    @classmethod
    def plain(cls) -> "Style":
        return cls()

    @classmethod
    def for_terminal(cls, color: bool = True) -> "Style":
        """Styled unless color is disabled by flag or by the NO_COLOR convention"""
        if not color or os.environ.get("NO_COLOR"):
            return cls.plain()
        return cls.styled()

    @property
    def is_plain(self) -> bool:
        return not self.reset

    def paint(self, text: str, *codes: str) -> str:
        """Wrap text in the given codes, closing with reset"""
        prefix = "".join(codes)
        if not prefix:
            return text
        return f"{prefix}{text}{self.reset}"
