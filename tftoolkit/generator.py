"""
Plan Summary Generator

Renders a classified terraform plan as a module-grouped, risk-ordered text
report for the terminal.
"""

import os
from typing import List, Optional, TextIO
from dataclasses import dataclass

from .analyzer import (
    PlanAnalysis,
    ActionKind,
    ModuleGroup,
    compute_attribute_diff,
    group_by_module,
)
from .parser import ChangeRecord
from .style import Style

TITLE = "====== TERRAFORM PLAN SUMMARY ======"
RULE = "====================================="
NO_CHANGES = "No changes. Infrastructure is up-to-date."
DESTRUCTION_WARNING = "WARNING: This plan includes resource destruction. Review carefully."


@dataclass(frozen=True)
class Section:
    """How one action bucket is rendered"""
    kind: ActionKind
    label: str
    symbol: str
    color: str
    total_label: str


# Risk order: destructive actions first
SECTIONS = [
    Section(ActionKind.DESTROY, "DESTROY", "-", "red", "to destroy"),
    Section(ActionKind.REPLACE, "REPLACE (destroy then create)", "-/+", "red", "to replace"),
    Section(ActionKind.CREATE, "CREATE", "+", "green", "to create"),
    Section(ActionKind.UPDATE, "UPDATE", "~", "yellow", "to update"),
    Section(ActionKind.READ, "READ", ">", "cyan", "to read"),
]

NO_OP_SECTION = Section(ActionKind.NO_OP, "NO-OP", "", "dim", "unchanged")


class SummaryGenerator:
    """Generates the text summary of a terraform plan analysis"""

    def __init__(self, style: Optional[Style] = None):
        self.style = style or Style.plain()

    def generate_report(
        self,
        analysis: PlanAnalysis,
        plan_file: Optional[str] = None,
        directory: Optional[str] = None,
    ) -> str:
        """
        Generate the full report.

        The title banner is only emitted when `plan_file` is given; the rule
        above the totals only when at least one section was rendered.
        """
        lines: List[str] = []

        if plan_file:
            lines.extend(self._generate_header(plan_file, directory or os.getcwd()))

        body = self._generate_sections(analysis)
        lines.extend(body)

        if body:
            lines.append(self.style.paint(RULE, self.style.bold))
        lines.append(self._generate_totals(analysis))

        if analysis.is_destructive:
            lines.append("")
            lines.append(self.style.paint(DESTRUCTION_WARNING, self.style.red, self.style.bold))

        return "\n".join(lines) + "\n"

    def write_report(
        self,
        analysis: PlanAnalysis,
        stream: TextIO,
        plan_file: Optional[str] = None,
        directory: Optional[str] = None,
    ) -> None:
        stream.write(self.generate_report(analysis, plan_file=plan_file, directory=directory))

    def _generate_header(self, plan_file: str, directory: str) -> List[str]:
        s = self.style
        return [
            "",
            s.paint(TITLE, s.bold),
            s.paint(f"Plan file: {plan_file}", s.dim),
            s.paint(f"Directory: {directory}", s.dim),
            "",
        ]

    def _generate_sections(self, analysis: PlanAnalysis) -> List[str]:
        lines: List[str] = []

        for section in SECTIONS:
            if analysis.count(section.kind) == 0:
                continue
            lines.extend(self._generate_section(section, analysis))
            lines.append("")

        noop_count = analysis.count(ActionKind.NO_OP)
        if noop_count:
            lines.append(self.style.paint(f"NO-OP: {noop_count} resources unchanged", self.style.dim))
            lines.append("")

        if analysis.unclassified:
            lines.extend(self._generate_unclassified(analysis.unclassified))
            lines.append("")

        return lines

    def _generate_section(self, section: Section, analysis: PlanAnalysis) -> List[str]:
        s = self.style
        color = getattr(s, section.color)
        lines = [s.paint(f"{section.label} ({analysis.count(section.kind)}):", color, s.bold)]

        for group in analysis.groups(section.kind):
            lines.append(f"  {s.paint(group.scope, s.dim)}")
            for record in group.records:
                lines.extend(self._generate_resource(section, group, record))

        return lines

    def _generate_resource(self, section: Section, group: ModuleGroup, record: ChangeRecord) -> List[str]:
        s = self.style
        color = getattr(s, section.color)
        short = group.display_address(record)

        if section.kind == ActionKind.REPLACE:
            lines = [f"    {s.paint(section.symbol, color)} {short}"]
            if record.action_reason:
                lines.append(s.paint(f"      reason: {record.action_reason}", s.dim))
            return lines

        lines = [s.paint(f"    {section.symbol} {short}", color)]
        if section.kind == ActionKind.UPDATE:
            for change in compute_attribute_diff(record.before, record.after):
                lines.append(s.paint(
                    f"      ~ {change.key}: {change.before_display} -> {change.after_display}",
                    s.yellow,
                ))
        return lines

    def _generate_unclassified(self, records: List[ChangeRecord]) -> List[str]:
        s = self.style
        lines = [s.paint(f"UNCLASSIFIED ({len(records)}):", s.yellow, s.bold)]

        for group in group_by_module(records):
            lines.append(f"  {s.paint(group.scope, s.dim)}")
            for record in group.records:
                actions = ", ".join(record.actions)
                lines.append(f"    {s.paint('? ' + group.display_address(record), s.yellow)} "
                             f"{s.paint('[' + actions + ']', s.dim)}")
        return lines

    def _generate_totals(self, analysis: PlanAnalysis) -> str:
        s = self.style
        parts = []
        for section in SECTIONS + [NO_OP_SECTION]:
            count = analysis.count(section.kind)
            if count:
                parts.append(s.paint(f"{count} {section.total_label}", getattr(s, section.color)))

        prefix = s.paint("Total: ", s.bold)
        if not parts:
            return prefix + s.paint(NO_CHANGES, s.dim)
        return prefix + ", ".join(parts)
