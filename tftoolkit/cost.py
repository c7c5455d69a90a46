"""
Infracost Cost Summary

Parses `infracost breakdown --format json` output and renders a module-grouped
monthly cost table. All pricing is computed by infracost; this module only
groups, sorts and formats the figures it reports.
"""

import json
import math
import os
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field

from .analyzer import module_scope, strip_module_prefix
from .config import CostThresholds
from .errors import CostParseError, ToolNotFoundError
from .runner import CommandRunner
from .style import Style

RULE_WIDTH = 74
NAME_WIDTH = 50
SHORT_NAME_WIDTH = 48
SHORT_NAME_KEEP = 45
SUB_NAME_WIDTH = 44
COST_WIDTH = 20
FULL_COST_WIDTH = 71


@dataclass
class CostItem:
    """A priced or free resource reported by infracost"""
    name: str
    monthly_cost: Optional[float]
    subresources: List["CostItem"] = field(default_factory=list)

    @property
    def is_priced(self) -> bool:
        return self.monthly_cost is not None and self.monthly_cost > 0

    @property
    def priced_subresources(self) -> List["CostItem"]:
        return [sub for sub in self.subresources if sub.is_priced]


@dataclass
class CostGroup:
    """Priced resources sharing a module scope"""
    scope: str
    resources: List[CostItem]

    @property
    def subtotal(self) -> float:
        return sum(r.monthly_cost for r in self.resources)


@dataclass
class CostBreakdown:
    """Parsed infracost breakdown"""
    total_monthly_cost: float
    resources: List[CostItem]

    @property
    def priced(self) -> List[CostItem]:
        return [r for r in self.resources if r.is_priced]

    @property
    def free_count(self) -> int:
        return len(self.resources) - len(self.priced)

    def groups(self) -> List[CostGroup]:
        """Group priced resources by module, most expensive group first"""
        by_scope: Dict[str, List[CostItem]] = {}
        for item in self.priced:
            by_scope.setdefault(module_scope(item.name), []).append(item)

        groups = [
            # sorted() is stable, so equal costs keep infracost's order
            CostGroup(scope, sorted(items, key=lambda r: -r.monthly_cost))
            for scope, items in by_scope.items()
        ]
        groups.sort(key=lambda g: (-g.subtotal, g.scope))
        return groups


class InfracostParser:
    """Parser for infracost breakdown JSON"""

    def parse_text(self, text: str) -> CostBreakdown:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CostParseError(f"Failed to parse infracost JSON: {e}") from e
        except RecursionError as e:
            raise CostParseError("Infracost JSON is nested too deeply") from e
        return self.parse_json(data)

    def parse_file(self, file_path: str) -> CostBreakdown:
        if not os.path.isfile(file_path):
            raise CostParseError(f"Cost file not found: {file_path}")
        with open(file_path, 'r', encoding='utf-8') as f:
            return self.parse_text(f.read())

    def parse_json(self, data: Any) -> CostBreakdown:
        if not isinstance(data, dict):
            raise CostParseError("Infracost data must be a JSON object")

        total = _parse_cost(data.get("totalMonthlyCost"), "totalMonthlyCost") or 0.0

        resources: List[CostItem] = []
        projects = data.get("projects") or []
        if projects:
            if not isinstance(projects[0], dict):
                raise CostParseError("Infracost projects must be JSON objects")
            breakdown = projects[0].get("breakdown") or {}
            for raw in breakdown.get("resources") or []:
                resources.append(self._parse_item(raw))

        return CostBreakdown(total_monthly_cost=total, resources=resources)

    def _parse_item(self, raw: Any) -> CostItem:
        if not isinstance(raw, dict):
            raise CostParseError("Infracost resource entries must be JSON objects")
        name = str(raw.get("name", ""))
        return CostItem(
            name=name,
            monthly_cost=_parse_cost(raw.get("monthlyCost"), name),
            subresources=[self._parse_item(sub) for sub in raw.get("subresources") or []],
        )


def _parse_cost(value: Any, label: str) -> Optional[float]:
    # infracost reports decimals as strings
    if value is None:
        return None
    if isinstance(value, bool):
        raise CostParseError(f"Invalid cost for {label}: {value!r}")
    try:
        cost = float(value)
    except (TypeError, ValueError) as e:
        raise CostParseError(f"Invalid cost for {label}: {value!r}") from e
    if not math.isfinite(cost):
        raise CostParseError(f"Invalid cost for {label}: {value!r}")
    return cost


def format_cost(cost: float) -> str:
    return f"${cost:,.2f}/mo"


def run_breakdown(runner: CommandRunner, path: str = ".") -> str:
    """Run infracost and return its JSON output"""
    if not runner.is_installed("infracost"):
        raise ToolNotFoundError("infracost", "Install with: brew install infracost")

    result = runner.run(["infracost", "breakdown", "--path", path, "--format", "json", "--show-skipped"])
    if not result.stdout.strip():
        raise CostParseError("Failed to get cost estimate.")
    return result.stdout


class CostReportGenerator:
    """Renders a cost breakdown as a terminal table"""

    def __init__(self, style: Optional[Style] = None, thresholds: Optional[CostThresholds] = None):
        self.style = style or Style.plain()
        self.thresholds = thresholds or CostThresholds()

    def generate_report(self, breakdown: CostBreakdown, directory: Optional[str] = None,
                        full: bool = False) -> str:
        s = self.style
        rule = s.paint(f"  {'─' * RULE_WIDTH}", s.dim)
        lines = [
            "",
            f"  {s.paint('INFRACOST ESTIMATE', s.bold)}",
            s.paint(f"  {directory or os.getcwd()}", s.dim),
            rule,
        ]

        for group in breakdown.groups():
            lines.append("")
            heading = f"{group.scope.ljust(NAME_WIDTH)} {format_cost(group.subtotal).rjust(COST_WIDTH)}"
            lines.append(f"  {s.paint(heading, s.bold)}")
            for item in group.resources:
                lines.extend(self._generate_resource(group, item, full))

        lines.append("")
        lines.append(rule)

        total = breakdown.total_monthly_cost
        total_color = self._total_color(total)
        total_label = "TOTAL".ljust(NAME_WIDTH)
        total_cost = format_cost(total).rjust(COST_WIDTH)
        lines.append(f"  {s.paint(total_label, s.bold)} {s.paint(total_cost, total_color, s.bold)}")
        lines.append(s.paint(f"  {len(breakdown.priced)} priced  ·  {breakdown.free_count} free", s.dim))
        if not full:
            lines.append(s.paint("  Run 'tftk cost --full' for expanded resource names and sub-costs", s.dim))

        return "\n".join(lines) + "\n"

    def _generate_resource(self, group: CostGroup, item: CostItem, full: bool) -> List[str]:
        s = self.style
        bar = s.paint("│", s.dim)
        short = strip_module_prefix(item.name, group.scope)
        cost = format_cost(item.monthly_cost)
        color = self._resource_color(item.monthly_cost)

        if not full:
            if len(short) > SHORT_NAME_WIDTH:
                short = short[:SHORT_NAME_KEEP] + "..."
            name = short.ljust(SHORT_NAME_WIDTH)
            return [f"  {bar}  {s.paint(name, s.cyan)} {s.paint(cost.rjust(COST_WIDTH), color)}"]

        lines = [
            f"  {bar}  {s.paint(short, s.cyan)}",
            f"  {bar}  {s.paint(cost.rjust(FULL_COST_WIDTH), color)}",
        ]
        for sub in item.priced_subresources:
            branch = "│    ├─ " + sub.name.ljust(SUB_NAME_WIDTH)
            sub_cost = format_cost(sub.monthly_cost).rjust(COST_WIDTH)
            lines.append(f"  {s.paint(branch, s.dim)} {s.paint(sub_cost, self._resource_color(sub.monthly_cost))}")
        return lines

    def _resource_color(self, cost: float) -> str:
        rounded = round_half_even(cost)
        if rounded >= self.thresholds.resource_alert:
            return self.style.red
        if rounded >= self.thresholds.resource_warn:
            return self.style.yellow
        return self.style.green

    def _total_color(self, cost: float) -> str:
        rounded = round_half_even(cost)
        if rounded >= self.thresholds.total_alert:
            return self.style.red
        if rounded >= self.thresholds.total_warn:
            return self.style.yellow
        return self.style.green


def round_half_even(value: float) -> int:
    # matches printf "%.0f"
    return int(f"{value:.0f}")
