"""
Terraform Plan Parser

Loads a terraform plan document and extracts the resource change records.
"""

import json
import os
from typing import Dict, List, Any, Optional, Tuple
from dataclasses import dataclass

from .errors import PlanFileNotFoundError, PlanParseError, ToolNotFoundError
from .runner import CommandRunner

# Binary plans written by `terraform plan -out` are zip archives
ZIP_MAGIC = b"PK\x03\x04"


@dataclass(frozen=True)
class ChangeRecord:
    """One planned change to one resource"""
    address: str
    actions: Tuple[str, ...]
    before: Optional[Dict[str, Any]] = None
    after: Optional[Dict[str, Any]] = None
    action_reason: Optional[str] = None


@dataclass
class TerraformPlan:
    """Parsed terraform plan data"""
    resource_changes: List[ChangeRecord]
    terraform_version: str = "unknown"
    format_version: str = "unknown"
    source: Optional[str] = None


class TerraformPlanParser:
    """Parser for terraform plan documents (JSON or binary plan files)"""

    def __init__(self, runner: Optional[CommandRunner] = None, terraform_binary: str = "terraform"):
        self.runner = runner or CommandRunner()
        self.terraform_binary = terraform_binary

    def parse_file(self, file_path: str) -> TerraformPlan:
        """Parse a plan file, converting binary plans through `terraform show -json`"""
        if not file_path:
            raise PlanFileNotFoundError()
        if not os.path.isfile(file_path):
            raise PlanFileNotFoundError(file_path)

        with open(file_path, 'rb') as f:
            raw = f.read()

        if raw.startswith(ZIP_MAGIC):
            text = self._show_binary_plan(file_path)
        else:
            try:
                text = raw.decode('utf-8')
            except UnicodeDecodeError as e:
                raise PlanParseError(f"Plan file is not UTF-8 text: {e}") from e

        plan = self.parse_text(text)
        plan.source = os.path.abspath(file_path)
        return plan

    def parse_text(self, text: str) -> TerraformPlan:
        """Parse a plan document given as a JSON string"""
        try:
            data = json.loads(text, parse_constant=_reject_constant)
        except json.JSONDecodeError as e:
            raise PlanParseError(f"Failed to parse plan JSON: {e}") from e
        except RecursionError as e:
            raise PlanParseError("Plan JSON is nested too deeply") from e
        return self.parse_json(data)

    def parse_json(self, plan_data: Any) -> TerraformPlan:
        """Parse already-decoded plan JSON data"""
        self._validate_plan_format(plan_data)

        resource_changes = self._parse_resource_changes(plan_data["resource_changes"])

        return TerraformPlan(
            resource_changes=resource_changes,
            terraform_version=plan_data.get("terraform_version", "unknown"),
            format_version=plan_data.get("format_version", "unknown"),
        )

    def _show_binary_plan(self, file_path: str) -> str:
        """Render a binary plan file as JSON with the terraform CLI"""
        if not self.runner.is_installed(self.terraform_binary):
            raise ToolNotFoundError(
                self.terraform_binary,
                "Binary plan files need terraform to convert them to JSON.",
            )

        result = self.runner.run([self.terraform_binary, "show", "-json", os.path.abspath(file_path)])
        if result.returncode != 0 or not result.stdout.strip():
            raise PlanParseError(
                "Failed to parse plan file. Make sure you're in the "
                "terraform-initialized directory."
            )
        return result.stdout

    def _validate_plan_format(self, plan_data: Any) -> None:
        """Validate that the plan data is in expected format"""
        if not isinstance(plan_data, dict):
            raise PlanParseError("Plan data must be a JSON object")

        if "resource_changes" not in plan_data:
            raise PlanParseError("Plan data missing 'resource_changes' field")

        if not isinstance(plan_data["resource_changes"], list):
            raise PlanParseError("'resource_changes' must be a list")

    def _parse_resource_changes(self, changes_data: List[Any]) -> List[ChangeRecord]:
        """Parse resource changes, failing on the first malformed record"""
        changes = []
        seen = set()

        for index, change_data in enumerate(changes_data):
            change = self._parse_single_resource_change(index, change_data)
            if change.address in seen:
                raise PlanParseError(f"Duplicate resource address: {change.address}")
            seen.add(change.address)
            changes.append(change)

        return changes

    def _parse_single_resource_change(self, index: int, change_data: Any) -> ChangeRecord:
        """Parse a single resource change"""
        if not isinstance(change_data, dict):
            raise PlanParseError(f"resource_changes[{index}] must be a JSON object")

        address = change_data.get("address")
        if not isinstance(address, str) or not address:
            raise PlanParseError(f"resource_changes[{index}] has no address")

        # Terraform nests actions/before/after under "change"
        change_info = change_data.get("change", change_data)
        if not isinstance(change_info, dict):
            raise PlanParseError(f"{address}: 'change' must be a JSON object")

        actions = change_info.get("actions")
        if not isinstance(actions, list) or not actions:
            raise PlanParseError(f"{address}: actions must be a non-empty list")
        if not all(isinstance(action, str) for action in actions):
            raise PlanParseError(f"{address}: actions must be strings")

        action_reason = change_data.get("action_reason")

        return ChangeRecord(
            address=address,
            actions=tuple(actions),
            before=self._parse_values(address, "before", change_info.get("before")),
            after=self._parse_values(address, "after", change_info.get("after")),
            action_reason=str(action_reason) if action_reason else None,
        )

    def _parse_values(self, address: str, name: str, values: Any) -> Optional[Dict[str, Any]]:
        if values is None:
            return None
        if not isinstance(values, dict):
            raise PlanParseError(f"{address}: '{name}' must be a JSON object or null")
        return values


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are accepted by the json module but are not JSON
    raise PlanParseError(f"Invalid JSON constant: {name}")
