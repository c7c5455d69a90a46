"""
Terraform Plan Analyzer

Classifies parsed resource changes into action buckets, groups addresses by
module scope and computes attribute-level diffs for in-place updates.
"""

import json
import re
from typing import Dict, List, Any, Optional, Tuple
from dataclasses import dataclass, field
from enum import Enum

from .parser import TerraformPlan, ChangeRecord

ROOT_SCOPE = "(root)"

_MODULE_SCOPE_RE = re.compile(r"^(module\.[^.]+)")

# Values longer than this are cut to DISPLAY_KEEP characters plus an ellipsis
DISPLAY_LIMIT = 60
DISPLAY_KEEP = 57
ELLIPSIS = "..."


class ActionKind(Enum):
    """Action buckets, in risk order"""
    DESTROY = "destroy"
    REPLACE = "replace"
    CREATE = "create"
    UPDATE = "update"
    READ = "read"
    NO_OP = "no-op"


_ACTION_PATTERNS: Dict[Tuple[str, ...], ActionKind] = {
    ("delete",): ActionKind.DESTROY,
    ("delete", "create"): ActionKind.REPLACE,
    ("create", "delete"): ActionKind.REPLACE,
    ("create",): ActionKind.CREATE,
    ("update",): ActionKind.UPDATE,
    ("read",): ActionKind.READ,
    ("no-op",): ActionKind.NO_OP,
}


def classify_actions(actions) -> Optional[ActionKind]:
    """Map an action sequence to its bucket, or None when it is not recognized"""
    return _ACTION_PATTERNS.get(tuple(actions))


def module_scope(address: str) -> str:
    """
    Return the first-level module scope of a resource address.

    `module.gke.google_container_cluster.this` -> `module.gke`
    `module.a.module.b.res.x` -> `module.a`
    `google_sql_database.x` -> `(root)`
    """
    match = _MODULE_SCOPE_RE.match(address)
    if match:
        return match.group(1)
    return ROOT_SCOPE


def strip_module_prefix(address: str, scope: str) -> str:
    """Return the address relative to its module scope"""
    if scope == ROOT_SCOPE:
        return address
    prefix = f"{scope}."
    if address.startswith(prefix):
        return address[len(prefix):]
    return address


def values_equal(left: Any, right: Any) -> bool:
    """Compare two JSON values without Python's bool/int coercion"""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, dict) and isinstance(right, dict):
        if left.keys() != right.keys():
            return False
        return all(values_equal(left[key], right[key]) for key in left)
    if isinstance(left, list) and isinstance(right, list):
        if len(left) != len(right):
            return False
        return all(values_equal(a, b) for a, b in zip(left, right))
    if isinstance(left, (dict, list)) or isinstance(right, (dict, list)):
        return False
    return left == right


def format_value(value: Any) -> str:
    """Render a value the way it appears in a diff line (untruncated)"""
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def truncate_value(text: str) -> str:
    if len(text) > DISPLAY_LIMIT:
        return text[:DISPLAY_KEEP] + ELLIPSIS
    return text


@dataclass(frozen=True)
class AttributeChange:
    """A top-level attribute whose value differs between before and after"""
    key: str
    before_value: Any
    after_value: Any

    @property
    def before_display(self) -> str:
        return truncate_value(format_value(self.before_value))

    @property
    def after_display(self) -> str:
        return truncate_value(format_value(self.after_value))


def compute_attribute_diff(before: Optional[Dict[str, Any]],
                           after: Optional[Dict[str, Any]]) -> List[AttributeChange]:
    """
    Compute the flat attribute diff of an update.

    Only keys of `before` are considered, in `before` order; a key missing
    from `after` compares as null. Returns an empty list unless both sides
    are present.
    """
    if before is None or after is None:
        return []

    changes = []
    for key, before_value in before.items():
        after_value = after.get(key)
        if not values_equal(before_value, after_value):
            changes.append(AttributeChange(key, before_value, after_value))
    return changes


@dataclass
class ModuleGroup:
    """Resources of one section that share a module scope"""
    scope: str
    records: List[ChangeRecord] = field(default_factory=list)

    def display_address(self, record: ChangeRecord) -> str:
        return strip_module_prefix(record.address, self.scope)


@dataclass
class PlanAnalysis:
    """Complete classification of a terraform plan"""
    plan: TerraformPlan
    buckets: Dict[ActionKind, List[ChangeRecord]]
    unclassified: List[ChangeRecord]

    def count(self, kind: ActionKind) -> int:
        return len(self.buckets[kind])

    @property
    def counts(self) -> Dict[ActionKind, int]:
        return {kind: len(records) for kind, records in self.buckets.items()}

    @property
    def has_changes(self) -> bool:
        return any(self.buckets[kind] for kind in ActionKind)

    @property
    def is_destructive(self) -> bool:
        return bool(self.buckets[ActionKind.DESTROY] or self.buckets[ActionKind.REPLACE])

    def groups(self, kind: ActionKind) -> List[ModuleGroup]:
        return group_by_module(self.buckets[kind])


def group_by_module(records: List[ChangeRecord]) -> List[ModuleGroup]:
    """
    Sort records by address and split them into runs sharing a module scope.

    Groups follow the sorted address list and are not re-sorted by name, so
    resource lines stay in ascending address order across the whole section.
    Root resources sorting on both sides of a module form two `(root)` runs.
    """
    groups: List[ModuleGroup] = []
    for record in sorted(records, key=lambda r: r.address):
        scope = module_scope(record.address)
        if not groups or groups[-1].scope != scope:
            groups.append(ModuleGroup(scope=scope))
        groups[-1].records.append(record)
    return groups


class PlanAnalyzer:
    """Partitions a plan's resource changes into action buckets"""

    def analyze(self, plan: TerraformPlan) -> PlanAnalysis:
        buckets: Dict[ActionKind, List[ChangeRecord]] = {kind: [] for kind in ActionKind}
        unclassified = []

        for record in plan.resource_changes:
            kind = classify_actions(record.actions)
            if kind is None:
                unclassified.append(record)
            else:
                buckets[kind].append(record)

        return PlanAnalysis(plan=plan, buckets=buckets, unclassified=unclassified)
