"""
Permission record model.

A PermissionRecord is an access-control list keyed by action.  Each
action maps to an AccessRule holding the roles explicitly allowed and
the roles explicitly denied.  It is serialized as a single JSON object
beside the resource it governs:

    {"read": {"allow": ["admin"], "deny": ["guest"]}}

A record carries no path of its own: it only means something in the
context of the sidecar it was loaded from.
"""

import enum
from typing import Any

from pydantic import BaseModel, Field, RootModel, field_serializer, model_validator

# Role name that matches every caller, anonymous ones included.
ANYONE = "*"

RoleSet = frozenset[str]


class Action(str, enum.Enum):
    READ = "read"
    WRITE = "write"
    # Inside a record, applies to every action.
    CRUD = "crud"


class Verdict(str, enum.Enum):
    ALLOW = "allow"
    DENY = "deny"


class AccessRule(BaseModel):
    allow: set[str] = Field(default_factory=set)
    deny: set[str] = Field(default_factory=set)

    @field_serializer("allow", "deny")
    def _sorted_roles(self, roles: set[str]) -> list[str]:
        return sorted(roles)


class PermissionRecord(RootModel[dict[str, AccessRule]]):
    root: dict[str, AccessRule] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _upgrade_legacy_layout(cls, data: Any) -> Any:
        """Accept records written as {"AllowedRoles": {...}, "DeniedRoles": {...}}."""
        if not isinstance(data, dict):
            return data
        if "AllowedRoles" not in data and "DeniedRoles" not in data:
            return data

        rules: dict[str, dict[str, Any]] = {}
        for legacy_key, field_name in (("AllowedRoles", "allow"), ("DeniedRoles", "deny")):
            by_action = data.get(legacy_key)
            if by_action is None:
                continue
            if not isinstance(by_action, dict):
                raise ValueError(f"{legacy_key} must map actions to role lists")
            for action, roles in by_action.items():
                rule = rules.setdefault(action, {"allow": [], "deny": []})
                # Passed through untouched so AccessRule rejects anything
                # that is not a list of role names.
                rule[field_name] = [] if roles is None else roles
        return rules

    # ── Builders ─────────────────────────────────────────────────────
    def allow(self, action: Action | str, *roles: str) -> "PermissionRecord":
        self._rule(action).allow.update(roles)
        return self

    def deny(self, action: Action | str, *roles: str) -> "PermissionRecord":
        self._rule(action).deny.update(roles)
        return self

    def _rule(self, action: Action | str) -> AccessRule:
        key = action.value if isinstance(action, Action) else action
        return self.root.setdefault(key, AccessRule())

    # ── Queries ──────────────────────────────────────────────────────
    def rules_for(self, action: Action) -> list[AccessRule]:
        """Rules that apply to *action*: its own entry plus the crud wildcard."""
        keys = {action.value, Action.CRUD.value}
        return [rule for key, rule in self.root.items() if key in keys]

    @property
    def has_allow_rules(self) -> bool:
        return any(rule.allow for rule in self.root.values())
