"""
Role evaluation: answers allow/deny for one record, one role set and
one action.

This is the only place that interprets the contents of a record.  The
resolver decides WHICH record governs a path; the evaluator decides what
that record says.

Rules (applied to the action's own entry plus the ``crud`` wildcard):
  1. Any caller role in a ``deny`` list  → DENY.  Deny beats allow.
  2. The record has no ``allow`` lists at all → ALLOW.
  3. Any caller role (or ``*``) in an ``allow`` list → ALLOW.
  4. Otherwise → DENY.
"""

from typing import Protocol

from filebox.models.permission import ANYONE, Action, PermissionRecord, RoleSet, Verdict


class PermissionEvaluator(Protocol):
    def evaluate(self, record: PermissionRecord, roles: RoleSet, action: Action) -> Verdict: ...


def _matches(listed: set[str], roles: RoleSet) -> bool:
    return ANYONE in listed or not listed.isdisjoint(roles)


class RoleEvaluator:
    """Default PermissionEvaluator: plain role-name matching."""

    def evaluate(self, record: PermissionRecord, roles: RoleSet, action: Action) -> Verdict:
        rules = record.rules_for(action)

        if any(_matches(rule.deny, roles) for rule in rules):
            return Verdict.DENY

        if not record.has_allow_rules:
            return Verdict.ALLOW

        if any(_matches(rule.allow, roles) for rule in rules):
            return Verdict.ALLOW

        return Verdict.DENY
