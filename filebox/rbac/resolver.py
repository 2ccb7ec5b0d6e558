"""
Permission resolver: finds the record that governs a path and asks the
evaluator for a verdict.

Resolution order:
  1. The target's own sidecar.  If present it is authoritative, even
     when it is empty or denies everything.  No further fallback.
  2. For a file without its own record: the owning directory's
     sidecar, resolved exactly as if the directory were the target.
  3. A directory without a record: ALLOW.

Only one level of fallback exists.  A directory never consults its own
parent, so resolution always stops at or before the base directory.

A corrupt or unreadable record at any level resolves to DENY.

The role set and the action are plain arguments.  Nothing is read from
or written to shared state, so one resolver can serve concurrent
requests.
"""

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Optional, Protocol

from filebox.core.errors import CorruptRecordError
from filebox.models.permission import Action, RoleSet, Verdict
from filebox.rbac.evaluator import PermissionEvaluator, RoleEvaluator
from filebox.services.metadata_store import MetadataStore

logger = logging.getLogger(__name__)


class Governed(Protocol):
    """Anything with a sidecar record and, optionally, an owner to fall back to."""

    logical_path: str
    meta_path: Path

    @property
    def owner(self) -> Optional["Governed"]: ...


class PermissionResolver:
    def __init__(
        self,
        store: MetadataStore,
        evaluator: PermissionEvaluator | None = None,
    ):
        self.store = store
        self.evaluator = evaluator or RoleEvaluator()

    def resolve(self, target: Governed, roles: Iterable[str], action: Action) -> Verdict:
        role_set: RoleSet = frozenset(roles)

        try:
            record = self.store.load(target.meta_path)
        except CorruptRecordError as exc:
            logger.warning("%s -- denying %s on %s", exc, action.value, target.logical_path)
            return Verdict.DENY

        if record is not None:
            verdict = self.evaluator.evaluate(record, role_set, action)
            if verdict is Verdict.DENY:
                logger.info(
                    "Denied %s on %s for roles %s (record %s)",
                    action.value,
                    target.logical_path,
                    sorted(role_set),
                    target.meta_path,
                )
            return verdict

        owner = target.owner
        if owner is None:
            return Verdict.ALLOW
        return self.resolve(owner, role_set, action)
