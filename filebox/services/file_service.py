"""
File service: binds logical request paths to physical paths inside the
base directory and gates every read/write on the permission resolver.

- ``Filebox`` holds the immutable base directory, the metadata store and
  the resolver.  One instance serves the whole app.
- ``File`` and ``Dir`` are request-scoped values built from a logical
  path and the caller's role set.  Building them does no I/O; every
  operation is one-shot and nothing is kept open between calls.
- A File always carries a freshly built Dir for its parent.  There is
  no shared graph between requests.

Errors are raised as filebox.core.errors exceptions and propagated
unchanged; no retries happen here.
"""

import logging
import posixpath
import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

from filebox.core.config import Settings
from filebox.core.errors import NotFoundOnDisk, PermissionDenied, StorageIOError
from filebox.models.permission import Action, PermissionRecord, RoleSet, Verdict
from filebox.rbac.evaluator import PermissionEvaluator
from filebox.rbac.resolver import PermissionResolver
from filebox.services.metadata_store import MetadataStore

logger = logging.getLogger(__name__)


def clean_logical_path(logical_path: str) -> str:
    """
    Normalize a request path to an absolute, ``..``-free POSIX path.

    ``..`` segments are clamped at the root, so the result can never
    point outside the base directory once joined onto it.
    """
    if "\x00" in logical_path:
        raise NotFoundOnDisk(f"Invalid path {logical_path!r}")
    return posixpath.normpath("/" + logical_path.lstrip("/"))


# ── Dir ──────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Dir:
    logical_path: str
    path: Path
    roles: RoleSet
    box: "Filebox" = field(repr=False, compare=False)

    @property
    def meta_path(self) -> Path:
        return self.box.store.dir_meta_path(self.path)

    @property
    def owner(self) -> None:
        # Directories never fall back further.
        return None

    def has_permission(self, action: Action = Action.READ) -> bool:
        return self.box.resolver.resolve(self, self.roles, action) is Verdict.ALLOW

    def get_permission(self) -> PermissionRecord | None:
        return self.box.store.load(self.meta_path)

    def set_permission(self, record: PermissionRecord) -> None:
        """Persist *record* for this directory.  The caller authorizes this."""
        self.create_if_missing()
        self.box.store.save(self.meta_path, record)

    def write_file(self, name: str, reader: BinaryIO) -> "File":
        """Create this directory if needed and write *name* inside it."""
        if not name or "/" in name or name in (".", ".."):
            raise ValueError(f"Not a plain file name: {name!r}")

        self.create_if_missing()
        file = self.box.access_file(posixpath.join(self.logical_path, name), self.roles)
        file.write(reader)
        return file

    def create_if_missing(self) -> None:
        try:
            self.path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageIOError(f"Could not create directory {self.logical_path}: {exc}") from exc


# ── File ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class File:
    logical_path: str
    path: Path
    roles: RoleSet
    dir: Dir
    box: "Filebox" = field(repr=False, compare=False)

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def meta_path(self) -> Path:
        return self.box.store.file_meta_path(self.path)

    @property
    def owner(self) -> Dir:
        return self.dir

    @property
    def is_sidecar(self) -> bool:
        return self.box.store.is_meta_path(self.path)

    def has_permission(self, action: Action = Action.READ) -> bool:
        return self.box.resolver.resolve(self, self.roles, action) is Verdict.ALLOW

    def read(self) -> BinaryIO:
        """
        Open the file for reading after the READ check passes.

        The caller owns the returned handle and must close it.
        Sidecar records are never served as content.
        """
        if self.is_sidecar:
            raise NotFoundOnDisk(self.logical_path)
        self._require(Action.READ)

        try:
            return open(self.path, "rb")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise NotFoundOnDisk(self.logical_path) from exc
        except OSError as exc:
            raise StorageIOError(f"Could not open {self.logical_path}: {exc}") from exc

    def write(self, reader: BinaryIO) -> None:
        """Replace the file's content with everything read from *reader*."""
        if self.is_sidecar:
            # Writing a sidecar here would let a caller rewrite its own ACL.
            raise PermissionDenied(f"{self.logical_path} is a permission record")
        self._require(Action.WRITE)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "wb") as dst:
                shutil.copyfileobj(reader, dst)
        except OSError as exc:
            raise StorageIOError(f"Could not write {self.logical_path}: {exc}") from exc

        logger.info("Wrote %s", self.logical_path)

    def get_permission(self) -> PermissionRecord | None:
        return self.box.store.load(self.meta_path)

    def set_permission(self, record: PermissionRecord) -> None:
        """Persist *record* for this file.  The caller authorizes this."""
        self.box.store.save(self.meta_path, record)

    def _require(self, action: Action) -> None:
        if not self.has_permission(action):
            raise PermissionDenied(f"{action.value} denied on {self.logical_path}")


# ── Filebox ──────────────────────────────────────────────────────────
class Filebox:
    """Entry point: maps logical paths under one base directory to File / Dir values."""

    def __init__(
        self,
        base_dir: str | Path,
        store: MetadataStore | None = None,
        evaluator: PermissionEvaluator | None = None,
    ):
        self._base_dir = Path(base_dir).absolute()
        self.store = store or MetadataStore()
        self.resolver = PermissionResolver(self.store, evaluator)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Filebox":
        return cls(
            settings.BASE_DIR,
            store=MetadataStore(settings.META_SUFFIX, settings.DIR_META_NAME),
        )

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def access_file(self, logical_path: str, roles: Iterable[str] = ()) -> File:
        role_set = frozenset(roles)
        logical = clean_logical_path(logical_path)
        if logical == "/":
            raise NotFoundOnDisk("The base directory is not a file")
        return File(
            logical_path=logical,
            path=self._physical(logical),
            roles=role_set,
            dir=self.access_dir(posixpath.dirname(logical), role_set),
            box=self,
        )

    def access_dir(self, logical_path: str, roles: Iterable[str] = ()) -> Dir:
        logical = clean_logical_path(logical_path)
        return Dir(
            logical_path=logical,
            path=self._physical(logical),
            roles=frozenset(roles),
            box=self,
        )

    def _physical(self, logical: str) -> Path:
        relative = logical.lstrip("/")
        return self._base_dir / relative if relative else self._base_dir
