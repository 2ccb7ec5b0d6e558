"""
Metadata store: sidecar permission records on disk.

Layout (part of the operational contract, tooling depends on it):
- a file ``report.pdf`` is governed by ``report.pdf<META_SUFFIX>``
- a directory ``docs/`` is governed by ``docs/<DIR_META_NAME>``

Both sidecars hold the same JSON-serialized PermissionRecord.

Nothing is cached here.  Every lookup goes to disk so a record written
by an administrator takes effect on the very next request.
"""

import contextlib
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from filebox.core.errors import CorruptRecordError, StorageIOError
from filebox.models.permission import PermissionRecord

logger = logging.getLogger(__name__)


class MetadataStore:
    def __init__(self, meta_suffix: str = ".meta", dir_meta_name: str = ".meta"):
        self.meta_suffix = meta_suffix
        self.dir_meta_name = dir_meta_name

    # ── Sidecar locations ────────────────────────────────────────────
    def file_meta_path(self, file_path: Path) -> Path:
        return file_path.with_name(file_path.name + self.meta_suffix)

    def dir_meta_path(self, dir_path: Path) -> Path:
        return dir_path / self.dir_meta_name

    def is_meta_path(self, path: Path) -> bool:
        """True when *path* names a sidecar record rather than content."""
        return path.name == self.dir_meta_name or path.name.endswith(self.meta_suffix)

    # ── Load / save ──────────────────────────────────────────────────
    def load(self, meta_path: Path) -> PermissionRecord | None:
        """
        Return the record stored at *meta_path*, or ``None`` if there is none.

        Absence is the common case and costs a single existence check.
        A sidecar that exists but cannot be read or parsed raises
        CorruptRecordError; callers must treat that as a denial.
        """
        # stat(), not exists(): an unreadable sidecar must not read as absent.
        try:
            meta_path.stat()
        except (FileNotFoundError, NotADirectoryError):
            return None
        except OSError as exc:
            raise CorruptRecordError(str(meta_path), f"unreadable: {exc}") from exc

        try:
            raw = meta_path.read_bytes()
        except FileNotFoundError:
            # Removed between the existence check and the read.
            return None
        except OSError as exc:
            raise CorruptRecordError(str(meta_path), f"unreadable: {exc}") from exc

        try:
            return PermissionRecord.model_validate_json(raw)
        except ValidationError as exc:
            raise CorruptRecordError(
                str(meta_path), f"{exc.error_count()} validation error(s)"
            ) from exc

    def save(self, meta_path: Path, record: PermissionRecord) -> None:
        """
        Persist *record* at *meta_path*, creating parent directories.

        The JSON is written to a temp file in the same directory and then
        renamed over the target, so readers see either the old record or
        the new one, never a partial write.
        """
        payload = record.model_dump_json(indent=2).encode("utf-8")
        directory = meta_path.parent

        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=str(directory), prefix=".", suffix=".tmp")
            try:
                with open(fd, "wb") as fh:
                    fh.write(payload)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.chmod(tmp_name, 0o644)
                os.replace(tmp_name, meta_path)
            except BaseException:
                with contextlib.suppress(FileNotFoundError):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            raise StorageIOError(f"Could not write permission record {meta_path}: {exc}") from exc

        logger.info("Permission record written to %s", meta_path)
