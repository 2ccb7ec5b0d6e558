"""
Permission controller: read and replace sidecar permission records.

Every route requires the admin role via `Depends(require_role())`.
The file service persists records unconditionally, so this dependency
is the only authorization in front of it.

Changes take effect on the next request; nothing is cached.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool

from filebox.models.permission import PermissionRecord, RoleSet
from filebox.rbac.dependencies import get_filebox, require_role
from filebox.schemas import MessageResponse
from filebox.services.file_service import Filebox

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/permissions", tags=["Permissions"])


def _record_or_404(record: PermissionRecord | None) -> PermissionRecord:
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No permission record",
        )
    return record


# ── Files ────────────────────────────────────────────────────────────
@router.get("/files/{file_path:path}", response_model=PermissionRecord)
async def get_file_permission(
    file_path: str,
    roles: RoleSet = Depends(require_role()),
    box: Filebox = Depends(get_filebox),
):
    file = box.access_file(file_path, roles)
    return _record_or_404(await run_in_threadpool(file.get_permission))


@router.put("/files/{file_path:path}", response_model=MessageResponse)
async def set_file_permission(
    file_path: str,
    body: PermissionRecord,
    roles: RoleSet = Depends(require_role()),
    box: Filebox = Depends(get_filebox),
):
    file = box.access_file(file_path, roles)
    await run_in_threadpool(file.set_permission, body)
    logger.info("Permission record for file %s replaced", file.logical_path)
    return MessageResponse(detail="Permission updated")


# ── Directories ──────────────────────────────────────────────────────
@router.get("/dirs/{dir_path:path}", response_model=PermissionRecord)
async def get_dir_permission(
    dir_path: str,
    roles: RoleSet = Depends(require_role()),
    box: Filebox = Depends(get_filebox),
):
    directory = box.access_dir(dir_path, roles)
    return _record_or_404(await run_in_threadpool(directory.get_permission))


@router.put("/dirs/{dir_path:path}", response_model=MessageResponse)
async def set_dir_permission(
    dir_path: str,
    body: PermissionRecord,
    roles: RoleSet = Depends(require_role()),
    box: Filebox = Depends(get_filebox),
):
    directory = box.access_dir(dir_path, roles)
    await run_in_threadpool(directory.set_permission, body)
    logger.info("Permission record for directory %s replaced", directory.logical_path)
    return MessageResponse(detail="Permission updated")
