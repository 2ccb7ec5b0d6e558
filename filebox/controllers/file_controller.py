"""
File controller: downloads and uploads under the mount prefix.

This is the transport boundary.  It turns a request path plus a role
set into a File, calls the core, and maps the outcome:

    stream            → 200, attachment download
    PermissionDenied  → 302 to login when auth is configured, else 404
                        (no auth means no way to retry, and 404 does not
                        reveal that the file exists)
    NotFoundOnDisk    → 404
    StorageIOError    → 500   (app-wide handler)
    Unauthenticated   → 401   (app-wide handler)

Every filesystem call runs in the thread pool.  Download streams close
their handle in a ``finally`` however the response loop ends.
"""

import logging
import mimetypes
import tempfile
from collections.abc import Iterator
from typing import BinaryIO
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import RedirectResponse, StreamingResponse

from filebox.core.config import Settings
from filebox.core.errors import NotFoundOnDisk, PermissionDenied
from filebox.core.security import AuthProvider
from filebox.models.permission import RoleSet
from filebox.rbac.dependencies import current_role_set, get_auth_provider, get_filebox, get_settings
from filebox.schemas import UploadResponse
from filebox.services.file_service import Filebox

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Files"])

# Uploads larger than this spill from memory to a temp file.
_SPOOL_MAX_SIZE = 1024 * 1024


def _iter_file(handle: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    try:
        while chunk := handle.read(chunk_size):
            yield chunk
    finally:
        handle.close()


def _content_disposition(filename: str) -> str:
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


@router.get("/{file_path:path}")
async def download(
    file_path: str,
    request: Request,
    roles: RoleSet = Depends(current_role_set),
    box: Filebox = Depends(get_filebox),
    auth: AuthProvider | None = Depends(get_auth_provider),
    app_settings: Settings = Depends(get_settings),
):
    """Stream a file as an attachment if the caller's roles allow reading it."""
    try:
        file = box.access_file(file_path, roles)
        handle = await run_in_threadpool(file.read)
    except PermissionDenied:
        if auth is not None:
            return RedirectResponse(auth.login_url(request), status_code=status.HTTP_302_FOUND)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
    except NotFoundOnDisk:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")

    media_type = mimetypes.guess_type(file.name)[0] or "application/octet-stream"
    return StreamingResponse(
        _iter_file(handle, app_settings.STREAM_CHUNK_SIZE),
        media_type=media_type,
        headers={"Content-Disposition": _content_disposition(file.name)},
    )


@router.put("/{file_path:path}", response_model=UploadResponse, status_code=201)
async def upload(
    file_path: str,
    request: Request,
    roles: RoleSet = Depends(current_role_set),
    box: Filebox = Depends(get_filebox),
    app_settings: Settings = Depends(get_settings),
):
    """Replace a file with the raw request body (requires write permission)."""
    if not app_settings.ALLOW_UPLOADS:
        raise HTTPException(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            detail="Uploads are disabled",
        )

    file = box.access_file(file_path, roles)

    with tempfile.SpooledTemporaryFile(max_size=_SPOOL_MAX_SIZE) as spool:
        size = 0
        async for chunk in request.stream():
            size += len(chunk)
            await run_in_threadpool(spool.write, chunk)
        spool.seek(0)

        try:
            await run_in_threadpool(file.write, spool)
        except PermissionDenied:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )

    return UploadResponse(path=file.logical_path, size=size)
