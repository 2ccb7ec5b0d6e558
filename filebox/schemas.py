"""
Pydantic schemas for request / response serialization.

Permission records are accepted and returned as-is
(``filebox.models.PermissionRecord``); only the envelopes live here.
"""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    detail: str


class UploadResponse(BaseModel):
    path: str
    size: int


class HealthResponse(BaseModel):
    status: str
    base_dir: str
