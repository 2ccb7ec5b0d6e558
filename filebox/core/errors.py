"""
Error taxonomy for the access-control core.

The core raises these; only the controllers translate them into HTTP
responses.  An absent permission record is NOT an error (the store
returns ``None``), so there is no "record not found" exception here.
"""


class FileboxError(Exception):
    """Base class for every error raised by the filebox core."""


class PermissionDenied(FileboxError):
    """The resolved verdict for the caller is deny (or the record is corrupt)."""


class NotFoundOnDisk(FileboxError):
    """Permission was granted but the underlying file does not exist."""


class StorageIOError(FileboxError):
    """A read, write or create failed for reasons unrelated to permission."""


class Unauthenticated(FileboxError):
    """The identity provider could not resolve the request to a session."""


class CorruptRecordError(FileboxError):
    """A sidecar record exists but could not be read or deserialized."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Corrupt permission record at {path}: {reason}")
        self.path = path
        self.reason = reason
