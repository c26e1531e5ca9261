from __future__ import annotations

from pydantic import BaseModel
from typing import Any, Optional


class JSONEnvelope(BaseModel):
    """Standard reply payload; data is omitted from the wire when None."""

    error: bool = False
    message: str = ""
    data: Optional[Any] = None


class UploadedFile(BaseModel):
    """One persisted upload, named by the server rather than the client."""

    new_file_name: str
    original_file_name: str
    file_size: int
    content_type: Optional[str] = None
