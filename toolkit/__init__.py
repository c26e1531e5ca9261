"""Request/response helpers for FastAPI/Starlette handlers.

JSON in and out, error envelopes, random names, outbound JSON pushes,
forced-download responses and sniffed multipart uploads.
"""

from toolkit.config import ToolsConfig
from toolkit.errors import (
    DecodeError,
    DetectionError,
    EncodeError,
    FileTypeNotAllowed,
    FormParseError,
    FormTooLarge,
    MultipleJSONValues,
    PayloadTooLarge,
    ToolkitError,
    TransportError,
)
from toolkit.tools import Tools

__all__ = [
    "Tools",
    "ToolsConfig",
    "ToolkitError",
    "DecodeError",
    "PayloadTooLarge",
    "MultipleJSONValues",
    "EncodeError",
    "TransportError",
    "FormParseError",
    "FormTooLarge",
    "DetectionError",
    "FileTypeNotAllowed",
]
