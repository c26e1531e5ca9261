from .fs import create_dir, log_error
from .random_string import RANDOM_STRING_SOURCE, random_string
from .sniffing import MimeType, detect_bytes, detect_reader, mime_matches

__all__ = [
    "create_dir",
    "log_error",
    "RANDOM_STRING_SOURCE",
    "random_string",
    "MimeType",
    "detect_bytes",
    "detect_reader",
    "mime_matches",
]
