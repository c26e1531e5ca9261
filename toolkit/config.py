from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from toolkit.core.random_string import RANDOM_STRING_SOURCE

DEFAULT_MAX_FILE_SIZE = 1024 * 1024
DEFAULT_MAX_FORM_SIZE = 1024 * 1024 * 1024
DEFAULT_RANDOM_NAME_LENGTH = 25
DEFAULT_SNIFF_BYTES = 3072


@dataclass(frozen=True, slots=True)
class ToolsConfig:
    """Limits shared by the request/response helpers.

    Notes:
    - max_file_size bounds JSON request bodies; 0 means the 1 MiB default.
    - max_form_size bounds multipart uploads.
    - Read-only once built; safe to share between request handlers.

    """

    max_file_size: int = 0
    max_form_size: int = DEFAULT_MAX_FORM_SIZE
    random_name_length: int = DEFAULT_RANDOM_NAME_LENGTH
    alphabet: str = RANDOM_STRING_SOURCE
    sniff_bytes: int = DEFAULT_SNIFF_BYTES

    @property
    def max_body_bytes(self) -> int:
        """Effective JSON body ceiling."""

        return self.max_file_size if self.max_file_size > 0 else DEFAULT_MAX_FILE_SIZE

    @staticmethod
    def from_env() -> "ToolsConfig":
        """Create a config from environment variables.

        - TOOLKIT_MAX_FILE_SIZE (default 0, i.e. 1 MiB)
        - TOOLKIT_MAX_FORM_SIZE (default 1 GiB)

        """

        return ToolsConfig(
            max_file_size=_env_int("TOOLKIT_MAX_FILE_SIZE", 0),
            max_form_size=_env_int("TOOLKIT_MAX_FORM_SIZE", DEFAULT_MAX_FORM_SIZE),
        )


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable.

    Notes:
    - Env vars are treated as trusted server configuration.
    - Unparseable values fall back to the default.

    """

    raw = os.environ.get(name, "").strip()
    if not raw:
        return int(default)
    try:
        return int(raw)
    except ValueError:
        return int(default)


def configure_logging() -> logging.Logger:
    """Apply TOOLKIT_LOG_LEVEL (default INFO) to the toolkit logger."""

    log = logging.getLogger("toolkit")
    log.setLevel(os.environ.get("TOOLKIT_LOG_LEVEL", "INFO").upper())
    return log
