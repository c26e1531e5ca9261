from __future__ import annotations

import logging
import os
from typing import Optional

log = logging.getLogger("toolkit")

DEFAULT_DIR_MODE = 0o755


def create_dir(path: str, mode: int = DEFAULT_DIR_MODE) -> None:
    """Create path and any missing parents if it does not exist yet.

    Notes:
    - Idempotent: an existing entry is left alone.
    - The existing entry is not type-checked; a regular file at path
      also counts as present.

    """

    if os.path.exists(path):
        return
    os.makedirs(path, mode=mode, exist_ok=True)
    log.debug("dir_created", extra={"path": path})


def log_error(err: Optional[BaseException]) -> None:
    """Log err at ERROR level; None is ignored."""

    if err is None:
        return
    log.error("error: %s", err)
