from __future__ import annotations

import logging
import os

from fastapi import HTTPException
from fastapi.responses import FileResponse

log = logging.getLogger("toolkit")


def download_file(base_path: str, file: str, display_name: str) -> FileResponse:
    """Serve base_path/file so that clients save it as display_name.

    Notes:
    - A leading slash on file does not escape base_path.
    - Paths that resolve outside base_path, or do not exist, are 404.
    - Range and conditional requests are handled by FileResponse.

    """

    base = os.path.realpath(base_path)
    fp = os.path.realpath(os.path.join(base, file.lstrip("/\\")))
    if os.path.commonpath([base, fp]) != base or not os.path.isfile(fp):
        log.info("download_not_found", extra={"path": file})
        raise HTTPException(status_code=404, detail="file_not_found")

    # FileResponse emits: attachment; filename="<display_name>"
    return FileResponse(fp, filename=display_name, content_disposition_type="attachment")
