from __future__ import annotations

import logging
import os
from typing import List, Optional, Sequence

from starlette.concurrency import run_in_threadpool
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import Request

from toolkit.api.models import UploadedFile
from toolkit.config import DEFAULT_MAX_FORM_SIZE, DEFAULT_RANDOM_NAME_LENGTH, DEFAULT_SNIFF_BYTES
from toolkit.core.random_string import RANDOM_STRING_SOURCE, random_string
from toolkit.core.sniffing import detect_reader, mime_matches
from toolkit.errors import DetectionError, FileTypeNotAllowed, FormParseError, FormTooLarge

log = logging.getLogger("toolkit")

_COPY_CHUNK = 1024 * 1024


async def upload_files(
    request: Request,
    upload_dir: str,
    *,
    max_form_size: Optional[int] = None,
    allowed_types: Optional[Sequence[str]] = None,
    name_length: int = DEFAULT_RANDOM_NAME_LENGTH,
    alphabet: str = RANDOM_STRING_SOURCE,
    sniff_bytes: int = DEFAULT_SNIFF_BYTES,
) -> List[UploadedFile]:
    """Persist every file of a multipart request under a random name.

    Args:
      upload_dir: existing, writable directory (see create_dir)
      max_form_size: ceiling for the whole form; None means 1 GiB
      allowed_types: optional mime types or patterns ("image/*")

    Returns one UploadedFile per file part, in form order.

    Notes:
    - The stored extension comes from the sniffed bytes, never the client.
    - The first failure aborts; files already written are not removed.

    """

    limit = max_form_size if max_form_size and max_form_size > 0 else DEFAULT_MAX_FORM_SIZE
    form = await _parse_form(request, limit)
    try:
        uploads = [v for _, v in form.multi_items() if isinstance(v, UploadFile)]
        total = sum(int(u.size or 0) for u in uploads)
        if total > limit:
            raise FormTooLarge(f"multipart form too large: {total} > {limit} bytes")

        results: List[UploadedFile] = []
        for upload in uploads:
            # Sniffing and copying block on disk; keep them off the event loop.
            stored = await run_in_threadpool(
                _store_upload,
                upload,
                upload_dir,
                allowed_types=allowed_types,
                name_length=name_length,
                alphabet=alphabet,
                sniff_bytes=sniff_bytes,
            )
            results.append(stored)
        return results
    finally:
        await form.close()


async def upload_one_file(
    request: Request,
    upload_dir: str,
    *,
    max_form_size: Optional[int] = None,
    allowed_types: Optional[Sequence[str]] = None,
    name_length: int = DEFAULT_RANDOM_NAME_LENGTH,
    alphabet: str = RANDOM_STRING_SOURCE,
    sniff_bytes: int = DEFAULT_SNIFF_BYTES,
) -> UploadedFile:
    """Like upload_files, returning the first stored file."""

    results = await upload_files(
        request,
        upload_dir,
        max_form_size=max_form_size,
        allowed_types=allowed_types,
        name_length=name_length,
        alphabet=alphabet,
        sniff_bytes=sniff_bytes,
    )
    if not results:
        raise FormParseError("no file uploaded")
    return results[0]


async def _parse_form(request: Request, limit: int) -> FormData:
    ctype = request.headers.get("content-type", "")
    if not ctype.lower().startswith("multipart/form-data"):
        raise FormParseError("request content-type is not multipart/form-data")

    declared = request.headers.get("content-length", "").strip()
    if declared.isdigit() and int(declared) > limit:
        raise FormTooLarge(f"multipart form too large: {declared} > {limit} bytes")

    try:
        return await request.form()
    except MultiPartException as e:
        raise FormParseError(f"cannot parse multipart form: {e.message}") from e
    except HTTPException as e:
        # Starlette converts parser errors to HTTPException when mounted in an app.
        raise FormParseError(f"cannot parse multipart form: {e.detail}") from e


def _store_upload(
    upload: UploadFile,
    upload_dir: str,
    *,
    allowed_types: Optional[Sequence[str]],
    name_length: int,
    alphabet: str,
    sniff_bytes: int,
) -> UploadedFile:
    infile = upload.file
    detected = detect_reader(infile, sniff_bytes)
    try:
        infile.seek(0)
    except (OSError, ValueError) as e:
        raise DetectionError(f"cannot rewind upload after sniffing: {e}") from e

    if allowed_types and not any(mime_matches(p, detected.mime_type) for p in allowed_types):
        raise FileTypeNotAllowed(f"file type {detected.mime_type} is not permitted")

    new_name = random_string(name_length, alphabet) + detected.extension
    dest = os.path.join(upload_dir, new_name)

    size = 0
    # "x": never clobber an existing stored file.
    with open(dest, "xb") as out:
        while True:
            chunk = infile.read(_COPY_CHUNK)
            if not chunk:
                break
            out.write(chunk)
            size += len(chunk)

    log.info(
        "file_uploaded",
        extra={"new_file_name": new_name, "content_type": detected.mime_type, "size": size},
    )
    return UploadedFile(
        new_file_name=new_name,
        original_file_name=os.path.basename(upload.filename or ""),
        file_size=size,
        content_type=detected.mime_type,
    )
