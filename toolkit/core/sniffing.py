from __future__ import annotations

import fnmatch
from dataclasses import dataclass
from typing import BinaryIO, Optional, Tuple

from toolkit.errors import DetectionError

OCTET_STREAM = "application/octet-stream"


@dataclass(frozen=True, slots=True)
class MimeType:
    """Result of signature-based sniffing.

    extension carries the leading dot and is empty when the type is unknown.
    """

    mime_type: str
    extension: str


# (offset, signature, mime, extension); first match wins.
_SIGNATURES: Tuple[Tuple[int, bytes, str, str], ...] = (
    (0, b"\xff\xfe", "text/plain; charset=utf-16le", ".txt"),
    (0, b"\xfe\xff", "text/plain; charset=utf-16be", ".txt"),
    (0, b"\x89PNG\r\n\x1a\n", "image/png", ".png"),
    (0, b"\xff\xd8\xff", "image/jpeg", ".jpg"),
    (0, b"GIF87a", "image/gif", ".gif"),
    (0, b"GIF89a", "image/gif", ".gif"),
    (0, b"II*\x00", "image/tiff", ".tiff"),
    (0, b"MM\x00*", "image/tiff", ".tiff"),
    (0, b"\x00\x00\x01\x00", "image/x-icon", ".ico"),
    (0, b"%PDF-", "application/pdf", ".pdf"),
    (0, b"PK\x05\x06", "application/zip", ".zip"),
    (0, b"\x1f\x8b", "application/gzip", ".gz"),
    (0, b"7z\xbc\xaf\x27\x1c", "application/x-7z-compressed", ".7z"),
    (0, b"Rar!\x1a\x07", "application/x-rar-compressed", ".rar"),
    (0, b"\x7fELF", "application/x-elf", ""),
    (0, b"\x00asm", "application/wasm", ".wasm"),
    (0, b"SQLite format 3\x00", "application/vnd.sqlite3", ".sqlite"),
    (0, b"ID3", "audio/mpeg", ".mp3"),
    (0, b"OggS", "audio/ogg", ".ogg"),
    (0, b"fLaC", "audio/flac", ".flac"),
    (0, b"MThd", "audio/midi", ".midi"),
    (0, b"\x1a\x45\xdf\xa3", "video/webm", ".webm"),
)

# RIFF containers: bytes 8..12 name the format.
_RIFF_FORMATS = {
    b"WEBP": ("image/webp", ".webp"),
    b"WAVE": ("audio/wav", ".wav"),
    b"AVI ": ("video/x-msvideo", ".avi"),
}

# ISO base media: bytes 4..8 are "ftyp", 8..12 the major brand.
_FTYP_BRANDS = {
    b"qt  ": ("video/quicktime", ".mov"),
    b"M4A ": ("audio/x-m4a", ".m4a"),
    b"heic": ("image/heic", ".heic"),
    b"avif": ("image/avif", ".avif"),
}

_ZIP_MAX_ENTRIES = 32

_OOXML_PARTS = (
    (
        b"word/",
        MimeType(
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            ".docx",
        ),
    ),
    (
        b"xl/",
        MimeType("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", ".xlsx"),
    ),
    (
        b"ppt/",
        MimeType(
            "application/vnd.openxmlformats-officedocument.presentationml.presentation",
            ".pptx",
        ),
    ),
)

# Content of the leading "mimetype" entry.
_ZIP_MIMETYPE_ENTRIES = {
    b"application/vnd.oasis.opendocument.text": (
        "application/vnd.oasis.opendocument.text",
        ".odt",
    ),
    b"application/vnd.oasis.opendocument.spreadsheet": (
        "application/vnd.oasis.opendocument.spreadsheet",
        ".ods",
    ),
    b"application/vnd.oasis.opendocument.presentation": (
        "application/vnd.oasis.opendocument.presentation",
        ".odp",
    ),
    b"application/epub+zip": ("application/epub+zip", ".epub"),
}


def detect_bytes(prefix: bytes) -> MimeType:
    """Detect a media type from the leading bytes of a stream.

    Notes:
    - Never consults filenames or client-declared types.
    - Falls back to text/plain for NUL-free UTF-8, else octet-stream.

    """

    magic = _magic_mime(prefix)
    if magic is not None:
        return magic

    markup = _markup_mime(prefix)
    if markup is not None:
        return markup

    if _json_heuristic(prefix):
        return MimeType("application/json", ".json")

    if _looks_like_text(prefix):
        return MimeType("text/plain; charset=utf-8", ".txt")

    return MimeType(OCTET_STREAM, "")


def detect_reader(fileobj: BinaryIO, limit: int = 3072) -> MimeType:
    """Read at most limit bytes from fileobj and sniff them.

    The stream is left where the read stopped; callers rewind it.
    """

    try:
        prefix = fileobj.read(max(1, int(limit)))
    except (OSError, ValueError) as e:
        raise DetectionError(f"cannot read stream for sniffing: {e}") from e
    return detect_bytes(prefix or b"")


def _magic_mime(prefix: bytes) -> Optional[MimeType]:
    """Detect mime from fixed magic headers."""

    for offset, sig, mime, ext in _SIGNATURES:
        if prefix[offset : offset + len(sig)] == sig:
            return MimeType(mime, ext)

    if prefix[:4] == b"PK\x03\x04":
        return _zip_mime(prefix)

    if prefix[:2] == b"BM" and prefix[6:10] == b"\x00\x00\x00\x00":
        # Reserved header words are always zero.
        return MimeType("image/bmp", ".bmp")

    if prefix[:3] == b"BZh" and prefix[3:4].isdigit():
        return MimeType("application/x-bzip2", ".bz2")

    if prefix[:4] == b"RIFF" and prefix[8:12] in _RIFF_FORMATS:
        return MimeType(*_RIFF_FORMATS[prefix[8:12]])

    if prefix[4:8] == b"ftyp":
        brand = prefix[8:12]
        if brand in _FTYP_BRANDS:
            return MimeType(*_FTYP_BRANDS[brand])
        return MimeType("video/mp4", ".mp4")

    if _is_mpeg_frame(prefix):
        return MimeType("audio/mpeg", ".mp3")

    return None


def _is_mpeg_frame(prefix: bytes) -> bool:
    """Bare MPEG audio frame header (no ID3 tag)."""

    if len(prefix) < 3 or prefix[0] != 0xFF or (prefix[1] & 0xE0) != 0xE0:
        return False
    version = (prefix[1] >> 3) & 0x03
    layer = (prefix[1] >> 1) & 0x03
    bitrate = prefix[2] >> 4
    sample_rate = (prefix[2] >> 2) & 0x03
    # 0b01 version and 0b00 layer are reserved; 0xF bitrate and 0b11 rate are invalid.
    return version != 1 and layer != 0 and bitrate != 0x0F and sample_rate != 0x03


def _zip_mime(prefix: bytes) -> MimeType:
    """Name a ZIP container from the local file headers inside prefix.

    Notes:
    - OOXML is recognized by its word/, xl/ or ppt/ parts.
    - ODF and EPUB store their type in a leading "mimetype" entry.
    - Headers past the prefix, or after a data descriptor, are not seen.

    """

    pos = 0
    for _ in range(_ZIP_MAX_ENTRIES):
        header = prefix[pos : pos + 30]
        if len(header) < 30 or header[:4] != b"PK\x03\x04":
            break
        flags = int.from_bytes(header[6:8], "little")
        size = int.from_bytes(header[18:22], "little")
        name_len = int.from_bytes(header[26:28], "little")
        extra_len = int.from_bytes(header[28:30], "little")
        name = prefix[pos + 30 : pos + 30 + name_len]
        data_start = pos + 30 + name_len + extra_len

        if name == b"mimetype":
            content = prefix[data_start : data_start + size].strip()
            if content in _ZIP_MIMETYPE_ENTRIES:
                return MimeType(*_ZIP_MIMETYPE_ENTRIES[content])
        for part, found in _OOXML_PARTS:
            if name.startswith(part):
                return found
        if name.startswith(b"META-INF/"):
            return MimeType("application/java-archive", ".jar")

        if flags & 0x08:
            # Sizes live in a trailing data descriptor.
            break
        pos = data_start + size

    return MimeType("application/zip", ".zip")


def _markup_mime(prefix: bytes) -> Optional[MimeType]:
    """Detect XML-family documents from their leading tag."""

    head = _strip_bom(prefix).lstrip().lower()
    if head.startswith(b"<!doctype html") or head.startswith(b"<html"):
        return MimeType("text/html; charset=utf-8", ".html")
    if head.startswith(b"<svg") or (head.startswith(b"<?xml") and b"<svg" in head):
        return MimeType("image/svg+xml", ".svg")
    if head.startswith(b"<?xml"):
        return MimeType("text/xml; charset=utf-8", ".xml")
    return None


def _json_heuristic(prefix: bytes) -> bool:
    """Heuristic JSON detection from a bounded prefix.

    Notes:
    - Does not parse JSON; only checks leading non-whitespace.

    """

    p = _strip_bom(prefix).lstrip()
    if not p:
        return False
    return p.startswith(b"{") or p.startswith(b"[")


def _looks_like_text(prefix: bytes) -> bool:
    if not prefix or b"\x00" in prefix:
        return False
    try:
        prefix.decode("utf-8")
    except UnicodeDecodeError as e:
        # A multi-byte sequence cut by the prefix limit is still text.
        return e.start >= len(prefix) - 3 and e.reason == "unexpected end of data"
    return True


def _strip_bom(prefix: bytes) -> bytes:
    if prefix.startswith(b"\xef\xbb\xbf"):
        return prefix[3:]
    return prefix


def mime_matches(pattern: str, mime: str) -> bool:
    """Match a mime against a simple pattern.

    Supported patterns:
    - "*" or "*/*" matches all
    - "type/*" matches any subtype
    - exact match (parameters such as charset are ignored)

    """

    pat = pattern.strip().lower()
    m = mime.split(";", 1)[0].strip().lower()

    if pat in {"*", "*/*"}:
        return True
    if "*" in pat:
        return fnmatch.fnmatchcase(m, pat)
    return pat == m
