"""Server-side helpers: JSON bodies, error envelopes, downloads and uploads."""

from .download import download_file  # noqa: F401
from .json_io import decode_json, error_json, read_json, write_json  # noqa: F401
from .models import JSONEnvelope, UploadedFile  # noqa: F401
from .upload import upload_files, upload_one_file  # noqa: F401
