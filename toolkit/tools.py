from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence
from urllib.request import OpenerDirector

from fastapi.responses import FileResponse
from starlette.requests import Request
from starlette.responses import Response

from toolkit.api.download import download_file
from toolkit.api.json_io import error_json, read_json, write_json
from toolkit.api.models import UploadedFile
from toolkit.api.upload import upload_files, upload_one_file
from toolkit.client.push import push_json_to_remote
from toolkit.config import ToolsConfig
from toolkit.core.fs import DEFAULT_DIR_MODE, create_dir, log_error
from toolkit.core.random_string import random_string


class Tools:
    """Request/response helpers bound to one ToolsConfig.

    Create one per application and share it between handlers; it holds
    no mutable state.

    Example:
        tools = Tools(ToolsConfig(max_file_size=64 * 1024))

        @app.post("/items")
        async def create(request: Request):
            try:
                payload = await tools.read_json(request, ItemIn)
            except ToolkitError as e:
                return tools.error_json(e)
            return tools.write_json(201, payload)

    """

    def __init__(self, config: Optional[ToolsConfig] = None):
        self.config = config or ToolsConfig()

    async def read_json(self, request: Request, model: Any = None) -> Any:
        return await read_json(request, model, max_bytes=self.config.max_body_bytes)

    def write_json(
        self, status: int, data: Any, headers: Optional[Mapping[str, str]] = None
    ) -> Response:
        return write_json(status, data, headers)

    def error_json(self, err: BaseException, status: int = 400) -> Response:
        return error_json(err, status)

    def random_string(self, n: int) -> str:
        return random_string(n, self.config.alphabet)

    def push_json_to_remote(
        self,
        url: str,
        data: Any,
        *,
        opener: Optional[OpenerDirector] = None,
        timeout: Optional[float] = None,
    ) -> int:
        return push_json_to_remote(url, data, opener=opener, timeout=timeout)

    def download_file(self, base_path: str, file: str, display_name: str) -> FileResponse:
        return download_file(base_path, file, display_name)

    async def upload_files(
        self,
        request: Request,
        upload_dir: str,
        allowed_types: Optional[Sequence[str]] = None,
    ) -> List[UploadedFile]:
        return await upload_files(request, upload_dir, **self._upload_options(allowed_types))

    async def upload_one_file(
        self,
        request: Request,
        upload_dir: str,
        allowed_types: Optional[Sequence[str]] = None,
    ) -> UploadedFile:
        return await upload_one_file(request, upload_dir, **self._upload_options(allowed_types))

    def create_dir(self, path: str, mode: int = DEFAULT_DIR_MODE) -> None:
        create_dir(path, mode)

    def log_error(self, err: Optional[BaseException]) -> None:
        log_error(err)

    def _upload_options(self, allowed_types: Optional[Sequence[str]]) -> dict:
        return {
            "max_form_size": self.config.max_form_size,
            "allowed_types": allowed_types,
            "name_length": self.config.random_name_length,
            "alphabet": self.config.alphabet,
            "sniff_bytes": self.config.sniff_bytes,
        }
