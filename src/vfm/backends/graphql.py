"""GraphQL multipart upload backend."""

from __future__ import annotations

import json
import logging

import aiohttp

from vfm.audit_log import AuditLog
from vfm.backends.common import (
    auth_headers,
    check_status,
    new_http_session,
    parse_json,
    perform_upload,
    post_text,
)
from vfm.backends.registry import backend
from vfm.errors import UploadRejectedError
from vfm.interfaces import UploadBackend
from vfm.models.config import GraphQLBackendConfig
from vfm.models.enums import BackendName
from vfm.models.session import Session
from vfm.models.upload import UploadResult, UploadTask
from vfm.validation import mime_type_for

logger = logging.getLogger(__name__)

UPLOAD_MUTATION = """mutation uploadFile($file: Upload!, $bucket: String) {
  uploadFile(file: $file, bucket: $bucket) {
    fileUrl
    mimetype
    encoding
  }
}"""

# Multipart request convention: part "0" fills variables.file.
_FILE_PART = "0"


def build_operations(bucket: str) -> str:
    return json.dumps(
        {"query": UPLOAD_MUTATION, "variables": {"file": None, "bucket": bucket}}
    )


def build_file_map() -> str:
    return json.dumps({_FILE_PART: ["variables.file"]})


@backend(BackendName.GRAPHQL)
class GraphQLUploadBackend(UploadBackend):
    """Uploads through the account's private GraphQL endpoint.

    The remote side generates the file name (uuid plus hash), so there is no
    existence check; this backend is not an ExistenceChecker.
    """

    name = BackendName.GRAPHQL
    config_cls = GraphQLBackendConfig

    @classmethod
    def create(
        cls, session: Session, config: GraphQLBackendConfig, audit_log: AuditLog
    ) -> UploadBackend:
        return cls(session, config, audit_log)

    def __init__(
        self, session: Session, config: GraphQLBackendConfig, audit_log: AuditLog
    ) -> None:
        self._session = session
        self._config = config
        self._audit_log = audit_log
        self._endpoint = config.endpoint_template.format(account=session.account)
        self._http: aiohttp.ClientSession | None = None
        self._shutdown_called = False

    def destination_preview(self, file_name: str) -> str:
        _ = file_name
        return f"https://{self._session.account}.{self._config.asset_host}/assets/.../[generated]"

    async def upload(self, task: UploadTask) -> UploadResult:
        self._ensure_open()
        return await perform_upload(
            task,
            method=self.name,
            session=self._session,
            audit_log=self._audit_log,
            send=self._send,
        )

    async def shutdown(self, timeout: float | None = None) -> None:
        _ = timeout
        if self._shutdown_called:
            return
        self._shutdown_called = True
        if self._http is not None and not self._http.closed:
            await self._http.close()

    async def _send(self, task: UploadTask, content: bytes) -> str:
        form = aiohttp.FormData()
        form.add_field("operations", build_operations(self._config.bucket))
        form.add_field("map", build_file_map())
        form.add_field(
            _FILE_PART,
            content,
            filename=task.name,
            content_type=mime_type_for(task.extension),
        )
        headers = {**auth_headers(self._session), "Accept": "application/json"}

        http = await self._get_http()
        status, body = await post_text(http, self._endpoint, data=form, headers=headers)
        check_status(status, body)

        payload = parse_json(body)
        if not isinstance(payload, dict):
            raise UploadRejectedError(f"unexpected GraphQL response: {body}")

        errors = payload.get("errors") or []
        if errors:
            first = errors[0]
            message = first.get("message") if isinstance(first, dict) else str(first)
            raise UploadRejectedError(f"GraphQL error: {message}")

        data = payload.get("data")
        upload = data.get("uploadFile") if isinstance(data, dict) else None
        file_url = upload.get("fileUrl") if isinstance(upload, dict) else None
        if not file_url:
            raise UploadRejectedError("no fileUrl in response")
        return str(file_url)

    async def _get_http(self) -> aiohttp.ClientSession:
        if self._http is None or self._http.closed:
            self._http = new_http_session(self._config.timeout_s)
        return self._http

    def _ensure_open(self) -> None:
        if self._shutdown_called:
            raise RuntimeError("Backend has been shut down")
