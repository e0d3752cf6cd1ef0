"""Legacy CMS FilePicker backend (token-gated form upload)."""

from __future__ import annotations

import logging
import re
from urllib.parse import quote

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
from vfm.errors import AuthExpiredError, UploadRejectedError
from vfm.interfaces import ExistenceChecker, UploadBackend
from vfm.models.config import CmsBackendConfig
from vfm.models.enums import BackendName
from vfm.models.session import Session
from vfm.models.upload import UploadResult, UploadTask
from vfm.validation import mime_type_for

logger = logging.getLogger(__name__)

_TOKEN_PATH = "/admin/a/PortalManagement/AddFile?fileType=images"
_UPLOAD_PATH = "/admin/a/FilePicker/UploadFile"
_EXISTS_PATH = "/admin/a/FilePicker/FileExists?changedFileName="

# Tried in order against the AddFile page markup.
_TOKEN_PATTERNS = (
    re.compile(r'id="fileUploadRequestToken"\s+value="([^"]+)"'),
    re.compile(r'value="([^"]+)"\s+id="fileUploadRequestToken"'),
    re.compile(r'fileUploadRequestToken[^>]*value="([^"]+)"'),
)

# Characters Go's url.PathEscape leaves alone in a path segment.
_PATH_SEGMENT_SAFE = "$&+:=@"


def extract_request_token(markup: str) -> str | None:
    """Find the upload request token in the AddFile page, or None."""
    for pattern in _TOKEN_PATTERNS:
        match = pattern.search(markup)
        if match:
            return match.group(1)
    return None


def build_file_url(account: str, asset_host: str, file_name: str) -> str:
    """Public URL of a FilePicker upload; the name is percent-encoded as one segment."""
    encoded = quote(file_name, safe=_PATH_SEGMENT_SAFE)
    return f"https://{account}.{asset_host}/arquivos/{encoded}"


@backend(BackendName.CMS)
class CmsFilePickerBackend(UploadBackend, ExistenceChecker):
    """Uploads through the CMS FilePicker admin endpoints.

    Each upload fetches a fresh request token immediately before posting the
    file. The token lives for seconds, so it is a local of the upload call
    and never stored on the instance.
    """

    name = BackendName.CMS
    config_cls = CmsBackendConfig

    @classmethod
    def create(
        cls, session: Session, config: CmsBackendConfig, audit_log: AuditLog
    ) -> UploadBackend:
        return cls(session, config, audit_log)

    def __init__(self, session: Session, config: CmsBackendConfig, audit_log: AuditLog) -> None:
        self._session = session
        self._config = config
        self._audit_log = audit_log
        self._base_url = config.host_template.format(account=session.account)
        self._http: aiohttp.ClientSession | None = None
        self._shutdown_called = False

    def file_url(self, file_name: str) -> str:
        return build_file_url(self._session.account, self._config.asset_host, file_name)

    def destination_preview(self, file_name: str) -> str:
        return self.file_url(file_name)

    async def upload(self, task: UploadTask) -> UploadResult:
        self._ensure_open()
        return await perform_upload(
            task,
            method=self.name,
            session=self._session,
            audit_log=self._audit_log,
            send=self._send,
        )

    async def exists(self, name: str) -> bool:
        """Ask FilePicker whether `name` is taken.

        The endpoint answers with a JSON object keyed by the names that exist.
        """
        self._ensure_open()
        writer = aiohttp.MultipartWriter("form-data")
        part = writer.append(name)
        # Field name must be the raw file name, unescaped.
        part.set_content_disposition("form-data", quote_fields=False, name=name)

        headers = {**auth_headers(self._session), "Accept": "*/*"}
        http = await self._get_http()
        status, body = await post_text(
            http, f"{self._base_url}{_EXISTS_PATH}", data=writer, headers=headers
        )
        check_status(status, body)
        payload = parse_json(body)
        if not isinstance(payload, dict):
            raise UploadRejectedError(f"unexpected FileExists response: {body}")
        logger.debug("FileExists %s -> %s", name, name in payload)
        return name in payload

    async def shutdown(self, timeout: float | None = None) -> None:
        _ = timeout
        if self._shutdown_called:
            return
        self._shutdown_called = True
        if self._http is not None and not self._http.closed:
            await self._http.close()

    async def _send(self, task: UploadTask, content: bytes) -> str:
        token = await self._fetch_request_token()

        form = aiohttp.FormData()
        form.add_field("requestToken", token)
        # Field name must be "FileData" with a capital D.
        form.add_field(
            "FileData",
            content,
            filename=task.name,
            content_type=mime_type_for(task.extension),
        )
        headers = {
            **auth_headers(self._session),
            "Accept": "*/*",
            "X-Requested-With": "XMLHttpRequest",
        }

        http = await self._get_http()
        status, body = await post_text(
            http, f"{self._base_url}{_UPLOAD_PATH}", data=form, headers=headers
        )
        check_status(status, body)

        payload = parse_json(body)
        if not isinstance(payload, dict):
            raise UploadRejectedError(f"unexpected upload response: {body}")
        inserted = payload.get("fileNameInserted") or ""
        if not inserted:
            message = payload.get("mensagem") or "no file name returned"
            raise UploadRejectedError(f"upload failed: {message}")
        return self.file_url(str(inserted))

    async def _fetch_request_token(self) -> str:
        http = await self._get_http()
        status, body = await post_text(
            http,
            f"{self._base_url}{_TOKEN_PATH}",
            headers=auth_headers(self._session),
            allow_redirects=False,
        )
        # A redirect here is the login page.
        if status in (301, 302, 303, 307, 308):
            raise AuthExpiredError(
                "authentication failed (redirect): your VTEX session has expired. "
                "Please run 'vtex login' and try again"
            )
        if status in (401, 403):
            check_status(status, body)  # raises AuthExpiredError
        if not 200 <= status < 300:
            raise UploadRejectedError(
                f"failed to fetch upload page with status {status}: {body}", status=status
            )

        token = extract_request_token(body)
        if token is None:
            raise AuthExpiredError(
                "authentication failed: could not obtain upload token. "
                "Your VTEX session may have expired. Please run 'vtex login' and try again"
            )
        return token

    async def _get_http(self) -> aiohttp.ClientSession:
        if self._http is None or self._http.closed:
            self._http = new_http_session(self._config.timeout_s)
        return self._http

    def _ensure_open(self) -> None:
        if self._shutdown_called:
            raise RuntimeError("Backend has been shut down")
