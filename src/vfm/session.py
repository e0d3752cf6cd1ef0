"""Load the session written by the VTEX CLI (`vtex login`)."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from vfm.errors import AuthMissingError
from vfm.models.config import SessionConfig
from vfm.models.session import Session

logger = logging.getLogger(__name__)

SESSION_FILE = "session.json"
WORKSPACE_FILE = "workspace.json"


def load_session(config: SessionConfig | None = None) -> Session:
    """Read session.json and workspace.json from the VTEX CLI session dir.

    Raises:
        AuthMissingError: If the directory or a file is missing, unreadable,
            or lacks the account, token or current workspace.
    """
    config = config or SessionConfig()
    directory = config.directory.expanduser()
    if not directory.is_dir():
        raise AuthMissingError("no VTEX session found. Please run 'vtex login' first")

    session_data = _read_json(directory / SESSION_FILE)
    workspace_data = _read_json(directory / WORKSPACE_FILE)

    account = str(session_data.get("account") or "")
    token = str(session_data.get("token") or "")
    workspace = str(workspace_data.get("currentWorkspace") or "")

    if not account:
        raise AuthMissingError("no account found in session. Please run 'vtex login' first")
    if not token:
        raise AuthMissingError("no token found in session. Please run 'vtex login' first")
    if not workspace:
        raise AuthMissingError(
            "no workspace found in session. Please run 'vtex use <workspace>' first"
        )

    session = Session(
        account=account,
        workspace=workspace,
        login=str(session_data.get("login") or ""),
        token=token,
    )
    validate_token(session, min_length=config.min_token_length)
    logger.debug("Loaded VTEX session: account=%s workspace=%s", account, workspace)
    return session


def validate_token(session: Session, *, min_length: int = 10) -> None:
    """Reject tokens that are obviously placeholders."""
    if not session.token:
        raise AuthMissingError("authentication failed: no authentication token found")
    if len(session.token) < min_length:
        raise AuthMissingError(
            "authentication failed: authentication token appears to be invalid (too short). "
            "Please run 'vtex login' and try again"
        )


def _read_json(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise AuthMissingError(
            f"failed to read {path.name}: {exc}. Please run 'vtex login' first", cause=exc
        ) from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise AuthMissingError(f"failed to parse {path.name}: {exc}", cause=exc) from exc
    if not isinstance(data, dict):
        raise AuthMissingError(f"failed to parse {path.name}: expected a JSON object")
    return data
