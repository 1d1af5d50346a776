import base64
from typing import Optional

from fastapi import Request, status

from storytests.core.errors import ApiError
from storytests.core.session_store import load_credentials
from storytests.models.schemas import ErrorCode, SessionCredentials

NOT_CONNECTED_MESSAGE = "Not connected to Jira. Please connect to Jira first using the Connect button."


def require_jira_credentials(request: Request) -> SessionCredentials:
    """FastAPI dependency: reject the request unless the session holds Jira credentials."""
    creds = load_credentials(request)
    if creds is None or not creds.is_valid:
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            NOT_CONNECTED_MESSAGE,
            code=ErrorCode.JIRA_NOT_CONNECTED,
        )
    return creds


def optional_jira_credentials(request: Request) -> Optional[SessionCredentials]:
    """FastAPI dependency: session credentials when valid, otherwise None."""
    creds = load_credentials(request)
    if creds is not None and creds.is_valid:
        return creds
    return None


def normalize_base_url(base_url: str) -> str:
    """Strip a single trailing slash from the Jira origin."""
    base_url = base_url.strip()
    return base_url[:-1] if base_url.endswith("/") else base_url


def build_credentials(base_url: str, email: str, api_token: str) -> SessionCredentials:
    token = base64.b64encode(f"{email}:{api_token}".encode("utf-8")).decode("ascii")
    return SessionCredentials(
        base_url=normalize_base_url(base_url),
        auth_header=f"Basic {token}",
    )
