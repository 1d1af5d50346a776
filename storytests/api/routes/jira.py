from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, Request, status

from storytests.config.settings import settings
from storytests.core.auth import build_credentials, optional_jira_credentials, require_jira_credentials
from storytests.core.dependencies import get_jira_service
from storytests.core.errors import ApiError, JiraServiceError
from storytests.core.session_store import get_session_id, load_credentials, save_credentials
from storytests.models.schemas import (
    ConnectionStatus,
    ConnectRequest,
    ConnectResponse,
    ErrorCode,
    SessionCredentials,
    StoryDetail,
    StorySummary,
)
from storytests.repositories.interfaces.jira_service import IJiraService

logger = structlog.get_logger()

router = APIRouter(prefix="/jira", tags=["jira"])

AUTH_FAILED_MESSAGE = "Jira authentication failed. Please check your credentials and reconnect."


def _upstream_error(err: JiraServiceError, fallback: str) -> ApiError:
    """Map an upstream failure to the client-facing error."""
    if err.is_auth_failure:
        return ApiError(status.HTTP_401_UNAUTHORIZED, AUTH_FAILED_MESSAGE, code=ErrorCode.JIRA_AUTH_FAILED)
    return ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, err.message or fallback)


@router.get("/_store")
async def debug_store(request: Request):
    """Return the session-stored credentials (non-production only)"""
    if settings.is_production:
        raise ApiError(status.HTTP_404_NOT_FOUND, "Not Found")
    creds = load_credentials(request)
    return {
        "session": get_session_id(request) is not None,
        "jiraCreds": creds.model_dump(by_alias=True) if creds else None,
    }


@router.get("/status", response_model=ConnectionStatus)
async def connection_status(creds: Optional[SessionCredentials] = Depends(optional_jira_credentials)):
    """Report whether this session is connected to Jira"""
    return ConnectionStatus(connected=creds is not None, base_url=creds.base_url if creds else None)


@router.post("/connect", response_model=ConnectResponse)
async def connect(
    request: Request,
    body: Optional[ConnectRequest] = None,
    jira: IJiraService = Depends(get_jira_service),
):
    """Verify Jira credentials and store them in the session"""
    body = body or ConnectRequest()
    base_url = (body.base_url or "").strip()
    email = (body.email or "").strip()
    api_token = (body.api_token or "").strip()
    if not base_url or not email or not api_token:
        raise ApiError(status.HTTP_400_BAD_REQUEST, "baseUrl, email and apiToken are required")

    creds = build_credentials(base_url, email, api_token)
    try:
        await jira.test_connection(creds)
    except JiraServiceError as e:
        logger.error("Jira connect failed", base_url=creds.base_url, status_code=e.status_code, error=e.message)
        raise ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, e.message or "Failed to connect to Jira")

    # Only verified credentials reach the session
    save_credentials(request, creds)
    logger.info("Jira connected", base_url=creds.base_url)
    return ConnectResponse(ok=True)


@router.get("/stories", response_model=List[StorySummary])
async def list_stories(
    creds: SessionCredentials = Depends(require_jira_credentials),
    jira: IJiraService = Depends(get_jira_service),
):
    """List stories from the connected Jira"""
    try:
        return await jira.get_stories(creds)
    except JiraServiceError as e:
        logger.error("Jira stories error", status_code=e.status_code, error=e.message)
        raise _upstream_error(e, "Failed to fetch stories")


@router.get("/story/{key}", response_model=StoryDetail)
async def get_story(
    key: str,
    creds: SessionCredentials = Depends(require_jira_credentials),
    jira: IJiraService = Depends(get_jira_service),
):
    """Fetch one story with description and acceptance criteria"""
    try:
        return await jira.get_story(creds, key)
    except JiraServiceError as e:
        logger.error("Jira story detail error", issue_key=key, status_code=e.status_code, error=e.message)
        raise _upstream_error(e, "Failed to fetch story details")
