import re
from typing import Any, Dict, List, Optional

import httpx
import structlog

from storytests.config.settings import settings
from storytests.core.errors import JiraServiceError
from storytests.models.schemas import SessionCredentials, StoryDetail, StorySummary
from storytests.repositories.interfaces.jira_service import IJiraService

logger = structlog.get_logger()

STORY_JQL = "issuetype = Story ORDER BY updated DESC"
SUMMARY_FIELDS = ["summary", "status", "priority", "assignee", "issuetype", "updated"]
DETAIL_FIELDS = SUMMARY_FIELDS + ["description", "customfield_10000"]
# Custom fields commonly used for acceptance criteria when it is not part of the description
ACCEPTANCE_CRITERIA_FIELDS = ["customfield_10000"]

_BLOCK_NODES = {"paragraph", "heading", "codeBlock", "blockquote", "panel", "tableRow", "rule"}


def adf_to_text(node: Any) -> str:
    """Flatten an Atlassian Document Format node (or plain string) to text."""
    if isinstance(node, str):
        return node
    if isinstance(node, list):
        return "".join(adf_to_text(child) for child in node)
    if not isinstance(node, dict):
        return ""

    node_type = node.get("type")
    if node_type == "text":
        return node.get("text", "")
    if node_type == "hardBreak":
        return "\n"

    inner = adf_to_text(node.get("content", []))
    if node_type == "listItem":
        return f"- {inner.strip()}\n"
    if node_type in _BLOCK_NODES:
        return inner.rstrip("\n") + "\n"
    return inner


def split_acceptance_criteria(text: str) -> tuple[str, str]:
    """Split story text on its "Acceptance Criteria" heading and clean the criteria."""
    parts = re.split(r"Acceptance Criteria[:\n]+", text, maxsplit=1, flags=re.IGNORECASE)
    description = parts[0].strip()
    criteria = parts[1].strip() if len(parts) > 1 else ""
    # Jira image/file markup
    criteria = re.sub(r"!\S+?\.(jpg|png|jpeg|gif)[^!]*!", "", criteria, flags=re.IGNORECASE)
    # Smart links: [text|url] or [text|url|smart-link]
    criteria = re.sub(r"\[.*?\|.*?\]", "", criteria)
    criteria = "\n".join(line for line in criteria.splitlines() if line.strip())
    return description, criteria


def extract_error_message(response: httpx.Response) -> Optional[str]:
    """Best-effort message from a Jira error payload."""
    try:
        payload = response.json()
    except ValueError:
        return response.text.strip() or None
    if not isinstance(payload, dict):
        return None
    messages = payload.get("errorMessages") or []
    if messages:
        return "; ".join(str(m) for m in messages)
    errors = payload.get("errors") or {}
    if isinstance(errors, dict) and errors:
        return "; ".join(f"{k}: {v}" for k, v in errors.items())
    return payload.get("message")


def _name(fields: Dict[str, Any], field: str, attr: str = "name") -> str:
    value = fields.get(field)
    if isinstance(value, dict):
        return value.get(attr) or ""
    return ""


class AtlassianJiraService(IJiraService):
    """Atlassian JIRA Cloud implementation using per-session Basic auth"""

    def __init__(self, timeout: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout if timeout is not None else settings.jira_timeout_seconds
        self.max_results = settings.jira_max_results
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def _get(self, creds: SessionCredentials, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{creds.base_url}{path}"
        headers = {"Authorization": creds.auth_header, "Accept": "application/json"}
        try:
            async with self._client() as client:
                response = await client.get(url, params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.error("JIRA request failed", path=path, error=str(e))
            raise JiraServiceError(f"Unable to reach Jira: {e}") from e

        if response.status_code >= 400:
            message = extract_error_message(response) or f"Jira responded with status {response.status_code}"
            logger.error("JIRA request rejected", path=path, status_code=response.status_code, error=message)
            raise JiraServiceError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise JiraServiceError("Jira returned an invalid JSON response") from e

    async def test_connection(self, creds: SessionCredentials) -> None:
        """Verify credentials by fetching the authenticated user"""
        user = await self._get(creds, "/rest/api/3/myself")
        logger.info("JIRA connection verified", account_id=user.get("accountId"))

    async def get_stories(self, creds: SessionCredentials) -> List[StorySummary]:
        """Search for stories, most recently updated first"""
        data = await self._get(
            creds,
            "/rest/api/3/search/jql",
            params={
                "jql": STORY_JQL,
                "fields": ",".join(SUMMARY_FIELDS),
                "maxResults": self.max_results,
            },
        )
        issues = data.get("issues", [])
        logger.info("JIRA stories fetched", count=len(issues))
        return [StorySummary(**self._summary_fields(issue)) for issue in issues]

    async def get_story(self, creds: SessionCredentials, issue_key: str) -> StoryDetail:
        """Get story details with description and acceptance criteria as plain text"""
        issue = await self._get(
            creds,
            f"/rest/api/3/issue/{issue_key}",
            params={"fields": ",".join(DETAIL_FIELDS)},
        )
        fields = issue.get("fields") or {}
        description, acceptance_criteria = split_acceptance_criteria(adf_to_text(fields.get("description")).strip())
        if not acceptance_criteria:
            for field in ACCEPTANCE_CRITERIA_FIELDS:
                custom = fields.get(field)
                if custom:
                    acceptance_criteria = adf_to_text(custom).strip()
                    break

        logger.info("JIRA story fetched", issue_key=issue_key)
        return StoryDetail(
            **self._summary_fields(issue),
            description=description,
            acceptance_criteria=acceptance_criteria,
        )

    def _summary_fields(self, issue: Dict[str, Any]) -> Dict[str, Any]:
        fields = issue.get("fields") or {}
        return {
            "key": issue.get("key", ""),
            "title": fields.get("summary") or "",
            "status": _name(fields, "status"),
            "priority": _name(fields, "priority"),
            "assignee": _name(fields, "assignee", "displayName"),
            "issue_type": _name(fields, "issuetype"),
            "updated": fields.get("updated"),
        }
