from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional
from enum import Enum


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TestCaseCategory(str, Enum):
    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    EDGE = "Edge"
    AUTHORIZATION = "Authorization"
    NON_FUNCTIONAL = "Non-Functional"


class ErrorCode(str, Enum):
    JIRA_NOT_CONNECTED = "JIRA_NOT_CONNECTED"
    JIRA_AUTH_FAILED = "JIRA_AUTH_FAILED"


class SessionCredentials(CamelModel):
    base_url: str = Field(..., description="Jira origin without trailing slash")
    auth_header: str = Field(..., description="Basic auth header value")

    @property
    def is_valid(self) -> bool:
        return bool(self.base_url and self.auth_header)


class ConnectRequest(CamelModel):
    # Presence is checked by the route so a missing field maps to 400
    base_url: Optional[str] = None
    email: Optional[str] = None
    api_token: Optional[str] = None


class ConnectResponse(BaseModel):
    ok: bool = True


class ConnectionStatus(CamelModel):
    connected: bool
    base_url: Optional[str] = None


class StorySummary(CamelModel):
    key: str
    title: str = ""
    status: str = ""
    priority: str = ""
    assignee: str = ""
    issue_type: str = ""
    updated: Optional[str] = None


class StoryDetail(StorySummary):
    description: str = ""
    acceptance_criteria: str = ""


class GenerateRequest(CamelModel):
    story_title: str = Field("", description="User story title")
    description: str = Field("", description="Free-form story description")
    acceptance_criteria: str = Field("", description="Acceptance criteria for the story")
    additional_info: str = Field("", description="Any extra context for the generator")


class TestCase(CamelModel):
    id: str = Field(..., description="Test case identifier, e.g. TC-001")
    title: str
    category: TestCaseCategory = TestCaseCategory.POSITIVE
    expected_result: str = ""
    steps: List[str] = Field(default_factory=list)
    test_data: Optional[str] = None


class GenerateResponse(CamelModel):
    cases: List[TestCase] = Field(default_factory=list)
    model: str = ""
    prompt_tokens: int = 0
    completion_tokens: int = 0
