from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from main import app
from storytests.core.dependencies import get_ai_service, get_jira_service
from storytests.core.errors import GenerationError, JiraServiceError
from storytests.core.session_store import SESSION_STORE
from storytests.models import schemas
from storytests.repositories.interfaces.ai_service import IAIService
from storytests.repositories.interfaces.jira_service import IJiraService


class FakeJiraService(IJiraService):
    """In-memory stand-in for the Atlassian service; errors are injected per call."""

    def __init__(self):
        self.connect_error: Optional[JiraServiceError] = None
        self.stories_error: Optional[JiraServiceError] = None
        self.story_error: Optional[JiraServiceError] = None
        self.seen_credentials: List[schemas.SessionCredentials] = []

    async def test_connection(self, creds):
        self.seen_credentials.append(creds)
        if self.connect_error:
            raise self.connect_error

    async def get_stories(self, creds):
        self.seen_credentials.append(creds)
        if self.stories_error:
            raise self.stories_error
        return [
            schemas.StorySummary(key="SHOP-1", title="Checkout with saved card", status="To Do"),
            schemas.StorySummary(key="SHOP-2", title="Apply discount code", status="In Progress"),
        ]

    async def get_story(self, creds, issue_key):
        self.seen_credentials.append(creds)
        if self.story_error:
            raise self.story_error
        return schemas.StoryDetail(
            key=issue_key,
            title="Checkout with saved card",
            description="As a shopper I want to reuse my card",
            acceptance_criteria="- Saved card is preselected",
        )


class FakeAIService(IAIService):
    def __init__(self):
        self.error: Optional[GenerationError] = None
        self.requests: List[schemas.GenerateRequest] = []

    @property
    def is_configured(self) -> bool:
        return True

    async def generate_test_cases(self, request):
        self.requests.append(request)
        if self.error:
            raise self.error
        return schemas.GenerateResponse(
            cases=[
                schemas.TestCase(
                    id="TC-001",
                    title="Pay with saved card",
                    category=schemas.TestCaseCategory.POSITIVE,
                    expected_result="Order is placed",
                    steps=["Open checkout", "Choose saved card", "Confirm"],
                    test_data="card=4111",
                )
            ],
            model="fake-model",
            prompt_tokens=120,
            completion_tokens=80,
        )


@pytest.fixture
def fake_jira():
    return FakeJiraService()


@pytest.fixture
def fake_ai():
    return FakeAIService()


@pytest.fixture
def test_client(fake_jira, fake_ai):
    """Client with a fresh cookie jar and fake upstreams"""
    app.dependency_overrides[get_jira_service] = lambda: fake_jira
    app.dependency_overrides[get_ai_service] = lambda: fake_ai
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
    SESSION_STORE.clear_all()


@pytest.fixture
def connected_client(test_client):
    response = test_client.post(
        "/api/jira/connect",
        json={"baseUrl": "https://acme.atlassian.net/", "email": "qa@acme.io", "apiToken": "secret"},
    )
    assert response.status_code == 200
    return test_client
