from abc import ABC, abstractmethod
from typing import List

from storytests.models.schemas import SessionCredentials, StoryDetail, StorySummary


class IJiraService(ABC):
    """Interface for JIRA read operations made on behalf of a session"""

    @abstractmethod
    async def test_connection(self, creds: SessionCredentials) -> None:
        """Verify the credentials against the upstream; raise on failure"""
        pass

    @abstractmethod
    async def get_stories(self, creds: SessionCredentials) -> List[StorySummary]:
        """List stories visible to the credentials"""
        pass

    @abstractmethod
    async def get_story(self, creds: SessionCredentials, issue_key: str) -> StoryDetail:
        """Get a single story with description and acceptance criteria"""
        pass
