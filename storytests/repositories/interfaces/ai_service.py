from abc import ABC, abstractmethod
from storytests.models.schemas import GenerateRequest, GenerateResponse


class IAIService(ABC):
    """Interface for the test case generation provider"""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials for the provider are available"""
        pass

    @abstractmethod
    async def generate_test_cases(self, request: GenerateRequest) -> GenerateResponse:
        """Generate test cases for a user story"""
        pass
