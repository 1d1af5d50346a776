from functools import lru_cache

import structlog
from fastapi import Depends

from storytests.config.settings import settings
from storytests.repositories.interfaces.ai_service import IAIService
from storytests.repositories.interfaces.jira_service import IJiraService
from storytests.repositories.implementations.jira_service import AtlassianJiraService
from storytests.services.test_case_service import TestCaseService

logger = structlog.get_logger()


class Container:
    """Dependency injection container"""

    def __init__(self):
        self._ai_service = None
        self._jira_service = None

    @lru_cache()
    def ai_service(self) -> IAIService:
        """Get generation provider instance (singleton)"""
        if self._ai_service is None:
            provider = settings.generation_provider.lower()
            if provider == "gemini":
                from storytests.repositories.implementations.gemini_service import GeminiService

                self._ai_service = GeminiService()
            else:
                if provider != "openai":
                    logger.warning("Unknown generation provider, using openai", provider=provider)
                from storytests.repositories.implementations.openai_service import OpenAIService

                self._ai_service = OpenAIService()
        return self._ai_service

    @lru_cache()
    def jira_service(self) -> IJiraService:
        """Get JIRA service instance (singleton)"""
        if self._jira_service is None:
            self._jira_service = AtlassianJiraService()
        return self._jira_service


# Global container instance
container = Container()


# Dependency providers for FastAPI
def get_ai_service() -> IAIService:
    """FastAPI dependency for generation provider"""
    return container.ai_service()


def get_jira_service() -> IJiraService:
    """FastAPI dependency for JIRA service"""
    return container.jira_service()


def get_test_case_service(ai_service: IAIService = Depends(get_ai_service)) -> TestCaseService:
    """FastAPI dependency for test case service"""
    return TestCaseService(ai_service=ai_service)
