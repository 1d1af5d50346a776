import structlog
from fastapi import APIRouter, Depends, status

from storytests.core.dependencies import get_test_case_service
from storytests.core.errors import ApiError, GenerationError
from storytests.models.schemas import GenerateRequest, GenerateResponse
from storytests.services.test_case_service import TestCaseService

logger = structlog.get_logger()

router = APIRouter(prefix="/generate-tests", tags=["generate"])


@router.post("", response_model=GenerateResponse)
async def generate_tests(
    request: GenerateRequest,
    service: TestCaseService = Depends(get_test_case_service),
):
    """Generate test cases for a user story"""
    logger.info("Generating test cases", story_title=request.story_title[:100])
    try:
        return await service.generate(request)
    except GenerationError as e:
        logger.error("Failed to generate test cases", error=str(e))
        raise ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e) or "Failed to generate tests")
