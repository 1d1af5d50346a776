import asyncio
from typing import Optional

import google.generativeai as genai
import structlog

from storytests.config.settings import settings
from storytests.core.errors import GenerationError
from storytests.models.schemas import GenerateRequest, GenerateResponse
from storytests.repositories.interfaces.ai_service import IAIService
from storytests.services.case_parser import SYSTEM_PROMPT, build_user_prompt, parse_cases

logger = structlog.get_logger()


class GeminiService(IAIService):
    """Google Gemini implementation of the generation provider."""

    def __init__(self) -> None:
        self.model_name = settings.gemini_model
        self.model: Optional[genai.GenerativeModel] = None
        if settings.gemini_api_key:
            genai.configure(api_key=settings.gemini_api_key)
            self.model = genai.GenerativeModel(self.model_name, system_instruction=SYSTEM_PROMPT)

    @property
    def is_configured(self) -> bool:
        return self.model is not None

    async def generate_test_cases(self, request: GenerateRequest) -> GenerateResponse:
        if self.model is None:
            raise GenerationError("Gemini provider is not configured; set GEMINI_API_KEY")

        model = self.model
        prompt = build_user_prompt(request)
        logger.info("Prompt built", provider="gemini", model=self.model_name, prompt_preview=prompt[:200])

        def sync_call():
            return model.generate_content(
                prompt,
                generation_config=genai.types.GenerationConfig(
                    temperature=0.4,
                    top_p=0.9,
                    # Ask the model to return raw JSON, no prose
                    response_mime_type="application/json",
                ),
            )

        try:
            response = await asyncio.get_running_loop().run_in_executor(None, sync_call)
            text = getattr(response, "text", None) or ""
        except Exception as e:
            logger.error("Gemini generate_content failed", error=str(e))
            raise GenerationError(f"Generation provider error: {e}") from e

        cases = parse_cases(text)
        if not cases:
            raise GenerationError("Generation provider returned no test cases")

        usage = getattr(response, "usage_metadata", None)
        return GenerateResponse(
            cases=cases,
            model=self.model_name,
            prompt_tokens=getattr(usage, "prompt_token_count", 0) or 0,
            completion_tokens=getattr(usage, "candidates_token_count", 0) or 0,
        )
