import asyncio
from typing import Optional

from openai import OpenAI
import structlog

from storytests.config.settings import settings
from storytests.core.errors import GenerationError
from storytests.models.schemas import GenerateRequest, GenerateResponse
from storytests.repositories.interfaces.ai_service import IAIService
from storytests.services.case_parser import SYSTEM_PROMPT, build_user_prompt, parse_cases

logger = structlog.get_logger()


class OpenAIService(IAIService):
    """OpenAI-compatible chat completions implementation (GitHub Models by default)"""

    def __init__(self, client: Optional[OpenAI] = None):
        self.model = settings.openai_model
        self.client = client
        if self.client is None and settings.openai_api_key:
            self.client = OpenAI(
                base_url=settings.openai_base_url,
                api_key=settings.openai_api_key,
            )

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    async def generate_test_cases(self, request: GenerateRequest) -> GenerateResponse:
        """Generate test cases using chat completions (async wrapper)"""
        if self.client is None:
            raise GenerationError("OpenAI provider is not configured; set OPENAI_API_KEY")

        client = self.client
        prompt = build_user_prompt(request)
        logger.info("Prompt built", provider="openai", model=self.model, prompt_preview=prompt[:200])

        def sync_call():
            return client.chat.completions.create(
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.4,
                top_p=0.9,
                model=self.model,
            )

        try:
            response = await asyncio.get_running_loop().run_in_executor(None, sync_call)
        except Exception as e:
            logger.error("OpenAI completion failed", error=str(e))
            raise GenerationError(f"Generation provider error: {e}") from e

        content = ""
        if getattr(response, "choices", None):
            content = response.choices[0].message.content or ""

        cases = parse_cases(content)
        if not cases:
            raise GenerationError("Generation provider returned no test cases")

        usage = getattr(response, "usage", None)
        return GenerateResponse(
            cases=cases,
            model=getattr(response, "model", None) or self.model,
            prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
        )
