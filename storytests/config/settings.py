from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    # API Configuration
    debug: bool = False
    environment: str = "development"
    host: str = "127.0.0.1"
    port: int = 8080
    api_prefix: str = "/api"

    # CORS: the configured origin is allowed on top of the local dev servers
    cors_origin: str = "http://localhost:5173"

    # Session cookie (holds only the session id; credentials stay server-side)
    session_secret: str = "dev-secret"
    session_cookie: str = "storytests_session"
    session_max_age: int = 86400
    session_https_only: bool = False

    # JIRA upstream
    jira_timeout_seconds: float = 30.0
    jira_max_results: int = 50

    # Generation provider: "openai" or "gemini"
    generation_provider: str = "openai"

    # OpenAI Configuration (secrets come from environment)
    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://models.github.ai/inference"
    openai_model: str = "openai/gpt-4.1"

    # Gemini Configuration (optional)
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-pro"

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    @property
    def allowed_origins(self) -> List[str]:
        origins = [self.cors_origin]
        for host in ("localhost", "127.0.0.1"):
            for port in (5173, 5174, 5175):
                origin = f"http://{host}:{port}"
                if origin not in origins:
                    origins.append(origin)
        return origins

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


# Global settings instance
settings = Settings()
