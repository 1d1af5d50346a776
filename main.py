from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware
import logging
import structlog
import time
from storytests.api.routes import api_router
from storytests.config.settings import settings
from storytests.core.errors import ApiError

STATIC_DIR = Path(__file__).resolve().parent / "storytests" / "static"

# Configure structured logging
logging.basicConfig(format="%(message)s", level=settings.log_level.upper())
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""

    app = FastAPI(
        title="Story to Tests API",
        description="Turn user stories (optionally linked from Jira) into structured test cases",
        version="1.0.0",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc"
    )

    # Request logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()

        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None
        )

        response = await call_next(request)

        process_time = time.time() - start_time

        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            process_time=process_time
        )

        return response

    # The cookie carries only the session id; credentials live in the server-side store
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie,
        max_age=settings.session_max_age,
        same_site="lax",
        https_only=settings.session_https_only,
    )

    # CORS middleware (credentials need explicit origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid request: {field} {first.get('msg', '')}".strip() if field else "Invalid request body"
        return JSONResponse(status_code=400, content={"message": message})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            method=request.method,
            path=request.url.path,
            error=str(exc),
            exc_info=True
        )

        return JSONResponse(
            status_code=500,
            content={"message": "Internal server error"}
        )

    # Include API routes
    app.include_router(api_router, prefix=settings.api_prefix)

    # Single-page UI; mounted last so API routes take precedence
    app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="ui")

    return app


# Create the application instance
app = create_app()


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info(
        "Application starting up",
        host=settings.host,
        port=settings.port,
        environment=settings.environment,
        cors_origin=settings.cors_origin,
        generation_provider=settings.generation_provider,
    )
    if settings.session_secret == "dev-secret" and settings.is_production:
        logger.warning("SESSION_SECRET is using the development default")


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Application shutting down")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
