from fastapi import APIRouter
from storytests.api.routes import generate, health, jira

api_router = APIRouter()

# Include all route modules
api_router.include_router(health.router)
api_router.include_router(jira.router)
api_router.include_router(generate.router)
