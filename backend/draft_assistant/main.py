import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from draft_assistant.config import settings
from draft_assistant.api.v1.router import api_router
from draft_assistant.dependencies import ServiceContainer

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup - load the player snapshot once; requests only read it
    catalog = ServiceContainer.load_player_catalog()
    app.state.player_catalog = catalog
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set - draft recommendations are disabled")
    logger.info(f"{settings.app_name} started with {len(catalog)} players")

    yield

    # Shutdown - close the reasoning service HTTP client
    await ServiceContainer.close()


app = FastAPI(
    title=settings.app_name,
    description="Fantasy Football Draft Assistant with tool-calling draft recommendations",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    return {"status": "healthy", "app": settings.app_name}
