import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from bountrip.config import settings

logging.basicConfig(level=settings.log_level)
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from bountrip.middleware.rate_limit import limiter
from bountrip.models.schemas import HealthResponse
from bountrip.routers import ai
from bountrip.services.llm import LLMDispatcher
from bountrip.services.model_registry import build_default_registry
from bountrip.services.token_budget import get_estimator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One HTTP client per process; closed on shutdown
    client = httpx.AsyncClient(timeout=settings.llm_timeout_seconds)
    registry = build_default_registry(settings)
    app.state.dispatcher = LLMDispatcher(
        registry=registry,
        client=client,
        estimator=get_estimator(settings.token_estimator),
    )
    logger.info("Loaded %d models, token estimator: %s", len(registry), settings.token_estimator)
    yield
    await client.aclose()


app = FastAPI(
    title="Bountrip AI",
    description="Travel assistant and LLM gateway for Bountrip",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)


app.include_router(ai.router)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(status="ok", version="0.1.0")
