import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from edusearch.config import settings
from edusearch.logging_config import setup_logging
from edusearch.routers import sessions
from edusearch.services.session_service import session_registry

logger = logging.getLogger("edusearch")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level)
    logger.info("Forwarding searches to %s", settings.search_endpoint_url)
    yield
    # Shutdown: drop live sessions and the pooled HTTP client
    await session_registry.aclose()


app = FastAPI(
    title="Buscador de Contenido Educativo",
    description="Search sessions over a remote course content index",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(sessions.router, prefix=settings.api_prefix)


@app.get("/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}
