from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from postgate import __version__
from postgate.core.config import get_settings
from postgate.core.logger import configure_logging
from postgate.api.errors import register_exception_handlers
from postgate.api.middleware.request_log import RequestLogMiddleware
from postgate.api.routers import health, posts, settings as settings_router

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings)
    if settings.auto_create_schema:
        from postgate.db.session import init_db

        init_db()
    logger.info(f"{settings.app_name} {__version__} started, API at {settings.app_url}/api/v1")
    yield


app = FastAPI(
    title=settings.app_name,
    description="Human-in-the-loop approval gateway for workflow automation",
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request logging
app.add_middleware(RequestLogMiddleware)

register_exception_handlers(app)

# Include routers
app.include_router(posts.router, prefix="/api/v1")
app.include_router(settings_router.router, prefix="/api/v1")
app.include_router(health.router)


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": __version__,
        "api": "/api/v1",
        "docs": "/docs" if settings.debug else None,
    }
