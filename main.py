"""
Main application entry point for the MedChat backend
"""
from contextlib import asynccontextmanager
from typing import Optional
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from medchat import __version__
from medchat.presentation.api.endpoints import (
    attachments,
    chat,
    health,
    prescriptions,
    profiles,
    specialties,
)
from medchat.presentation.middleware.error_handler import ErrorHandlerMiddleware
from medchat.infrastructure.config import Settings, configure_logging, get_settings
from medchat.infrastructure.di.container import initialize_container, cleanup_container

# Load environment variables from .env file
load_dotenv()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events"""
    await initialize_container(app.state.settings)
    yield
    await cleanup_container()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    settings = settings or get_settings()
    configure_logging(settings.monitoring)

    app = FastAPI(
        title=settings.app_name,
        description="Backend API for a specialty-aware medical chat assistant",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Retry-After", "X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
    )

    # Add custom middleware
    app.add_middleware(ErrorHandlerMiddleware)

    # Include routers
    app.include_router(profiles.router, prefix="/api/v1")
    app.include_router(specialties.router, prefix="/api/v1")
    app.include_router(chat.router, prefix="/api/v1")
    app.include_router(attachments.router, prefix="/api/v1")
    app.include_router(prescriptions.router, prefix="/api/v1")
    app.include_router(health.router, prefix="/api/v1")

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.monitoring.log_level.lower(),
        timeout_keep_alive=120
    )
