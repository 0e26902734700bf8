"""
FastAPI entrypoint for the AI Hollywood Studio API.

The CLI (run_pipeline.py) and this API drive the same
VideoPipelineOrchestrator; the API also keeps one record per generation
and serves the compiled file.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hollywood_studio.api.routes_videos import router as videos_router
from hollywood_studio.core.config import Settings, settings
from hollywood_studio.core.logging_config import get_logger, setup_logging


def create_app(app_settings: Settings) -> FastAPI:
    """Build the FastAPI application for the given settings."""
    setup_logging(log_level=app_settings.log_level, log_file=app_settings.log_file)
    logger = get_logger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configured = sorted(app_settings.provider_credentials())
        logger.info(f"{app_settings.app_name} v{app_settings.app_version} starting (debug={app_settings.debug})")
        logger.info(f"Configured providers: {', '.join(configured) or 'none'}")
        if "elevenlabs" not in configured:
            logger.warning("ELEVENLABS_API_KEY is not set; every generation will fail pre-flight")
        yield
        logger.info("Shutting down application")

    application = FastAPI(
        title=app_settings.app_name,
        version=app_settings.app_version,
        description="Generates narrated video essays from a title, category and target length",
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.include_router(videos_router)

    @application.get("/")
    async def root():
        """Service summary."""
        return {
            "name": app_settings.app_name,
            "version": app_settings.app_version,
            "status": "running",
            "endpoints": {
                "generate_video": "/videos/generate",
                "get_generation": "/videos/{generation_id}",
                "download_video": "/videos/{generation_id}/download",
                "docs": "/docs",
            },
        }

    @application.get("/health")
    async def health():
        return {"status": "healthy"}

    return application


app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "hollywood_studio.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
