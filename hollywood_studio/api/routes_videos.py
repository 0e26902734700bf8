"""FastAPI routes for video generation."""

import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from hollywood_studio.core.config import Settings, settings
from hollywood_studio.core.errors import MissingCredential, ProviderError
from hollywood_studio.core.logging_config import get_logger
from hollywood_studio.models.schemas import (
    GenerateVideoResponse,
    GenerationRequest,
    GenerationResult,
    GenerationStatus,
)
from hollywood_studio.pipelines.video_pipeline import VideoPipelineOrchestrator
from hollywood_studio.storage.repository import GenerationRepository
from hollywood_studio.utils.error_handler import error_kind, format_error_message, public_error_message

router = APIRouter(prefix="/videos", tags=["videos"])


def get_orchestrator(settings: Settings, logger: Any) -> VideoPipelineOrchestrator:
    """Build the pipeline orchestrator for one request."""
    return VideoPipelineOrchestrator(settings, logger)


def get_repository(settings: Settings, logger: Any) -> GenerationRepository:
    return GenerationRepository(settings, logger)


def _status_code_for(error: Exception) -> int:
    if isinstance(error, MissingCredential):
        return 503
    if isinstance(error, ProviderError):
        return 502
    return 500


@router.post("/generate", response_model=GenerateVideoResponse)
def generate_video(request: GenerationRequest) -> GenerateVideoResponse:
    """
    Generate a video essay.

    Pipeline:
    ScriptComposer → NarrationSynthesizer + MediaAssetFetcher → VideoCompiler
    """
    generation_id = f"gen_{uuid.uuid4().hex[:12]}"
    logger = get_logger(__name__, generation_id=generation_id, title=request.title)
    logger.info(f"Generation requested: '{request.title}' ({request.category}, {request.duration_minutes} min)")

    repository = get_repository(settings, logger)
    orchestrator = get_orchestrator(settings, logger)
    result = GenerationResult(generation_id=generation_id, status=GenerationStatus.COMPLETED, request=request)

    try:
        video = orchestrator.run(request, settings.provider_credentials())
    except Exception as e:
        logger.error(format_error_message("Video generation", e, context={"generation_id": generation_id}))
        result.status = GenerationStatus.FAILED
        result.error_kind = error_kind(e)
        result.error_message = public_error_message(e)
        result.completed_at = datetime.now()
        repository.save_result(result)
        raise HTTPException(status_code=_status_code_for(e), detail=result.error_message)

    result.video = video
    result.completed_at = datetime.now()
    repository.save_result(result)

    return GenerateVideoResponse(
        generation_id=generation_id,
        status=result.status,
        duration_seconds=video.duration_seconds,
        size_bytes=video.size_bytes,
        quality=video.quality,
        download_url=f"/videos/{generation_id}/download",
    )


@router.get("/{generation_id}", response_model=GenerationResult)
def get_generation(generation_id: str) -> GenerationResult:
    """Get a stored generation record."""
    logger = get_logger(__name__, generation_id=generation_id)
    result = get_repository(settings, logger).load_result(generation_id)
    if not result:
        raise HTTPException(status_code=404, detail=f"Generation {generation_id} not found")
    return result


@router.get("/{generation_id}/download")
def download_video(generation_id: str) -> FileResponse:
    """Download the compiled video (or narration audio for audio-only results)."""
    logger = get_logger(__name__, generation_id=generation_id)
    result = get_repository(settings, logger).load_result(generation_id)
    if not result or not result.video:
        raise HTTPException(status_code=404, detail=f"No output for generation {generation_id}")

    file_path = Path(result.video.file_path)
    if not file_path.exists():
        raise HTTPException(status_code=410, detail="Output file is no longer available")

    media_type = "video/mp4" if file_path.suffix.lower() == ".mp4" else "audio/mpeg"
    return FileResponse(file_path, media_type=media_type, filename=file_path.name)
