"""Shared pytest fixtures and configuration."""

import pytest

from hollywood_studio.core.config import Settings
from hollywood_studio.core.logging_config import get_logger
from hollywood_studio.models.schemas import NarrationAudio


@pytest.fixture
def settings(tmp_path):
    """Create test settings instance with all directories under tmp_path."""
    return Settings(
        _env_file=None,
        elevenlabs_api_key=None,
        pexels_api_key=None,
        unsplash_access_key=None,
        output_dir=str(tmp_path / "videos"),
        temp_dir=str(tmp_path / "videos" / "tmp"),
        storage_path=str(tmp_path / "storage"),
        max_parallel_downloads=2,
    )


@pytest.fixture
def logger():
    """Create test logger instance."""
    return get_logger(__name__)


@pytest.fixture
def narration(tmp_path):
    """A fake narration file (10 seconds of 'silence')."""
    path = tmp_path / "narration.mp3"
    path.write_bytes(b"ID3" + b"\x00" * 1024)
    return NarrationAudio(
        file_path=path,
        byte_length=path.stat().st_size,
        approximate_duration_seconds=10.0,
        voice_id="EXAVITQu4vr4xnSDxMaL",
        chunk_count=1,
    )
