"""Application configuration using pydantic-settings."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be configured via environment variables or a .env file.
    See .env.example for a template.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================================================
    # Application Settings
    # ========================================================================
    app_name: str = Field(default="AI Hollywood Studio", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    log_file: Optional[str] = Field(default=None, description="Optional log file path (rotated, zipped)")

    # ========================================================================
    # Provider Credentials
    # ========================================================================
    elevenlabs_api_key: Optional[str] = Field(default=None, description="ElevenLabs API key (narration)")
    pexels_api_key: Optional[str] = Field(default=None, description="Pexels API key (stock video clips)")
    unsplash_access_key: Optional[str] = Field(default=None, description="Unsplash access key (stock images)")

    # ========================================================================
    # TTS (Text-to-Speech) Settings
    # ========================================================================
    elevenlabs_base_url: str = Field(default="https://api.elevenlabs.io", description="ElevenLabs API base URL")
    elevenlabs_model_id: str = Field(default="eleven_monolingual_v1", description="ElevenLabs model ID")
    voice_stability: float = Field(default=0.5, description="ElevenLabs voice stability")
    voice_similarity_boost: float = Field(default=0.5, description="ElevenLabs similarity boost")
    voice_style_exaggeration: float = Field(default=0.5, description="ElevenLabs style exaggeration")
    voice_use_speaker_boost: bool = Field(default=True, description="ElevenLabs speaker boost")
    tts_max_characters: int = Field(
        default=4500,
        description="Maximum characters per TTS request; longer scripts are split into chunks",
    )
    tts_timeout_seconds: float = Field(default=120.0, description="Timeout per TTS request in seconds")

    # ========================================================================
    # Script Settings
    # ========================================================================
    words_per_minute: int = Field(default=150, description="Narration speaking rate used for word budgets")

    # ========================================================================
    # Stock Media Settings
    # ========================================================================
    pexels_base_url: str = Field(default="https://api.pexels.com", description="Pexels API base URL")
    unsplash_base_url: str = Field(default="https://api.unsplash.com", description="Unsplash API base URL")
    desired_clip_count: int = Field(default=5, description="Number of stock video clips to gather per run")
    min_video_clips: int = Field(
        default=3,
        description="Below this many clips, still images are fetched to supplement (default: 3)",
    )
    max_supplement_images: int = Field(default=3, description="Maximum still images used as a supplement")
    min_clip_width: int = Field(default=1280, description="Minimum width for the preferred 'hd' clip variant")
    search_page_size: int = Field(default=5, description="Results requested per stock-media search")
    search_timeout_seconds: float = Field(default=15.0, description="Timeout for stock-media search requests")
    download_timeout_seconds: float = Field(default=30.0, description="Timeout for each asset download")
    max_download_bytes: int = Field(
        default=200 * 1024 * 1024,
        description="Assets larger than this are abandoned mid-download",
    )
    max_parallel_downloads: int = Field(default=4, description="Maximum concurrent asset downloads")

    # ========================================================================
    # Video Compilation Settings
    # ========================================================================
    ffmpeg_binary: str = Field(default="ffmpeg", description="FFmpeg executable")
    ffprobe_binary: str = Field(default="ffprobe", description="FFprobe executable")
    video_width: int = Field(default=1920, description="Output width in pixels")
    video_height: int = Field(default=1080, description="Output height in pixels")
    video_fps: int = Field(default=30, description="Output frame rate")
    video_codec: str = Field(default="libx264", description="Output video codec")
    audio_codec: str = Field(default="aac", description="Output audio codec")
    video_preset: str = Field(default="fast", description="Encoder preset")
    video_crf: int = Field(default=23, description="Encoder constant rate factor")
    audio_bitrate: str = Field(default="192k", description="Output audio bitrate")
    audio_gain: float = Field(default=1.0, description="Narration volume multiplier applied during mux")
    min_segment_seconds: float = Field(default=3.0, description="Minimum on-screen time per clip or image")
    fade_seconds: float = Field(default=0.5, description="Fade in/out length for slideshow images")
    compile_timeout_seconds: float = Field(default=300.0, description="Timeout for one compilation subprocess")

    # ========================================================================
    # Storage Settings
    # ========================================================================
    output_dir: str = Field(default="generated_videos", description="Directory for compiled videos")
    temp_dir: str = Field(default="generated_videos/tmp", description="Directory for per-run work files")
    storage_path: str = Field(default="storage/generations", description="Storage path for generation records")
    keep_temp_files: bool = Field(
        default=False,
        description="Keep per-run work files after a successful run (always kept on failure)",
    )

    def provider_credentials(self) -> dict[str, str]:
        """
        Build the service-name → secret mapping consumed by the pipeline.

        Returns:
            Mapping containing only the configured (non-blank) keys
        """
        candidates = {
            "elevenlabs": self.elevenlabs_api_key,
            "pexels": self.pexels_api_key,
            "unsplash": self.unsplash_access_key,
        }
        return {service: key.strip() for service, key in candidates.items() if key and key.strip()}


# Global settings instance
settings = Settings()
