"""Pydantic models and schemas for the video generation pipeline."""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# Enums
# ============================================================================


class Tone(str, Enum):
    """Narration tone used to flavour the script."""

    PROFESSIONAL = "professional"
    EDUCATIONAL = "educational"
    CONVERSATIONAL = "conversational"
    AUTHORITATIVE = "authoritative"
    MOTIVATIONAL = "motivational"


class VisualStyle(str, Enum):
    """Visual style for search modifiers, background colour and colour grade."""

    CORPORATE = "corporate"
    MODERN = "modern"
    MINIMALIST = "minimalist"
    CINEMATIC = "cinematic"


class SectionKind(str, Enum):
    """Role of a script section."""

    INTRO = "intro"
    CONTENT = "content"
    CONCLUSION = "conclusion"


class AssetKind(str, Enum):
    """Kind of stock media asset."""

    VIDEO = "video"
    IMAGE = "image"


class CompilationStrategyName(str, Enum):
    """Visual assembly strategies, in fallback order."""

    CLIPS = "clips"
    SLIDESHOW = "slideshow"
    SOLID_BACKGROUND = "solid_background"
    RAW_AUDIO = "raw_audio"


class GenerationStatus(str, Enum):
    """Status of a stored generation record."""

    COMPLETED = "completed"
    FAILED = "failed"


# ============================================================================
# Request Models
# ============================================================================


class GenerationRequest(BaseModel):
    """A single video generation request. Immutable once accepted."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1, description="Video title")
    category: str = Field(default="business", description="Content category (unknown values use the default template)")
    duration_minutes: float = Field(..., gt=0, le=180, description="Target video length in minutes")
    tone: Tone = Field(default=Tone.PROFESSIONAL, description="Narration tone")
    voice_style: str = Field(default="professional-male", description="Narration voice style")
    visual_style: VisualStyle = Field(default=VisualStyle.CORPORATE, description="Visual style")

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be blank")
        return value.strip()

    @property
    def duration_seconds(self) -> float:
        return self.duration_minutes * 60.0


# ============================================================================
# Script Models
# ============================================================================


class ScriptSection(BaseModel):
    """One ordered part of the narration script."""

    kind: SectionKind = Field(..., description="Section role")
    heading: str = Field(..., description="Section heading")
    body: str = Field(..., description="Section narration text")
    word_count: int = Field(..., ge=0, description="Words in body")
    approximate_duration_seconds: float = Field(..., ge=0, description="Estimated spoken duration")


class Script(BaseModel):
    """Narration script built for one run."""

    title: str = Field(..., description="Video title")
    category: str = Field(..., description="Resolved template category")
    tone: Tone = Field(..., description="Tone used for filler selection")
    sections: list[ScriptSection] = Field(default_factory=list, description="Ordered sections")
    full_text: str = Field(..., description="Section bodies joined for narration")
    word_count: int = Field(..., ge=0, description="Words in full_text")
    target_word_count: int = Field(..., ge=0, description="Word budget derived from duration and speaking rate")


# ============================================================================
# Narration / Media Models
# ============================================================================


class NarrationAudio(BaseModel):
    """Handle to a synthesized narration file."""

    file_path: Path = Field(..., description="Audio file on disk")
    byte_length: int = Field(..., ge=0, description="File size in bytes")
    approximate_duration_seconds: float = Field(..., ge=0, description="Estimated narration length")
    voice_id: Optional[str] = Field(default=None, description="Provider voice identifier")
    chunk_count: int = Field(default=1, ge=1, description="Number of provider requests used")


class MediaAsset(BaseModel):
    """A downloaded stock clip or image."""

    kind: AssetKind = Field(..., description="video or image")
    local_path: Path = Field(..., description="Downloaded file")
    source_provider: str = Field(..., description="Provider name (pexels, unsplash)")
    search_term: str = Field(..., description="Search term that produced the asset")
    source_url: Optional[str] = Field(default=None, description="Download URL")
    width: Optional[int] = Field(default=None, description="Pixel width when known")
    height: Optional[int] = Field(default=None, description="Pixel height when known")


class MediaAssets(BaseModel):
    """Assets gathered for one run, in presentation order."""

    videos: list[MediaAsset] = Field(default_factory=list)
    images: list[MediaAsset] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.videos and not self.images


class CompiledVideo(BaseModel):
    """Terminal artifact handed to the caller."""

    file_path: Path = Field(..., description="Output file")
    size_bytes: int = Field(..., ge=0, description="Output size in bytes")
    duration_seconds: float = Field(..., ge=0, description="Output duration")
    quality: str = Field(..., description="professional, standard, basic or audio_only")
    strategy: CompilationStrategyName = Field(..., description="Strategy that produced the output")


# ============================================================================
# Media Tool Contract
# ============================================================================


class InputSpec(BaseModel):
    """One input of a compilation layout."""

    source: str = Field(..., description="File path or lavfi source description")
    options: list[str] = Field(default_factory=list, description="Options placed before -i")


class LayoutSpec(BaseModel):
    """Declarative description of one compilation pass."""

    inputs: list[InputSpec] = Field(..., min_length=1)
    filter_graph: str = Field(..., description="Filter graph joining inputs into labelled outputs")
    maps: list[str] = Field(default_factory=list, description="Stream labels to map into the output")
    output_options: list[str] = Field(default_factory=list, description="Codec and duration options")
    output_path: Path = Field(..., description="Output file")
    timeout_seconds: float = Field(default=300.0, gt=0)


# ============================================================================
# API / Storage Models
# ============================================================================


class GenerationResult(BaseModel):
    """Stored outcome of one generation request."""

    generation_id: str = Field(..., description="Unique identifier")
    status: GenerationStatus = Field(..., description="completed or failed")
    request: GenerationRequest = Field(..., description="Original request")
    video: Optional[CompiledVideo] = Field(default=None, description="Compiled output when completed")
    error_kind: Optional[str] = Field(default=None, description="Classified error kind when failed")
    error_message: Optional[str] = Field(default=None, description="Caller-safe failure message")
    created_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = Field(default=None)


class GenerateVideoResponse(BaseModel):
    """Response body of the generate endpoint."""

    generation_id: str
    status: GenerationStatus
    duration_seconds: Optional[float] = None
    size_bytes: Optional[int] = None
    quality: Optional[str] = None
    download_url: Optional[str] = None
