"""Video Compiler - assembles narration and stock media into the final video through a fallback chain."""

import shutil
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from hollywood_studio.core.config import Settings
from hollywood_studio.core.errors import CompilationFailure, CompilationFatal, GenerationError
from hollywood_studio.models.schemas import (
    CompilationStrategyName,
    CompiledVideo,
    InputSpec,
    LayoutSpec,
    MediaAssets,
    NarrationAudio,
    VisualStyle,
)
from hollywood_studio.services.media_tool import MediaTool
from hollywood_studio.utils.cancellation import CancellationToken, check_cancelled
from hollywood_studio.utils.error_handler import format_error_message, get_fallback_suggestion

# Folded into the main encode pass of the clip and slideshow layouts
COLOR_GRADES: dict[VisualStyle, str] = {
    VisualStyle.CINEMATIC: "colorbalance=rs=0.1:gs=-0.1:bs=-0.2,curves=vintage",
    VisualStyle.MODERN: "vibrance=intensity=0.3,colorbalance=rs=0.05:bs=-0.05",
    VisualStyle.CORPORATE: "colorbalance=rs=-0.05:gs=0.05,curves=increase_contrast",
    VisualStyle.MINIMALIST: "",
}

BACKGROUND_COLORS: dict[VisualStyle, str] = {
    VisualStyle.CORPORATE: "0x1e3a5f",
    VisualStyle.MODERN: "0x111827",
    VisualStyle.MINIMALIST: "0xf2f2f2",
    VisualStyle.CINEMATIC: "0x000000",
}


class CompileContext(BaseModel):
    """Inputs shared by every strategy of one compile call."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    narration: NarrationAudio
    assets: MediaAssets
    duration_seconds: float = Field(..., gt=0)
    output_path: Path
    visual_style: VisualStyle = VisualStyle.CORPORATE
    cancel_token: Optional[CancellationToken] = None


class StrategyOutcome(BaseModel):
    """Result of one strategy attempt."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    ok: bool
    video: Optional[CompiledVideo] = None
    error: Optional[GenerationError] = None


class CompilationStrategy:
    """Base class: builds a LayoutSpec and runs it through the media tool."""

    name: CompilationStrategyName
    quality: str

    def __init__(self, settings: Settings, tool: MediaTool):
        self.settings = settings
        self.tool = tool

    def is_applicable(self, assets: MediaAssets) -> bool:
        raise NotImplementedError

    def build_layout(self, context: CompileContext) -> LayoutSpec:
        raise NotImplementedError

    def reported_duration(self, context: CompileContext) -> float:
        return context.duration_seconds

    def attempt(self, context: CompileContext) -> StrategyOutcome:
        """Compile with this strategy; CompilationFailure becomes a failed outcome."""
        try:
            layout = self.build_layout(context)
            output = self.tool.compile_layout(layout, context.cancel_token)
        except CompilationFailure as e:
            Path(context.output_path).unlink(missing_ok=True)
            return StrategyOutcome(ok=False, error=e)

        video = CompiledVideo(
            file_path=output,
            size_bytes=output.stat().st_size,
            duration_seconds=round(self.reported_duration(context), 3),
            quality=self.quality,
            strategy=self.name,
        )
        return StrategyOutcome(ok=True, video=video)

    # Shared filter-graph pieces

    def _canonical_video(self) -> str:
        """Letterbox to the output frame without cropping."""
        width, height = self.settings.video_width, self.settings.video_height
        return (
            f"scale={width}:{height}:force_original_aspect_ratio=decrease,"
            f"pad={width}:{height}:(ow-iw)/2:(oh-ih)/2:color=black,"
            f"setsar=1,fps={self.settings.video_fps}"
        )

    def _output_options(self) -> list[str]:
        return [
            "-c:v",
            self.settings.video_codec,
            "-preset",
            self.settings.video_preset,
            "-crf",
            str(self.settings.video_crf),
            "-pix_fmt",
            "yuv420p",
            "-r",
            str(self.settings.video_fps),
            "-c:a",
            self.settings.audio_codec,
            "-b:a",
            self.settings.audio_bitrate,
            "-movflags",
            "+faststart",
        ]

    def _timed_audio(self, input_index: int, duration: float) -> str:
        """Narration with gain, padded with silence and cut to exactly duration."""
        return (
            f"[{input_index}:a]volume={self.settings.audio_gain},apad,"
            f"atrim=duration={duration:.3f},asetpts=PTS-STARTPTS[aout]"
        )

    @staticmethod
    def _grade(visual_style: VisualStyle) -> str:
        grade = COLOR_GRADES.get(visual_style, "")
        return f",{grade}" if grade else ""


class ClipStrategy(CompilationStrategy):
    """Stock clips looped and cut into equal segments, timed to the requested duration."""

    name = CompilationStrategyName.CLIPS
    quality = "professional"

    def is_applicable(self, assets: MediaAssets) -> bool:
        return len(assets.videos) > 0

    def segment_seconds(self, duration: float, clip_count: int) -> float:
        return max(self.settings.min_segment_seconds, duration / clip_count)

    def build_layout(self, context: CompileContext) -> LayoutSpec:
        clips = context.assets.videos
        duration = context.duration_seconds
        segment = self.segment_seconds(duration, len(clips))

        inputs = [InputSpec(source=str(clip.local_path), options=["-stream_loop", "-1"]) for clip in clips]
        inputs.append(InputSpec(source=str(context.narration.file_path)))
        audio_index = len(clips)

        chains = [
            f"[{i}:v]{self._canonical_video()},trim=duration={segment:.3f},setpts=PTS-STARTPTS[v{i}]"
            for i in range(len(clips))
        ]
        labels = "".join(f"[v{i}]" for i in range(len(clips)))
        chains.append(f"{labels}concat=n={len(clips)}:v=1:a=0[vcat]")
        chains.append(
            f"[vcat]tpad=stop_mode=clone:stop_duration={duration:.3f},"
            f"trim=duration={duration:.3f},setpts=PTS-STARTPTS{self._grade(context.visual_style)}[vout]"
        )
        chains.append(self._timed_audio(audio_index, duration))

        return LayoutSpec(
            inputs=inputs,
            filter_graph=";".join(chains),
            maps=["[vout]", "[aout]"],
            output_options=self._output_options() + ["-t", f"{duration:.3f}"],
            output_path=context.output_path,
            timeout_seconds=self.settings.compile_timeout_seconds,
        )


class SlideshowStrategy(CompilationStrategy):
    """Still images with fades, muxed against the narration until the shorter stream ends."""

    name = CompilationStrategyName.SLIDESHOW
    quality = "standard"

    def is_applicable(self, assets: MediaAssets) -> bool:
        # Chosen first only when there are no clips, but still a fallback for a failed clip layout
        return len(assets.images) > 0

    def narration_seconds(self, context: CompileContext) -> float:
        probed = self.tool.probe_duration(context.narration.file_path)
        return probed if probed else context.narration.approximate_duration_seconds

    def reported_duration(self, context: CompileContext) -> float:
        return min(context.duration_seconds, self.narration_seconds(context))

    def build_layout(self, context: CompileContext) -> LayoutSpec:
        images = context.assets.images
        per_image = context.duration_seconds / len(images)
        fade = min(self.settings.fade_seconds, per_image / 2)

        inputs = [
            InputSpec(source=str(image.local_path), options=["-loop", "1", "-t", f"{per_image:.3f}"])
            for image in images
        ]
        inputs.append(InputSpec(source=str(context.narration.file_path)))
        audio_index = len(images)

        chains = [
            f"[{i}:v]{self._canonical_video()},"
            f"fade=t=in:st=0:d={fade:.3f},fade=t=out:st={per_image - fade:.3f}:d={fade:.3f},"
            f"setpts=PTS-STARTPTS[v{i}]"
            for i in range(len(images))
        ]
        labels = "".join(f"[v{i}]" for i in range(len(images)))
        chains.append(
            f"{labels}concat=n={len(images)}:v=1:a=0{self._grade(context.visual_style)},format=yuv420p[vout]"
        )
        chains.append(f"[{audio_index}:a]volume={self.settings.audio_gain}[aout]")

        return LayoutSpec(
            inputs=inputs,
            filter_graph=";".join(chains),
            maps=["[vout]", "[aout]"],
            output_options=self._output_options() + ["-shortest"],
            output_path=context.output_path,
            timeout_seconds=self.settings.compile_timeout_seconds,
        )


class SolidBackgroundStrategy(CompilationStrategy):
    """Plain colour background for the full requested duration."""

    name = CompilationStrategyName.SOLID_BACKGROUND
    quality = "basic"

    def is_applicable(self, assets: MediaAssets) -> bool:
        return True

    def build_layout(self, context: CompileContext) -> LayoutSpec:
        duration = context.duration_seconds
        color = BACKGROUND_COLORS.get(context.visual_style, "0x000000")
        source = (
            f"color=c={color}:s={self.settings.video_width}x{self.settings.video_height}"
            f":r={self.settings.video_fps}:d={duration:.3f}"
        )
        return LayoutSpec(
            inputs=[
                InputSpec(source=source, options=["-f", "lavfi"]),
                InputSpec(source=str(context.narration.file_path)),
            ],
            filter_graph=f"[0:v]format=yuv420p[vout];{self._timed_audio(1, duration)}",
            maps=["[vout]", "[aout]"],
            output_options=self._output_options() + ["-t", f"{duration:.3f}"],
            output_path=context.output_path,
            timeout_seconds=self.settings.compile_timeout_seconds,
        )


class RawAudioPassthrough(CompilationStrategy):
    """Last resort: deliver the narration file itself."""

    name = CompilationStrategyName.RAW_AUDIO
    quality = "audio_only"

    def is_applicable(self, assets: MediaAssets) -> bool:
        return True

    def attempt(self, context: CompileContext) -> StrategyOutcome:
        source = Path(context.narration.file_path)
        destination = Path(context.output_path).with_suffix(source.suffix or ".mp3")
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, destination)
        except OSError as e:
            return StrategyOutcome(
                ok=False,
                error=CompilationFatal(
                    f"Could not copy narration to {destination}: {e}",
                    {"source": str(source), "destination": str(destination)},
                ),
            )
        video = CompiledVideo(
            file_path=destination,
            size_bytes=destination.stat().st_size,
            duration_seconds=context.narration.approximate_duration_seconds,
            quality=self.quality,
            strategy=self.name,
        )
        return StrategyOutcome(ok=True, video=video)


class VideoCompiler:
    """Runs the compilation strategies in order until one produces an output."""

    def __init__(
        self,
        settings: Settings,
        logger: Any,
        tool: Optional[MediaTool] = None,
        strategies: Optional[list[CompilationStrategy]] = None,
    ):
        """
        Initialize video compiler.

        Args:
            settings: Application settings
            logger: Logger instance
            tool: Media tool used by the strategies
            strategies: Ordered strategy chain (clips, slideshow, solid background, raw audio by default)
        """
        self.settings = settings
        self.logger = logger
        self.tool = tool or MediaTool(settings, logger)
        self.strategies = strategies or [
            ClipStrategy(settings, self.tool),
            SlideshowStrategy(settings, self.tool),
            SolidBackgroundStrategy(settings, self.tool),
            RawAudioPassthrough(settings, self.tool),
        ]

    def compile(
        self,
        narration: NarrationAudio,
        assets: MediaAssets,
        duration_seconds: float,
        output_path: Path,
        visual_style: Optional[VisualStyle] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> CompiledVideo:
        """
        Compile narration and assets into one output file.

        Starts at the first applicable strategy; any CompilationFailure moves
        on to the next applicable one.

        Args:
            narration: Synthesized narration
            assets: Downloaded stock media
            duration_seconds: Requested video length
            output_path: Destination file (.mp4)
            visual_style: Visual style for colour grade and background
            cancel_token: Optional cancellation token

        Returns:
            CompiledVideo from the first strategy that succeeded

        Raises:
            CompilationFatal: If every strategy failed, including the raw-audio passthrough
            GenerationCancelled: If cancellation is requested
        """
        context = CompileContext(
            narration=narration,
            assets=assets,
            duration_seconds=duration_seconds,
            output_path=Path(output_path),
            visual_style=VisualStyle(visual_style) if visual_style else VisualStyle.CORPORATE,
            cancel_token=cancel_token,
        )

        failures: list[str] = []
        for strategy in self.strategies:
            if not strategy.is_applicable(assets):
                continue
            check_cancelled(cancel_token, "compilation")
            self.logger.info(f"Compiling with {strategy.name.value} strategy")
            outcome = strategy.attempt(context)
            if outcome.ok and outcome.video:
                self.logger.info(
                    f"Compiled {outcome.video.file_path.name}: {outcome.video.duration_seconds:.1f}s, "
                    f"quality={outcome.video.quality}"
                )
                return outcome.video

            error = outcome.error or CompilationFailure(f"{strategy.name.value} produced no output")
            failures.append(f"{strategy.name.value}: {error}")
            if isinstance(error, CompilationFatal):
                self.logger.error(format_error_message("Raw audio passthrough", error))
                raise error
            self.logger.warning(
                format_error_message(
                    f"{strategy.name.value} compilation",
                    error,
                    context=error.details if isinstance(error, GenerationError) else None,
                    suggestion=get_fallback_suggestion("Compilation", error),
                )
            )

        raise CompilationFatal("All compilation strategies failed", {"attempts": failures})
