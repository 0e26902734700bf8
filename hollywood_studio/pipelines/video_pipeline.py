"""Video pipeline orchestrator - title → script → narration + stock media → compiled video."""

import argparse
import random
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from hollywood_studio.core.config import Settings, settings
from hollywood_studio.core.errors import GenerationCancelled, MissingCredential
from hollywood_studio.core.logging_config import get_logger, setup_logging
from hollywood_studio.models.schemas import CompiledVideo, GenerationRequest, MediaAssets, Tone, VisualStyle
from hollywood_studio.services.media_fetcher import MediaAssetFetcher
from hollywood_studio.services.narration_synthesizer import VOICE_MAP, NarrationSynthesizer
from hollywood_studio.services.script_composer import ScriptComposer
from hollywood_studio.services.script_templates import TemplateRegistry
from hollywood_studio.services.video_compiler import VideoCompiler
from hollywood_studio.utils.cancellation import CancellationToken, check_cancelled
from hollywood_studio.utils.error_handler import (
    error_kind,
    format_error_message,
    get_fallback_suggestion,
    log_context,
    public_error_message,
)
from hollywood_studio.utils.io_utils import ensure_directories, remove_tree, unique_run_name
from hollywood_studio.utils.parallel_executor import ParallelExecutor


class VideoPipelineOrchestrator:
    """Runs one generation request through the four pipeline stages."""

    def __init__(
        self,
        settings: Settings,
        logger: Any,
        composer: Optional[ScriptComposer] = None,
        synthesizer: Optional[NarrationSynthesizer] = None,
        fetcher: Optional[MediaAssetFetcher] = None,
        compiler: Optional[VideoCompiler] = None,
        executor: Optional[ParallelExecutor] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            settings: Application settings
            logger: Logger instance
            composer: Script composer
            synthesizer: Narration synthesizer
            fetcher: Stock media fetcher
            compiler: Video compiler
            executor: Executor running narration and asset fetching side by side
        """
        self.settings = settings
        self.logger = logger
        self.composer = composer or ScriptComposer(settings, logger)
        self.synthesizer = synthesizer or NarrationSynthesizer(settings, logger)
        self.fetcher = fetcher or MediaAssetFetcher(settings, logger)
        self.compiler = compiler or VideoCompiler(settings, logger)
        self.executor = executor or ParallelExecutor(settings, logger)

    def run(
        self,
        request: GenerationRequest,
        provider_credentials: Mapping[str, str],
        cancel_token: Optional[CancellationToken] = None,
    ) -> CompiledVideo:
        """
        Generate one video.

        Args:
            request: Validated generation request
            provider_credentials: Mapping of service name (elevenlabs, pexels, unsplash) to secret
            cancel_token: Optional cancellation token

        Returns:
            CompiledVideo descriptor of the output file

        Raises:
            MissingCredential: If no ElevenLabs key is supplied (nothing is created)
            ProviderError: If narration fails
            CompilationFatal: If no output could be written at all
            GenerationCancelled: If the run was cancelled
        """
        credentials = MappingProxyType(dict(provider_credentials))
        if not credentials.get("elevenlabs"):
            raise MissingCredential("elevenlabs")

        run_id = unique_run_name(request.title)
        log = self.logger.bind(run_id=run_id, title=request.title)
        started = time.time()

        output_dir = Path(self.settings.output_dir)
        ensure_directories(output_dir, Path(self.settings.temp_dir))
        work_dir = Path(self.settings.temp_dir) / run_id
        work_dir.mkdir(parents=True, exist_ok=True)
        log.info(f"State: directories-ready (work dir {work_dir})")

        try:
            video = self._run_stages(request, credentials, run_id, work_dir, output_dir, log, cancel_token)
        except GenerationCancelled:
            log.warning("Run cancelled; removing work directory")
            remove_tree(work_dir, log)
            raise
        except Exception as e:
            log.error(f"Run failed ({error_kind(e)}); work directory kept at {work_dir}")
            log.debug(f"Failure context: {log_context(e)}")
            raise

        if self.settings.keep_temp_files:
            log.info(f"Keeping work directory {work_dir}")
        else:
            remove_tree(work_dir, log)

        log.info(
            f"State: done in {time.time() - started:.1f}s → {video.file_path} "
            f"({video.quality}, {video.duration_seconds:.1f}s)"
        )
        return video

    def _run_stages(
        self,
        request: GenerationRequest,
        credentials: Mapping[str, str],
        run_id: str,
        work_dir: Path,
        output_dir: Path,
        log: Any,
        cancel_token: Optional[CancellationToken],
    ) -> CompiledVideo:
        script = self.composer.compose(request.title, request.category, request.duration_minutes, request.tone)
        log.info(f"State: script-composed ({script.word_count} words, {len(script.sections)} sections)")
        check_cancelled(cancel_token, "script")

        narration_path = work_dir / f"{run_id}_narration.mp3"
        # Stops the asset fetch alone when narration fails; follows the run's token otherwise.
        fetch_token = CancellationToken(parent=cancel_token)
        narration_future, fetch_future = self.executor.submit_api_calls(
            [
                lambda: self.synthesizer.synthesize(
                    script.full_text,
                    request.voice_style,
                    credentials.get("elevenlabs"),
                    narration_path,
                    cancel_token=cancel_token,
                ),
                lambda: self.fetcher.fetch(
                    request.category,
                    self.settings.desired_clip_count,
                    work_dir,
                    visual_style=request.visual_style,
                    credentials=credentials,
                    cancel_token=fetch_token,
                ),
            ],
            task_names=["narration", "asset_fetch"],
            run_id=run_id,
            max_workers=2,
        )

        narration, narration_error = narration_future.result()
        if narration_error is not None:
            fetch_token.cancel("narration failed")
            if isinstance(narration_error, GenerationCancelled) or (cancel_token is not None and cancel_token.cancelled):
                # The work directory is removed on cancellation; let the fetch stop writing first
                fetch_future.result()
                check_cancelled(cancel_token, "narration")
            raise narration_error
        log.info(f"State: narration-synthesized ({narration.byte_length} bytes, {narration.chunk_count} chunk(s))")

        assets, assets_error = fetch_future.result()
        if isinstance(assets_error, GenerationCancelled):
            raise assets_error
        if assets_error is not None:
            log.warning(
                format_error_message(
                    "Asset fetching",
                    assets_error,
                    suggestion=get_fallback_suggestion("Stock Media", assets_error),
                )
            )
            assets = MediaAssets()
        log.info(f"State: assets-gathered ({len(assets.videos)} clips, {len(assets.images)} images)")
        check_cancelled(cancel_token, "assets")

        video = self.compiler.compile(
            narration,
            assets,
            request.duration_seconds,
            output_dir / f"{run_id}.mp4",
            visual_style=request.visual_style,
            cancel_token=cancel_token,
        )
        log.info(f"State: video-compiled ({video.strategy.value})")
        return video


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entrypoint: generate one video from command-line arguments."""
    parser = argparse.ArgumentParser(
        description="AI Hollywood Studio - Video Essay Pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--title", type=str, required=True, help="Video title")
    parser.add_argument(
        "--category",
        type=str,
        default="business",
        help=f"Content category: {', '.join(TemplateRegistry().categories)} (default: business)",
    )
    parser.add_argument(
        "--duration-minutes",
        type=float,
        default=5.0,
        help="Target video length in minutes (default: 5)",
    )
    parser.add_argument(
        "--tone",
        type=str,
        default=Tone.PROFESSIONAL.value,
        choices=[tone.value for tone in Tone],
        help="Narration tone (default: professional)",
    )
    parser.add_argument(
        "--voice-style",
        type=str,
        default="professional-male",
        choices=sorted(VOICE_MAP),
        help="Narration voice (default: professional-male)",
    )
    parser.add_argument(
        "--visual-style",
        type=str,
        default=VisualStyle.CORPORATE.value,
        choices=[style.value for style in VisualStyle],
        help="Visual style (default: corporate)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help=f"Output directory for videos (default: {settings.output_dir})",
    )
    parser.add_argument(
        "--keep-temp",
        action="store_true",
        help="Keep the per-run work directory after a successful run",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible scripts",
    )

    args = parser.parse_args(argv)

    try:
        request = GenerationRequest(
            title=args.title,
            category=args.category,
            duration_minutes=args.duration_minutes,
            tone=args.tone,
            voice_style=args.voice_style,
            visual_style=args.visual_style,
        )
    except ValidationError as e:
        parser.error(f"Invalid request: {e.errors()[0]['msg']}")

    overrides: dict[str, Any] = {}
    if args.output_dir:
        overrides["output_dir"] = args.output_dir
    if args.keep_temp:
        overrides["keep_temp_files"] = True
    run_settings = settings.model_copy(update=overrides) if overrides else settings

    setup_logging(log_level=run_settings.log_level, log_file=run_settings.log_file)
    logger = get_logger(__name__, title=request.title)

    logger.info("=" * 60)
    logger.info("AI Hollywood Studio - Video Essay Pipeline")
    logger.info(f"Title: {request.title}")
    logger.info(f"Category: {request.category} | Tone: {request.tone.value} | Voice: {request.voice_style}")
    logger.info(f"Duration: {request.duration_minutes} min | Visual style: {request.visual_style.value}")
    logger.info("=" * 60)

    rng = random.Random(args.seed) if args.seed is not None else None
    orchestrator = VideoPipelineOrchestrator(
        run_settings,
        logger,
        composer=ScriptComposer(run_settings, logger, rng=rng),
    )
    cancel_token = CancellationToken()

    with ThreadPoolExecutor(max_workers=1) as pool:
        future = pool.submit(orchestrator.run, request, run_settings.provider_credentials(), cancel_token)
        try:
            while not future.done():
                time.sleep(0.2)
            video = future.result()
        except KeyboardInterrupt:
            logger.warning("Interrupted; cancelling run...")
            cancel_token.cancel("keyboard interrupt")
            try:
                future.result()
            except GenerationCancelled:
                logger.info("Run cancelled")
            except Exception as e:
                logger.error(format_error_message("Video generation", e))
            return 1
        except Exception as e:
            logger.error(format_error_message("Video generation", e))
            print(public_error_message(e), file=sys.stderr)
            return 1

    logger.info("=" * 60)
    logger.info("✅ Video generated")
    logger.info(f"File: {video.file_path}")
    logger.info(f"Quality: {video.quality} ({video.strategy.value})")
    logger.info(f"Duration: {video.duration_seconds:.1f}s | Size: {video.size_bytes / 1_000_000:.1f} MB")
    logger.info("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
