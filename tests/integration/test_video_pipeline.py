"""Tests for the video pipeline orchestrator."""

import random
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from hollywood_studio.core.errors import GenerationCancelled, MissingCredential, ProviderError
from hollywood_studio.models.schemas import (
    CompilationStrategyName,
    GenerationRequest,
    NarrationAudio,
    Tone,
    VisualStyle,
)
from hollywood_studio.pipelines.video_pipeline import VideoPipelineOrchestrator, main
from hollywood_studio.services.media_fetcher import MediaAssetFetcher
from hollywood_studio.services.script_composer import ScriptComposer
from hollywood_studio.services.video_compiler import VideoCompiler
from hollywood_studio.utils.cancellation import CancellationToken

CREDENTIALS = {"elevenlabs": "tts-key"}


@pytest.fixture
def request_model():
    """Two-minute educational investing request narrated by the default voice."""
    return GenerationRequest(
        title="Index Funds 101",
        category="investing",
        duration_minutes=2,
        tone=Tone.EDUCATIONAL,
        voice_style="professional-male",
        visual_style=VisualStyle.CORPORATE,
    )


def _fake_synthesizer():
    """Synthesizer mock that writes ten seconds of 'silence'."""
    synthesizer = MagicMock()

    def synthesize(script_text, voice_style, api_key, output_path, cancel_token=None):
        Path(output_path).write_bytes(b"ID3" + b"\x00" * 2048)
        return NarrationAudio(
            file_path=output_path,
            byte_length=2051,
            approximate_duration_seconds=10.0,
            voice_id="EXAVITQu4vr4xnSDxMaL",
        )

    synthesizer.synthesize.side_effect = synthesize
    return synthesizer


def _fake_tool():
    """Media tool mock that writes whatever layout it is given."""
    tool = MagicMock()
    tool.probe_duration.return_value = None

    def compile_layout(layout, cancel_token=None):
        Path(layout.output_path).write_bytes(b"compiled video")
        return Path(layout.output_path)

    tool.compile_layout.side_effect = compile_layout
    return tool


@pytest.fixture
def orchestrator(settings, logger):
    """Orchestrator with mocked narration and media tool and no stock-media keys."""
    return VideoPipelineOrchestrator(
        settings,
        logger,
        composer=ScriptComposer(settings, logger, rng=random.Random(3)),
        synthesizer=_fake_synthesizer(),
        fetcher=MediaAssetFetcher(settings, logger, session=MagicMock()),
        compiler=VideoCompiler(settings, logger, tool=_fake_tool()),
    )


def test_end_to_end_solid_background(orchestrator, request_model, settings):
    """With zero assets the run produces a two-minute solid-background video."""
    video = orchestrator.run(request_model, CREDENTIALS)

    assert video.strategy == CompilationStrategyName.SOLID_BACKGROUND
    assert video.quality == "basic"
    assert video.duration_seconds == pytest.approx(120, abs=1)
    assert video.file_path.parent == Path(settings.output_dir)
    assert video.file_path.exists()
    assert "index-funds-101" in video.file_path.name
    # Work directory is removed on success
    assert list(Path(settings.temp_dir).iterdir()) == []


def test_script_is_sized_for_duration(orchestrator, request_model):
    """The narration receives a script of roughly 300 words."""
    orchestrator.run(request_model, CREDENTIALS)

    script_text = orchestrator.synthesizer.synthesize.call_args.args[0]
    assert abs(len(script_text.split()) - 300) <= 15


def test_missing_credential_before_any_work(orchestrator, request_model, settings):
    """No ElevenLabs key fails pre-flight and creates nothing."""
    with pytest.raises(MissingCredential):
        orchestrator.run(request_model, {"pexels": "key"})

    assert not Path(settings.output_dir).exists()
    orchestrator.synthesizer.synthesize.assert_not_called()


def test_concurrent_identical_titles(orchestrator, request_model):
    """Two simultaneous runs with the same title write distinct files."""
    with ThreadPoolExecutor(max_workers=2) as pool:
        futures = [pool.submit(orchestrator.run, request_model, CREDENTIALS) for _ in range(2)]
        videos = [f.result() for f in futures]

    assert videos[0].file_path != videos[1].file_path
    assert all(v.file_path.exists() for v in videos)


def test_narration_failure_keeps_work_dir(orchestrator, request_model, settings):
    """A provider error propagates and the work directory is retained."""
    orchestrator.synthesizer.synthesize.side_effect = ProviderError("ElevenLabs API returned status 500", 500)

    with pytest.raises(ProviderError):
        orchestrator.run(request_model, CREDENTIALS)

    assert len(list(Path(settings.temp_dir).iterdir())) == 1


def test_narration_failure_stops_asset_fetch(orchestrator, request_model):
    """A narration error surfaces at once and cancels the still-running asset fetch."""
    orchestrator.synthesizer.synthesize.side_effect = ProviderError("ElevenLabs API returned status 500", 500)
    fetch_stopped = threading.Event()

    def slow_fetch(category, desired_count, work_dir, visual_style=None, credentials=None, cancel_token=None):
        for _ in range(100):
            if cancel_token.cancelled:
                fetch_stopped.set()
                raise GenerationCancelled()
            time.sleep(0.05)

    orchestrator.fetcher = MagicMock()
    orchestrator.fetcher.fetch.side_effect = slow_fetch

    started = time.monotonic()
    with pytest.raises(ProviderError):
        orchestrator.run(request_model, CREDENTIALS)

    assert time.monotonic() - started < 1.0
    assert fetch_stopped.wait(2.0)


def test_keep_temp_files(orchestrator, request_model, settings):
    """keep_temp_files retains the work directory after success."""
    settings.keep_temp_files = True

    orchestrator.run(request_model, CREDENTIALS)

    work_dirs = list(Path(settings.temp_dir).iterdir())
    assert len(work_dirs) == 1
    assert any(p.suffix == ".mp3" for p in work_dirs[0].iterdir())


def test_asset_fetch_crash_degrades(orchestrator, request_model):
    """An unexpected fetcher exception degrades to zero assets."""
    orchestrator.fetcher = MagicMock()
    orchestrator.fetcher.fetch.side_effect = RuntimeError("boom")

    video = orchestrator.run(request_model, CREDENTIALS)

    assert video.strategy == CompilationStrategyName.SOLID_BACKGROUND


def test_cancelled_run_removes_work_dir(orchestrator, request_model, settings):
    """A cancelled run raises GenerationCancelled and cleans up."""
    token = CancellationToken()
    token.cancel("test")

    with pytest.raises(GenerationCancelled):
        orchestrator.run(request_model, CREDENTIALS, cancel_token=token)

    assert list(Path(settings.temp_dir).iterdir()) == []


@patch("hollywood_studio.pipelines.video_pipeline.VideoPipelineOrchestrator")
def test_cli_main(mock_orchestrator_class, tmp_path):
    """The CLI builds a request and returns 0 on success."""
    video = MagicMock()
    video.file_path = tmp_path / "out.mp4"
    video.duration_seconds = 120.0
    video.size_bytes = 2048
    video.quality = "basic"
    video.strategy = CompilationStrategyName.SOLID_BACKGROUND
    mock_orchestrator_class.return_value.run.return_value = video

    result = main(
        [
            "--title",
            "Index Funds 101",
            "--category",
            "investing",
            "--duration-minutes",
            "2",
            "--tone",
            "educational",
            "--output-dir",
            str(tmp_path),
            "--seed",
            "1",
        ]
    )

    assert result == 0
    request = mock_orchestrator_class.return_value.run.call_args.args[0]
    assert request.title == "Index Funds 101"
    assert request.tone == Tone.EDUCATIONAL


@patch("hollywood_studio.pipelines.video_pipeline.VideoPipelineOrchestrator")
def test_cli_failure_returns_one(mock_orchestrator_class, tmp_path):
    """Classified failures make the CLI return 1."""
    mock_orchestrator_class.return_value.run.side_effect = MissingCredential("elevenlabs")

    assert main(["--title", "Index Funds 101", "--output-dir", str(tmp_path)]) == 1
