"""Tests for Video Compiler service."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from hollywood_studio.core.errors import CompilationFailure, CompilationFatal
from hollywood_studio.models.schemas import (
    AssetKind,
    CompilationStrategyName,
    MediaAsset,
    MediaAssets,
    VisualStyle,
)
from hollywood_studio.services.video_compiler import ClipStrategy, VideoCompiler


def _asset(tmp_path, kind, index):
    suffix = ".mp4" if kind == AssetKind.VIDEO else ".jpg"
    path = tmp_path / f"{kind.value}_{index}{suffix}"
    path.write_bytes(b"media")
    return MediaAsset(kind=kind, local_path=path, source_provider="test", search_term="office")


def _writing_tool(fail_strategies=()):
    """Mock media tool that writes the output file unless the layout matches a failing strategy."""
    tool = MagicMock()
    tool.probe_duration.return_value = None
    layouts = []

    def compile_layout(layout, cancel_token=None):
        layouts.append(layout)
        sources = " ".join(Path(i.source).name for i in layout.inputs)
        if ("video_" in sources and "clips" in fail_strategies) or (
            "image_" in sources and "slideshow" in fail_strategies
        ) or ("color=" in sources and "solid" in fail_strategies):
            raise CompilationFailure("ffmpeg exited with code 1", {"returncode": 1})
        Path(layout.output_path).write_bytes(b"compiled video")
        return Path(layout.output_path)

    tool.compile_layout.side_effect = compile_layout
    tool.layouts = layouts
    return tool


def test_zero_assets_uses_solid_background(settings, logger, narration, tmp_path):
    """With no assets the solid background covers the requested duration."""
    tool = _writing_tool()
    compiler = VideoCompiler(settings, logger, tool=tool)

    video = compiler.compile(narration, MediaAssets(), 120.0, tmp_path / "out.mp4", VisualStyle.CORPORATE)

    assert video.strategy == CompilationStrategyName.SOLID_BACKGROUND
    assert video.quality == "basic"
    assert abs(video.duration_seconds - 120.0) <= 1
    layout = tool.layouts[0]
    assert layout.inputs[0].options == ["-f", "lavfi"]
    assert "0x1e3a5f" in layout.inputs[0].source
    assert "atrim=duration=120.000" in layout.filter_graph
    assert layout.output_options[-2:] == ["-t", "120.000"]


def test_clip_layout(settings, logger, narration, tmp_path):
    """Clips are looped, letterboxed, trimmed to segments and graded."""
    tool = _writing_tool()
    compiler = VideoCompiler(settings, logger, tool=tool)
    assets = MediaAssets(videos=[_asset(tmp_path, AssetKind.VIDEO, i) for i in range(4)])

    video = compiler.compile(narration, assets, 60.0, tmp_path / "out.mp4", VisualStyle.CINEMATIC)

    assert video.strategy == CompilationStrategyName.CLIPS
    assert video.quality == "professional"
    assert video.duration_seconds == 60.0
    layout = tool.layouts[0]
    assert all(i.options == ["-stream_loop", "-1"] for i in layout.inputs[:4])
    assert "force_original_aspect_ratio=decrease" in layout.filter_graph
    assert "trim=duration=15.000" in layout.filter_graph
    assert "concat=n=4:v=1:a=0" in layout.filter_graph
    assert "curves=vintage" in layout.filter_graph
    assert "volume=1.0" in layout.filter_graph


def test_segment_has_minimum(settings):
    """Many clips in a short video still get the minimum segment length."""
    strategy = ClipStrategy(settings, MagicMock())

    assert strategy.segment_seconds(6.0, 5) == settings.min_segment_seconds
    assert strategy.segment_seconds(60.0, 5) == 12.0


def test_clip_failure_falls_back_to_solid(settings, logger, narration, tmp_path):
    """A failing clip compile falls through to the solid background without raising."""
    tool = _writing_tool(fail_strategies=("clips",))
    compiler = VideoCompiler(settings, logger, tool=tool)
    assets = MediaAssets(videos=[_asset(tmp_path, AssetKind.VIDEO, 1)])

    video = compiler.compile(narration, assets, 30.0, tmp_path / "out.mp4")

    assert video.strategy == CompilationStrategyName.SOLID_BACKGROUND
    assert tool.compile_layout.call_count == 2


def test_clip_failure_with_images_uses_slideshow(settings, logger, narration, tmp_path):
    """With supplementary images, a failed clip layout falls back to the slideshow."""
    tool = _writing_tool(fail_strategies=("clips",))
    compiler = VideoCompiler(settings, logger, tool=tool)
    assets = MediaAssets(
        videos=[_asset(tmp_path, AssetKind.VIDEO, 1)],
        images=[_asset(tmp_path, AssetKind.IMAGE, 1)],
    )

    video = compiler.compile(narration, assets, 30.0, tmp_path / "out.mp4")

    assert video.strategy == CompilationStrategyName.SLIDESHOW


def test_slideshow_for_images(settings, logger, narration, tmp_path):
    """Images only → slideshow with fades, duration capped by narration."""
    tool = _writing_tool()
    compiler = VideoCompiler(settings, logger, tool=tool)
    assets = MediaAssets(images=[_asset(tmp_path, AssetKind.IMAGE, i) for i in range(3)])

    video = compiler.compile(narration, assets, 30.0, tmp_path / "out.mp4", VisualStyle.MINIMALIST)

    assert video.strategy == CompilationStrategyName.SLIDESHOW
    assert video.quality == "standard"
    assert video.duration_seconds == pytest.approx(10.0)
    layout = tool.layouts[0]
    assert layout.inputs[0].options == ["-loop", "1", "-t", "10.000"]
    assert "fade=t=in:st=0:d=0.500" in layout.filter_graph
    assert "-shortest" in layout.output_options


def test_everything_fails_gives_audio_only(settings, logger, narration, tmp_path):
    """When every ffmpeg layout fails the narration is delivered as-is."""
    tool = _writing_tool(fail_strategies=("clips", "slideshow", "solid"))
    compiler = VideoCompiler(settings, logger, tool=tool)
    assets = MediaAssets(videos=[_asset(tmp_path, AssetKind.VIDEO, 1)])

    video = compiler.compile(narration, assets, 30.0, tmp_path / "out.mp4")

    assert video.strategy == CompilationStrategyName.RAW_AUDIO
    assert video.quality == "audio_only"
    assert video.file_path.suffix == ".mp3"
    assert video.file_path.read_bytes() == narration.file_path.read_bytes()


def test_passthrough_failure_is_fatal(settings, logger, narration, tmp_path):
    """If even the raw copy fails, CompilationFatal is raised."""
    tool = _writing_tool(fail_strategies=("solid",))
    compiler = VideoCompiler(settings, logger, tool=tool)
    narration.file_path.unlink()

    with pytest.raises(CompilationFatal):
        compiler.compile(narration, MediaAssets(), 30.0, tmp_path / "out.mp4")
