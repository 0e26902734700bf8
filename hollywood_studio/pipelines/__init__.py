"""Pipeline orchestrators for AI Hollywood Studio."""

from hollywood_studio.pipelines.video_pipeline import VideoPipelineOrchestrator, main

__all__ = ["VideoPipelineOrchestrator", "main"]
