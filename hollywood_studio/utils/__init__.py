"""Utility functions for AI Hollywood Studio."""

from hollywood_studio.utils.cancellation import CancellationToken
from hollywood_studio.utils.io_utils import ensure_directories, slugify, unique_run_name
from hollywood_studio.utils.text_utils import count_words, estimate_spoken_duration, split_into_chunks

__all__ = [
    "CancellationToken",
    "ensure_directories",
    "slugify",
    "unique_run_name",
    "count_words",
    "estimate_spoken_duration",
    "split_into_chunks",
]
