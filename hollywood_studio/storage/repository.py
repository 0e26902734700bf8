"""Storage repository for generation records."""

import json
from pathlib import Path
from typing import Any, Optional

from hollywood_studio.core.config import Settings
from hollywood_studio.models.schemas import GenerationResult


class GenerationRepository:
    """Repository for storing and loading generation results."""

    def __init__(self, settings: Settings, logger: Any):
        """
        Initialize the repository.

        Args:
            settings: Application settings
            logger: Logger instance
        """
        self.settings = settings
        self.logger = logger
        self.storage_path = Path(settings.storage_path)
        self.storage_path.mkdir(parents=True, exist_ok=True)

    def _path_for(self, generation_id: str) -> Path:
        # Ids are generated server-side, but never let one escape the storage directory
        safe_id = Path(generation_id).name
        return self.storage_path / f"{safe_id}.json"

    def save_result(self, result: GenerationResult) -> Path:
        """
        Save a generation result to storage.

        Args:
            result: Generation result to save

        Returns:
            Path of the written record
        """
        file_path = self._path_for(result.generation_id)
        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(result.model_dump(mode="json"), f, indent=2, ensure_ascii=False)
        self.logger.info(f"Generation saved to: {file_path}")
        return file_path

    def load_result(self, generation_id: str) -> Optional[GenerationResult]:
        """
        Load a generation result from storage.

        Args:
            generation_id: Generation identifier

        Returns:
            Generation result if found, None otherwise
        """
        file_path = self._path_for(generation_id)
        if not file_path.exists():
            self.logger.warning(f"Generation not found: {generation_id}")
            return None

        with open(file_path, "r", encoding="utf-8") as f:
            return GenerationResult.model_validate(json.load(f))

    def list_results(self) -> list[str]:
        """List stored generation IDs, newest first."""
        files = sorted(self.storage_path.glob("*.json"), key=lambda p: p.stat().st_mtime, reverse=True)
        return [f.stem for f in files]
