"""Stock media clients - Pexels video search and Unsplash image search."""

from typing import Any, Optional

import requests
from pydantic import BaseModel, Field

from hollywood_studio.core.config import Settings


class StockSearchHit(BaseModel):
    """A downloadable search result from a stock provider."""

    provider: str = Field(..., description="pexels or unsplash")
    asset_id: str = Field(..., description="Provider-side identifier")
    download_url: str = Field(..., description="Direct media URL")
    width: Optional[int] = Field(default=None)
    height: Optional[int] = Field(default=None)
    search_term: str = Field(..., description="Query that produced the hit")


def select_video_file(video_files: list[dict], min_width: int) -> Optional[dict]:
    """
    Pick the file to download from a Pexels video result.

    Prefers the first ``quality == "hd"`` file at least ``min_width`` wide,
    otherwise the widest file that has a link.

    Args:
        video_files: The ``video_files`` list of a Pexels video
        min_width: Minimum width for the preferred HD file

    Returns:
        The chosen file dict, or None if no file has a link
    """
    candidates = [f for f in video_files or [] if isinstance(f, dict) and f.get("link")]
    for video_file in candidates:
        if video_file.get("quality") == "hd" and (video_file.get("width") or 0) >= min_width:
            return video_file
    if not candidates:
        return None
    return max(candidates, key=lambda f: f.get("width") or 0)


class PexelsVideoClient:
    """Client for the Pexels video search API."""

    def __init__(self, settings: Settings, logger: Any, session: Optional[requests.Session] = None):
        self.settings = settings
        self.logger = logger
        self.session = session or requests.Session()

    def search_videos(self, query: str, api_key: str, per_page: Optional[int] = None) -> list[StockSearchHit]:
        """
        Search landscape stock videos.

        Args:
            query: Search term
            api_key: Pexels API key
            per_page: Results per page (defaults to search_page_size)

        Returns:
            Hits in provider order, one per video that has a usable file

        Raises:
            requests.exceptions.RequestException: On network or HTTP errors
        """
        response = self.session.get(
            f"{self.settings.pexels_base_url.rstrip('/')}/videos/search",
            params={
                "query": query,
                "per_page": per_page or self.settings.search_page_size,
                "orientation": "landscape",
            },
            headers={"Authorization": api_key},
            timeout=self.settings.search_timeout_seconds,
        )
        response.raise_for_status()
        payload = response.json()

        hits: list[StockSearchHit] = []
        for video in payload.get("videos") or []:
            if not isinstance(video, dict):
                continue
            chosen = select_video_file(video.get("video_files") or [], self.settings.min_clip_width)
            if not chosen:
                continue
            hits.append(
                StockSearchHit(
                    provider="pexels",
                    asset_id=str(video.get("id", chosen["link"])),
                    download_url=chosen["link"],
                    width=chosen.get("width") or video.get("width"),
                    height=chosen.get("height") or video.get("height"),
                    search_term=query,
                )
            )
        self.logger.debug(f"[Pexels] '{query}': {len(hits)} usable videos")
        return hits


class UnsplashImageClient:
    """Client for the Unsplash photo search API."""

    def __init__(self, settings: Settings, logger: Any, session: Optional[requests.Session] = None):
        self.settings = settings
        self.logger = logger
        self.session = session or requests.Session()

    def search_images(self, query: str, access_key: str, per_page: Optional[int] = None) -> list[StockSearchHit]:
        """Search landscape photos; returns hits using the ``urls.regular`` rendition."""
        response = self.session.get(
            f"{self.settings.unsplash_base_url.rstrip('/')}/search/photos",
            params={
                "query": query,
                "per_page": per_page or self.settings.search_page_size,
                "orientation": "landscape",
            },
            headers={"Authorization": f"Client-ID {access_key}"},
            timeout=self.settings.search_timeout_seconds,
        )
        response.raise_for_status()
        payload = response.json()

        hits: list[StockSearchHit] = []
        for photo in payload.get("results") or []:
            if not isinstance(photo, dict):
                continue
            url = (photo.get("urls") or {}).get("regular")
            if not isinstance(url, str) or not url.startswith("http"):
                continue
            hits.append(
                StockSearchHit(
                    provider="unsplash",
                    asset_id=str(photo.get("id", url)),
                    download_url=url,
                    width=photo.get("width"),
                    height=photo.get("height"),
                    search_term=query,
                )
            )
        self.logger.debug(f"[Unsplash] '{query}': {len(hits)} images")
        return hits
