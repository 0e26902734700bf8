"""Media Asset Fetcher - finds and downloads category-relevant stock clips and images."""

import time
import uuid
from pathlib import Path
from typing import Any, Callable, Iterator, Mapping, Optional

import requests

from hollywood_studio.core.config import Settings
from hollywood_studio.models.schemas import AssetKind, MediaAsset, MediaAssets, VisualStyle
from hollywood_studio.services.stock_media import PexelsVideoClient, StockSearchHit, UnsplashImageClient
from hollywood_studio.utils.cancellation import CancellationToken, check_cancelled
from hollywood_studio.utils.error_handler import format_error_message, get_fallback_suggestion
from hollywood_studio.utils.parallel_executor import ParallelExecutor

CATEGORY_SEARCH_TERMS: dict[str, list[str]] = {
    "finance": ["money", "calculator", "budget", "savings", "financial planning", "investment", "banking"],
    "investing": ["stock market", "trading", "portfolio", "charts", "financial growth", "business", "success"],
    "crypto": ["bitcoin", "blockchain", "digital currency", "technology", "computer", "finance"],
    "ai": ["artificial intelligence", "computer", "technology", "data", "innovation", "future", "robotics"],
    "startups": ["business", "entrepreneur", "office", "team", "innovation", "growth", "success"],
    "business": ["office", "meeting", "professional", "team", "corporate", "success", "growth"],
}

CATEGORY_ALIASES: dict[str, str] = {
    "personal-finance": "finance",
    "cryptocurrency": "crypto",
    "ai-technology": "ai",
    "startup": "startups",
}

STYLE_MODIFIERS: dict[VisualStyle, list[str]] = {
    VisualStyle.CORPORATE: ["professional", "clean", "office"],
    VisualStyle.MODERN: ["sleek", "contemporary", "digital"],
    VisualStyle.MINIMALIST: ["simple", "clean", "minimal"],
    VisualStyle.CINEMATIC: ["dramatic", "high quality", "cinematic"],
}

DOWNLOAD_CHUNK_BYTES = 64 * 1024


class DownloadError(Exception):
    """A single asset download failed; the asset is skipped."""


def search_terms_for(category: str, visual_style: Optional[VisualStyle] = None) -> list[str]:
    """
    Ordered search terms for a category, followed by the visual-style modifiers.

    Args:
        category: Content category (aliases accepted, unknown → business)
        visual_style: Optional visual style

    Returns:
        List of search terms
    """
    key = "-".join((category or "").strip().lower().split())
    key = CATEGORY_ALIASES.get(key, key)
    terms = list(CATEGORY_SEARCH_TERMS.get(key, CATEGORY_SEARCH_TERMS["business"]))
    if visual_style is not None:
        terms.extend(STYLE_MODIFIERS.get(VisualStyle(visual_style), []))
    return terms


class MediaAssetFetcher:
    """Queries Pexels (clips) and Unsplash (stills) and downloads results to a work directory."""

    def __init__(
        self,
        settings: Settings,
        logger: Any,
        session: Optional[requests.Session] = None,
        executor: Optional[ParallelExecutor] = None,
    ):
        """
        Initialize media asset fetcher.

        Args:
            settings: Application settings
            logger: Logger instance
            session: HTTP session shared by search and download requests
            executor: Parallel executor for downloads
        """
        self.settings = settings
        self.logger = logger
        self.session = session or requests.Session()
        self.executor = executor or ParallelExecutor(settings, logger)
        self.pexels = PexelsVideoClient(settings, logger, self.session)
        self.unsplash = UnsplashImageClient(settings, logger, self.session)

    def fetch(
        self,
        category: str,
        desired_count: int,
        work_dir: Path,
        visual_style: Optional[VisualStyle] = None,
        credentials: Optional[Mapping[str, str]] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> MediaAssets:
        """
        Gather up to desired_count clips, supplementing with still images when clips are scarce.

        Never raises for provider problems: unconfigured providers, empty
        searches and failed downloads all just shrink the result.

        Args:
            category: Content category
            desired_count: Number of clips wanted
            work_dir: Directory downloads are written to
            visual_style: Optional visual style (adds modifier search terms)
            credentials: Provider keys (defaults to the settings' keys)
            cancel_token: Optional cancellation token

        Returns:
            MediaAssets with videos and images in presentation order

        Raises:
            GenerationCancelled: If cancellation is requested
        """
        credentials = credentials if credentials is not None else self.settings.provider_credentials()
        work_dir = Path(work_dir)
        work_dir.mkdir(parents=True, exist_ok=True)
        terms = search_terms_for(category, visual_style)

        videos: list[MediaAsset] = []
        pexels_key = credentials.get("pexels")
        if pexels_key and desired_count > 0:
            videos = self._gather(
                lambda term: self.pexels.search_videos(term, pexels_key),
                terms,
                desired_count,
                AssetKind.VIDEO,
                "Pexels",
                work_dir,
                cancel_token,
            )
        else:
            self.logger.info("Pexels not configured; skipping stock clips")

        images: list[MediaAsset] = []
        unsplash_key = credentials.get("unsplash")
        if len(videos) < self.settings.min_video_clips:
            if unsplash_key:
                self.logger.info(
                    f"Only {len(videos)} clip(s) gathered; supplementing with up to "
                    f"{self.settings.max_supplement_images} image(s)"
                )
                images = self._gather(
                    lambda term: self.unsplash.search_images(term, unsplash_key),
                    terms,
                    self.settings.max_supplement_images,
                    AssetKind.IMAGE,
                    "Unsplash",
                    work_dir,
                    cancel_token,
                )
            else:
                self.logger.info("Unsplash not configured; no image supplement")

        assets = MediaAssets(videos=videos, images=images)
        if len(videos) < desired_count:
            self.logger.warning(
                f"Partial asset fetch: {len(videos)}/{desired_count} clips, {len(images)} image(s)"
            )
        else:
            self.logger.info(f"Fetched {len(videos)} clips and {len(images)} image(s)")
        return assets

    def _gather(
        self,
        search: Callable[[str], list[StockSearchHit]],
        terms: list[str],
        wanted: int,
        kind: AssetKind,
        provider_label: str,
        work_dir: Path,
        cancel_token: Optional[CancellationToken],
    ) -> list[MediaAsset]:
        """
        Search and download until wanted assets are on disk or the terms run out.

        Failed downloads are replaced by hits from terms not yet searched.
        """
        remaining_terms = iter(terms)
        used: set[str] = set()
        assets: list[MediaAsset] = []
        while len(assets) < wanted:
            hits = self._collect_hits(
                search, remaining_terms, wanted - len(assets), used, provider_label, cancel_token
            )
            if not hits:
                break
            downloaded = self._download_all(hits, kind, work_dir, cancel_token, first_index=len(assets) + 1)
            if len(downloaded) < len(hits):
                self.logger.info(
                    f"{len(hits) - len(downloaded)} {provider_label} download(s) failed; trying further terms"
                )
            assets.extend(downloaded)
        return assets

    def _collect_hits(
        self,
        search: Callable[[str], list[StockSearchHit]],
        terms: Iterator[str],
        wanted: int,
        used: set[str],
        provider_label: str,
        cancel_token: Optional[CancellationToken],
    ) -> list[StockSearchHit]:
        """Take the first not-yet-used hit per term until wanted hits are gathered."""
        hits: list[StockSearchHit] = []
        if wanted <= 0:
            return hits
        for term in terms:
            check_cancelled(cancel_token, "asset_search")
            try:
                results = search(term)
            except (requests.exceptions.RequestException, ValueError) as e:
                self.logger.warning(
                    format_error_message(
                        f"{provider_label} search",
                        e,
                        context={"term": term},
                        suggestion=get_fallback_suggestion("Stock Media", e),
                    )
                )
                continue
            for hit in results:
                if hit.download_url not in used:
                    used.add(hit.download_url)
                    hits.append(hit)
                    break
            if len(hits) >= wanted:
                break
        return hits

    def _download_all(
        self,
        hits: list[StockSearchHit],
        kind: AssetKind,
        work_dir: Path,
        cancel_token: Optional[CancellationToken],
        first_index: int = 1,
    ) -> list[MediaAsset]:
        """Download hits in parallel; failed downloads are logged and dropped, order is kept."""
        if not hits:
            return []
        extension = ".mp4" if kind == AssetKind.VIDEO else ".jpg"
        destinations = [
            work_dir / f"{kind.value}_{index:02d}_{hit.provider}_{uuid.uuid4().hex[:8]}{extension}"
            for index, hit in enumerate(hits, start=first_index)
        ]
        tasks = [
            (lambda hit=hit, dest=dest: self._download(hit, dest, cancel_token))
            for hit, dest in zip(hits, destinations)
        ]
        names = [f"{hit.provider}:{hit.search_term}" for hit in hits]
        results = self.executor.execute_api_calls(tasks, task_names=names)

        check_cancelled(cancel_token, "asset_download")

        assets: list[MediaAsset] = []
        for hit, (path, error) in zip(hits, results):
            if error is not None:
                self.logger.warning(
                    format_error_message(
                        "Asset download",
                        error,
                        context={"provider": hit.provider, "term": hit.search_term},
                        suggestion=get_fallback_suggestion("Stock Media", error),
                    )
                )
                continue
            assets.append(
                MediaAsset(
                    kind=kind,
                    local_path=path,
                    source_provider=hit.provider,
                    search_term=hit.search_term,
                    source_url=hit.download_url,
                    width=hit.width,
                    height=hit.height,
                )
            )
        return assets

    def _download(
        self,
        hit: StockSearchHit,
        destination: Path,
        cancel_token: Optional[CancellationToken],
    ) -> Path:
        """
        Stream one asset to disk with a timeout and byte ceiling; partial files are removed.

        The requests timeout only bounds each socket read, so the whole
        transfer is also held to download_timeout_seconds of wall-clock time.
        """
        max_bytes = self.settings.max_download_bytes
        time_limit = self.settings.download_timeout_seconds
        written = 0
        started = time.monotonic()
        try:
            response = self.session.get(
                hit.download_url,
                stream=True,
                timeout=time_limit,
            )
            try:
                response.raise_for_status()
                declared = response.headers.get("Content-Length")
                if isinstance(declared, str) and declared.isdigit() and int(declared) > max_bytes:
                    raise DownloadError(f"Asset too large: {declared} bytes > {max_bytes}")
                with open(destination, "wb") as handle:
                    for block in response.iter_content(chunk_size=DOWNLOAD_CHUNK_BYTES):
                        check_cancelled(cancel_token, "asset_download")
                        if time.monotonic() - started > time_limit:
                            raise DownloadError(f"Download exceeded {time_limit:g}s")
                        if not block:
                            continue
                        written += len(block)
                        if written > max_bytes:
                            raise DownloadError(f"Asset exceeded {max_bytes} bytes")
                        handle.write(block)
            finally:
                response.close()
        except Exception:
            destination.unlink(missing_ok=True)
            raise

        if written == 0:
            destination.unlink(missing_ok=True)
            raise DownloadError(f"Empty download from {hit.provider}")
        return destination
