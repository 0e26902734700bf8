"""Tests for Media Asset Fetcher service."""

import time
from unittest.mock import MagicMock

import pytest
import requests

from hollywood_studio.models.schemas import AssetKind, VisualStyle
from hollywood_studio.services.media_fetcher import MediaAssetFetcher, search_terms_for
from hollywood_studio.services.stock_media import select_video_file

PEXELS_KEY = {"pexels": "pexels-key", "unsplash": "unsplash-key", "elevenlabs": "tts-key"}


def _json_response(payload):
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


def _download_response(body=b"media-bytes"):
    response = MagicMock()
    response.headers = {}
    response.raise_for_status.return_value = None
    response.iter_content.return_value = [body]
    return response


def _pexels_payload(term):
    slug = term.replace(" ", "-")
    return {
        "videos": [
            {
                "id": f"{slug}-1",
                "video_files": [
                    {"quality": "sd", "width": 640, "height": 360, "link": f"https://pexels.test/{slug}-sd.mp4"},
                    {"quality": "hd", "width": 1920, "height": 1080, "link": f"https://pexels.test/{slug}-hd.mp4"},
                ],
            }
        ]
    }


def _unsplash_payload(term):
    slug = term.replace(" ", "-")
    return {"results": [{"id": f"{slug}-img", "urls": {"regular": f"https://unsplash.test/{slug}.jpg"}}]}


class FakeSession:
    """Routes search requests to payload builders and downloads to a handler."""

    def __init__(self, pexels=_pexels_payload, unsplash=_unsplash_payload, download=None):
        self.pexels = pexels
        self.unsplash = unsplash
        self.download = download or (lambda url: _download_response())
        self.search_calls = []
        self.download_calls = []

    def get(self, url, params=None, headers=None, timeout=None, stream=False):
        if stream:
            self.download_calls.append(url)
            return self.download(url)
        self.search_calls.append((url, params, headers))
        if "/videos/search" in url:
            return _json_response(self.pexels(params["query"]))
        return _json_response(self.unsplash(params["query"]))


def test_search_terms_include_style_modifiers():
    """Visual-style modifiers are appended after the category terms."""
    terms = search_terms_for("cryptocurrency", VisualStyle.CINEMATIC)

    assert terms[0] == "bitcoin"
    assert terms[-3:] == ["dramatic", "high quality", "cinematic"]


def test_search_terms_default_to_business():
    """Unknown categories use the business terms."""
    assert search_terms_for("gardening")[:2] == ["office", "meeting"]


def test_select_video_file_prefers_hd():
    """The first wide-enough HD file wins, otherwise the widest file."""
    files = [
        {"quality": "sd", "width": 960, "link": "a"},
        {"quality": "hd", "width": 1280, "link": "b"},
        {"quality": "hd", "width": 1920, "link": "c"},
    ]
    assert select_video_file(files, 1280)["link"] == "b"
    assert select_video_file([{"quality": "sd", "width": 640, "link": "x"}, {"width": 960, "link": "y"}], 1280)["link"] == "y"
    assert select_video_file([{"quality": "hd", "width": 1920}], 1280) is None


def test_fetch_downloads_clips(settings, logger, tmp_path):
    """Clips are gathered one per term until the desired count is reached."""
    session = FakeSession()
    fetcher = MediaAssetFetcher(settings, logger, session=session)

    assets = fetcher.fetch("investing", 3, tmp_path / "work", credentials=PEXELS_KEY)

    assert len(assets.videos) == 3
    assert assets.images == []
    assert [a.search_term for a in assets.videos] == ["stock market", "trading", "portfolio"]
    for asset in assets.videos:
        assert asset.kind == AssetKind.VIDEO
        assert asset.local_path.exists()
        assert asset.source_url.endswith("-hd.mp4")
    url, params, headers = session.search_calls[0]
    assert params["orientation"] == "landscape"
    assert headers["Authorization"] == "pexels-key"


def test_fetch_without_keys_is_empty(settings, logger, tmp_path):
    """Unconfigured providers yield empty lists, never an error."""
    session = FakeSession()
    fetcher = MediaAssetFetcher(settings, logger, session=session)

    assets = fetcher.fetch("finance", 5, tmp_path / "work", credentials={"elevenlabs": "k"})

    assert assets.is_empty
    assert session.search_calls == []


def test_all_downloads_time_out(settings, logger, tmp_path):
    """When every download times out the result is empty and no files remain."""

    def timeout(url):
        raise requests.exceptions.Timeout("timed out")

    work_dir = tmp_path / "work"
    fetcher = MediaAssetFetcher(settings, logger, session=FakeSession(download=timeout))

    assets = fetcher.fetch("business", 5, work_dir, credentials=PEXELS_KEY)

    assert assets.videos == []
    assert assets.images == []
    assert list(work_dir.iterdir()) == []


def test_images_supplement_scarce_clips(settings, logger, tmp_path):
    """Fewer than the minimum clips triggers the Unsplash supplement."""
    session = FakeSession(pexels=lambda term: {"videos": []})
    fetcher = MediaAssetFetcher(settings, logger, session=session)

    assets = fetcher.fetch("ai", 5, tmp_path / "work", credentials=PEXELS_KEY)

    assert assets.videos == []
    assert len(assets.images) == settings.max_supplement_images
    assert all(image.source_provider == "unsplash" for image in assets.images)
    unsplash_headers = [h for url, _, h in session.search_calls if "search/photos" in url]
    assert unsplash_headers[0]["Authorization"] == "Client-ID unsplash-key"


def test_search_errors_are_skipped(settings, logger, tmp_path):
    """A failing search term is skipped and the next term is tried."""

    def flaky(term):
        if term == "office":
            raise requests.exceptions.HTTPError("500 Server Error")
        return _pexels_payload(term)

    fetcher = MediaAssetFetcher(settings, logger, session=FakeSession(pexels=flaky))

    assets = fetcher.fetch("business", 2, tmp_path / "work", credentials={"pexels": "k"})

    assert [a.search_term for a in assets.videos] == ["meeting", "professional"]


def test_oversized_download_is_dropped(settings, logger, tmp_path):
    """Downloads above the byte ceiling are discarded."""
    settings.max_download_bytes = 4
    work_dir = tmp_path / "work"
    fetcher = MediaAssetFetcher(settings, logger, session=FakeSession())

    assets = fetcher.fetch("business", 1, work_dir, credentials={"pexels": "k"})

    assert assets.videos == []
    assert list(work_dir.iterdir()) == []


def test_slow_download_is_abandoned(settings, logger, tmp_path):
    """A server trickling bytes is cut off at the download timeout and the next term is used."""
    settings.download_timeout_seconds = 0.3

    def trickle():
        while True:
            time.sleep(0.05)
            yield b"0123456789"

    def download(url):
        if "office" in url:
            response = _download_response()
            response.iter_content.return_value = trickle()
            return response
        return _download_response()

    work_dir = tmp_path / "work"
    fetcher = MediaAssetFetcher(settings, logger, session=FakeSession(download=download))

    started = time.monotonic()
    assets = fetcher.fetch("business", 1, work_dir, credentials={"pexels": "k"})

    assert time.monotonic() - started < 2.0
    assert [a.search_term for a in assets.videos] == ["meeting"]
    assert [p.name for p in work_dir.iterdir()] == [assets.videos[0].local_path.name]


def test_failed_downloads_are_replaced_from_unused_terms(settings, logger, tmp_path):
    """Failed downloads are topped up with hits from terms not yet searched."""

    def download(url):
        if any(term in url for term in ("office", "meeting", "professional")):
            raise requests.exceptions.ConnectionError("connection reset")
        return _download_response()

    session = FakeSession(download=download)
    fetcher = MediaAssetFetcher(settings, logger, session=session)

    assets = fetcher.fetch("business", 3, tmp_path / "work", credentials={"pexels": "k"})

    assert [a.search_term for a in assets.videos] == ["team", "corporate", "success"]
    assert len(session.download_calls) == 6
    assert assets.images == []
