"""Narration Synthesizer - turns script text into an MP3 narration via ElevenLabs."""

from pathlib import Path
from typing import Any, Optional

import requests

from hollywood_studio.core.config import Settings
from hollywood_studio.core.errors import CharacterLimitExceeded, MissingCredential, ProviderError
from hollywood_studio.models.schemas import NarrationAudio
from hollywood_studio.utils.cancellation import CancellationToken, check_cancelled
from hollywood_studio.utils.error_handler import format_error_message, get_fallback_suggestion
from hollywood_studio.utils.text_utils import estimate_spoken_duration, split_into_chunks

DEFAULT_VOICE_STYLE = "professional-male"

# ElevenLabs premade voices
VOICE_MAP: dict[str, str] = {
    "professional-male": "EXAVITQu4vr4xnSDxMaL",
    "professional-female": "21m00Tcm4TlvDq8ikWAM",
    "authoritative-male": "VR6AewLTigWG4xSOukaG",
    "friendly-female": "jsCqWAovK2LkecY7zXl4",
    "energetic-male": "pFZP5JQG7iQjIQuC4Bku",
}

CHARACTER_LIMIT_STATUSES = {"character_limit_exceeded", "text_too_long", "max_character_limit_exceeded"}
STREAM_CHUNK_BYTES = 8192


class NarrationSynthesizer:
    """ElevenLabs text-to-speech client producing one narration file per run."""

    def __init__(self, settings: Settings, logger: Any, session: Optional[requests.Session] = None):
        """
        Initialize narration synthesizer.

        Args:
            settings: Application settings
            logger: Logger instance
            session: HTTP session (a new requests.Session when omitted)
        """
        self.settings = settings
        self.logger = logger
        self.session = session or requests.Session()

    @staticmethod
    def resolve_voice(voice_style: Optional[str]) -> str:
        """Map a voice style name to a voice id (professional-male when unknown)."""
        key = (voice_style or "").strip().lower()
        return VOICE_MAP.get(key, VOICE_MAP[DEFAULT_VOICE_STYLE])

    def synthesize(
        self,
        script_text: str,
        voice_style: str,
        api_key: Optional[str],
        output_path: Path,
        cancel_token: Optional[CancellationToken] = None,
    ) -> NarrationAudio:
        """
        Synthesize narration for a script.

        Text longer than ``tts_max_characters`` is split at sentence
        boundaries and sent as several requests; the MP3 bodies are appended
        in order into ``output_path``.

        Args:
            script_text: Full narration text
            voice_style: Voice style name (see VOICE_MAP)
            api_key: ElevenLabs API key
            output_path: Destination MP3 file
            cancel_token: Optional cancellation token

        Returns:
            NarrationAudio describing the written file

        Raises:
            MissingCredential: If api_key is absent (no request is made)
            ValueError: If script_text is empty
            ProviderError: If the provider fails or times out
            GenerationCancelled: If cancellation is requested mid-synthesis
        """
        if not api_key or not api_key.strip():
            raise MissingCredential("elevenlabs")
        if not script_text or not script_text.strip():
            raise ValueError("Script text cannot be empty")

        voice_id = self.resolve_voice(voice_style)
        chunks = split_into_chunks(script_text, self.settings.tts_max_characters)
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        self.logger.info(
            f"Synthesizing narration: {len(script_text)} characters in {len(chunks)} request(s), voice={voice_id}"
        )

        try:
            with open(output_path, "wb") as audio_file:
                for index, chunk in enumerate(chunks, start=1):
                    check_cancelled(cancel_token, "narration")
                    self.logger.debug(f"TTS request {index}/{len(chunks)} ({len(chunk)} characters)")
                    self._request_chunk(chunk, voice_id, api_key, audio_file, cancel_token)
        except Exception as e:
            output_path.unlink(missing_ok=True)
            if isinstance(e, ProviderError):
                self.logger.error(
                    format_error_message(
                        "Narration synthesis",
                        e,
                        context={"voice_id": voice_id, "chunks": len(chunks)},
                        suggestion=get_fallback_suggestion("TTS", e),
                    )
                )
            raise

        byte_length = output_path.stat().st_size
        if byte_length == 0:
            output_path.unlink(missing_ok=True)
            raise ProviderError("Narration provider returned an empty audio body")

        duration = estimate_spoken_duration(script_text, self.settings.words_per_minute)
        self.logger.info(f"Narration written: {output_path} ({byte_length} bytes, ~{duration:.0f}s)")

        return NarrationAudio(
            file_path=output_path,
            byte_length=byte_length,
            approximate_duration_seconds=duration,
            voice_id=voice_id,
            chunk_count=len(chunks),
        )

    def _request_chunk(
        self,
        text: str,
        voice_id: str,
        api_key: str,
        audio_file: Any,
        cancel_token: Optional[CancellationToken],
    ) -> None:
        """POST one chunk and stream the MP3 body into audio_file."""
        url = f"{self.settings.elevenlabs_base_url.rstrip('/')}/v1/text-to-speech/{voice_id}"
        headers = {
            "Accept": "audio/mpeg",
            "Content-Type": "application/json",
            "xi-api-key": api_key,
        }
        payload = {
            "text": text,
            "model_id": self.settings.elevenlabs_model_id,
            "voice_settings": {
                "stability": self.settings.voice_stability,
                "similarity_boost": self.settings.voice_similarity_boost,
                "style": self.settings.voice_style_exaggeration,
                "use_speaker_boost": self.settings.voice_use_speaker_boost,
            },
        }

        try:
            response = self.session.post(
                url,
                json=payload,
                headers=headers,
                timeout=self.settings.tts_timeout_seconds,
                stream=True,
            )
        except requests.exceptions.Timeout as e:
            raise ProviderError(f"ElevenLabs request timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            raise ProviderError(f"Network error calling ElevenLabs API: {e}") from e

        try:
            if response.status_code >= 400:
                raise self._classify_error(response)
            for block in response.iter_content(chunk_size=STREAM_CHUNK_BYTES):
                check_cancelled(cancel_token, "narration")
                if block:
                    audio_file.write(block)
        except requests.exceptions.RequestException as e:
            raise ProviderError(f"ElevenLabs stream interrupted: {e}") from e
        finally:
            response.close()

    @staticmethod
    def _classify_error(response: Any) -> ProviderError:
        """Map an ElevenLabs error response to a ProviderError (payload kept in details only)."""
        status_code = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = None

        detail = body.get("detail") if isinstance(body, dict) else None
        provider_status = detail.get("status") if isinstance(detail, dict) else None
        provider_message = detail.get("message") if isinstance(detail, dict) else detail
        details = {"provider_status": provider_status, "provider_message": provider_message}

        if provider_status in CHARACTER_LIMIT_STATUSES:
            return CharacterLimitExceeded(
                "ElevenLabs rejected the text as too long", status_code=status_code, details=details
            )
        if status_code == 429:
            return ProviderError("ElevenLabs rate limit exceeded (429)", status_code=status_code, details=details)
        return ProviderError(f"ElevenLabs API returned status {status_code}", status_code=status_code, details=details)
