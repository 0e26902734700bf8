"""Classified errors raised by the video generation pipeline."""

from typing import Any, Optional


class GenerationError(Exception):
    """Base class for classified pipeline failures."""

    kind = "generation_error"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class MissingCredential(GenerationError):
    """A required provider key is absent. Raised before any work is done."""

    kind = "missing_credential"

    def __init__(self, service: str, message: Optional[str] = None):
        super().__init__(message or f"No API key configured for {service}", {"service": service})
        self.service = service


class ProviderError(GenerationError):
    """The narration provider returned an error or timed out."""

    kind = "provider_error"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        details = dict(details or {})
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details)
        self.status_code = status_code


class CharacterLimitExceeded(ProviderError):
    """The provider rejected a request for exceeding its character ceiling."""

    kind = "character_limit_exceeded"


class CompilationFailure(GenerationError):
    """One compilation strategy failed. Recovered by the fallback chain."""

    kind = "compilation_failure"


class CompilationFatal(GenerationError):
    """Even the raw-audio passthrough failed."""

    kind = "compilation_fatal"


class GenerationCancelled(GenerationError):
    """The run observed an external cancellation request."""

    kind = "cancelled"

    def __init__(self, message: str = "Generation was cancelled", details: Optional[dict[str, Any]] = None):
        super().__init__(message, details)
