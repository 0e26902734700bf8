"""Error Handler - provides user-friendly error messages and graceful degradation."""

from typing import Any, Optional

from hollywood_studio.core.errors import (
    CharacterLimitExceeded,
    CompilationFatal,
    GenerationCancelled,
    GenerationError,
    MissingCredential,
    ProviderError,
)


def format_error_message(
    operation: str,
    error: Exception,
    context: Optional[dict] = None,
    suggestion: Optional[str] = None,
) -> str:
    """
    Format a user-friendly error message.

    Args:
        operation: What operation was being performed (e.g., "Downloading stock clip")
        error: The exception that occurred
        context: Additional context (e.g., {"run_id": "...", "search_term": "bitcoin"})
        suggestion: Optional suggestion for how to fix the issue

    Returns:
        Formatted error message
    """
    error_type = type(error).__name__
    error_msg = str(error)

    # Build context string
    context_str = ""
    if context:
        context_parts = [f"{k}={v}" for k, v in context.items()]
        context_str = f" ({', '.join(context_parts)})"

    # Build message
    message = f"❌ {operation} failed{context_str}\n"
    message += f"   Error: {error_type}: {error_msg}"
    if isinstance(error, GenerationError):
        message += f" [kind={error.kind}]"

    if suggestion:
        message += f"\n   💡 Suggestion: {suggestion}"

    return message


def get_fallback_suggestion(service: str, error: Exception) -> Optional[str]:
    """
    Get a suggestion for how to handle a service failure.

    Args:
        service: Service name ("TTS", "Stock Media", "Compilation")
        error: The exception

    Returns:
        Suggestion string or None
    """
    error_msg = str(error).lower()

    if service == "TTS":
        if isinstance(error, MissingCredential) or "api key" in error_msg:
            return "Set ELEVENLABS_API_KEY in your .env file. Narration is required for every video."
        elif isinstance(error, CharacterLimitExceeded):
            return "Lower TTS_MAX_CHARACTERS so the script is sent in smaller chunks."
        elif "rate limit" in error_msg or "429" in error_msg:
            return "Rate limit exceeded. Wait a few minutes and retry the whole generation."
        elif "network" in error_msg or "timeout" in error_msg or "timed out" in error_msg:
            return "Network error. Check your internet connection and retry the generation."
        else:
            return "Narration failed. Retry the generation; no video can be built without narration."

    elif service == "Stock Media":
        if "401" in error_msg or "403" in error_msg or "api key" in error_msg:
            return "Check PEXELS_API_KEY / UNSPLASH_ACCESS_KEY. Continuing with fewer visuals."
        elif "rate limit" in error_msg or "429" in error_msg:
            return "Stock-media rate limit exceeded. Continuing with fewer visuals."
        elif "timeout" in error_msg or "timed out" in error_msg:
            return "Download timed out. Asset skipped."
        else:
            return "Asset skipped. The video will use the remaining visuals or a plain background."

    elif service == "Compilation":
        if "not found" in error_msg or "no such file" in error_msg:
            return "Install FFmpeg or set FFMPEG_BINARY. Falling back to a simpler layout."
        elif "timed out" in error_msg:
            return "Compilation timed out. Raise COMPILE_TIMEOUT_SECONDS for long videos."
        else:
            return "Falling back to a simpler layout."

    return None


def public_error_message(error: Exception) -> str:
    """
    Caller-safe failure message.

    Classified errors expose only their kind-level reason; provider payloads
    kept in ``details`` are never included.

    Args:
        error: The exception that stopped the run

    Returns:
        Message of the form "generation failed: <reason>"
    """
    if isinstance(error, MissingCredential):
        reason = f"missing credential for {error.service}"
    elif isinstance(error, CharacterLimitExceeded):
        reason = "narration text exceeds provider limit"
    elif isinstance(error, ProviderError):
        reason = "narration provider error"
    elif isinstance(error, CompilationFatal):
        reason = "could not write output file"
    elif isinstance(error, GenerationCancelled):
        reason = "cancelled"
    elif isinstance(error, GenerationError):
        reason = error.kind.replace("_", " ")
    else:
        reason = "internal error"
    return f"generation failed: {reason}"


def error_kind(error: Exception) -> str:
    """Stable kind string for logs and stored records."""
    if isinstance(error, GenerationError):
        return error.kind
    return "internal_error"


def log_context(error: Exception) -> dict[str, Any]:
    """Details worth logging for an error (never returned to callers)."""
    context: dict[str, Any] = {"kind": error_kind(error)}
    if isinstance(error, GenerationError):
        context.update(error.details)
    return context
