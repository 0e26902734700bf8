"""Text utility functions for script processing."""

# This module is part of hollywood_studio.utils package

import re

_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")


def count_words(text: str) -> int:
    """Count whitespace-separated words."""
    return len(text.split())


def estimate_spoken_duration(text: str, words_per_minute: int = 150) -> float:
    """
    Estimate the spoken duration of text in seconds.

    Args:
        text: Text to estimate duration for.
        words_per_minute: Average speaking rate (default 150 WPM).

    Returns:
        Estimated duration in seconds.
    """
    word_count = count_words(text)
    minutes = word_count / words_per_minute
    return round(minutes * 60, 2)


def truncate_to_word_count(text: str, max_words: int) -> str:
    """
    Truncate text to at most max_words words.

    The cut may land mid-sentence; a terminal period is added in that case
    so the narration does not end on a dangling clause marker.

    Args:
        text: Text to truncate.
        max_words: Word ceiling.

    Returns:
        Text with at most max_words words.
    """
    words = text.split()
    if len(words) <= max_words:
        return " ".join(words)
    truncated = " ".join(words[:max_words])
    if truncated and truncated[-1] not in ".!?":
        truncated = truncated.rstrip(",;:-") + "."
    return truncated


def split_into_chunks(text: str, max_characters: int) -> list[str]:
    """
    Split text into chunks of at most max_characters.

    Splits at paragraph and sentence boundaries first and falls back to word
    boundaries for sentences longer than the limit. No text is dropped; a
    single word longer than the limit is hard-split.

    Args:
        text: Text to split.
        max_characters: Maximum characters per chunk.

    Returns:
        Ordered list of non-empty chunks.
    """
    if max_characters <= 0:
        raise ValueError("max_characters must be positive")

    text = text.strip()
    if not text:
        return []
    if len(text) <= max_characters:
        return [text]

    pieces: list[str] = []
    for paragraph in re.split(r"\n\s*\n", text):
        for sentence in _SENTENCE_BOUNDARY.split(paragraph.strip()):
            sentence = " ".join(sentence.split())
            if not sentence:
                continue
            if len(sentence) <= max_characters:
                pieces.append(sentence)
            else:
                pieces.extend(_split_long_sentence(sentence, max_characters))

    chunks: list[str] = []
    current = ""
    for piece in pieces:
        candidate = f"{current} {piece}" if current else piece
        if len(candidate) <= max_characters:
            current = candidate
        else:
            if current:
                chunks.append(current)
            current = piece
    if current:
        chunks.append(current)
    return chunks


def _split_long_sentence(sentence: str, max_characters: int) -> list[str]:
    parts: list[str] = []
    current = ""
    for word in sentence.split():
        while len(word) > max_characters:
            if current:
                parts.append(current)
                current = ""
            parts.append(word[:max_characters])
            word = word[max_characters:]
        if not word:
            continue
        candidate = f"{current} {word}" if current else word
        if len(candidate) <= max_characters:
            current = candidate
        else:
            parts.append(current)
            current = word
    if current:
        parts.append(current)
    return parts
