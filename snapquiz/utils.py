"""Utility functions for sanitization and upload handling."""

import html
from pathlib import PurePath

import bleach

from snapquiz.exceptions import ValidationError

SUPPORTED_UPLOAD_EXTENSIONS = {".txt", ".md"}


def sanitize_generated_text(text: str) -> str:
    """Strip any HTML/script content from AI-generated text.

    Generated titles, questions and options are stored as plain text, so all
    tags are removed. Entities bleach escapes are turned back into characters.
    """
    sanitized = bleach.clean(text or "", tags=[], strip=True)
    return html.unescape(sanitized).strip()


def extract_upload_text(content: bytes, filename: str, max_bytes: int) -> str:
    """Decode an uploaded course document into text.

    Args:
        content: Raw uploaded bytes
        filename: Original file name, used to detect the file type
        max_bytes: Upload size limit

    Returns:
        The decoded, stripped text

    Raises:
        ValidationError: If the file is too large, unsupported, not UTF-8 or empty
    """
    if len(content) > max_bytes:
        raise ValidationError(
            f"File size exceeds maximum limit of {max_bytes / (1024 * 1024):.0f}MB. "
            f"Current size: {len(content) / (1024 * 1024):.2f}MB"
        )

    extension = PurePath(filename or "").suffix.lower()
    if extension not in SUPPORTED_UPLOAD_EXTENSIONS:
        raise ValidationError(f"Unsupported file type: {extension or filename!r}")

    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError:
        raise ValidationError("Uploaded file is not valid UTF-8 text")

    text = text.strip()
    if not text:
        raise ValidationError("Uploaded file is empty")
    return text
