"""Input validation and prompt-injection scrubbing for resume text.

Pure and deterministic: same input, same output, no I/O.
"""

import re

from resume_roast.config import load_settings
from resume_roast.core.errors import ValidationFailed

_CODE_FENCE = re.compile(r"```")
# Opening/closing tags, plus a dangling "<tag" at the end of the text.
_TAG = re.compile(r"</?[^>]+(>|$)")


def strip_markup(text: str) -> str:
    """Remove code fences and HTML/XML-like tags.

    Applied until nothing changes, so removing one construct can never
    leave another one behind (``<b>`` inside a fence, split fences, ...).
    """
    previous = None
    while previous != text:
        previous = text
        text = _CODE_FENCE.sub("", text)
        text = _TAG.sub("", text)
    return text


def validate_resume_text(
    raw_text: object,
    min_length: int | None = None,
    max_length: int | None = None,
) -> str:
    """Validate and sanitize raw resume text.

    Args:
        raw_text: Untrusted value from the request body.
        min_length: Shortest accepted trimmed text (defaults to settings).
        max_length: Longest accepted trimmed text (defaults to settings).

    Returns:
        Sanitized text whose length lies within [min_length, max_length].

    Raises:
        ValidationFailed with a human-readable reason.
    """
    settings = load_settings()
    if min_length is None:
        min_length = settings.min_resume_length
    if max_length is None:
        max_length = settings.max_resume_length

    if not raw_text or not isinstance(raw_text, str):
        raise ValidationFailed("Resume text is required")

    trimmed = raw_text.strip()

    if len(trimmed) < min_length:
        raise ValidationFailed("Resume is too short. Please provide more content.")

    if len(trimmed) > max_length:
        raise ValidationFailed(
            f"Resume is too long. Please shorten to under {max_length:,} characters."
        )

    sanitized = strip_markup(trimmed)[:max_length]

    # Markup-only padding can't sneak a near-empty resume past the minimum.
    if len(sanitized.strip()) < min_length:
        raise ValidationFailed("Resume is too short. Please provide more content.")

    return sanitized


def clean_target_role(raw_role: object, max_length: int) -> str:
    """Sanitize the optional target-role hint. Returns "" when absent."""
    if not isinstance(raw_role, str):
        return ""
    return strip_markup(raw_role.strip())[:max_length].strip()
