"""Validation utilities for route inputs."""

from __future__ import annotations

import logging

from promptgate.core.config import PromptGateConfig

logger = logging.getLogger(__name__)

MISSING_PROMPT = "Missing prompt"


class PromptValidationError(Exception):
    """User-facing validation error.

    The message is returned to the caller as the response body.
    """

    pass


def validate_prompt(value: str | None) -> str:
    """Require a non-empty prompt and return it unchanged.

    Whitespace-only prompts are accepted; nothing is trimmed or escaped.

    Raises:
        PromptValidationError: If the prompt is absent or empty.
    """
    if not value:
        raise PromptValidationError(MISSING_PROMPT)
    return value


def parse_dimension(raw: str | int | None, default: int) -> int:
    """Parse a width/height path segment.

    Absent or non-integer input falls back to *default* instead of producing
    a non-numeric value.
    """
    if raw is None:
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.debug(f"Unparseable dimension {raw!r}, using default {default}")
        return default


def clamp_dimension(value: int, maximum: int, minimum: int = 1) -> int:
    """Restrict *value* to ``[minimum, maximum]``."""
    return max(minimum, min(value, maximum))


def resolve_dimensions(
    width: str | int | None,
    height: str | int | None,
    cfg: PromptGateConfig,
) -> tuple[int, int]:
    """Parse and clamp both image dimensions using *cfg* bounds.

    Returns:
        ``(width, height)`` ready to forward to the provider.
    """
    return (
        clamp_dimension(
            parse_dimension(width, cfg.default_dimension),
            cfg.max_dimension,
            cfg.min_dimension,
        ),
        clamp_dimension(
            parse_dimension(height, cfg.default_dimension),
            cfg.max_dimension,
            cfg.min_dimension,
        ),
    )
