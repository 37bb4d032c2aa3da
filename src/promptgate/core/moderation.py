"""Content moderation gate.

Text is moderated *before* generation (the user's prompt), images *after*
generation (the provider's output, wrapped as a data URI content part).

Moderation fails open: a transport error or a non-success status yields an
unflagged result carrying the error description, which is logged and never
shown to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from promptgate.core.config import PromptGateConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModerationResult:
    """Verdict for a single moderation call."""

    flagged: bool
    error: str | None = None


def image_data_uri(b64: str, extension: str = "jpg") -> str:
    """Build a ``data:`` URI for a base64-encoded image."""
    subtype = "jpeg" if extension.lower() in ("jpg", "jpeg") else extension.lower()
    return f"data:image/{subtype};base64,{b64}"


class ModerationClient:
    """Moderation provider client sharing the application's HTTP client."""

    def __init__(self, cfg: PromptGateConfig, http: httpx.AsyncClient) -> None:
        self.cfg = cfg
        self.http = http

    async def moderate_text(self, text: str) -> ModerationResult:
        """Moderate a plain prompt string."""
        return await self._moderate(text)

    async def moderate_image(self, b64: str, extension: str = "jpg") -> ModerationResult:
        """Moderate a generated image given its base64 payload."""
        return await self._moderate(
            [
                {
                    "type": "image_url",
                    "image_url": {"url": image_data_uri(b64, extension)},
                }
            ]
        )

    async def _moderate(self, moderation_input: Any) -> ModerationResult:
        try:
            response = await self.http.post(
                self.cfg.moderation_url,
                headers={
                    "Authorization": f"Bearer {self.cfg.moderation_key}",
                    "Content-Type": "application/json",
                },
                json={"model": self.cfg.moderation_model, "input": moderation_input},
            )
        except httpx.HTTPError as e:
            error = f"{type(e).__name__}: {e}"
            logger.warning(f"Moderation request failed, allowing content: {error}")
            return ModerationResult(flagged=False, error=error)

        if response.is_error:
            error = f"HTTP {response.status_code}: {response.text}"
            logger.warning(f"Moderation provider error, allowing content: {error}")
            return ModerationResult(flagged=False, error=error)

        try:
            payload = response.json()
        except ValueError as e:
            logger.warning(f"Unreadable moderation response, allowing content: {e}")
            return ModerationResult(flagged=False, error=str(e))

        results = (payload.get("results") or []) if isinstance(payload, dict) else []
        flagged = any(isinstance(r, dict) and r.get("flagged") for r in results)
        if flagged:
            logger.info("Content flagged by moderation")
        return ModerationResult(flagged=flagged)
