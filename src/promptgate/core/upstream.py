"""Calls to the hosted inference provider.

The provider speaks the OpenAI-compatible wire format:

- ``POST {base}/completions`` for text, either streamed (server-sent events
  relayed to the caller byte for byte) or buffered (all choice texts joined).
- ``POST {base}/images/generations`` for images, always requesting
  ``response_format="b64_json"``.

Each call is issued exactly once.  There is no retry and no client-side
timeout; a hung provider holds the request until the hosting platform gives
up on it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from promptgate.core.config import PromptGateConfig

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """The provider answered with a non-success status.

    Attributes:
        status_code: HTTP status returned by the provider.
        body: Raw response body, relayed verbatim where the route exposes it.
    """

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Upstream returned HTTP {status_code}: {body}")
        self.status_code = status_code
        self.body = body


@dataclass
class CompletionResult:
    """Buffered text completion.

    Attributes:
        text: Concatenation of every returned choice's ``text``.
        created: Provider timestamp (``created`` field), passed through as-is.
    """

    text: str
    created: int | str | None


def extract_image_data(payload: Any) -> str | None:
    """Return the first result's base64 payload, or ``None`` if absent."""
    if not isinstance(payload, dict):
        return None
    data = payload.get("data") or []
    if not data or not isinstance(data[0], dict):
        return None
    return data[0].get("b64_json") or None


class InferenceClient:
    """Thin wrapper around a shared :class:`httpx.AsyncClient`.

    Args:
        cfg: Application configuration (model ids, key, base URL).
        http: Client owned by the application lifespan.
    """

    def __init__(self, cfg: PromptGateConfig, http: httpx.AsyncClient) -> None:
        self.cfg = cfg
        self.http = http
        self.base_url = cfg.ai_base_url.rstrip("/")

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.cfg.ai_key}",
            "Content-Type": "application/json",
            "Accept": "*/*",
        }

    async def stream_completion(self, prompt: str) -> httpx.Response:
        """Open a streaming completion and return the live response.

        The caller owns the returned response and must close it (``aclose``)
        once the body has been relayed.

        Raises:
            UpstreamError: If the provider rejects the request.
        """
        request = self.http.build_request(
            "POST",
            f"{self.base_url}/completions",
            headers=self._headers(),
            json={
                "model": self.cfg.text_model,
                "prompt": prompt,
                "stream": True,
            },
        )
        logger.info(f"Streaming completion from {self.cfg.text_model}")
        response = await self.http.send(request, stream=True)
        if response.is_error:
            body = (await response.aread()).decode("utf-8", errors="replace")
            await response.aclose()
            raise UpstreamError(response.status_code, body)
        return response

    async def complete(self, prompt: str) -> CompletionResult:
        """Run a buffered completion and join all choice texts.

        Raises:
            UpstreamError: If the provider rejects the request.
        """
        logger.info(f"Requesting completion from {self.cfg.text_model}")
        response = await self.http.post(
            f"{self.base_url}/completions",
            headers=self._headers(),
            json={
                "model": self.cfg.text_model,
                "prompt": prompt,
                "max_tokens": self.cfg.text_max_tokens,
                "stream": False,
            },
        )
        if response.is_error:
            raise UpstreamError(response.status_code, response.text)

        payload = response.json()
        text = "".join(choice.get("text") or "" for choice in payload.get("choices") or [])
        return CompletionResult(text=text, created=payload.get("created"))

    async def generate_image(
        self,
        prompt: str,
        width: int,
        height: int,
        negative_prompt: str | None = None,
    ) -> dict:
        """Generate one image and return the provider's JSON payload.

        Args:
            prompt: Already-templated positive prompt.
            width: Clamped width in pixels.
            height: Clamped height in pixels.
            negative_prompt: Sent only when set and enabled in the config.

        Raises:
            UpstreamError: If the provider rejects the request.
        """
        body: dict[str, Any] = {
            "model": self.cfg.image_model,
            "prompt": prompt,
            "width": width,
            "height": height,
            "seed": self.cfg.image_seed,
            "num_inference_steps": self.cfg.image_num_inference_steps,
            "response_format": "b64_json",
            "response_extension": self.cfg.image_response_extension,
        }
        if negative_prompt and self.cfg.image_negative_prompt_enabled:
            body["negative_prompt"] = negative_prompt

        logger.info(f"Requesting {width}x{height} image from {self.cfg.image_model}")
        response = await self.http.post(
            f"{self.base_url}/images/generations",
            headers=self._headers(),
            json=body,
        )
        if response.is_error:
            logger.warning(f"Image generation failed with HTTP {response.status_code}")
            raise UpstreamError(response.status_code, response.text)
        return response.json()
