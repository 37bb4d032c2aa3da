"""Pydantic response models for the PromptGate API.

Models
------
TextResponse
    Envelope for ``GET /ai/txt2txt`` and for any flagged short-circuit.
ImageResponse
    Envelope for ``GET /ai/txt2img/{width}/{height}``.
HealthResponse
    Liveness probe payload.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class TextResponse(BaseModel):
    """Generated (or flagged) text.

    Attributes:
        response: Generated text, or the fixed flagged message.
        created_at: Provider timestamp for generated text (null when the
            provider omits ``created``), ISO-8601 string for flagged responses.
    """

    response: str = Field(..., description="Generated text or flagged notice.")
    created_at: str | int | None = Field(
        default=None,
        description="Provider 'created' timestamp, or ISO-8601 time when flagged.",
    )


class ImageResponse(BaseModel):
    """Base64-encoded generated image.

    Attributes:
        data: The provider's ``b64_json`` payload.
    """

    data: str = Field(..., description="Base64-encoded image.")


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
