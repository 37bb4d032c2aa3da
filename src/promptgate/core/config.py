"""Configuration management for PromptGate.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the PROMPTGATE_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (PROMPTGATE_* prefix)
2. .env file in the project root
3. Default values defined in PromptGateConfig

Example .env file:
    PROMPTGATE_AI_KEY=...
    PROMPTGATE_MODERATION_KEY=...
    PROMPTGATE_MAX_DIMENSION=1400
    PROMPTGATE_CORS_ORIGINS='["https://smmai.app"]'

List-valued settings (``cors_origins`` and friends) are read from the
environment as JSON arrays.

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
The FastAPI application reads it unless an explicit instance is passed to
:func:`promptgate.api.main.create_app`.

Usage Example
-------------
    from promptgate.core.config import config

    print(config.text_model)
    print(config.moderation_enabled)

Secrets
-------
``ai_key`` and ``moderation_key`` are opaque bindings.  They are sent as bearer
tokens to their respective providers and never logged.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CORS_ORIGINS = [
    "https://mobile-textinput.smmake.pages.dev",
    "https://smmai.app",
]


class PromptGateConfig(BaseSettings):
    """Main configuration for PromptGate.

    Attributes
    ----------
    Inference Provider:
        ai_key : str
            Bearer token for the text/image generation provider
        ai_base_url : str
            Base URL of the OpenAI-compatible provider API
        text_model : str
            Model identifier used for text completions
        text_max_tokens : int
            Token bound for non-streaming completions
        text_stream : bool
            Serve ``/ai/txt2txt`` as a raw event stream instead of JSON

    Image Generation:
        image_model : str
            Model identifier used for image generation
        image_negative_prompt_enabled : bool
            Send the fixed negative prompt (not every provider accepts one)
        image_num_inference_steps : int
            Fixed number of diffusion steps
        image_seed : int
            Seed forwarded to the provider (-1 lets the provider pick)
        image_response_extension : str
            Encoded image format requested from the provider
        image_passthrough : bool
            Return the provider's JSON untouched instead of ``{data: ...}``
        default_dimension : int
            Width/height used when a path parameter is absent or unparseable
        max_dimension : int
            Upper bound for width/height
        min_dimension : int
            Lower bound for width/height

    Moderation:
        moderation_key : str | None
            Bearer token for the moderation provider; unset disables moderation
        moderation_url : str
            Moderation endpoint
        moderation_model : str
            Moderation model identifier

    Cross-Origin Policy:
        cors_prefix : str
            Path prefix the policy is applied to
        cors_origins : list[str]
            Static allow-list of origins
        cors_allow_headers, cors_expose_headers, cors_allow_methods : list[str]
        cors_max_age : int
        cors_allow_credentials : bool

    Server:
        server_host : str
        server_port : int
        log_level : str
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PROMPTGATE_",
        case_sensitive=False,
    )

    # Inference provider
    ai_key: str = Field(
        default="",
        description="API key for the text/image generation provider",
    )
    ai_base_url: str = Field(
        default="https://api.studio.nebius.ai/v1/",
        description="Base URL of the OpenAI-compatible inference API",
    )
    text_model: str = Field(
        default="meta-llama/Meta-Llama-3.1-8B-Instruct",
        description="Model used for text completions",
    )
    text_max_tokens: int = Field(
        default=512,
        description="max_tokens for non-streaming completions",
        ge=1,
        le=8192,
    )
    text_stream: bool = Field(
        default=False,
        description="Serve /ai/txt2txt as a raw token stream",
    )

    # Image generation
    image_model: str = Field(
        default="stability-ai/sdxl",
        description="Model used for image generation",
    )
    image_negative_prompt_enabled: bool = Field(
        default=True,
        description="Send the fixed negative prompt with image requests",
    )
    image_num_inference_steps: int = Field(default=50, ge=1, le=200)
    image_seed: int = Field(default=-1)
    image_response_extension: str = Field(default="jpg")
    image_passthrough: bool = Field(
        default=False,
        description="Return the provider's raw JSON from the image route",
    )
    default_dimension: int = Field(default=512, ge=1)
    max_dimension: int = Field(default=1400, ge=1)
    min_dimension: int = Field(default=1, ge=1)

    # Moderation
    moderation_key: str | None = Field(
        default=None,
        description="API key for the moderation provider (unset disables moderation)",
    )
    moderation_url: str = Field(default="https://api.openai.com/v1/moderations")
    moderation_model: str = Field(default="omni-moderation-latest")

    # Cross-origin policy
    cors_prefix: str = Field(default="/ai")
    cors_origins: list[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    cors_allow_headers: list[str] = Field(
        default_factory=lambda: ["Content-Type", "Authorization"]
    )
    cors_expose_headers: list[str] = Field(
        default_factory=lambda: ["Content-Length", "Content-Type"]
    )
    cors_allow_methods: list[str] = Field(default_factory=lambda: ["POST", "GET", "OPTIONS"])
    cors_max_age: int = Field(default=600, ge=0)
    cors_allow_credentials: bool = Field(default=True)

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    server_port: int = Field(
        default=8787,
        description="Server port",
        ge=1024,
        le=65535,
    )
    log_level: str = Field(default="INFO")

    @property
    def moderation_enabled(self) -> bool:
        """Whether a moderation key is configured."""
        return bool(self.moderation_key)


# Global configuration instance, loaded from PROMPTGATE_* variables and .env.
config = PromptGateConfig()
