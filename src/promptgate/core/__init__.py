"""Core functionality for the prompt proxy.

- **PromptGateConfig**: Configuration management using Pydantic Settings
- **config**: Global configuration instance (loads from environment variables)
- **InferenceClient**: Text completion and image generation calls
- **ModerationClient**: Fail-open content moderation gate
"""

from promptgate.core.config import PromptGateConfig, config
from promptgate.core.moderation import ModerationClient, ModerationResult
from promptgate.core.upstream import InferenceClient, UpstreamError

__all__ = [
    "InferenceClient",
    "ModerationClient",
    "ModerationResult",
    "PromptGateConfig",
    "UpstreamError",
    "config",
]
