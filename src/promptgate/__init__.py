"""PromptGate - templated prompt proxy for hosted text and image generation."""

__version__ = "0.3.0"

from promptgate.core.config import PromptGateConfig, config

__all__ = [
    "PromptGateConfig",
    "config",
]
