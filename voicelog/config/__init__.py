"""Runtime configuration."""

from .settings import GoogleConfig, OpenAIConfig, Settings, settings

__all__ = ["GoogleConfig", "OpenAIConfig", "Settings", "settings"]
