"""FastAPI routers acting as controllers in the MVC architecture."""

from . import diagnostics, onboarding, transcribe, voice_log

__all__ = ["diagnostics", "onboarding", "transcribe", "voice_log"]
