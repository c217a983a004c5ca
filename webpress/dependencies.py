"""
Dependency providers for FastAPI routes.

Routes get their collaborators from these factories, so tests can swap
them through ``app.dependency_overrides``.
"""
from fastapi import Depends

from webpress.config import Settings, get_settings
from webpress.core.session import SessionStore
from webpress.core.transcoder import AdaptiveTranscoder


def get_session_store(settings: Settings = Depends(get_settings)) -> SessionStore:
    """
    Factory function for the session store rooted at the output directory.

    Args:
        settings: Service settings

    Returns:
        SessionStore instance
    """
    return SessionStore(settings.output_dir)


def get_transcoder() -> AdaptiveTranscoder:
    """Factory function for the transcoder used by batch conversions."""
    return AdaptiveTranscoder()
