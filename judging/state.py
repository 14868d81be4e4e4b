"""
Global application state
Shared resources accessible across all modules
"""
from typing import Optional

from judging.core.store import JudgingStore
from judging.models import Settings

# Engine settings, replaced at startup from config/judging.yaml
SETTINGS: Settings = Settings()

# Persistence boundary, opened at startup
STORE: Optional[JudgingStore] = None


def require_store() -> JudgingStore:
    """Return the opened store or fail loudly if startup did not run"""
    if STORE is None:
        raise RuntimeError("Judging store is not initialized")
    return STORE
