"""
Global application state
Shared resources accessible across all modules
"""
from typing import Dict, Optional

from audition.core.realtime import ChangeFeed
from audition.core.store import Store
from audition.models import Settings

# Settings loaded at startup
SETTINGS: Settings = Settings()

# Relational store, opened at startup
STORE: Optional[Store] = None

# Change feed shared by the store (publisher) and websocket clients (subscribers)
FEED: ChangeFeed = ChangeFeed()

# Issued bearer tokens: token -> (identity, expiry unix timestamp)
TOKEN_REGISTRY: Dict[str, Dict] = {}


def get_store() -> Store:
    """Store accessor used by the API dependencies"""
    if STORE is None:
        raise RuntimeError("Store is not initialised")
    return STORE


def reset(settings: Optional[Settings] = None) -> None:
    """Re-open the store from settings and drop issued tokens"""
    global SETTINGS, STORE, FEED
    SETTINGS = settings or Settings()
    FEED = ChangeFeed()
    STORE = Store(SETTINGS.database_path, feed=FEED)
    TOKEN_REGISTRY.clear()
