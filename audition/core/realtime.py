"""
Realtime Notifier - in-process change feed

Row-level change events for the groups/sessions/submissions tables, filtered
by session id. Delivery is best-effort: subscribers must treat every event
as a hint and re-fetch authoritative state from the store.
"""
import logging
import threading
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from pydantic import BaseModel


logger = logging.getLogger(__name__)

WATCHED_TABLES = frozenset({"dancer_groups", "sessions", "score_submissions"})


class ChangeEvent(BaseModel):
    """One row-level change"""
    table: str                  # dancer_groups | sessions | score_submissions
    action: str                 # insert | update | delete
    session_id: str
    row_id: str
    payload: Dict[str, Any] = {}


Callback = Callable[[ChangeEvent], None]


class Subscription:
    """Handle returned by ChangeFeed.subscribe"""

    def __init__(self, feed: "ChangeFeed", session_id: str, callback: Callback,
                 tables: Optional[FrozenSet[str]]):
        self.feed = feed
        self.session_id = session_id
        self.callback = callback
        self.tables = tables
        self.closed = False

    def matches(self, event: ChangeEvent) -> bool:
        if self.closed or event.session_id != self.session_id:
            return False
        return self.tables is None or event.table in self.tables

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.feed._remove(self)


class ChangeFeed:
    """Publish/subscribe hub keyed by session id"""

    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: List[Subscription] = []

    def subscribe(self, session_id: str, callback: Callback,
                  tables: Optional[List[str]] = None) -> Subscription:
        """
        Register interest in changes for one session

        Args:
            session_id: Session to watch
            callback: Called with each matching ChangeEvent
            tables: Restrict to these tables (default: all watched tables)

        Returns:
            Subscription (call .close() to stop receiving events)
        """
        unknown = set(tables or ()) - WATCHED_TABLES
        if unknown:
            raise ValueError(f"Not a watched table: {', '.join(sorted(unknown))}")
        sub = Subscription(self, session_id, callback, frozenset(tables) if tables else None)
        with self._lock:
            self._subscriptions.append(sub)
        logger.debug(f"📡 Subscribed to session {session_id} (tables={tables or 'all'})")
        return sub

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            if sub in self._subscriptions:
                self._subscriptions.remove(sub)

    def publish(self, event: ChangeEvent) -> int:
        """
        Deliver an event to every matching subscriber

        A failing subscriber is logged and skipped; the others still receive
        the event.

        Returns:
            Number of subscribers the event was delivered to
        """
        with self._lock:
            targets = [s for s in self._subscriptions if s.matches(event)]

        delivered = 0
        for sub in targets:
            try:
                sub.callback(event)
                delivered += 1
            except Exception as e:
                logger.error(
                    f"❌ Subscriber failed on {event.table}/{event.action} "
                    f"for session {event.session_id}: {type(e).__name__}: {e}",
                    exc_info=True
                )
        return delivered

    def subscriber_count(self, session_id: Optional[str] = None) -> int:
        with self._lock:
            if session_id is None:
                return len(self._subscriptions)
            return sum(1 for s in self._subscriptions if s.session_id == session_id)
