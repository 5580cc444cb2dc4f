"""In-process change feed for live session views.

Observers subscribe per session id and receive every newly recorded scan and
every session update, in publish order. ``Subscription.unsubscribe`` is the
only way a subscription ends; once it returns, its callbacks never run again.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from .model import Scan, Session

logger = logging.getLogger(__name__)

ScanCallback = Callable[[Scan], None]
SessionCallback = Callable[[Session], None]


class Subscription:
    def __init__(
        self,
        feed: "ChangeFeed",
        session_id: str,
        on_scan: Optional[ScanCallback],
        on_session: Optional[SessionCallback],
    ):
        self._feed = feed
        self.session_id = session_id
        self._on_scan = on_scan
        self._on_session = on_session
        # Held while a callback runs, so unsubscribe() waits for it to finish.
        self._lock = threading.RLock()
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def _deliver(self, callback, payload) -> None:
        with self._lock:
            if not self._active or callback is None:
                return
            try:
                callback(payload)
            except Exception:
                logger.exception("change feed callback failed for session %s", self.session_id)

    def deliver_scan(self, scan: Scan) -> None:
        self._deliver(self._on_scan, scan)

    def deliver_session(self, session: Session) -> None:
        self._deliver(self._on_session, session)

    def unsubscribe(self) -> None:
        with self._lock:
            if not self._active:
                return
            self._active = False
        self._feed._remove(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unsubscribe()


class ChangeFeed:
    def __init__(self):
        self._lock = threading.Lock()
        # Serializes publishers so every subscriber sees one global order.
        self._publish_lock = threading.RLock()
        self._subscribers: dict[str, list[Subscription]] = {}

    def subscribe(
        self,
        session_id: str,
        *,
        on_scan: Optional[ScanCallback] = None,
        on_session: Optional[SessionCallback] = None,
    ) -> Subscription:
        sub = Subscription(self, session_id, on_scan, on_session)
        with self._lock:
            self._subscribers.setdefault(session_id, []).append(sub)
        logger.debug("subscribed to session %s", session_id)
        return sub

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._subscribers.get(sub.session_id, [])
            if sub in subs:
                subs.remove(sub)
            if not subs:
                self._subscribers.pop(sub.session_id, None)
        logger.debug("unsubscribed from session %s", sub.session_id)

    def _snapshot(self, session_id: str) -> list[Subscription]:
        with self._lock:
            return list(self._subscribers.get(session_id, ()))

    def subscriber_count(self, session_id: str) -> int:
        with self._lock:
            return len(self._subscribers.get(session_id, ()))

    def publish_scan(self, scan: Scan) -> None:
        with self._publish_lock:
            for sub in self._snapshot(scan.session_id):
                sub.deliver_scan(scan)

    def publish_session(self, session: Session) -> None:
        with self._publish_lock:
            for sub in self._snapshot(session.session_id):
                sub.deliver_session(session)
