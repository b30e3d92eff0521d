"""Visitor and online-count tracking.

Counters live in memory and are served from there; the database copy is
written in background tasks so a slow or missing database never holds up a
socket handler. With no database every counter except the unique visitor
totals keeps working.
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Dict


class PresenceTracker:
    def __init__(self, app=None, socketio=None, logger=None):
        self.app = app
        self.socketio = socketio
        self.logger = logger or logging.getLogger(__name__)
        self.enabled = True
        self._lock = threading.Lock()
        self._active: Dict[str, str] = {}  # sid -> fingerprint
        self.unique_visitors = 0
        self.total_visits = 0
        self.peak_concurrent = 0
        self.current_online = 0
        if app is not None:
            self.init_app(app, socketio)

    def init_app(self, app, socketio=None):
        self.app = app
        self.socketio = socketio or self.socketio
        self.logger = app.logger
        self.enabled = bool(app.config.get('ANALYTICS_ENABLED', True))

    # ---- collaborator interface ----

    def record_connect(self, conn_id: str, fingerprint: str) -> None:
        """Count a fingerprinted connection and broadcast the new totals.

        When the visit is persisted, the broadcast waits for the database so
        that a first-time visitor is already counted as unique in it.
        """
        with self._lock:
            # Repeated fingerprint on the same socket does not count twice
            counted = conn_id not in self._active
            self._active[conn_id] = fingerprint
            peak_changed = False
            if counted:
                self.current_online += 1
                peak_changed = self.current_online > self.peak_concurrent
                if peak_changed:
                    self.peak_concurrent = self.current_online
        if not (counted and self._dispatch(self._persist_connect, conn_id, fingerprint, peak_changed)):
            self.broadcast()

    def record_disconnect(self, conn_id: str) -> None:
        with self._lock:
            if self._active.pop(conn_id, None) is None:
                return
            self.current_online = max(0, self.current_online - 1)
        self._dispatch(self._persist_disconnect, conn_id)

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return {
                'uniqueVisitors': self.unique_visitors,
                'totalVisits': self.total_visits,
                'peakConcurrent': self.peak_concurrent,
                'currentOnline': self.current_online,
            }

    # ---- persistence ----

    def load(self) -> None:
        """Load stored totals and prune stale session rows."""
        if not self.enabled or self.app is None:
            return
        from hijack import db
        from hijack.models import AnalyticsStats, PresenceSession
        with self.app.app_context():
            try:
                ttl = int(self.app.config.get('SESSION_TTL_SEC', 3600))
                cutoff = datetime.utcnow() - timedelta(seconds=ttl)
                PresenceSession.query.filter(PresenceSession.last_seen < cutoff).delete()
                stats = db.session.get(AnalyticsStats, 'stats')
                db.session.commit()
            except Exception:
                db.session.rollback()
                self.logger.exception("[analytics-load] failed, running without stored analytics")
                return
            if stats:
                with self._lock:
                    self.unique_visitors = stats.unique_visitors or 0
                    self.total_visits = stats.total_visits or 0
                    self.peak_concurrent = stats.peak_concurrent or 0
            self.logger.info(f"[analytics-load] {self.snapshot()}")

    def reset(self) -> None:
        with self._lock:
            self._active.clear()
            self.unique_visitors = 0
            self.total_visits = 0
            self.peak_concurrent = 0
            self.current_online = 0

    def broadcast(self) -> None:
        if self.socketio is None or self.app is None:
            return
        namespace = self.app.config.get('SOCKETIO_NAMESPACE', '/')
        self.socketio.emit('analyticsUpdate', self.snapshot(), namespace=namespace)

    def _dispatch(self, fn, *args) -> bool:
        if not self.enabled or self.app is None:
            return False
        # In tests, run inline for determinism; otherwise keep DB work off the handler
        if self.app.config.get('TESTING') or self.socketio is None:
            fn(*args)
        else:
            self.socketio.start_background_task(fn, *args)
        return True

    def _persist_connect(self, conn_id: str, fingerprint: str, peak_changed: bool) -> None:
        from hijack import db
        from hijack.models import AnalyticsStats, PresenceSession, Visitor
        with self.app.app_context():
            try:
                now = datetime.utcnow()
                visitor = Visitor.query.filter_by(fingerprint=fingerprint).first()
                is_unique = visitor is None
                if is_unique:
                    visitor = Visitor(fingerprint=fingerprint, visit_count=0)
                    db.session.add(visitor)
                visitor.visit_count = (visitor.visit_count or 0) + 1
                visitor.last_visit = now
                visitor.socket_id = conn_id

                session = db.session.get(PresenceSession, conn_id)
                if session is None:
                    session = PresenceSession(socket_id=conn_id, fingerprint=fingerprint)
                    db.session.add(session)
                session.fingerprint = fingerprint
                session.last_seen = now

                if is_unique or peak_changed:
                    bump = 1 if is_unique else 0
                    with self._lock:
                        counters = (self.unique_visitors + bump, self.total_visits + bump, self.peak_concurrent)
                    stats = AnalyticsStats.singleton()
                    stats.unique_visitors, stats.total_visits, stats.peak_concurrent = counters
                    stats.last_updated = now
                db.session.commit()
                # Memory follows the stored counters, never ahead of them
                if is_unique:
                    with self._lock:
                        self.unique_visitors += 1
                        self.total_visits += 1
            except Exception:
                db.session.rollback()
                self.logger.exception(f"[analytics-connect] sid={conn_id} persist failed")
        self.broadcast()

    def _persist_disconnect(self, conn_id: str) -> None:
        from hijack import db
        from hijack.models import PresenceSession
        with self.app.app_context():
            try:
                PresenceSession.query.filter_by(socket_id=conn_id).delete()
                db.session.commit()
            except Exception:
                db.session.rollback()
                self.logger.exception(f"[analytics-disconnect] sid={conn_id} persist failed")
