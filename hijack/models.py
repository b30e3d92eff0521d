from datetime import datetime

from hijack import db


class Visitor(db.Model):
    __tablename__ = 'visitor'
    id = db.Column(db.Integer, primary_key=True)
    fingerprint = db.Column(db.String(128), unique=True, nullable=False, index=True)
    visit_count = db.Column(db.Integer, default=0, nullable=False)
    last_visit = db.Column(db.DateTime, default=datetime.utcnow)
    socket_id = db.Column(db.String(64), nullable=True)


class PresenceSession(db.Model):
    __tablename__ = 'presence_session'
    socket_id = db.Column(db.String(64), primary_key=True)
    fingerprint = db.Column(db.String(128), nullable=False)
    last_seen = db.Column(db.DateTime, default=datetime.utcnow, index=True)


class AnalyticsStats(db.Model):
    __tablename__ = 'analytics_stats'
    id = db.Column(db.String(16), primary_key=True, default='stats')
    unique_visitors = db.Column(db.Integer, default=0, nullable=False)
    # Cumulative unique visitors over all time
    total_visits = db.Column(db.Integer, default=0, nullable=False)
    peak_concurrent = db.Column(db.Integer, default=0, nullable=False)
    last_updated = db.Column(db.DateTime, default=datetime.utcnow)

    @classmethod
    def singleton(cls):
        stats = db.session.get(cls, 'stats')
        if stats is None:
            stats = cls(id='stats', unique_visitors=0, total_visits=0, peak_concurrent=0)
            db.session.add(stats)
        return stats
