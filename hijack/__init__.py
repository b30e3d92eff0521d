from flask import Flask, current_app
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def _allowed_origins(value):
    if not value or value == '*':
        return '*'
    return [origin.strip() for origin in value.split(',') if origin.strip()]


def get_coordinator():
    return current_app.extensions['coordinator']


def get_presence():
    return current_app.extensions['presence']


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = _allowed_origins(flask_app.config.get('CORS_ORIGINS', '*'))
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Shared game state is owned by objects hung off the app, not module globals
    from hijack.services.coordination import Coordinator
    from hijack.services.coordination.notifier import SocketIONotifier
    from hijack.services.presence import PresenceTracker

    presence = PresenceTracker(flask_app, socketio)
    coordinator = Coordinator(
        SocketIONotifier(socketio, namespace=namespace),
        presence=presence,
        logger=flask_app.logger,
        room_id_bytes=int(flask_app.config.get('ROOM_ID_BYTES', 3)),
    )
    flask_app.extensions['presence'] = presence
    flask_app.extensions['coordinator'] = coordinator

    from hijack.main import main
    flask_app.register_blueprint(main)

    from hijack.api.analytics import analytics
    flask_app.register_blueprint(analytics, url_prefix='/api')

    from hijack.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace)

    import hijack.models  # noqa: F401
    if not flask_app.config.get('TESTING'):
        presence.load()

    @click.command('analytics-reset')
    def analytics_reset_command():
        """Drops, recreates, and zeroes the analytics tables."""
        from hijack.models import AnalyticsStats
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            db.session.add(AnalyticsStats(id='stats'))
            db.session.commit()
            presence.reset()
            print('Analytics tables have been reset!')

    flask_app.cli.add_command(analytics_reset_command)

    return flask_app
