import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///hijack.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Comma separated list; '*' allows any origin
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Matched room codes are ROOM_ID_BYTES random bytes rendered as upper hex
    ROOM_ID_BYTES = int(os.environ.get('ROOM_ID_BYTES', '3'))
    # Visitor/online tracking. Gameplay works the same with it disabled.
    ANALYTICS_ENABLED = os.environ.get('ANALYTICS_ENABLED', '1') not in ('0', 'false', 'False')
    # Presence sessions older than this are pruned at startup (seconds)
    SESSION_TTL_SEC = int(os.environ.get('SESSION_TTL_SEC', '3600'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Dev server bind address, see run.py
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3000'))
    RUN_DEBUG = os.environ.get('FLASK_DEBUG', '1') not in ('0', 'false', 'False')
