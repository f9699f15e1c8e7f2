from functools import partial

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

from watchparty.logging_config import setup_logging

# Each client's events run in arrival order on its own reader
socketio = SocketIO(async_mode=None, async_handlers=False)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    setup_logging(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'
    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One registry per application; handlers reach it through app.extensions
    from watchparty.services.rooms import Broadcaster, RoomRegistry, SessionHandler
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    registry = RoomRegistry()
    broadcaster = Broadcaster(registry, partial(socketio.emit, namespace=namespace))
    flask_app.extensions['room_registry'] = registry
    flask_app.extensions['room_sessions'] = SessionHandler(
        registry,
        broadcaster,
        timestamp_format=flask_app.config.get('CHAT_TIMESTAMP_FORMAT', '%I:%M:%S %p'),
    )

    from watchparty.main import main
    flask_app.register_blueprint(main)

    from watchparty.socketio_events import register_socketio_handlers
    register_socketio_handlers(socketio, namespace=namespace)

    flask_app.logger.info("Watch party server ready (namespace %s)", namespace)
    return flask_app


def run_options(flask_app):
    """Keyword arguments for ``socketio.run`` taken from the app config."""
    return {
        'host': flask_app.config.get('HOST', '0.0.0.0'),
        'port': flask_app.config.get('PORT', 5000),
        'debug': bool(flask_app.config.get('DEBUG', False)),
        # Werkzeug refuses non-debug runs unless explicitly allowed
        'allow_unsafe_werkzeug': bool(flask_app.config.get('ALLOW_UNSAFE_WERKZEUG', False)),
    }
