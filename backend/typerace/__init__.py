from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config
from typerace.services.rooms import Dispatcher, RoomRegistry

socketio = SocketIO(async_mode=None, async_handlers=False)

# Process-wide room state; only the socket handlers mutate it
registry = RoomRegistry()
dispatcher = Dispatcher(socketio)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS', [])
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from typerace.main import main
    flask_app.register_blueprint(main)

    from typerace.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    return flask_app
