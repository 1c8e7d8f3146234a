import os

import click
from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

BACKEND_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))

socketio = SocketIO(async_mode=None)


def get_registry(flask_app):
    return flask_app.extensions['bingo_registry']


def create_app(config_class=Config):
    flask_app = Flask(__name__, static_folder=None)
    flask_app.config.from_object(config_class)

    origins = flask_app.config.get('CORS_ALLOWED_ORIGINS', '*')
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    static_dir = flask_app.config.get('STATIC_FOLDER') or 'public'
    if not os.path.isabs(static_dir):
        static_dir = os.path.join(BACKEND_ROOT, static_dir)
    flask_app.config['STATIC_DIR'] = static_dir

    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))
    CORS(flask_app, origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    # One registry per app instance; handlers look it up through current_app
    from bingo.services.rooms import RoomRegistry
    from bingo.socketio_events import SocketIONotifier, register_socketio_handlers
    registry = RoomRegistry(
        notifier=SocketIONotifier(socketio, namespace=namespace),
        logger=flask_app.logger,
        notify_host_left=flask_app.config.get('NOTIFY_HOST_LEFT', False),
    )
    flask_app.extensions['bingo_registry'] = registry

    from bingo.main import main
    flask_app.register_blueprint(main)

    register_socketio_handlers(namespace=namespace)

    from bingo.services.rooms.sweeper import start_room_sweeper
    start_room_sweeper(flask_app, registry)

    @click.command('serve')
    @click.option('--host', default=None, help='Interface to bind (defaults to HOST config).')
    @click.option('--port', default=None, type=int, help='Port to listen on (defaults to PORT config).')
    def serve_command(host, port):
        """Runs the bingo server with websocket support."""
        host = host or flask_app.config.get('HOST', '0.0.0.0')
        port = port or int(flask_app.config.get('PORT', 3000))
        flask_app.logger.info(f"[serve] listening on {host}:{port}")
        socketio.run(flask_app, host=host, port=port)

    flask_app.cli.add_command(serve_command)

    return flask_app
