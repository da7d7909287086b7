from flask import Flask, g, request
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import os
import time
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def _ensure_sqlite_dir(uri: str) -> None:
    prefix = 'sqlite:///'
    if uri and uri.startswith(prefix):
        directory = os.path.dirname(uri[len(prefix):])
        if directory:
            os.makedirs(directory, exist_ok=True)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    level = flask_app.config.get('LOG_LEVEL', 'INFO')
    # Service modules log through children of the app logger
    flask_app.logger.setLevel(level)

    _ensure_sqlite_dir(flask_app.config.get('SQLALCHEMY_DATABASE_URI', ''))

    allowed_origins = flask_app.config.get('CORS_ORIGINS', [])
    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    @flask_app.before_request
    def _start_timer():
        g.request_started = time.perf_counter()

    @flask_app.after_request
    def _log_request(response):
        started = g.get('request_started')
        elapsed = f"{(time.perf_counter() - started) * 1000:.1f}ms" if started is not None else '-'
        flask_app.logger.info(
            f"{request.method} {request.path} {response.status_code} {elapsed} from {request.remote_addr}"
        )
        return response

    from wingspan_scoring.errors import register_error_handlers
    register_error_handlers(flask_app)

    # Import and register blueprints here
    from wingspan_scoring.main import main
    flask_app.register_blueprint(main)

    from wingspan_scoring.api.goals import goals
    from wingspan_scoring.api.scoring import scoring
    from wingspan_scoring.api.history import history
    from wingspan_scoring.api.sessions import sessions
    flask_app.register_blueprint(goals, url_prefix='/api')
    flask_app.register_blueprint(scoring, url_prefix='/api')
    flask_app.register_blueprint(history, url_prefix='/api')
    flask_app.register_blueprint(sessions, url_prefix='/api/sessions')

    # Register Socket.IO event handlers
    try:
        from wingspan_scoring.socketio_events import register_socketio_handlers
        register_socketio_handlers(testing=flask_app.config.get('TESTING', False))
    except ImportError as exc:
        flask_app.logger.warning(f"SocketIO events not loaded: {exc}")

    # Make sure the models are registered with the metadata
    from wingspan_scoring import models  # noqa: F401

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the database tables."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            click.echo('Database has been reset!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
