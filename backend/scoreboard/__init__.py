from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Models must be registered on the metadata before the store touches them
    from scoreboard import models  # noqa: F401
    from scoreboard.store import init_store, get_store, DEMO_PLAYERS
    init_store(flask_app)

    from scoreboard.main import main
    flask_app.register_blueprint(main)

    from scoreboard.api.board import board
    # Mount board routes under /api to match frontend API client
    flask_app.register_blueprint(board, url_prefix='/api')

    from scoreboard.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from scoreboard.models import Player
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            for name in DEMO_PLAYERS:
                db.session.add(Player(name=name, score=0))

            db.session.commit()
            print('Database has been reset and seeded!')

    @click.command('scores-recompute')
    def scores_recompute_command():
        """Rewrites player totals from their score entries."""
        from scoreboard.services.rounds.ledger import recompute_scores
        with flask_app.app_context():
            drifted = recompute_scores(get_store())
            print(f'Recomputed scores; {len(drifted)} player(s) corrected.')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(scores_recompute_command)

    return flask_app
