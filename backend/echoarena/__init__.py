from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
from sqlalchemy.exc import SQLAlchemyError
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
allowed_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from echoarena.api.auth import auth
    flask_app.register_blueprint(auth, url_prefix='/api/auth')

    from echoarena.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    from echoarena.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/game')

    from echoarena.api.questions import questions
    flask_app.register_blueprint(questions, url_prefix='/api/questions')

    # Socket.IO handlers bind to the initialized socketio instance
    from echoarena.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    from echoarena.services.games.errors import GameError

    @flask_app.errorhandler(GameError)
    def handle_game_error(exc):
        db.session.rollback()
        flask_app.logger.info(f"[game-error] {exc.code}: {exc.message}")
        return jsonify(exc.to_dict()), exc.status_code

    @flask_app.errorhandler(SQLAlchemyError)
    def handle_storage_error(exc):
        db.session.rollback()
        flask_app.logger.exception("[storage-error] database operation failed")
        return jsonify({'success': False, 'error': 'Internal server error', 'code': 'internal_error'}), 500

    # Flask-Login user loader
    from echoarena.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, user_id)

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from echoarena.seed import seed_database
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            seed_database()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
