from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
from datetime import timedelta
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('ALLOWED_ORIGINS') or []

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Dictionary layers and rack policy are built once per app and shared by all requests
    from wordrush.services.words import build_oracle, build_rack_generator
    cache = None
    if flask_app.config.get('DICTIONARY_CACHE_BACKEND', 'database') == 'database':
        from wordrush.services.words.cache import DatabaseDictionaryCache
        cache = DatabaseDictionaryCache(ttl=timedelta(days=int(flask_app.config.get('DICTIONARY_CACHE_DAYS', 7))))
    flask_app.extensions['wordrush'] = {
        'oracle': build_oracle(flask_app.config, cache=cache),
        'racks': build_rack_generator(flask_app.config),
        'dictionary_cache': cache,
    }

    from wordrush.errors import GameError

    @flask_app.errorhandler(GameError)
    def handle_game_error(exc):
        return jsonify(exc.to_dict()), exc.status_code

    from wordrush.main import main
    flask_app.register_blueprint(main)

    from wordrush.api.game import game
    flask_app.register_blueprint(game, url_prefix='/api/game')

    from wordrush.api.shop import shop
    flask_app.register_blueprint(shop, url_prefix='/api/shop')

    from wordrush.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    from wordrush.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Authentication required', 'code': 'unauthorized'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed players
            for u in ['testuser1', 'testuser2', 'testuser3']:
                user = User(username=u, name=u, gems=0, free_swaps_left=flask_app.config.get('FREE_SWAPS_PER_DAY', 3))
                user.set_password('password')
                db.session.add(user)

            db.session.commit()
            print('Database has been reset and seeded!')

    @click.command('leaderboard-clear')
    def leaderboard_clear_command():
        """Deletes played sessions and zeroes leaderboard statistics."""
        from wordrush.models import GameSession
        with flask_app.app_context():
            removed = GameSession.query.delete()
            User.query.update({'best_score': 0, 'total_gems': 0, 'total_games': 0})
            db.session.commit()
            print(f'Leaderboard cleared ({removed} sessions removed).')

    @click.command('dictionary-purge')
    def dictionary_purge_command():
        """Removes expired remote dictionary answers from the cache table."""
        with flask_app.app_context():
            store = flask_app.extensions['wordrush']['dictionary_cache']
            if store is None:
                print('Dictionary cache is not database-backed; nothing to purge.')
                return
            print(f'Removed {store.purge_expired()} expired entries.')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(leaderboard_clear_command)
    flask_app.cli.add_command(dictionary_purge_command)

    return flask_app
