from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
# Handlers run inline so one connection's messages apply in the order sent
socketio = SocketIO(async_mode=None, async_handlers=False)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    origins = flask_app.config.get('CORS_ORIGINS', [])
    CORS(flask_app, supports_credentials=True, origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    # Realtime core: one transport shared by the broadcaster and the relay
    from sportshub.realtime import EXTENSION_KEY, Realtime, SignalingRelay, SocketIOTransport, TopicBroadcaster
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')
    transport = SocketIOTransport(socketio, namespace)
    realtime = Realtime(
        broadcaster=TopicBroadcaster(transport, logger=flask_app.logger),
        relay=SignalingRelay(transport, logger=flask_app.logger),
    )
    flask_app.extensions[EXTENSION_KEY] = realtime

    from sportshub.socketio_events import register_socketio_handlers
    register_socketio_handlers(socketio, realtime, namespace)

    from sportshub.services.screen_share import ScreenShareService
    from sportshub.api.screen_share import SERVICE_KEY
    screen_share_service = ScreenShareService(realtime.relay, flask_app.config, logger=flask_app.logger)
    flask_app.extensions[SERVICE_KEY] = screen_share_service

    from sportshub.services.sports import SportsService
    sports_service = SportsService(flask_app)
    flask_app.extensions['sportshub.sports'] = sports_service

    # Import and register blueprints here
    from sportshub.main import main
    flask_app.register_blueprint(main)

    from sportshub.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from sportshub.api.screen_share import screen_share
    flask_app.register_blueprint(screen_share, url_prefix='/api/screen-share')

    # Flask-Login user loader
    from sportshub.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Unauthorized', 'message': 'Authentication required'}), 401

    if not flask_app.config.get('TESTING'):
        if flask_app.config.get('ENABLE_POLLING'):
            try:
                sports_service.initialize_sports()
            except Exception as exc:
                # Keep the API up when the database or sports feed is unavailable at boot
                flask_app.logger.warning(f"Sports polling not started: {exc}")
        # Session expiry does not depend on the sports feed
        _start_session_sweeper(flask_app, screen_share_service, sports_service)

    _register_cli(flask_app, sports_service, screen_share_service)

    return flask_app


def _start_session_sweeper(flask_app, screen_share_service, sports_service):
    interval = int(flask_app.config.get('SESSION_SWEEP_INTERVAL_SEC', 0))
    if interval <= 0:
        return
    from sportshub.services.sports.scheduler import start_repeating_task
    start_repeating_task(
        flask_app,
        'session-sweep',
        screen_share_service.cleanup_expired_sessions,
        lambda: interval,
        sports_service.stop_event,
    )


def _register_cli(flask_app, sports_service, screen_share_service):

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from sportshub.models import User
        from sportshub.services.sports import ensure_sport
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            ensure_sport('soccer', 'Soccer')
            for u in ['testuser1', 'testuser2', 'testuser3']:
                user = User(username=u)
                user.set_password('password')
                db.session.add(user)

            db.session.commit()
            print('Database has been reset and seeded!')

    @click.command('poll-now')
    @click.argument('kind', type=click.Choice(['daily', 'live']), default='daily')
    def poll_now_command(kind):
        """Runs one sports poll immediately and publishes any changes."""
        sports_service.initialize_sports(start_polling=False)
        with flask_app.app_context():
            published = sports_service.trigger_fetch(kind)
        print(f'Poll finished: {published} events published')

    @click.command('sweep-sessions')
    def sweep_sessions_command():
        """Ends screen-share sessions older than the configured timeout."""
        with flask_app.app_context():
            ended = screen_share_service.cleanup_expired_sessions()
        print(f'Ended {ended} expired sessions')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(poll_now_command)
    flask_app.cli.add_command(sweep_sessions_command)
