from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()
# Threading mode: channel locks are real OS locks. Handlers run inline so one
# connection's commands are processed in arrival order.
socketio = SocketIO(async_mode='threading', async_handlers=False)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from tracker.services.auth import SessionResolver
    from tracker.services.timers import ConnectionRegistry, HeartbeatScheduler, SyncEngine, TimerStore

    resolver = SessionResolver(ttl_sec=flask_app.config.get('SESSION_TTL_SEC', 0))
    testing = flask_app.config.get('TESTING', False)
    heartbeat = HeartbeatScheduler(
        flask_app,
        interval=float(flask_app.config.get('HEARTBEAT_INTERVAL_SEC', 1.0)),
        enabled=not testing or flask_app.config.get('ENABLE_HEARTBEAT_IN_TESTS', False),
    )
    engine = SyncEngine(
        TimerStore(),
        ConnectionRegistry(),
        heartbeat,
        close_superseded=flask_app.config.get('CLOSE_SUPERSEDED_CONNECTIONS', False),
    )
    flask_app.extensions['session_resolver'] = resolver
    flask_app.extensions['timer_sync'] = engine

    # Refuse unauthenticated transports before Engine.IO opens a session
    from tracker.socket_gate import SessionGate
    flask_app.wsgi_app = SessionGate(flask_app, flask_app.wsgi_app, resolver)

    # Import and register blueprints here
    from tracker.main import main
    flask_app.register_blueprint(main)

    # Register Socket.IO event handlers
    from tracker.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    # Flask-Login resolves the user from the opaque session cookie
    from tracker.models import User

    @login_manager.request_loader
    def load_user_from_request(req):
        token = req.cookies.get(flask_app.config['SESSION_TOKEN_COOKIE'])
        return resolver.resolve_by_token(token)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"success": False, "message": "Login required"}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed users
            users = ['testuser1', 'testuser2', 'testuser3']
            for u in users:
                user = User(username=u)
                user.set_password('password')
                db.session.add(user)

            db.session.commit()
            print('Database has been reset and seeded!')

    @click.command('purge-sessions')
    def purge_sessions_command():
        """Deletes sessions older than SESSION_TTL_SEC."""
        with flask_app.app_context():
            removed = resolver.purge_expired()
            print(f'Removed {removed} expired session(s).')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(purge_sessions_command)

    return flask_app
