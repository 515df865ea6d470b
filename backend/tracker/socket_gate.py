import json

from werkzeug.wrappers import Request, Response

SOCKETIO_PATH = '/socket.io'


class SessionGate:
    """WSGI middleware refusing Socket.IO transport requests without a session.

    Sits outside the Engine.IO middleware, so an unauthenticated client gets
    a 401 before any transport is opened (polling handshake or websocket
    upgrade) and never receives an Engine.IO session id.
    """

    def __init__(self, flask_app, wsgi_app, resolver):
        self.flask_app = flask_app
        self.wsgi_app = wsgi_app
        self.resolver = resolver

    def __call__(self, environ, start_response):
        path = environ.get('PATH_INFO', '')
        if path != SOCKETIO_PATH and not path.startswith(SOCKETIO_PATH + '/'):
            return self.wsgi_app(environ, start_response)

        token = Request(environ).cookies.get(self.flask_app.config['SESSION_TOKEN_COOKIE'])
        with self.flask_app.app_context():
            user = self.resolver.resolve_by_token(token)
        if user is None:
            self.flask_app.logger.info(f"[ws-refuse] path={path} unauthenticated")
            response = Response(
                json.dumps({'success': False, 'message': 'unauthorized'}),
                status=401,
                mimetype='application/json',
            )
            return response(environ, start_response)
        return self.wsgi_app(environ, start_response)
