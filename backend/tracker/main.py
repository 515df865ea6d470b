from flask import Blueprint, current_app, request, jsonify
from flask_login import login_required, current_user
from tracker.services.auth import create_user, find_user_by_username

main = Blueprint('main', __name__)


def _credentials():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = request.form
    username = data.get('username')
    password = data.get('password')
    if not isinstance(username, str) or not isinstance(password, str):
        return None, None
    return username.strip(), password


def _with_session_cookie(response, user):
    token = current_app.extensions['session_resolver'].create_session(user.id)
    response.set_cookie(current_app.config['SESSION_TOKEN_COOKIE'], token, httponly=True, samesite='Lax')
    return response


@main.route('/')
def index():
    user = current_user.to_dict() if current_user.is_authenticated else None
    return jsonify({'user': user, 'authError': request.args.get('authError')})


@main.route('/login', methods=['POST', 'OPTIONS'])
def login():
    if request.method == 'OPTIONS':
        return jsonify({'status': 'ok'}), 200
    username, password = _credentials()
    if username is None:
        return jsonify({"success": False, "message": "Missing username or password"}), 400
    user = find_user_by_username(username)
    if not user:
        return jsonify({"success": False, "message": "Unknown username"}), 401
    if not user.check_password(password):
        return jsonify({"success": False, "message": "Wrong password"}), 401
    current_app.logger.info(f"[login] user={user.id}")
    return _with_session_cookie(jsonify({"success": True, "user": user.to_dict()}), user)


@main.route('/signup', methods=['POST', 'OPTIONS'])
def signup():
    if request.method == 'OPTIONS':
        return jsonify({'status': 'ok'}), 200
    username, password = _credentials()
    if not username or not password:
        return jsonify({"success": False, "message": "Missing username or password"}), 400
    if find_user_by_username(username):
        return jsonify({"success": False, "message": "The user is already registered"}), 400
    new_user = create_user(username, password)
    current_app.logger.info(f"[signup] user={new_user.id}")
    response = _with_session_cookie(jsonify({"success": True, "user": new_user.to_dict()}), new_user)
    return response, 201


@main.route('/check_login', methods=['GET'])
@login_required
def check_login():
    return jsonify({"success": True, "user": current_user.to_dict()})


@main.route('/logout', methods=['GET', 'POST'])
@login_required
def logout():
    cookie_name = current_app.config['SESSION_TOKEN_COOKIE']
    current_app.extensions['session_resolver'].delete_session(request.cookies.get(cookie_name))
    current_app.logger.info(f"[logout] user={current_user.id}")
    response = jsonify({"success": True})
    response.delete_cookie(cookie_name)
    return response
