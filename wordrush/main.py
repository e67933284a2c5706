from flask import Blueprint, request, jsonify, current_app
from flask_login import login_user, logout_user, login_required, current_user
from datetime import datetime
import re
from wordrush import db
from wordrush.errors import InvalidInput
from wordrush.models import User

main = Blueprint('main', __name__)

USERNAME_RE = re.compile(r'^[A-Za-z0-9_-]{1,40}$')


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the WordRush game server!'})


@main.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    username = data.get('username')
    password = data.get('password')
    name = data.get('name')
    if not isinstance(username, str) or not USERNAME_RE.match(username):
        raise InvalidInput('username must be 1-40 letters, digits, dashes or underscores')
    if not isinstance(password, str) or len(password) < 6:
        raise InvalidInput('password must be at least 6 characters')
    if name is not None and (not isinstance(name, str) or len(name) > 80):
        raise InvalidInput('name must be at most 80 characters')

    if User.query.filter_by(username=username).first():
        return jsonify({'error': 'Username already exists', 'code': 'username_taken'}), 400

    user = User(
        username=username,
        name=name or username,
        gems=0,
        free_swaps_left=int(current_app.config.get('FREE_SWAPS_PER_DAY', 3)),
        last_free_reset_at=datetime.utcnow().date(),
    )
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    login_user(user, remember=True)
    current_app.logger.info(f"[register] user={user.id} username={user.username}")
    return jsonify({'user': user.to_dict()}), 201


@main.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    user = User.query.filter_by(username=data.get('username')).first()
    if user and user.check_password(data.get('password') or ''):
        login_user(user, remember=True)
        return jsonify({'user': user.to_dict()})
    return jsonify({'error': 'Invalid username or password', 'code': 'invalid_credentials'}), 401


@main.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'message': 'Logged out successfully.'})


@main.route('/me')
@login_required
def profile():
    return jsonify(current_user.to_dict())


@main.route('/api/leaderboard')
@login_required
def leaderboard():
    leaders = (
        User.query.order_by(User.best_score.desc(), User.total_gems.desc())
        .limit(20)
        .all()
    )
    return jsonify([u.to_leader_dict() for u in leaders])
