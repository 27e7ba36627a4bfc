import time
from datetime import datetime, timezone

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user
from pydantic import ValidationError

from sportshub import db
from sportshub.api.schemas import CredentialsRequest, validation_details
from sportshub.models import User
from sportshub.realtime import get_realtime

main = Blueprint('main', __name__)

_started = time.monotonic()


@main.route('/')
def index():
    return jsonify({'message': 'SportsHub API is running!'})


@main.route('/api/health')
def health():
    return jsonify({
        'status': 'ok',
        'uptime': time.monotonic() - _started,
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'connections': get_realtime().broadcaster.connection_count(),
    })


def _credentials():
    return CredentialsRequest.model_validate(request.get_json(silent=True) or {})


@main.route('/api/auth/register', methods=['POST'])
def register():
    try:
        data = _credentials()
    except ValidationError as exc:
        return jsonify({'error': 'Missing username or password', 'details': validation_details(exc)}), 400
    if User.query.filter_by(username=data.username).first():
        return jsonify({'error': 'Username already exists'}), 400

    user = User(username=data.username, name=data.name)
    user.set_password(data.password)
    db.session.add(user)
    db.session.commit()
    login_user(user)
    return jsonify({'user': user.to_dict()}), 201


@main.route('/api/auth/login', methods=['POST'])
def login():
    try:
        data = _credentials()
    except ValidationError as exc:
        return jsonify({'error': 'Missing username or password', 'details': validation_details(exc)}), 400
    user = User.query.filter_by(username=data.username).first()
    if user and user.check_password(data.password):
        login_user(user, remember=True)
        return jsonify({'user': user.to_dict()})
    return jsonify({'error': 'Invalid username or password'}), 401


@main.route('/api/auth/me', methods=['GET'])
@login_required
def me():
    return jsonify({'user': current_user.to_dict()})


@main.route('/api/auth/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'message': 'Logged out successfully.'})
