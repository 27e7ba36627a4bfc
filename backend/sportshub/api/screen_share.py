from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required
from pydantic import ValidationError

from sportshub.services.screen_share import ScreenShareError, ScreenShareService
from .schemas import CreateScreenShareRequest, LeaveScreenShareRequest, UpdateScreenShareRequest, validation_details

screen_share = Blueprint('screen_share', __name__)

SERVICE_KEY = 'sportshub.screen_share'


def get_service() -> ScreenShareService:
    return current_app.extensions[SERVICE_KEY]


def _invalid(exc: ValidationError):
    return jsonify({'error': 'Invalid request data', 'details': validation_details(exc)}), 400


def _failed(exc: ScreenShareError):
    return jsonify({'error': str(exc)}), exc.status_code


def _optional_user_id():
    return current_user.id if current_user.is_authenticated else None


@screen_share.route('/sessions', methods=['POST'])
@login_required
def create_session():
    try:
        body = CreateScreenShareRequest.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return _invalid(exc)
    try:
        session = get_service().create_session(current_user.id, **body.model_dump())
    except ScreenShareError as exc:
        return _failed(exc)
    return jsonify(session.to_dict()), 201


@screen_share.route('/sessions', methods=['GET'])
def list_sessions():
    limit = request.args.get('limit', 20, type=int)
    limit = max(1, min(limit or 20, 100))
    sessions = get_service().get_active_sessions(limit)
    return jsonify({'data': [s.to_dict() for s in sessions], 'count': len(sessions)})


@screen_share.route('/sessions/<string:session_id>', methods=['GET'])
def get_session(session_id):
    session = get_service().get_session(session_id)
    if session is None:
        return jsonify({'error': 'Session not found'}), 404
    return jsonify(session.to_dict(include_viewers=True))


@screen_share.route('/sessions/<string:session_id>', methods=['PATCH'])
@login_required
def update_session(session_id):
    try:
        body = UpdateScreenShareRequest.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return _invalid(exc)
    try:
        session = get_service().update_session(session_id, current_user.id, **body.model_dump(exclude_none=True))
    except ScreenShareError as exc:
        return _failed(exc)
    return jsonify(session.to_dict())


@screen_share.route('/sessions/<string:session_id>', methods=['DELETE'])
@login_required
def end_session(session_id):
    try:
        get_service().end_session(session_id, current_user.id)
    except ScreenShareError as exc:
        return _failed(exc)
    return jsonify({'message': 'Session ended successfully'})


@screen_share.route('/sessions/<string:session_id>/join', methods=['POST'])
def join_session(session_id):
    # Anonymous viewers are allowed
    try:
        result = get_service().join_session(session_id, _optional_user_id())
    except ScreenShareError as exc:
        return _failed(exc)
    return jsonify({
        'session': result['session'].to_dict(),
        'viewer_id': result['viewer_id'],
        'ice_servers': result['ice_servers'],
    })


@screen_share.route('/sessions/<string:session_id>/leave', methods=['POST'])
def leave_session(session_id):
    try:
        body = LeaveScreenShareRequest.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return _invalid(exc)
    try:
        get_service().leave_session(session_id, _optional_user_id(), viewer_id=body.viewer_id)
    except ScreenShareError as exc:
        return _failed(exc)
    return jsonify({'message': 'Left session successfully'})


@screen_share.route('/games/<int:game_id>/sessions', methods=['GET'])
def game_sessions(game_id):
    sessions = get_service().get_sessions_for_game(game_id)
    return jsonify({'data': [s.to_dict() for s in sessions], 'count': len(sessions)})


@screen_share.route('/my-sessions', methods=['GET'])
@login_required
def my_sessions():
    sessions = get_service().get_user_sessions(current_user.id)
    return jsonify({'data': [s.to_dict() for s in sessions], 'count': len(sessions)})


@screen_share.route('/ice-servers', methods=['GET'])
def ice_servers():
    return jsonify({'ice_servers': get_service().ice_servers})
