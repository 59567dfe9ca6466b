from flask import jsonify, request
from flask_login import login_required, current_user

from flashquest_app.core.error_handlers import ValidationError, success_response
from . import study_sessions_api_bp
from .services import StudySessionService


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


@study_sessions_api_bp.route('', methods=['POST'])
@login_required
def start_session_api():
    data = _json_body()
    session = StudySessionService.start_session(
        current_user.user_id,
        deck_id=data.get('deck_id'),
        total_cards=data.get('total_cards', 0),
    )
    return jsonify(success_response(session)), 201


@study_sessions_api_bp.route('/<int:session_id>', methods=['GET'])
@login_required
def get_session_api(session_id):
    session = StudySessionService.get_session(current_user.user_id, session_id)
    return jsonify(success_response(session.to_dict()))


@study_sessions_api_bp.route('/<int:session_id>', methods=['PUT'])
@login_required
def autosave_session_api(session_id):
    """Auto-save live progress; the client calls this on a timer."""
    data = _json_body()
    result = StudySessionService.autosave(
        current_user.user_id,
        session_id,
        answers=data.get('answers'),
        session_xp=data.get('session_xp'),
        duration_seconds=data.get('duration_seconds'),
    )
    return jsonify(success_response(result))


@study_sessions_api_bp.route('/<int:session_id>/complete', methods=['POST'])
@login_required
def complete_session_api(session_id):
    data = _json_body()
    missing = [field for field in ('score', 'correct_count') if field not in data]
    if missing:
        raise ValidationError('Missing required fields', errors={field: 'required' for field in missing})

    result = StudySessionService.complete(
        current_user.user_id,
        session_id,
        score=data['score'],
        correct_count=data['correct_count'],
        incorrect_count=data.get('incorrect_count', 0),
        skipped_count=data.get('skipped_count', 0),
        duration_seconds=data.get('duration_seconds'),
        session_xp=data.get('session_xp'),
        cards_learned=data.get('cards_learned', 0),
        mastered_card_ids=data.get('mastered_card_ids') or (),
    )
    return jsonify(success_response(result, message='Session completed'))
