from flask import jsonify, request
from flask_login import login_required, current_user

from flashquest_app.core.error_handlers import ValidationError, success_response
from . import gamification_api_bp
from .constants import ACTIVITY_CALENDAR_DAYS
from .services import AchievementService, DailyChallengeService, ProgressionService


@gamification_api_bp.route('/progression', methods=['GET'])
@login_required
def get_progression_api():
    """Level, XP and streak of the current user."""
    return jsonify(success_response(ProgressionService.get_progression(current_user.user_id)))


@gamification_api_bp.route('/achievements', methods=['GET'])
@login_required
def list_achievements_api():
    return jsonify(success_response(AchievementService.list_achievements(current_user.user_id)))


@gamification_api_bp.route('/achievements/evaluate', methods=['POST'])
@login_required
def evaluate_achievements_api():
    """Re-check lifetime achievements; safe to call repeatedly."""
    unlocked = AchievementService.evaluate(current_user.user_id)
    return jsonify(success_response({'new_achievements': AchievementService.as_payload(unlocked)}))


@gamification_api_bp.route('/daily-challenges/today', methods=['GET'])
@login_required
def get_daily_challenges_api():
    challenges = DailyChallengeService.get_today(current_user.user_id)
    return jsonify(success_response(challenges.to_dict()))


@gamification_api_bp.route('/daily-challenges/claim-reward', methods=['POST'])
@login_required
def claim_daily_reward_api():
    data = request.get_json(silent=True) or {}
    challenge_id = data.get('challenge_id')
    if not challenge_id:
        raise ValidationError('challenge_id is required', errors={'challenge_id': 'missing'})

    result = DailyChallengeService.claim_reward(current_user.user_id, challenge_id)
    return jsonify(success_response(result.to_dict(), message=f'Claimed {result.xp_earned} XP'))


@gamification_api_bp.route('/daily-challenges/activity-calendar', methods=['GET'])
@login_required
def get_activity_calendar_api():
    days = request.args.get('days', ACTIVITY_CALENDAR_DAYS, type=int)
    if days < 1 or days > 366:
        raise ValidationError('days must be between 1 and 366', errors={'days': days})
    calendar = DailyChallengeService.get_activity_calendar(current_user.user_id, days)
    return jsonify(success_response({'calendar': calendar}))
