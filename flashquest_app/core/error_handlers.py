"""
Error Handlers for FlashQuest

Provides:
- Custom exception classes
- Consistent error response format
- Flask error handlers
"""

from flask import jsonify, request, current_app
from typing import Optional, Dict, Any


class FlashQuestError(Exception):
    """Base exception class for FlashQuest."""

    # Expected rejections are user-facing outcomes, not failures
    expected = False

    def __init__(
        self,
        message: str,
        code: str = 'UNKNOWN_ERROR',
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert error to dictionary for JSON response."""
        return {
            'success': False,
            'message': self.message,
            'code': self.code,
            'details': self.details
        }


class NotFoundError(FlashQuestError):
    """Resource not found."""

    def __init__(self, message: str = 'Resource not found', resource: str = None):
        super().__init__(
            message=message,
            code='NOT_FOUND',
            status_code=404,
            details={'resource': resource} if resource else None
        )


class ValidationError(FlashQuestError):
    """Input validation failed."""

    def __init__(self, message: str = 'Validation failed', errors: Dict = None):
        super().__init__(
            message=message,
            code='VALIDATION_ERROR',
            status_code=400,
            details={'errors': errors} if errors else None
        )


class AuthorizationError(FlashQuestError):
    """Access denied."""

    def __init__(self, message: str = 'Access denied'):
        super().__init__(
            message=message,
            code='UNAUTHORIZED',
            status_code=403
        )


class AlreadyClaimedError(FlashQuestError):
    """Daily challenge reward was already paid out today."""

    expected = True

    def __init__(self, challenge_id: str):
        super().__init__(
            message='Reward already claimed',
            code='ALREADY_CLAIMED',
            status_code=409,
            details={'challenge_id': challenge_id}
        )


class NotCompletedError(FlashQuestError):
    """Daily challenge target has not been reached yet."""

    expected = True

    def __init__(self, challenge_id: str, progress: int = 0, target: int = 0):
        super().__init__(
            message='Challenge not completed yet',
            code='NOT_COMPLETED',
            status_code=400,
            details={'challenge_id': challenge_id, 'progress': progress, 'target': target}
        )


class SessionAlreadyCompletedError(FlashQuestError):
    """Study session was already finalized."""

    def __init__(self, session_id: int):
        super().__init__(
            message='Session already completed',
            code='ALREADY_COMPLETED',
            status_code=409,
            details={'session_id': session_id}
        )


def error_response(
    message: str,
    code: str = 'ERROR',
    status_code: int = 400,
    details: Dict = None
) -> tuple:
    """Create a standardized error response."""
    response = {
        'success': False,
        'message': message,
        'code': code
    }
    if details:
        response['details'] = details

    return jsonify(response), status_code


def success_response(data: Any = None, message: str = None) -> dict:
    """Create a standardized success response."""
    response = {'success': True}
    if data is not None:
        response['data'] = data
    if message:
        response['message'] = message
    return response


def register_error_handlers(app):
    """Register error handlers with Flask app."""

    @app.errorhandler(FlashQuestError)
    def handle_flashquest_error(error):
        if error.expected:
            current_app.logger.info(f"{error.code}: {error.message} {error.details}")
        else:
            current_app.logger.error(f"{error.code}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def handle_not_found(error):
        if request.path.startswith('/api/'):
            return error_response('Endpoint not found', 'NOT_FOUND', 404)
        return error

    @app.errorhandler(500)
    def handle_internal_error(error):
        current_app.logger.exception('Internal server error')
        if request.path.startswith('/api/'):
            return error_response('Internal server error', 'SERVER_ERROR', 500)
        return error
