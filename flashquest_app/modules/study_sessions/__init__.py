from flask import Blueprint

study_sessions_api_bp = Blueprint(
    'study_sessions_api',
    __name__,
    url_prefix='/api/study-sessions'
)

from . import routes  # noqa: E402,F401
