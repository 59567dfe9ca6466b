from .session_service import StudySessionService

__all__ = ['StudySessionService']
