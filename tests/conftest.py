import os
import sys
from datetime import datetime, timedelta, timezone

import pytest
from flask import g

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from flashquest_app import create_app, db
from flashquest_app.config import Config
from flashquest_app.models import Achievement, StudySession, User
from flashquest_app.modules.gamification.schemas import AchievementDefinition


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'connect_args': {'check_same_thread': False}
    }
    WTF_CSRF_ENABLED = False
    LOG_TO_FILE = False
    LOG_LEVEL = 'DEBUG'
    SYSTEM_TIMEZONE = 'UTC'


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user_factory(app):
    counter = {'n': 0}

    def make_user(**fields):
        counter['n'] += 1
        n = counter['n']
        user = User(username=f'learner{n}', email=f'learner{n}@example.com', **fields)
        user.set_password('password')
        db.session.add(user)
        db.session.commit()
        return user

    return make_user


@pytest.fixture
def login(client):
    def do_login(user):
        with client.session_transaction() as sess:
            sess['_user_id'] = str(user.user_id)
            sess['_fresh'] = True
        # The app fixture keeps one app context open across requests, so drop
        # Flask-Login's per-context user cache when switching users.
        g.pop('_login_user', None)
        return client

    return do_login


@pytest.fixture
def add_session(app):
    """Insert a study session directly, bypassing the session service."""

    def make_session(user, status=StudySession.STATUS_ACTIVE, answers=None, duration_seconds=0,
                     correct_count=None, started_at=None, total_cards=0, session_xp=0):
        session = StudySession(
            user_id=user.user_id,
            status=status,
            answers=answers or {},
            duration_seconds=duration_seconds,
            correct_count=correct_count,
            total_cards=total_cards,
            session_xp=session_xp,
            started_at=started_at or datetime.now(timezone.utc),
        )
        if status == StudySession.STATUS_COMPLETED:
            session.completed_at = session.started_at + timedelta(seconds=duration_seconds)
        db.session.add(session)
        db.session.commit()
        return session

    return make_session


@pytest.fixture
def add_achievement(app):
    """Insert an achievement row and return its catalog definition."""

    def make_achievement(achievement_id, condition_type, condition_value, xp_reward=10, tier='bronze'):
        db.session.add(Achievement(
            achievement_id=achievement_id,
            title=achievement_id.replace('_', ' ').title(),
            description=f'{condition_type} >= {condition_value}',
            condition_type=condition_type,
            condition_value=condition_value,
            xp_reward=xp_reward,
            tier=tier,
        ))
        db.session.commit()
        return AchievementDefinition(
            id=achievement_id,
            title=achievement_id,
            condition_type=condition_type,
            condition_value=condition_value,
            xp_reward=xp_reward,
            tier=tier,
        )

    return make_achievement


@pytest.fixture
def app_log(app, caplog):
    """Route the app logger (which does not propagate) into caplog."""
    app.logger.addHandler(caplog.handler)
    try:
        yield caplog
    finally:
        app.logger.removeHandler(caplog.handler)


def answers_map(correct=0, incorrect=0, skipped=0):
    answers = {}
    for outcome, count in (('correct', correct), ('incorrect', incorrect), ('skipped', skipped)):
        for _ in range(count):
            answers[f'attempt-{len(answers) + 1}'] = outcome
    return answers
