import pytest

from flashquest_app.modules.gamification.constants import ConditionType
from flashquest_app.modules.gamification.logics import achievement_rules
from flashquest_app.modules.gamification.logics.achievement_rules import (
    InvalidConditionTypeError,
    condition_met,
    hour_in_window,
)
from flashquest_app.modules.gamification.logics.catalog import AchievementCatalog
from flashquest_app.modules.gamification.schemas import (
    AchievementDefinition,
    SessionContext,
    UserStats,
)


class StubCounters:
    def __init__(self, decks_created=0, sessions_completed=0, mastered_decks=0):
        self._values = {
            'decks_created': decks_created,
            'sessions_completed': sessions_completed,
            'mastered_decks': mastered_decks,
        }

    def decks_created(self):
        return self._values['decks_created']

    def sessions_completed(self):
        return self._values['sessions_completed']

    def mastered_decks(self):
        return self._values['mastered_decks']


def definition(condition_type, value, achievement_id='x'):
    kind = condition_type.value if isinstance(condition_type, ConditionType) else condition_type
    return AchievementDefinition(id=achievement_id, title=achievement_id, condition_type=kind,
                                 condition_value=value, xp_reward=10)


def stats(**overrides):
    values = dict(level=1, streak=0, total_cards_learned=0, total_decks_completed=0, total_xp=0)
    values.update(overrides)
    return UserStats(**values)


class TestLifetimeRules:

    @pytest.mark.parametrize('condition_type, field', [
        (ConditionType.DECKS_COMPLETED, 'total_decks_completed'),
        (ConditionType.STREAK_DAYS, 'streak'),
        (ConditionType.CARDS_MASTERED, 'total_cards_learned'),
        (ConditionType.LEVEL_REACHED, 'level'),
        (ConditionType.TOTAL_XP, 'total_xp'),
    ])
    def test_stat_threshold_is_inclusive(self, condition_type, field):
        rule = definition(condition_type, 5)

        assert condition_met(rule, stats(**{field: 5}), StubCounters())
        assert not condition_met(rule, stats(**{field: 4}), StubCounters())

    def test_counter_rules(self):
        counters = StubCounters(decks_created=3, sessions_completed=49, mastered_decks=1)

        assert condition_met(definition(ConditionType.DECKS_CREATED, 3), stats(), counters)
        assert not condition_met(definition(ConditionType.TOTAL_SESSIONS_COMPLETED, 50), stats(), counters)
        assert condition_met(definition(ConditionType.CARDS_MASTERED_SINGLE_DECK, 1), stats(), counters)


class TestSessionRules:

    def test_session_rules_need_context(self):
        for condition_type in achievement_rules.SESSION_SCOPED:
            assert not condition_met(definition(condition_type, 1), stats(), StubCounters())

    def test_cards_per_minute(self):
        rule = definition(ConditionType.CARDS_PER_MINUTE, 10)

        assert condition_met(rule, stats(), StubCounters(), SessionContext(correct_count=12, duration_seconds=60))
        assert not condition_met(rule, stats(), StubCounters(), SessionContext(correct_count=12, duration_seconds=90))

    def test_cards_per_minute_minimum_count_guard(self):
        """A handful of very fast answers does not qualify."""
        rule = definition(ConditionType.CARDS_PER_MINUTE, 10)
        fast_but_few = SessionContext(correct_count=5, duration_seconds=10)

        assert not condition_met(rule, stats(), StubCounters(), fast_but_few)

    def test_cards_per_minute_guard_uses_larger_threshold(self):
        rule = definition(ConditionType.CARDS_PER_MINUTE, 15)

        assert not condition_met(rule, stats(), StubCounters(), SessionContext(correct_count=12, duration_seconds=30))
        assert condition_met(rule, stats(), StubCounters(), SessionContext(correct_count=15, duration_seconds=60))

    def test_cards_per_minute_zero_duration(self):
        rule = definition(ConditionType.CARDS_PER_MINUTE, 10)

        assert not condition_met(rule, stats(), StubCounters(), SessionContext(correct_count=50, duration_seconds=0))

    @pytest.mark.parametrize('hour, window, expected', [
        (23, 2300, True),
        (2, 2300, True),
        (3, 2300, True),
        (4, 2300, False),
        (22, 2300, False),
        (5, 500, True),
        (8, 500, True),
        (9, 500, False),
        (4, 500, False),
    ])
    def test_time_windows(self, hour, window, expected):
        assert hour_in_window(hour, window) is expected

    def test_time_of_day_needs_a_correct_answer(self):
        rule = definition(ConditionType.SESSION_TIME_OF_DAY, 500)

        assert condition_met(rule, stats(), StubCounters(),
                             SessionContext(correct_count=1, duration_seconds=60, completed_at_hour=6))
        assert not condition_met(rule, stats(), StubCounters(),
                                 SessionContext(correct_count=0, duration_seconds=60, completed_at_hour=6))

    def test_perfect_score(self):
        rule = definition(ConditionType.PERFECT_SCORE_MIN_CARDS, 20)

        def ctx(score, total):
            return SessionContext(correct_count=total, duration_seconds=60, total_cards=total, score=score)

        assert condition_met(rule, stats(), StubCounters(), ctx(100, 20))
        assert not condition_met(rule, stats(), StubCounters(), ctx(100, 19))
        assert not condition_met(rule, stats(), StubCounters(), ctx(99, 40))

    def test_single_session_xp(self):
        rule = definition(ConditionType.SINGLE_SESSION_XP, 200)

        assert condition_met(rule, stats(), StubCounters(),
                             SessionContext(correct_count=1, duration_seconds=1, session_xp=200))


class TestDispatch:

    def test_every_condition_type_has_a_rule(self):
        assert set(achievement_rules._RULES) == set(ConditionType)

    def test_unknown_condition_type_raises(self):
        with pytest.raises(InvalidConditionTypeError) as excinfo:
            condition_met(definition('moon_phase', 1, 'lunar'), stats(), StubCounters())

        assert excinfo.value.achievement_id == 'lunar'


class TestCatalog:

    def test_lookup_and_order(self):
        catalog = AchievementCatalog([
            definition(ConditionType.STREAK_DAYS, 5, 'b'),
            definition(ConditionType.STREAK_DAYS, 7, 'a'),
            definition(ConditionType.LEVEL_REACHED, 10, 'c'),
        ])

        assert len(catalog) == 3
        assert 'a' in catalog
        assert catalog.get('c').condition_value == 10
        assert catalog.get('zzz') is None
        assert [d.id for d in catalog.excluding({'a'})] == ['b', 'c']

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError):
            AchievementCatalog([
                definition(ConditionType.STREAK_DAYS, 5, 'dup'),
                definition(ConditionType.STREAK_DAYS, 7, 'dup'),
            ])
