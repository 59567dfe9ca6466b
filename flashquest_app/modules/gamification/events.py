"""
Event Handlers for Gamification Module.

Listens to the progression signals, which are sent only after the
user's transaction has committed.
"""
from flask import current_app

from flashquest_app.core.signals import achievement_unlocked, level_up, xp_awarded


@xp_awarded.connect
def on_xp_awarded(sender, **kwargs):
    """
    Expected kwargs:
        - user_id: int
        - amount: int
        - reason: str
        - old_level / new_level: int
        - total_xp: int
    """
    current_app.logger.debug(
        f"[Gamification] xp_awarded user={kwargs.get('user_id')} amount={kwargs.get('amount')} "
        f"reason={kwargs.get('reason')} total={kwargs.get('total_xp')}"
    )


@level_up.connect
def on_level_up(sender, **kwargs):
    current_app.logger.info(
        f"[Gamification] User {kwargs.get('user_id')} reached level {kwargs.get('new_level')} "
        f"(from {kwargs.get('old_level')})"
    )


@achievement_unlocked.connect
def on_achievement_unlocked(sender, **kwargs):
    current_app.logger.debug(
        f"[Gamification] achievement_unlocked user={kwargs.get('user_id')} "
        f"achievement={kwargs.get('achievement_id')} xp={kwargs.get('xp_reward')}"
    )
