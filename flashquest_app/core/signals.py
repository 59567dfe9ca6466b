"""
Central Signal Registry for Event-Driven Architecture.

Uses blinker to let modules react to progression changes without importing
each other.

Usage:
    # Publisher (sender)
    from flashquest_app.core.signals import xp_awarded
    xp_awarded.send(None, user_id=1, amount=50, ...)

    # Subscriber (receiver) - in module's events.py
    @xp_awarded.connect
    def on_xp_awarded(sender, **kwargs):
        ...
"""
from blinker import Namespace

progression_signals = Namespace()

# Signal: Fired after XP has been credited to a user
# Payload: user_id, amount, reason, old_level, new_level, total_xp
xp_awarded = progression_signals.signal('xp_awarded')

# Signal: Fired when an XP credit pushed the user over one or more levels
# Payload: user_id, old_level, new_level
level_up = progression_signals.signal('level_up')

# Signal: Fired once per newly created achievement unlock
# Payload: user_id, achievement_id, xp_reward
achievement_unlocked = progression_signals.signal('achievement_unlocked')
