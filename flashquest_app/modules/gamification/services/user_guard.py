"""
User Guard
==========
Per-user serialization boundary for every progression write.

All read-modify-write sequences on a user's XP, achievements and daily
challenges run inside ``user_transaction(user_id)``:

- a process-local lock per user orders concurrent writers in this process;
- the user row is loaded ``FOR UPDATE`` so other processes queue on the
  database (a no-op on SQLite, whose writers are already serialized);
- nested scopes on the same thread join the outermost one, which alone
  commits or rolls back;
- signals raised inside the scope are delivered only after commit;
- ``savepoint()`` lets an optional step fail without losing the rest.
"""

import threading
import weakref
from contextlib import contextmanager

from flask import current_app

from flashquest_app.extensions import db
from flashquest_app.models import User
from flashquest_app.core.error_handlers import NotFoundError

_registry_lock = threading.Lock()
# Entries disappear once no transaction holds the lock
_user_locks = weakref.WeakValueDictionary()
_state = threading.local()


def _lock_for(user_id: int) -> threading.RLock:
    with _registry_lock:
        lock = _user_locks.get(user_id)
        if lock is None:
            lock = _user_locks[user_id] = threading.RLock()
        return lock


def _depth() -> int:
    return getattr(_state, 'depth', 0)


def in_user_transaction() -> bool:
    return _depth() > 0


def defer_signal(signal, **payload):
    """Send ``signal`` after the enclosing transaction commits, or now if there is none."""
    if in_user_transaction():
        _state.pending.append((signal, payload))
    else:
        signal.send(current_app._get_current_object(), **payload)


def _flush_signals(pending):
    app = current_app._get_current_object()
    for signal, payload in pending:
        signal.send(app, **payload)


@contextmanager
def user_transaction(user_id: int):
    """
    Serialize progression writes for ``user_id`` and yield the locked User.

    Raises:
        NotFoundError: no such user.
    """
    lock = _lock_for(user_id)
    lock.acquire()
    outermost = _depth() == 0
    if outermost:
        _state.pending = []
    _state.depth = _depth() + 1
    committed = None
    try:
        stmt = db.select(User).filter_by(user_id=user_id).with_for_update()
        if outermost:
            stmt = stmt.execution_options(populate_existing=True)
        user = db.session.execute(stmt).scalar_one_or_none()
        if user is None:
            raise NotFoundError(f'User {user_id} not found', resource='user')

        yield user

        if outermost:
            db.session.commit()
            committed = _state.pending
    except Exception:
        if outermost:
            db.session.rollback()
        raise
    finally:
        _state.depth -= 1
        if outermost:
            _state.pending = []
        lock.release()

    if committed:
        _flush_signals(committed)


@contextmanager
def savepoint():
    """
    Run a step that may fail without aborting the enclosing user transaction.

    The step's writes roll back to a SAVEPOINT and the signals it deferred are
    dropped; the exception still propagates to the caller.
    """
    pending = _state.pending if in_user_transaction() else []
    mark = len(pending)
    try:
        with db.session.begin_nested():
            yield
    except Exception:
        del pending[mark:]
        raise
