"""Process-local locks serializing writes to a league's draft session.

The store is the source of truth; these locks only make the read-check-write
sequence in start_draft / make_pick / reset_draft atomic within one process.
They provide no cross-process synchronization.
"""

from contextlib import contextmanager
from threading import Lock, RLock
from typing import Dict, Iterator, Optional

_REGISTRY_LOCK = Lock()
_LEAGUE_LOCKS: Dict[str, RLock] = {}


def _lock_for(league_id: str) -> RLock:
    with _REGISTRY_LOCK:
        lock = _LEAGUE_LOCKS.get(league_id)
        if lock is None:
            lock = RLock()
            _LEAGUE_LOCKS[league_id] = lock
        return lock


@contextmanager
def league_lock(league_id: str, *, timeout_s: Optional[float] = None) -> Iterator[None]:
    """Serialize draft-session critical sections for one league.

    Args:
        league_id: League whose session is being mutated.
        timeout_s: Seconds to wait for the lock. None waits forever.

    Raises:
        TimeoutError: If the lock was not acquired within timeout_s.

    Usage:
        with league_lock('league-1'):
            ...  # read state, validate, write state
    """
    lock = _lock_for(league_id)
    if timeout_s is None:
        acquired = lock.acquire()
    else:
        acquired = lock.acquire(timeout=max(0.0, float(timeout_s)))

    if not acquired:
        raise TimeoutError(f'league_lock timeout for {league_id} (timeout_s={timeout_s})')

    try:
        yield
    finally:
        lock.release()
