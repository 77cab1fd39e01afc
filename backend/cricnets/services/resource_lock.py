"""
Named resource locks.

Serializes "check conflicts, then write" per resource key. Two layers:

1. An in-process mutex per key (threading.Lock, created on demand), acquired with a
   bounded wait.
2. A durable booking_locks row per key, created lazily (get-or-create; losing the
   creation race counts as success) and locked with SELECT ... FOR UPDATE so other
   processes sharing the database serialize too. SQLite has no row locks; its
   single-writer rule plus layer 1 covers single-node deployments.

Row locks are held until the caller's transaction ends, so callers must commit or
roll back the booking write inside the `with` block.
"""
import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Sequence

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlmodel import Session, select

from cricnets.models.booking import WicketType
from cricnets.models.booking_lock import BookingLock
from cricnets.services.errors import LockContentionError

logger = logging.getLogger(__name__)

WICKET_LOCK_PREFIX = "WICKET_LOCK_"
OPERATOR_POOL_LOCK = "OPERATOR_POOL_LOCK"


def wicket_lock_key(wicket_type: WicketType) -> str:
    return f"{WICKET_LOCK_PREFIX}{WicketType(wicket_type).value}"


def ensure_lock_row(session: Session, resource_key: str) -> None:
    """Create the lock row for resource_key if it does not exist yet. Idempotent."""
    if session.get(BookingLock, resource_key) is not None:
        return
    session.add(BookingLock(resource_id=resource_key))
    try:
        session.commit()
    except IntegrityError:
        # Another caller created it between our read and our insert
        session.rollback()


class ResourceLockManager:
    def __init__(self, timeout_seconds: float = 10.0):
        self.timeout_seconds = timeout_seconds
        self._registry_guard = threading.Lock()
        self._mutexes: Dict[str, threading.Lock] = {}

    def _mutex_for(self, resource_key: str) -> threading.Lock:
        with self._registry_guard:
            mutex = self._mutexes.get(resource_key)
            if mutex is None:
                mutex = threading.Lock()
                self._mutexes[resource_key] = mutex
            return mutex

    def _take_mutexes(self, keys: Sequence[str], timeout: float) -> List[threading.Lock]:
        held: List[threading.Lock] = []
        for key in keys:
            mutex = self._mutex_for(key)
            if not mutex.acquire(timeout=timeout):
                for other in reversed(held):
                    other.release()
                logger.warning(f"Timed out after {timeout}s waiting for resource lock {key}")
                raise LockContentionError(
                    f"Resource {key} is busy with another booking. Please retry.", resource_key=key
                )
            held.append(mutex)
        return held

    def _lock_rows(self, session: Session, keys: Sequence[str], timeout: float) -> None:
        try:
            for key in keys:
                ensure_lock_row(session, key)
            if session.get_bind().dialect.name == "postgresql":
                session.execute(text(f"SET LOCAL lock_timeout = '{int(timeout * 1000)}ms'"))
            for key in keys:
                session.exec(select(BookingLock).where(BookingLock.resource_id == key).with_for_update()).one()
        except OperationalError as exc:
            session.rollback()
            logger.warning(f"Database lock acquisition failed for {', '.join(keys)}: {exc}")
            raise LockContentionError(
                f"Resource {keys[0]} is busy with another booking. Please retry.", resource_key=keys[0]
            ) from exc

    @contextmanager
    def acquire(self, session: Session, *resource_keys: str, timeout: Optional[float] = None) -> Iterator[None]:
        """
        Hold the named locks for the duration of the block.

        Keys are taken in the order given; callers must use a fixed order (wicket first,
        operator pool second) so two requests can never wait on each other.

        Raises:
            LockContentionError: the wait exceeded the timeout or the database refused the lock
        """
        wait = self.timeout_seconds if timeout is None else timeout
        held = self._take_mutexes(resource_keys, wait)
        try:
            self._lock_rows(session, resource_keys, wait)
            yield
        finally:
            for mutex in reversed(held):
                mutex.release()
