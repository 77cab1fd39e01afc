import threading

import pytest
from sqlmodel import Session, select

from cricnets.models.booking import WicketType
from cricnets.models.booking_lock import BookingLock
from cricnets.services.errors import LockContentionError
from cricnets.services.resource_lock import (
    OPERATOR_POOL_LOCK,
    ResourceLockManager,
    ensure_lock_row,
    wicket_lock_key,
)


def test_wicket_lock_keys_are_per_wicket():
    assert wicket_lock_key(WicketType.OUTDOOR_CEMENT) == "WICKET_LOCK_OUTDOOR_CEMENT"
    assert wicket_lock_key("OUTDOOR_TURF") == "WICKET_LOCK_OUTDOOR_TURF"


def test_lock_rows_are_created_lazily_and_once(session: Session, lock_manager: ResourceLockManager):
    assert session.exec(select(BookingLock)).all() == []

    with lock_manager.acquire(session, "WICKET_LOCK_OUTDOOR_TURF"):
        pass
    with lock_manager.acquire(session, "WICKET_LOCK_OUTDOOR_TURF"):
        pass
    ensure_lock_row(session, "WICKET_LOCK_OUTDOOR_TURF")

    rows = session.exec(select(BookingLock)).all()
    assert [r.resource_id for r in rows] == ["WICKET_LOCK_OUTDOOR_TURF"]


def test_same_key_times_out_with_contention_error(session: Session, lock_manager: ResourceLockManager):
    key = wicket_lock_key(WicketType.INDOOR_ASTRO_TURF)
    holding = threading.Event()
    release = threading.Event()

    def holder():
        with lock_manager.acquire(session, key):
            holding.set()
            release.wait(5)

    thread = threading.Thread(target=holder)
    thread.start()
    try:
        assert holding.wait(5)
        with pytest.raises(LockContentionError) as exc_info:
            with lock_manager.acquire(session, key, timeout=0.05):
                pass
        assert exc_info.value.retryable is True
        assert exc_info.value.resource_key == key
    finally:
        release.set()
        thread.join(5)


def test_different_keys_do_not_block_each_other(session: Session, lock_manager: ResourceLockManager):
    with lock_manager.acquire(session, wicket_lock_key(WicketType.INDOOR_ASTRO_TURF)):
        with lock_manager.acquire(session, wicket_lock_key(WicketType.OUTDOOR_CEMENT), timeout=0.05):
            pass


def test_multiple_keys_are_held_together_and_released(session: Session, lock_manager: ResourceLockManager):
    wicket = wicket_lock_key(WicketType.OUTDOOR_TURF)

    with lock_manager.acquire(session, wicket, OPERATOR_POOL_LOCK):
        with pytest.raises(LockContentionError):
            with lock_manager.acquire(session, OPERATOR_POOL_LOCK, timeout=0.05):
                pass

    # Both free again once the block exits
    with lock_manager.acquire(session, wicket, OPERATOR_POOL_LOCK, timeout=0.05):
        pass


def test_failed_multi_key_acquire_releases_keys_already_taken(session: Session, lock_manager: ResourceLockManager):
    wicket = wicket_lock_key(WicketType.OUTDOOR_CEMENT)

    with lock_manager.acquire(session, OPERATOR_POOL_LOCK):
        with pytest.raises(LockContentionError):
            with lock_manager.acquire(session, wicket, OPERATOR_POOL_LOCK, timeout=0.05):
                pass
        # The wicket key taken before the failure was given back
        with lock_manager.acquire(session, wicket, timeout=0.05):
            pass


def test_lock_released_when_block_raises(session: Session, lock_manager: ResourceLockManager):
    key = wicket_lock_key(WicketType.INDOOR_ASTRO_TURF)

    with pytest.raises(RuntimeError):
        with lock_manager.acquire(session, key):
            raise RuntimeError("boom")

    with lock_manager.acquire(session, key, timeout=0.05):
        pass
