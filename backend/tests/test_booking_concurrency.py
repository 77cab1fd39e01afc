"""
Concurrent creation against a shared file-backed database.

Each worker thread uses its own Session (as separate requests would) and the same
process-wide ResourceLockManager.
"""
import threading
from typing import List

import pytest
from sqlmodel import Session, SQLModel, create_engine, select

from cricnets.config import BookingDefaults
from cricnets.models.booking import BallType, Booking, LeatherBallOption, WicketType
from cricnets.services.booking_service import BookingRequest, BookingService
from cricnets.services.errors import BookingConflictError, OperatorCapacityError
from cricnets.services.resource_lock import ResourceLockManager
from tests.conftest import NOW, at

THREADS = 10


@pytest.fixture(name="file_engine")
def file_engine_fixture(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'concurrency.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


def _run_concurrently(engine, requests: List[BookingRequest], lock_manager: ResourceLockManager):
    barrier = threading.Barrier(len(requests))
    created, rejected, unexpected = [], [], []
    guard = threading.Lock()

    def worker(request: BookingRequest):
        barrier.wait()
        with Session(engine) as session:
            service = BookingService(
                session, defaults=BookingDefaults(), lock_manager=lock_manager, clock=lambda: NOW
            )
            try:
                booking = service.create_booking(request)
                with guard:
                    created.append(booking.id)
            except (BookingConflictError, OperatorCapacityError) as exc:
                with guard:
                    rejected.append(exc)
            except Exception as exc:  # noqa: BLE001 - surfaced through the assertion below
                with guard:
                    unexpected.append(exc)

    threads = [threading.Thread(target=worker, args=(r,)) for r in requests]
    for t in threads:
        t.start()
    for t in threads:
        t.join(60)
    return created, rejected, unexpected


def test_identical_requests_yield_exactly_one_booking(file_engine):
    lock_manager = ResourceLockManager(timeout_seconds=30)
    requests = [
        BookingRequest.for_ball_type(at(14, 0), BallType.LEATHER, f"player{i}@example.com") for i in range(THREADS)
    ]

    created, rejected, unexpected = _run_concurrently(file_engine, requests, lock_manager)

    assert unexpected == []
    assert len(created) == 1
    assert len(rejected) == THREADS - 1
    assert all(isinstance(exc, BookingConflictError) for exc in rejected)
    with Session(file_engine) as session:
        assert len(session.exec(select(Booking)).all()) == 1


def test_different_wickets_all_succeed(file_engine):
    lock_manager = ResourceLockManager(timeout_seconds=30)
    requests = [
        BookingRequest(start_time=at(14, 0), ball_type=BallType.LEATHER, wicket_type=wicket)
        for wicket in WicketType
    ]

    created, rejected, unexpected = _run_concurrently(file_engine, requests, lock_manager)

    assert unexpected == []
    assert rejected == []
    assert len(created) == len(list(WicketType))


def test_operator_pool_is_not_oversubscribed_across_wickets(file_engine):
    # Three leather-machine requests on three different wickets, two operators
    lock_manager = ResourceLockManager(timeout_seconds=30)
    requests = [
        BookingRequest(
            start_time=at(16, 0),
            ball_type=BallType.LEATHER_MACHINE,
            wicket_type=wicket,
            leather_ball_option=LeatherBallOption.MACHINE_BALL,
        )
        for wicket in WicketType
    ]

    created, rejected, unexpected = _run_concurrently(file_engine, requests, lock_manager)

    assert unexpected == []
    assert len(created) == 2
    assert len(rejected) == 1
    assert isinstance(rejected[0], OperatorCapacityError)
