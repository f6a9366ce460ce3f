"""
Shared fixtures: sessions, a fake gateway and a fresh store per test.
"""

from __future__ import annotations

import pytest

from laundrmate.application.use_cases.booking_lifecycle import BookingLifecycleUseCase
from laundrmate.infrastructure.session.memory_session_store import MemorySessionStore
from laundrmate.infrastructure.store.memory_booking_store import MemoryBookingStore
from tests.fakes import OWNER, USER, FakeBookingGateway


@pytest.fixture
def owner_session() -> MemorySessionStore:
    return MemorySessionStore(OWNER)


@pytest.fixture
def user_session() -> MemorySessionStore:
    return MemorySessionStore(USER)


@pytest.fixture
def store() -> MemoryBookingStore:
    return MemoryBookingStore(name="test")


@pytest.fixture
def gateway() -> FakeBookingGateway:
    return FakeBookingGateway()


@pytest.fixture
def make_lifecycle(gateway: FakeBookingGateway, store: MemoryBookingStore):
    def build(session_store: MemorySessionStore, **kwargs) -> BookingLifecycleUseCase:
        return BookingLifecycleUseCase(gateway=gateway, session_store=session_store, store=store, **kwargs)

    return build
