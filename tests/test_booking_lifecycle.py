"""
Tests for the booking lifecycle controller: authorization, the status state
machine and the optimistic update / rollback protocol.
"""

from __future__ import annotations

import asyncio
import dataclasses

import pytest

from laundrmate.application.dto.booking_payload import BookingCreate, BookingUpdate
from laundrmate.application.exceptions import (
    AuthError,
    InvalidTransitionError,
    NetworkError,
    NotFoundError,
    ValidationError,
)
from laundrmate.domain.entities.booking import BookingStatus
from laundrmate.infrastructure.session.memory_session_store import MemorySessionStore
from tests.fakes import LATER, SUDS, make_booking


def _seed(gateway, store, booking):
    gateway.records[booking.id] = booking
    store.upsert(booking)


async def test_confirm_shows_immediately_and_settles_back_on_failure(make_lifecycle, owner_session, gateway, store):
    """The store flips to confirmed before the server answers, then converges to the re-read value."""
    _seed(gateway, store, make_booking(1))
    gateway.delay = 0.01
    gateway.fail["patch_status"] = NetworkError("Request timed out")
    lifecycle = make_lifecycle(owner_session)

    task = asyncio.create_task(lifecycle.transition(1, "confirmed"))
    await asyncio.sleep(0)
    assert store.get(1).status == BookingStatus.confirmed

    result = await task

    assert store.get(1).status == BookingStatus.pending
    assert result.ok is False
    assert result.notice == "Failed to update status."
    assert isinstance(result.error, NetworkError)
    assert gateway.call_names() == ["patch_status", "get_by_id"]


async def test_owner_cancel_failure_reflects_server_status(make_lifecycle, owner_session, gateway, store):
    _seed(gateway, store, make_booking(42, status=BookingStatus.confirmed))
    gateway.fail["patch_status"] = InvalidTransitionError("Invalid status transition", status_code=400)
    lifecycle = make_lifecycle(owner_session)

    result = await lifecycle.transition(42, BookingStatus.cancelled)

    assert ("get_by_id", 42) in gateway.calls
    assert store.get(42).status == BookingStatus.confirmed
    assert result.booking.status == BookingStatus.confirmed


async def test_failure_takes_whatever_the_server_now_says(make_lifecycle, owner_session, gateway, store):
    store.upsert(make_booking(42, status=BookingStatus.confirmed))
    gateway.records[42] = make_booking(42, status=BookingStatus.cancelled, updated_at=LATER)
    gateway.fail["patch_status"] = NetworkError("boom")
    lifecycle = make_lifecycle(owner_session)

    await lifecycle.transition(42, "cancelled")

    assert store.get(42).status == BookingStatus.cancelled
    assert store.get(42).updated_at == LATER


async def test_failed_reread_drops_the_booking(make_lifecycle, owner_session, gateway, store):
    _seed(gateway, store, make_booking(1))
    gateway.fail["patch_status"] = NetworkError("boom")
    gateway.fail["get_by_id"] = NotFoundError("gone", status_code=404)
    lifecycle = make_lifecycle(owner_session)

    result = await lifecycle.transition(1, "confirmed")

    assert store.get(1) is None
    assert result.ok is False
    assert result.booking is None


async def test_success_reconciles_with_server_copy(make_lifecycle, owner_session, gateway, store):
    _seed(gateway, store, make_booking(1, laundry=SUDS))
    lifecycle = make_lifecycle(owner_session)

    result = await lifecycle.transition(1, "confirmed")

    assert result.ok is True
    assert store.get(1).status == BookingStatus.confirmed
    assert store.get(1).updated_at == LATER
    # The write response carries no embedded laundry; the shown one is kept.
    assert store.get(1).laundry == SUDS
    assert gateway.call_names() == ["patch_status"]


async def test_cancelled_call_restores_previous_value(make_lifecycle, owner_session, gateway, store):
    _seed(gateway, store, make_booking(1))
    gateway.delay = 1.0
    lifecycle = make_lifecycle(owner_session)

    task = asyncio.create_task(lifecycle.transition(1, "confirmed"))
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert store.get(1).status == BookingStatus.pending


async def test_user_cannot_confirm(make_lifecycle, user_session, gateway, store):
    """A non-owner is rejected before any gateway call or store change."""
    _seed(gateway, store, make_booking(1))
    lifecycle = make_lifecycle(user_session)

    with pytest.raises(AuthError):
        await lifecycle.transition(1, "confirmed")

    assert gateway.calls == []
    assert store.get(1).status == BookingStatus.pending


async def test_user_can_cancel_own_pending_booking(make_lifecycle, user_session, gateway, store):
    _seed(gateway, store, make_booking(1, user_id=2))
    lifecycle = make_lifecycle(user_session)

    result = await lifecycle.transition(1, "cancelled")

    assert result.ok is True
    assert store.get(1).status == BookingStatus.cancelled


async def test_user_cannot_touch_someone_elses_booking(make_lifecycle, user_session, gateway, store):
    _seed(gateway, store, make_booking(1, user_id=9))
    lifecycle = make_lifecycle(user_session)

    with pytest.raises(AuthError):
        await lifecycle.transition(1, "cancelled")
    with pytest.raises(AuthError):
        await lifecycle.delete(1)
    assert gateway.calls == []


async def test_user_cannot_cancel_confirmed_booking(make_lifecycle, user_session, gateway, store):
    _seed(gateway, store, make_booking(1, status=BookingStatus.confirmed))
    lifecycle = make_lifecycle(user_session)

    with pytest.raises(AuthError):
        await lifecycle.transition(1, "cancelled")


async def test_transitions_outside_the_state_machine_are_rejected(make_lifecycle, owner_session, gateway, store):
    _seed(gateway, store, make_booking(1, status=BookingStatus.cancelled))
    _seed(gateway, store, make_booking(2, status=BookingStatus.confirmed))
    lifecycle = make_lifecycle(owner_session)

    with pytest.raises(InvalidTransitionError):
        await lifecycle.transition(1, "confirmed")
    with pytest.raises(InvalidTransitionError):
        await lifecycle.transition(2, "confirmed")
    with pytest.raises(ValidationError):
        await lifecycle.transition(2, "done")
    assert gateway.calls == []


async def test_reopen_follows_setting(make_lifecycle, owner_session, gateway, store):
    _seed(gateway, store, make_booking(1, status=BookingStatus.confirmed))

    with pytest.raises(InvalidTransitionError):
        await make_lifecycle(owner_session, allow_reopen=False).transition(1, "pending")

    result = await make_lifecycle(owner_session).transition(1, "pending")
    assert result.ok is True
    assert store.get(1).status == BookingStatus.pending


async def test_no_session_is_unauthorized(make_lifecycle, gateway, store):
    _seed(gateway, store, make_booking(1))
    lifecycle = make_lifecycle(MemorySessionStore())

    with pytest.raises(AuthError):
        await lifecycle.transition(1, "cancelled")
    with pytest.raises(AuthError):
        await lifecycle.create(BookingCreate(laundry_id=7))
    assert gateway.calls == []


async def test_transition_on_unloaded_booking(make_lifecycle, owner_session):
    with pytest.raises(NotFoundError):
        await make_lifecycle(owner_session).transition(99, "confirmed")


async def test_second_change_while_first_in_flight_is_rejected(make_lifecycle, owner_session, gateway, store):
    _seed(gateway, store, make_booking(1))
    gateway.delay = 0.01
    lifecycle = make_lifecycle(owner_session)

    first = asyncio.create_task(lifecycle.transition(1, "confirmed"))
    await asyncio.sleep(0)
    with pytest.raises(InvalidTransitionError):
        await lifecycle.transition(1, "cancelled")
    with pytest.raises(InvalidTransitionError):
        await lifecycle.delete(1)

    assert (await first).ok is True
    assert gateway.call_names() == ["patch_status"]


async def test_available_transitions(make_lifecycle, owner_session, user_session):
    pending = make_booking(1)
    cancelled = make_booking(2, status=BookingStatus.cancelled)

    assert make_lifecycle(owner_session).available_transitions(pending) == [
        BookingStatus.confirmed,
        BookingStatus.cancelled,
    ]
    assert make_lifecycle(owner_session).available_transitions(cancelled) == [BookingStatus.pending]
    assert make_lifecycle(user_session).available_transitions(pending) == [BookingStatus.cancelled]
    assert make_lifecycle(user_session).available_transitions(cancelled) == []


async def test_create_waits_for_server_then_adds_pending_entry(make_lifecycle, user_session, gateway, store):
    """Creating {laundryId: 7, serviceType: "Wash & Fold"} makes one call and one pending entry."""
    lifecycle = make_lifecycle(user_session)

    booking = await lifecycle.create(BookingCreate(laundry_id=7, service_type="Wash & Fold"))

    creates = [c for c in gateway.calls if c[0] == "create"]
    assert len(creates) == 1
    assert creates[0][1].laundry_id == 7
    assert len(store) == 1
    assert store.get(booking.id).status == BookingStatus.pending
    assert store.get(booking.id).service_type == "Wash & Fold"


async def test_failed_create_leaves_no_phantom(make_lifecycle, user_session, gateway, store):
    gateway.fail["create"] = ValidationError("laundryId does not exist", status_code=400)
    lifecycle = make_lifecycle(user_session)

    with pytest.raises(ValidationError):
        await lifecycle.create(BookingCreate(laundry_id=7))
    assert len(store) == 0


async def test_create_requires_laundry(make_lifecycle, user_session, gateway):
    with pytest.raises(ValidationError):
        await make_lifecycle(user_session).create(BookingCreate(service_type="Ironing"))
    assert gateway.calls == []


async def test_edit_rejects_status(make_lifecycle, owner_session, gateway, store):
    _seed(gateway, store, make_booking(1))

    with pytest.raises(ValidationError):
        await make_lifecycle(owner_session).edit(1, BookingUpdate(status=BookingStatus.confirmed))
    assert gateway.calls == []


async def test_edit_updates_store_from_server_response(make_lifecycle, user_session, gateway, store):
    _seed(gateway, store, make_booking(1, status=BookingStatus.confirmed, laundry=SUDS))

    await make_lifecycle(user_session).edit(1, BookingUpdate(notes="Use cold water", price="15"))

    edited = store.get(1)
    assert edited.notes == "Use cold water"
    assert str(edited.price) == "15"
    assert edited.status == BookingStatus.confirmed
    assert edited.laundry == SUDS


async def test_failed_edit_leaves_store_untouched(make_lifecycle, user_session, gateway, store):
    original = make_booking(1, notes="before")
    _seed(gateway, store, original)
    gateway.fail["update"] = NetworkError("boom")

    with pytest.raises(NetworkError):
        await make_lifecycle(user_session).edit(1, BookingUpdate(notes="after"))
    assert store.get(1) == original


async def test_delete_is_optimistic(make_lifecycle, user_session, gateway, store):
    _seed(gateway, store, make_booking(1))
    gateway.delay = 0.01
    lifecycle = make_lifecycle(user_session)

    task = asyncio.create_task(lifecycle.delete(1))
    await asyncio.sleep(0)
    assert store.get(1) is None

    result = await task
    assert result.ok is True
    assert 1 not in gateway.records


async def test_failed_delete_restores_booking(make_lifecycle, owner_session, gateway, store):
    original = make_booking(1, laundry=SUDS)
    _seed(gateway, store, dataclasses.replace(original))
    gateway.fail["delete"] = NetworkError("boom")

    result = await make_lifecycle(owner_session).delete(1)

    assert result.ok is False
    assert result.notice == "Failed to delete."
    assert store.get(1) == original


async def test_delete_of_already_deleted_booking_stays_removed(make_lifecycle, owner_session, gateway, store):
    store.upsert(make_booking(1))

    result = await make_lifecycle(owner_session).delete(1)

    assert result.ok is False
    assert isinstance(result.error, NotFoundError)
    assert store.get(1) is None
    assert gateway.call_names() == ["delete", "get_by_id"]
