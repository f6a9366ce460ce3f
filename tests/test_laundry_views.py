"""
Tests for the owner dashboard and the public laundry browser.
"""

from __future__ import annotations

import pytest

from laundrmate.application.exceptions import NetworkError, ValidationError
from laundrmate.application.use_cases.laundry_views import LaundryBrowser, OwnerDashboard
from laundrmate.domain.entities.laundry import Laundry
from tests.fakes import FakeBookingGateway, FakeLaundryGateway, make_booking

SUDS = Laundry(id=7, name="Suds & Co", description="Dry cleaning", address="12 Harbour Rd")
PRESS = Laundry(id=8, name="Fresh Press", description="Ironing and pressing")


def _dashboard(session_store, bookings=None) -> tuple[OwnerDashboard, FakeLaundryGateway, FakeBookingGateway]:
    laundries = FakeLaundryGateway([SUDS, PRESS])
    gateway = FakeBookingGateway(bookings or [])
    return OwnerDashboard(laundries, gateway, session_store), laundries, gateway


async def test_dashboard_counts_bookings_per_laundry(owner_session):
    dashboard, _, _ = _dashboard(
        owner_session,
        [make_booking(1, laundry_id=7), make_booking(2, laundry_id=7), make_booking(3, laundry_id=8)],
    )

    assert await dashboard.load() is True

    assert dashboard.count_for(7) == 2
    assert dashboard.count_for(8) == 1
    assert dashboard.count_for(99) == 0
    assert dashboard.total_bookings == 3


async def test_dashboard_search_matches_name_and_description(owner_session):
    dashboard, _, _ = _dashboard(owner_session)
    await dashboard.load()

    dashboard.search = "PRESS"
    assert [l.id for l in dashboard.visible()] == [8]
    dashboard.search = "harbour"
    assert [l.id for l in dashboard.visible()] == [7]
    dashboard.search = "  "
    assert len(dashboard.visible()) == 2


async def test_save_requires_name(owner_session):
    dashboard, laundries, _ = _dashboard(owner_session)

    with pytest.raises(ValidationError):
        await dashboard.save_laundry({"name": "   ", "description": "x"})
    assert laundries.calls == []


async def test_save_creates_then_reloads(owner_session):
    dashboard, laundries, gateway = _dashboard(owner_session)

    saved = await dashboard.save_laundry({"name": " Bubbles ", "lat": "", "lng": "2.35"})

    assert saved.name == "Bubbles"
    payload = laundries.calls[0][1]
    assert payload.lat is None
    assert payload.lng == 2.35
    assert [c[0] for c in laundries.calls] == ["create", "list_mine"]
    assert gateway.call_names() == ["list_owned"]
    assert any(l.name == "Bubbles" for l in dashboard.laundries)


async def test_save_existing_laundry_updates(owner_session):
    dashboard, laundries, _ = _dashboard(owner_session)

    await dashboard.save_laundry({"name": "Suds Deluxe"}, laundry_id=7)

    assert laundries.calls[0][:2] == ("update", 7)
    assert laundries.records[7].name == "Suds Deluxe"


async def test_delete_laundry_reloads(owner_session):
    dashboard, laundries, _ = _dashboard(owner_session)

    await dashboard.delete_laundry(8)

    assert [l.id for l in dashboard.laundries] == [7]


async def test_failed_load_surfaces_error(owner_session):
    dashboard, _, gateway = _dashboard(owner_session)
    gateway.fail["list_owned"] = NetworkError("offline")

    with pytest.raises(NetworkError):
        await dashboard.load()


async def test_logout_clears_dashboard(owner_session):
    dashboard, _, _ = _dashboard(owner_session, [make_booking(1)])
    await dashboard.load()

    owner_session.clear()

    assert dashboard.laundries == []
    assert dashboard.total_bookings == 0


async def test_closed_dashboard_ignores_late_load(owner_session):
    dashboard, _, _ = _dashboard(owner_session)
    dashboard.close()

    assert await dashboard.load() is False
    assert dashboard.laundries == []


async def test_browser_lists_and_filters():
    browser = LaundryBrowser(FakeLaundryGateway([SUDS, PRESS]))

    assert await browser.load() is True
    browser.search = "dry"

    assert [l.id for l in browser.visible()] == [7]
