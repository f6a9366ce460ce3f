from __future__ import annotations

from laundrmate.application.ports.session_store import SessionStorePort
from laundrmate.application.use_cases.authenticate import AuthenticateUseCase
from laundrmate.application.use_cases.booking_views import (
    BookingDetailView,
    BookingForm,
    BookingListView,
    BookingSource,
)
from laundrmate.application.use_cases.laundry_views import LaundryBrowser, OwnerDashboard
from laundrmate.core.config import settings
from laundrmate.domain.entities.booking import BookingId, LaundryId
from laundrmate.infrastructure.api.base_client import ApiClient
from laundrmate.infrastructure.api.http_auth_gateway import HttpAuthGateway
from laundrmate.infrastructure.api.http_booking_gateway import HttpBookingGateway
from laundrmate.infrastructure.api.http_laundry_gateway import HttpLaundryGateway
from laundrmate.infrastructure.session.memory_session_store import MemorySessionStore
from laundrmate.infrastructure.store.memory_booking_store import MemoryBookingStore


_session_store: MemorySessionStore | None = None
_api_client: ApiClient | None = None


def get_session_store() -> SessionStorePort:
    global _session_store
    if _session_store is None:
        _session_store = MemorySessionStore()
    return _session_store


def get_api_client() -> ApiClient:
    global _api_client
    if _api_client is None:
        _api_client = ApiClient(
            session_store=get_session_store(),
            base_url=settings.API_BASE_URL,
            auth_scheme=settings.AUTH_SCHEME,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
    return _api_client


async def close_api_client() -> None:
    global _api_client
    if _api_client is not None:
        await _api_client.aclose()
        _api_client = None


def get_booking_gateway() -> HttpBookingGateway:
    return HttpBookingGateway(api=get_api_client())


def get_laundry_gateway() -> HttpLaundryGateway:
    return HttpLaundryGateway(api=get_api_client())


def get_authenticate_use_case() -> AuthenticateUseCase:
    return AuthenticateUseCase(gateway=HttpAuthGateway(api=get_api_client()), session_store=get_session_store())


def _view_options() -> dict[str, bool]:
    return {
        "allow_reopen": settings.ALLOW_REOPEN,
        "inflight_guard": settings.BOOKING_INFLIGHT_GUARD,
    }


def get_booking_list_view(source: BookingSource | str) -> BookingListView:
    source = BookingSource(source)
    return BookingListView(
        source=source,
        gateway=get_booking_gateway(),
        session_store=get_session_store(),
        store=MemoryBookingStore(name=f"bookings:{source.value}"),
        **_view_options(),
    )


def get_booking_detail_view(booking_id: BookingId) -> BookingDetailView:
    return BookingDetailView(
        booking_id=booking_id,
        gateway=get_booking_gateway(),
        session_store=get_session_store(),
        store=MemoryBookingStore(name=f"booking:{booking_id}"),
        **_view_options(),
    )


def get_booking_form(
    target_view: BookingListView,
    booking_id: BookingId | None = None,
    preset_laundry_id: LaundryId | None = None,
) -> BookingForm:
    return BookingForm(
        lifecycle=target_view.lifecycle,
        gateway=get_booking_gateway(),
        session_store=get_session_store(),
        booking_id=booking_id,
        preset_laundry_id=preset_laundry_id,
    )


def get_owner_dashboard() -> OwnerDashboard:
    return OwnerDashboard(
        laundry_gateway=get_laundry_gateway(),
        booking_gateway=get_booking_gateway(),
        session_store=get_session_store(),
    )


def get_laundry_browser() -> LaundryBrowser:
    return LaundryBrowser(laundry_gateway=get_laundry_gateway())
