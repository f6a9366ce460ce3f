from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Sequence

from laundrmate.domain.entities.booking import Booking, LaundryId
from laundrmate.domain.entities.laundry import Laundry

ALL_STATUSES = "all"


def _haystack(parts: Iterable[Any]) -> str:
    words = []
    for part in parts:
        if part is None:
            continue
        text = part.value if isinstance(part, Enum) else str(part)
        if text:
            words.append(text)
    return " ".join(words).lower()


def booking_matches(
    booking: Booking,
    search: str = "",
    status: str = ALL_STATUSES,
    laundry_id: LaundryId | None = None,
) -> bool:
    wanted_status = (status or ALL_STATUSES).strip().lower()
    if wanted_status != ALL_STATUSES and booking.status.value.lower() != wanted_status:
        return False
    if laundry_id is not None and booking.laundry_id != laundry_id:
        return False

    text = (search or "").strip().lower()
    if not text:
        return True

    laundry = booking.laundry
    hay = _haystack(
        [
            booking.id,
            booking.status,
            booking.service_type,
            booking.notes,
            laundry.name if laundry else None,
            laundry.address if laundry else None,
            laundry.description if laundry else None,
            laundry.lat if laundry else None,
            laundry.lng if laundry else None,
        ]
    )
    return text in hay


def filter_bookings(
    snapshot: Sequence[Booking],
    search: str = "",
    status: str = ALL_STATUSES,
    laundry_id: LaundryId | None = None,
) -> list[Booking]:
    """
    Read-only projection of a store snapshot.

    Source order is preserved and the snapshot is never touched, so the same
    inputs always give the same output.
    """
    return [b for b in snapshot if booking_matches(b, search, status, laundry_id)]


def filter_laundries(laundries: Sequence[Laundry], search: str = "") -> list[Laundry]:
    text = (search or "").strip().lower()
    if not text:
        return list(laundries)
    return [
        laundry
        for laundry in laundries
        if text in _haystack([laundry.name, laundry.description, laundry.address, laundry.lat, laundry.lng])
    ]


def count_by_laundry(bookings: Iterable[Booking]) -> dict[LaundryId, int]:
    counts: dict[LaundryId, int] = {}
    for booking in bookings:
        if booking.laundry_id is None:
            continue
        counts[booking.laundry_id] = counts.get(booking.laundry_id, 0) + 1
    return counts
