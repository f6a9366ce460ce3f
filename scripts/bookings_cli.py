#!/usr/bin/env python3
from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

"""
Local booking harness against a running backend.

Usage:
  python3 scripts/bookings_cli.py --email owner@example.com --password secret bookings --owned
  python3 scripts/bookings_cli.py --token "$JWT" confirm 42
  python3 scripts/bookings_cli.py laundries --search wash

Every command signs in first (credentials or a raw token), then runs through
the same views and lifecycle controller the UI uses.
"""

import argparse
import asyncio
import logging

from laundrmate.application.dto.booking_payload import BookingCreate, BookingUpdate
from laundrmate.application.exceptions import BookingClientError
from laundrmate.application.use_cases.booking_views import BookingSource
from laundrmate.application.utils.search import ALL_STATUSES
from laundrmate.application.utils.token_claims import session_from_token
from laundrmate.core.logging import configure_logging
from laundrmate.domain.entities.booking import Booking
from laundrmate.wiring.dependencies import (
    close_api_client,
    get_authenticate_use_case,
    get_booking_detail_view,
    get_booking_list_view,
    get_laundry_browser,
    get_owner_dashboard,
    get_session_store,
)

_TRANSITION_COMMANDS = {"confirm": "confirmed", "cancel": "cancelled", "reopen": "pending"}


def _print_booking(b: Booking) -> None:
    laundry = b.laundry.name if b.laundry and b.laundry.name else f"Laundry #{b.laundry_id}"
    when = b.scheduled_at.isoformat(timespec="minutes") if b.scheduled_at else "-"
    price = "-" if b.price is None else f"{b.price}"
    print(f"#{b.id:<6} {b.status.value.upper():<10} {laundry:<28} {b.service_type or '-':<14} {when:<17} {price}")
    if b.notes:
        print(f"        notes: {b.notes}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="LaundrMate booking harness")
    parser.add_argument("--email")
    parser.add_argument("--password")
    parser.add_argument("--token", help="Use an existing JWT instead of signing in")
    parser.add_argument("--log-level", default=None)
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("laundries", help="Browse laundries")
    p.add_argument("--search", default="")
    p.add_argument("--mine", action="store_true", help="Owner dashboard with booking counts")

    p = sub.add_parser("bookings", help="List bookings")
    p.add_argument("--owned", action="store_true", help="Bookings across my laundries (owners)")
    p.add_argument("--search", default="")
    p.add_argument("--status", default=ALL_STATUSES)
    p.add_argument("--laundry", type=int, default=None)

    p = sub.add_parser("show", help="Show one booking")
    p.add_argument("booking_id")

    p = sub.add_parser("create", help="Create a booking")
    p.add_argument("--laundry", required=True)
    p.add_argument("--service", default=None)
    p.add_argument("--scheduled", default=None, help="ISO date-time")
    p.add_argument("--notes", default=None)
    p.add_argument("--price", default=None)

    p = sub.add_parser("edit", help="Edit schedule, service, notes or price")
    p.add_argument("booking_id")
    p.add_argument("--service")
    p.add_argument("--scheduled")
    p.add_argument("--notes")
    p.add_argument("--price")

    for name in (*_TRANSITION_COMMANDS, "delete"):
        p = sub.add_parser(name)
        p.add_argument("booking_id")
    return parser


async def _sign_in(args: argparse.Namespace) -> None:
    if args.token:
        get_session_store().set(session_from_token(args.token))
    elif args.email and args.password:
        await get_authenticate_use_case().login(args.email, args.password)


async def _run(args: argparse.Namespace) -> int:
    await _sign_in(args)

    if args.command == "laundries":
        if args.mine:
            dashboard = get_owner_dashboard()
            dashboard.search = args.search
            await dashboard.load()
            print(f"Total bookings: {dashboard.total_bookings}")
            for laundry in dashboard.visible():
                print(f"#{laundry.id:<6} {laundry.name:<28} {dashboard.count_for(laundry.id)} booking(s)")
            return 0
        browser = get_laundry_browser()
        browser.search = args.search
        await browser.load()
        for laundry in browser.visible():
            print(f"#{laundry.id:<6} {laundry.name:<28} {laundry.address or laundry.description or ''}")
        return 0

    if args.command == "bookings":
        view = get_booking_list_view(BookingSource.owned if args.owned else BookingSource.mine)
        view.search, view.status_filter, view.laundry_filter = args.search, args.status, args.laundry
        await view.refresh()
        shown, total = view.shown_of_total
        print(f"Showing {shown}/{total}")
        for booking in view.visible():
            _print_booking(booking)
        return 0

    if args.command == "create":
        view = get_booking_list_view(BookingSource.mine)
        booking = await view.create(
            BookingCreate(
                laundry_id=args.laundry,
                service_type=args.service,
                scheduled_at=args.scheduled,
                notes=args.notes,
                price=args.price,
            )
        )
        _print_booking(booking)
        return 0

    detail = get_booking_detail_view(args.booking_id)
    if await detail.load() is None:
        print("Booking not found")
        return 1

    if args.command == "show":
        _print_booking(detail.booking)
        allowed = detail.lifecycle.available_transitions(detail.booking)
        print("Allowed: " + (", ".join(s.value for s in allowed) or "none"))
        return 0

    if args.command == "edit":
        changes = {
            name: value
            for name, value in (
                ("service_type", args.service),
                ("scheduled_at", args.scheduled),
                ("notes", args.notes),
                ("price", args.price),
            )
            if value is not None
        }
        booking = await detail.lifecycle.edit(detail.booking_id, BookingUpdate(**changes))
        _print_booking(booking)
        return 0

    if args.command == "delete":
        result = await detail.delete()
    else:
        result = await detail.transition(_TRANSITION_COMMANDS[args.command])
    if not result.ok:
        print(f"{result.notice} ({result.error})")
    if detail.booking is not None:
        _print_booking(detail.booking)
    elif result.ok:
        print(f"Booking #{args.booking_id} deleted")
    return 0 if result.ok else 1


async def _main(args: argparse.Namespace) -> int:
    try:
        return await _run(args)
    except BookingClientError as e:
        logging.getLogger("bookings_cli").error("Command failed", extra={"error": str(e)})
        print(f"Error: {e}")
        return 1
    finally:
        await close_api_client()


def main() -> None:
    args = _build_parser().parse_args()
    configure_logging(args.log_level)
    sys.exit(asyncio.run(_main(args)))


if __name__ == "__main__":
    main()
