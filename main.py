"""
Command-line entry point.

Seeds the in-memory backend with the demo barbershop and either prints
the slot table for one service and date, or launches the console demo.

Usage:
    Slot table:   python main.py slots --service Haircut --date 2025-03-17
    Console mode: python main.py console [--scenario booking|not-found|owner]
"""

import argparse
import asyncio
import sys
from datetime import date

from barberbook.backend.appointments import AppointmentStore
from barberbook.backend.businesses import BusinessDirectory
from barberbook.backend.catalog import ServiceCatalog
from barberbook.backend.database import InMemoryDatabase
from barberbook.backend.demo import DEMO_SLUG, seed_demo_business
from barberbook.backend.working_hours import WorkingHoursRepository
from barberbook.config import settings
from barberbook.scheduling.slot_generator import generate_slots
from barberbook.utils import format_wall_clock


async def _print_slots(slug: str, service_name: str, day: date) -> int:
    """Print every candidate slot for a service on a date. Returns an exit code."""
    db = InMemoryDatabase()
    await seed_demo_business(db)

    business = await BusinessDirectory(db).get_by_slug(slug)
    if business is None:
        print(f"Business not found: {slug}")
        return 1

    services = await ServiceCatalog(db).list(business.id)
    service = next((s for s in services if s.name.lower() == service_name.lower()), None)
    if service is None:
        names = ", ".join(s.name for s in services)
        print(f"Unknown service '{service_name}'. Available: {names}")
        return 1

    week = await WorkingHoursRepository(db).get_week(business.id)
    existing = await AppointmentStore(db).list_for_day(business.id, day)
    slots = generate_slots(day, service, week, existing)

    hours = week.hours_on(day)
    print(f"{business.shop_name} - {service.name} ({service.duration_minutes} min)")
    print(f"{day.isoformat()} {hours.day_name} ({settings.schedule.timezone})")
    if not slots:
        print("No slots available.")
        return 0
    for slot in slots:
        marker = "free" if slot.is_available else "taken"
        print(f"  {format_wall_clock(slot.start_time)}-{format_wall_clock(slot.end_time)}  {marker}")
    return 0


def _run_console_mode(argv: list[str]) -> None:
    """Start the offline console demo."""
    import console_demo

    sys.argv = [sys.argv[0], *argv]
    console_demo.main()


def main(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(description="Barbershop booking tools")
    sub = parser.add_subparsers(dest="command", required=True)

    slots = sub.add_parser("slots", help="Print the slot table for a service and date")
    slots.add_argument("--slug", default=DEMO_SLUG, help="Public booking slug")
    slots.add_argument("--service", required=True, help="Service name, e.g. Haircut")
    slots.add_argument(
        "--date", required=True, type=date.fromisoformat, help="Date as YYYY-MM-DD"
    )

    sub.add_parser("console", help="Run the offline console demo", add_help=False)

    args, extra = parser.parse_known_args(argv)
    if args.command == "console":
        _run_console_mode(extra)
        return 0
    return asyncio.run(_print_slots(args.slug, args.service, args.date))


def cli() -> None:
    sys.exit(main(sys.argv[1:]))


if __name__ == "__main__":
    cli()
