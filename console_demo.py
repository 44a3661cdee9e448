"""
Offline console demo: runs the public booking page and the owner
dashboard against seeded in-memory data.

Uses the real schedule model, slot generator, booking state machine and
repositories. No network calls, no credentials needed.

Usage:
    python console_demo.py
    python console_demo.py --scenario booking
    python console_demo.py --scenario not-found
    python console_demo.py --scenario owner
"""

import argparse
import asyncio
from datetime import date, datetime, timedelta
from typing import Optional

from barberbook.app_state import AppController
from barberbook.backend.database import InMemoryDatabase
from barberbook.backend.demo import DEMO_EMAIL, DEMO_PASSWORD, DEMO_SLUG, seed_demo_business
from barberbook.booking.state_machine import BookingStep, InvalidTransitionError
from barberbook.booking.workflow import BookingWorkflow
from barberbook.config import settings
from barberbook.dashboard import build_dashboard, service_label, week_overview
from barberbook.errors import BarberbookError, user_friendly_error
from barberbook.utils import format_wall_clock, local_today, parse_wall_clock

BLUE = "\033[94m"
GREEN = "\033[92m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


def _skip_sunday(day: date) -> date:
    """The demo shop is closed on Sundays; roll forward to Monday."""
    return day + timedelta(days=1) if day.weekday() == 6 else day


class ConsoleSession:
    """Drives one booking page in the terminal."""

    def __init__(self, db: InMemoryDatabase, slug: str = DEMO_SLUG) -> None:
        self.db = db
        self.workflow = BookingWorkflow(slug, db)
        self._pending_name: Optional[str] = None

    def page_say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[{self.workflow.step.value}]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def error_say(self, text: str) -> None:
        print(f"{RED}  !! {text}{RESET}")

    # Pre-scripted scenarios for --scenario flag
    SCENARIOS: dict[str, list[str]] = {
        "booking": [
            "2",          # Beard Trim
            "+1",         # tomorrow, or Monday after a Sunday
            "10:00",
            "continue",
            "João Silva",
            "(11) 99999-9999",
        ],
    }

    MAX_INPUT_LENGTH = 200

    def banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  {settings.app_name.upper()} - {title}{RESET}")
        print(f"{BOLD}  Booking page: /{self.workflow.slug}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

    async def open_page(self) -> bool:
        if not await self.workflow.load():
            if self.workflow.not_found:
                self.page_say("Business not found. Check the link or go back to login.")
            else:
                self.error_say(self.workflow.error or "Could not load the page.")
            return False
        self.page_say(f"Welcome to {self.workflow.business.shop_name}! Choose a service:")
        self._show_services()
        return True

    async def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self.banner(f"Scenario: {scenario}")
        if not await self.open_page():
            return

        for step in steps:
            if self.workflow.step == BookingStep.CONFIRMED:
                break
            print(f"\n{BLUE}[Client] {RESET}{step}")
            await self._process_input(step)
            self.system_log(f"Step: {self.workflow.step.value}")

        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
        trace = " -> ".join(self.workflow.state_machine.get_step_trace())
        print(f"{DIM}  Step trace: {trace}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    async def run(self) -> None:
        self.banner("Console Demo")
        print(f"{BOLD}  Type 'back' to go back, 'restart' to start over, 'quit' to exit{RESET}")
        if not await self.open_page():
            return

        while not self.workflow.state_machine.is_terminal():
            user_input = input(f"\n{BLUE}[Client] {RESET}").strip()
            if not user_input:
                continue
            if user_input.lower() in ("quit", "exit", "q"):
                print(f"\n{DIM}Session ended.{RESET}")
                return
            if len(user_input) > self.MAX_INPUT_LENGTH:
                user_input = user_input[: self.MAX_INPUT_LENGTH]
            await self._process_input(user_input)
            self.system_log(f"Step: {self.workflow.step.value}")

    # ------------------------------------------------------------------ #
    # Input routing
    # ------------------------------------------------------------------ #

    async def _process_input(self, text: str) -> None:
        lower = text.lower()
        if lower in ("back", "restart"):
            self._pending_name = None
        try:
            if lower == "back":
                await self.workflow.back()
                self.page_say("Went back.")
                self._show_current_step()
                return
            if lower == "restart":
                self.workflow.restart()
                self.page_say("Starting over. Choose a service:")
                self._show_services()
                return

            step = self.workflow.step
            if step == BookingStep.SELECT_SERVICE:
                await self._handle_service(text)
            elif step == BookingStep.SELECT_DATE_TIME:
                await self._handle_date_time(text)
            elif step == BookingStep.ENTER_DETAILS:
                await self._handle_details(text)
        except InvalidTransitionError as exc:
            self.error_say(str(exc))
        except BarberbookError as exc:
            self.error_say(user_friendly_error(exc))

    async def _handle_service(self, text: str) -> None:
        services = self.workflow.services
        if not text.isdigit() or not 1 <= int(text) <= len(services):
            self.page_say(f"Please pick a number between 1 and {len(services)}.")
            return
        service = services[int(text) - 1]
        await self.workflow.select_service(service.id)
        self.page_say(f"{service.name} selected. Pick a date (YYYY-MM-DD or +N days):")
        self._show_slots()

    async def _handle_date_time(self, text: str) -> None:
        if text.lower() == "continue":
            self.workflow.continue_to_details()
            self.page_say("Almost done. Your name?")
            return

        picked_day = self._parse_day(text)
        if picked_day is not None:
            await self.workflow.select_date(picked_day)
            self.page_say(f"Showing times for {picked_day.isoformat()} ({picked_day.strftime('%A')}):")
            self._show_slots()
            return

        try:
            wall = parse_wall_clock(text)
        except ValueError:
            self.page_say("Type a date, a time like 10:30, or 'continue'.")
            return
        slot = self.workflow.select_slot(datetime.combine(self.workflow.selected_date, wall))
        self.page_say(
            f"{format_wall_clock(slot.start_time)}-{format_wall_clock(slot.end_time)} selected. "
            "Type 'continue' to enter your details."
        )

    async def _handle_details(self, text: str) -> None:
        # Two prompts on the same step: name first, then phone.
        if self._pending_name is None:
            self._pending_name = text
            self.page_say("And your phone number?")
            return
        name, self._pending_name = self._pending_name, None
        try:
            appointment = await self.workflow.submit_details(name, text)
        except BarberbookError:
            self.error_say(self.workflow.error or "Booking failed.")
            self.page_say("Your name?")
            return
        if appointment is not None:
            self.page_say(
                f"Booked! {service_label(appointment, self.workflow.services)} on "
                f"{appointment.start_time.strftime('%Y-%m-%d at %H:%M')}. See you soon, "
                f"{appointment.client_name}."
            )

    # ------------------------------------------------------------------ #
    # Rendering
    # ------------------------------------------------------------------ #

    def _parse_day(self, text: str) -> Optional[date]:
        if text.startswith("+") and text[1:].isdigit():
            return self._relative_day(int(text[1:]))
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None

    def _relative_day(self, offset: int) -> date:
        return _skip_sunday(self.workflow.today + timedelta(days=offset))

    def _show_current_step(self) -> None:
        if self.workflow.step == BookingStep.SELECT_SERVICE:
            self._show_services()
        elif self.workflow.step == BookingStep.SELECT_DATE_TIME:
            self._show_slots()

    def _show_services(self) -> None:
        for index, service in enumerate(self.workflow.services, start=1):
            print(f"    {index}. {service.name} - {service.duration_minutes} min - R$ {service.price:.2f}")

    def _show_slots(self) -> None:
        slots = self.workflow.slots
        if not slots:
            self.system_log(f"No times on {self.workflow.selected_date.isoformat()}.")
            return
        cells = [
            f"{format_wall_clock(s.start_time)}{'' if s.is_available else '(x)'}" for s in slots
        ]
        for row in range(0, len(cells), 8):
            print("    " + "  ".join(cells[row:row + 8]))


async def run_owner_scenario(db: InMemoryDatabase) -> None:
    """Sign in as the demo owner and print the dashboard."""
    controller = AppController(db)
    await controller.sign_in(DEMO_EMAIL, DEMO_PASSWORD)
    state = controller.state
    today = local_today(settings.zone)
    stats = build_dashboard(state, today)

    print(f"\n{BOLD}Dashboard for {state.user.shop_name}{RESET}")
    print(f"  Appointments today: {len(stats.today_appointments)}")
    print(f"  Total appointments: {stats.total_appointments}")
    print(f"  Services:           {stats.total_services}")
    print(f"\n{BOLD}Next 7 days{RESET}")
    for entry in week_overview(state.appointments, today):
        print(f"  {entry.day.isoformat()} {entry.day.strftime('%a')}: {entry.count}")
    print(f"\n{BOLD}Appointments{RESET}")
    for appointment in state.appointments:
        print(
            f"  {appointment.start_time.strftime('%Y-%m-%d %H:%M')} "
            f"{service_label(appointment, state.services):<16} "
            f"{appointment.client_name:<16} {appointment.status.value}"
        )
    await controller.sign_out()


async def _main(scenario: Optional[str]) -> None:
    db = InMemoryDatabase()
    await seed_demo_business(db)

    if scenario == "not-found":
        session = ConsoleSession(db, slug="no-such-shop")
        session.banner("Scenario: not-found")
        await session.open_page()
        return
    if scenario == "owner":
        await ConsoleSession(db).run_scenario("booking")
        await run_owner_scenario(db)
        return

    session = ConsoleSession(db)
    if scenario:
        await session.run_scenario(scenario)
    else:
        await session.run()


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=["booking", "not-found", "owner"],
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    args = parser.parse_args()
    asyncio.run(_main(args.scenario))


if __name__ == "__main__":
    main()
