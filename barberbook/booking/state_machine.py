"""
Finite state machine for the public booking flow.

Four linear steps with explicit transitions. Backward navigation only
goes to the immediately preceding step; there is no skipping ahead.
Every move the page makes must match a transition in the table, so a
stray button press cannot put the flow into an impossible state.

Usage:
    sm = BookingStateMachine()
    sm.transition(BookingTrigger.SERVICE_PICKED)
    assert sm.current_step == BookingStep.SELECT_DATE_TIME
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class BookingStep(str, Enum):
    """All steps of the booking flow."""
    SELECT_SERVICE = "select_service"
    SELECT_DATE_TIME = "select_date_time"
    ENTER_DETAILS = "enter_details"
    CONFIRMED = "confirmed"


class BookingTrigger(str, Enum):
    """Events that cause step transitions."""
    SERVICE_PICKED = "service_picked"
    DATE_PICKED = "date_picked"
    SLOT_PICKED = "slot_picked"
    CONTINUE = "continue"
    DETAILS_SUBMITTED = "details_submitted"
    BACK = "back"


@dataclass
class Transition:
    """A single valid step transition."""
    from_step: BookingStep
    to_step: BookingStep
    trigger: BookingTrigger
    guard: Optional[Callable[[], bool]] = None


@dataclass
class StepEntry:
    """Recorded history entry for a step visit."""
    step: BookingStep
    entered_at: datetime
    trigger: Optional[BookingTrigger] = None


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current step."""


class BookingStateMachine:
    """
    Deterministic state machine controlling the booking page.

    Guards let the owner of the machine veto a transition, e.g. CONTINUE
    is only allowed once a slot has been picked.
    """

    TRANSITIONS: list[Transition] = [
        # --- Service ---
        Transition(BookingStep.SELECT_SERVICE, BookingStep.SELECT_DATE_TIME,
                   BookingTrigger.SERVICE_PICKED),

        # --- Date and time ---
        Transition(BookingStep.SELECT_DATE_TIME, BookingStep.SELECT_DATE_TIME,
                   BookingTrigger.DATE_PICKED),
        Transition(BookingStep.SELECT_DATE_TIME, BookingStep.SELECT_DATE_TIME,
                   BookingTrigger.SLOT_PICKED),
        Transition(BookingStep.SELECT_DATE_TIME, BookingStep.ENTER_DETAILS,
                   BookingTrigger.CONTINUE),

        # --- Details ---
        Transition(BookingStep.ENTER_DETAILS, BookingStep.CONFIRMED,
                   BookingTrigger.DETAILS_SUBMITTED),

        # --- Back ---
        Transition(BookingStep.SELECT_DATE_TIME, BookingStep.SELECT_SERVICE,
                   BookingTrigger.BACK),
        Transition(BookingStep.ENTER_DETAILS, BookingStep.SELECT_DATE_TIME,
                   BookingTrigger.BACK),
    ]

    def __init__(self, guards: Optional[dict[BookingTrigger, Callable[[], bool]]] = None) -> None:
        self._guards = guards or {}
        self._current_step = BookingStep.SELECT_SERVICE
        self._history: list[StepEntry] = [
            StepEntry(step=BookingStep.SELECT_SERVICE, entered_at=datetime.now(timezone.utc))
        ]

    @property
    def current_step(self) -> BookingStep:
        return self._current_step

    def transition(self, trigger: BookingTrigger) -> BookingStep:
        """
        Execute a step transition.

        Args:
            trigger: The event triggering the transition.

        Returns:
            The new step.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_step == self._current_step and t.trigger == trigger:
                guard = t.guard or self._guards.get(trigger)
                if guard is not None and not guard():
                    continue

                old_step = self._current_step
                self._current_step = t.to_step
                self._history.append(StepEntry(
                    step=self._current_step,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                ))

                logger.debug(
                    "Step transition: %s -> %s (trigger: %s)",
                    old_step.value, self._current_step.value, trigger.value,
                )
                return self._current_step

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_step.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def can(self, trigger: BookingTrigger) -> bool:
        """True when ``trigger`` would currently succeed."""
        for t in self.TRANSITIONS:
            if t.from_step == self._current_step and t.trigger == trigger:
                guard = t.guard or self._guards.get(trigger)
                if guard is None or guard():
                    return True
        return False

    def reset(self) -> None:
        """Return to the first step, keeping the history."""
        self._current_step = BookingStep.SELECT_SERVICE
        self._history.append(StepEntry(
            step=self._current_step, entered_at=datetime.now(timezone.utc),
        ))
        logger.debug("Booking flow restarted")

    def get_valid_triggers(self) -> list[BookingTrigger]:
        """Return all triggers valid from the current step."""
        return [t.trigger for t in self.TRANSITIONS if t.from_step == self._current_step]

    def get_history(self) -> list[StepEntry]:
        """Return the full step transition history."""
        return list(self._history)

    def get_step_trace(self) -> list[str]:
        """Return ordered list of step names visited."""
        return [entry.step.value for entry in self._history]

    def is_terminal(self) -> bool:
        """Check if the booking has been confirmed."""
        return self._current_step == BookingStep.CONFIRMED
