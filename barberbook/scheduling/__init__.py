from barberbook.scheduling.schedule import WeeklySchedule, closed_day
from barberbook.scheduling.slot_generator import available_slots, find_slot, generate_slots

__all__ = [
    "WeeklySchedule",
    "closed_day",
    "generate_slots",
    "find_slot",
    "available_slots",
]
