"""Delivery time slots.

Slot labels are the user-facing ranges stored on orders (``"5-6 PM"``). The
order of ``TIME_SLOTS`` is the delivery ordering used when sorting listings.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence

ASAP = "ASAP"
DEFAULT_PLAN_SLOT = "7-8 AM"

_UNKNOWN_SLOT_RANK = 999
_SLOT_START = re.compile(r"^\s*(\d{1,2})\s*(AM|PM)?", re.IGNORECASE)


class SlotPeriod(str, Enum):
    MORNING = "morning"
    EVENING = "evening"


@dataclass(frozen=True)
class TimeSlot:
    id: str
    range: str
    type: SlotPeriod

    @property
    def start_hour(self) -> int:
        """Start of the slot on a 24-hour clock."""
        return slot_start_hour(self.range)

    def to_dict(self):
        return {"id": self.id, "range": self.range, "type": self.type.value}


TIME_SLOTS: List[TimeSlot] = [
    TimeSlot("1", "7-8 AM", SlotPeriod.MORNING),
    TimeSlot("2", "8-9 AM", SlotPeriod.MORNING),
    TimeSlot("3", "9-10 AM", SlotPeriod.MORNING),
    TimeSlot("4", "10-11 AM", SlotPeriod.MORNING),
    TimeSlot("5", "3-4 PM", SlotPeriod.EVENING),
    TimeSlot("6", "4-5 PM", SlotPeriod.EVENING),
    TimeSlot("7", "5-6 PM", SlotPeriod.EVENING),
    TimeSlot("8", "6-7 PM", SlotPeriod.EVENING),
]


def slot_start_hour(label: str) -> int:
    """
    Convert the start of a range label to a 24-hour value.

    "5-6 PM" -> 17, "11 AM-12 PM" -> 11, "12-1 PM" -> 12. A start without its
    own meridiem inherits the one of the end of the range.
    """
    start, _, end = label.partition("-")
    match = _SLOT_START.match(start)
    if not match:
        raise ValueError(f"Invalid time slot label: {label!r}")

    hour = int(match.group(1))
    meridiem = match.group(2)
    if meridiem is None:
        meridiem = "PM" if "PM" in end.upper() else "AM"
    meridiem = meridiem.upper()

    if meridiem == "PM" and hour != 12:
        hour += 12
    elif meridiem == "AM" and hour == 12:
        hour = 0
    return hour


def slot_for_hour(hour: int, slots: Sequence[TimeSlot] = TIME_SLOTS) -> Optional[TimeSlot]:
    """Return the configured slot starting at ``hour`` (24h), if any."""
    for slot in slots:
        if slot.start_hour == hour:
            return slot
    return None


def target_hour(hour: int, minutes: int) -> int:
    """From half past onwards the worker is serving the next hour's slot."""
    return hour + 1 if minutes >= 30 else hour


def slot_labels(slots: Sequence[TimeSlot] = TIME_SLOTS) -> List[str]:
    return [slot.range for slot in slots]


def kitchen_slot_order(slots: Sequence[TimeSlot] = TIME_SLOTS) -> List[str]:
    """Kitchen priority: configured slots first, ASAP orders after them."""
    return slot_labels(slots) + [ASAP]


def slot_rank(label: Optional[str], ordering: Sequence[str]) -> int:
    try:
        return list(ordering).index(label)
    except ValueError:
        return _UNKNOWN_SLOT_RANK


def sort_by_slot(rows: Iterable[dict], ordering: Sequence[str], key: str = "timeSlot") -> List[dict]:
    """Stable sort of rows by their slot position, unknown labels last."""
    ordering = list(ordering)
    return sorted(rows, key=lambda row: slot_rank(row.get(key), ordering))
