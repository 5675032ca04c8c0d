from __future__ import annotations

from dataclasses import dataclass, field

# Index matches date.weekday()
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


@dataclass(frozen=True)
class TimeSlot:
    start_time: str  # HH:MM, 24h
    end_time: str  # HH:MM, 24h

    @property
    def label(self) -> str:
        return f"{self.start_time}-{self.end_time}"


@dataclass(frozen=True)
class Timetable:
    # weekday name -> service code -> slots
    days: dict[str, dict[str, tuple[TimeSlot, ...]]] = field(default_factory=dict)

    def slots_for(self, weekday: str, service_code: str) -> list[TimeSlot]:
        return list(self.days.get(weekday, {}).get(service_code, ()))

    def slots_on(self, weekday: str) -> list[TimeSlot]:
        """All slots of a weekday, across every service code."""
        slots: list[TimeSlot] = []
        for service_slots in self.days.get(weekday, {}).values():
            slots.extend(service_slots)
        return slots

    def offers(self, weekday: str, service_code: str) -> bool:
        return bool(self.days.get(weekday, {}).get(service_code))
