# hydroscan/domain/scheduling.py
from dataclasses import dataclass
from datetime import date

from hydroscan.domain.errors import ValidationError
from hydroscan.utils.settings import DISALLOWED_WEEKDAYS

_WEEKDAY_CODES = ["MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN"]


def parse_weekdays(raw: str) -> frozenset[int]:
    days = set()
    for part in (raw or "").split(","):
        code = part.strip().upper()[:3]
        if not code:
            continue
        if code not in _WEEKDAY_CODES:
            raise ValueError(f"Unknown weekday code: {part!r}")
        days.add(_WEEKDAY_CODES.index(code))
    return frozenset(days)


BLOCKED_WEEKDAYS = parse_weekdays(DISALLOWED_WEEKDAYS)


@dataclass(frozen=True)
class Schedule:
    pickup_date: date | None = None
    delivery_date: date | None = None

    @property
    def is_scheduled(self) -> bool:
        return self.pickup_date is not None or self.delivery_date is not None


def validate_schedule_date(
    requested: date,
    today: date,
    blocked_weekdays: frozenset[int] = BLOCKED_WEEKDAYS,
    field: str = "date",
) -> date:
    if requested <= today:
        raise ValidationError(f"Please select a future {field}")
    if requested.weekday() in blocked_weekdays:
        names = ", ".join(_WEEKDAY_CODES[d].title() for d in sorted(blocked_weekdays))
        raise ValidationError(f"The {field} falls on an unavailable day ({names})")
    return requested


def validate_schedule(
    schedule: Schedule | None,
    today: date,
    blocked_weekdays: frozenset[int] = BLOCKED_WEEKDAYS,
) -> Schedule:
    if schedule is None:
        return Schedule()
    if schedule.pickup_date is not None:
        validate_schedule_date(schedule.pickup_date, today, blocked_weekdays, "pickup date")
    if schedule.delivery_date is not None:
        validate_schedule_date(schedule.delivery_date, today, blocked_weekdays, "delivery date")
    return schedule
