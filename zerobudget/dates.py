from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from django.core.exceptions import ValidationError
from django.utils import timezone


@dataclass(frozen=True)
class MonthContext:
    """The caller's notion of "today" and of the current budget month.

    Clients pass ``userDate``/``userYear``/``userMonth`` so that month
    boundaries follow their timezone rather than the server's.
    """

    today: date
    year: int
    month: int

    @classmethod
    def for_date(cls, today: date) -> "MonthContext":
        return cls(today=today, year=today.year, month=today.month)

    @classmethod
    def server_now(cls) -> "MonthContext":
        return cls.for_date(timezone.localdate())

    @classmethod
    def from_params(cls, params) -> "MonthContext":
        raw_date = params.get("userDate")
        raw_year = params.get("userYear")
        raw_month = params.get("userMonth")

        if raw_date:
            try:
                today = date.fromisoformat(str(raw_date))
            except ValueError:
                raise ValidationError({"userDate": ["Enter a date in YYYY-MM-DD format."]})
        else:
            today = timezone.localdate()

        if raw_year in (None, "") or raw_month in (None, ""):
            return cls.for_date(today)
        try:
            year, month = int(raw_year), int(raw_month)
        except (TypeError, ValueError):
            raise ValidationError("userYear and userMonth must be integers.")
        if not 1 <= month <= 12:
            raise ValidationError({"userMonth": ["Month must be between 1 and 12."]})
        return cls(today=today, year=year, month=month)

    @property
    def period(self) -> tuple[int, int]:
        return (self.year, self.month)

    def is_future(self, value: date) -> bool:
        return value > self.today

    def is_past_month(self, value: date) -> bool:
        return (value.year, value.month) < self.period

    def ensure_not_future(self, value: date) -> None:
        if self.is_future(value):
            raise ValidationError(
                {"date": [f"Transaction date {value.isoformat()} is in the future."]}
            )
