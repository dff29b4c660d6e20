# bemanning/core/utils.py
import calendar
import datetime
import math
from collections.abc import Iterator
from typing import Any

from bemanning.core.config import DATE_FORMAT_ISO


def get_today() -> datetime.date:
    """Dagens datum. Egen funktion så att tester kan monkeypatcha den."""
    return datetime.date.today()


def parse_iso_date(value: Any) -> datetime.date | None:
    """
    Tolkar ett datum fail-closed.

    Accepterar datetime.date, datetime.datetime och strängar "YYYY-MM-DD"
    (även längre ISO-strängar, där bara datumdelen används).
    Returnerar None i stället för att kasta vid ogiltiga värden.
    """
    if value is None:
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()[:10]
    try:
        return datetime.datetime.strptime(text, DATE_FORMAT_ISO).date()
    except ValueError:
        return None


def format_iso_date(date: datetime.date) -> str:
    return date.strftime(DATE_FORMAT_ISO)


def days_in_month(year: int, month: int) -> int:
    """Antal dagar i månaden (skottårssäkert)."""
    return calendar.monthrange(year, month)[1]


def week_bounds(date: datetime.date) -> tuple[datetime.date, datetime.date]:
    """Returnerar (måndag, söndag) för veckan som innehåller datumet."""
    monday = date - datetime.timedelta(days=date.weekday())
    return monday, monday + datetime.timedelta(days=6)


def iter_dates(start: datetime.date, end: datetime.date) -> Iterator[datetime.date]:
    """Itererar från start till och med end."""
    current = start
    while current <= end:
        yield current
        current += datetime.timedelta(days=1)


def count_weekdays_in_month(year: int, month: int) -> int:
    """Antal måndag–fredag i månaden. Helgdagar räknas inte bort."""
    return sum(
        1
        for day in range(1, days_in_month(year, month) + 1)
        if datetime.date(year, month, day).weekday() < 5
    )


def round_half_up(value: float) -> int:
    """
    Avrundar .5 uppåt.

    Pythons round() avrundar till jämnt tal (12.5 -> 12), vilket ger fel
    antal semesterdagar och fel målvärden.
    """
    return int(math.floor(value + 0.5))
