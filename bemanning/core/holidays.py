"""Svenska helgdagar och röda dagar."""

import datetime
from functools import cache
from typing import Any

from bemanning.core.utils import parse_iso_date

#: (månad, dag, namn) för helgdagar med fast datum.
FIXED_HOLIDAYS: tuple[tuple[int, int, str], ...] = (
    (1, 1, "Nyårsdagen"),
    (1, 6, "Trettondedag jul"),
    (5, 1, "Första maj"),
    (6, 6, "Sveriges nationaldag"),
    (12, 24, "Julafton"),
    (12, 25, "Juldagen"),
    (12, 26, "Annandag jul"),
    (12, 31, "Nyårsafton"),
)

#: (dagar från påskdagen, namn) för rörliga helgdagar.
EASTER_OFFSETS: tuple[tuple[int, str], ...] = (
    (-3, "Skärtorsdagen"),
    (-2, "Långfredagen"),
    (0, "Påskdagen"),
    (1, "Annandag påsk"),
    (39, "Kristi himmelsfärdsdag"),
    (49, "Pingstdagen"),
)


def easter_sunday(year: int) -> datetime.date:
    """Anonymous Gregorian algorithm (Meeus/Jones/Butcher)."""
    a = year % 19
    b = year // 100
    c = year % 100
    d = b // 4
    e = b % 4
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i = c // 4
    k = c % 4
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month = (h + l - 7 * m + 114) // 31
    day = ((h + l - 7 * m + 114) % 31) + 1
    return datetime.date(year, month, day)


def _first_saturday(start: datetime.date, days: int, fallback: datetime.date) -> datetime.date:
    """Första lördagen i intervallet [start, start + days), annars fallback."""
    for offset in range(days):
        d = start + datetime.timedelta(days=offset)
        if d.weekday() == 5:  # 5 = Saturday
            return d
    return fallback


def midsommardagen(year: int) -> datetime.date:
    """Midsummer Day: Saturday between 20 and 26 June."""
    return _first_saturday(datetime.date(year, 6, 20), 7, datetime.date(year, 6, 20))


def alla_helgons_dag(year: int) -> datetime.date:
    """All Saints' Day: Saturday between 31 Oct and 6 Nov."""
    return _first_saturday(datetime.date(year, 10, 31), 7, datetime.date(year, 11, 1))


@cache
def _holidays_for_year(year: int) -> dict[datetime.date, str]:
    """Cachad per år. Helgdagar för ett givet år ändras aldrig."""
    holidays: dict[datetime.date, str] = {}

    def add(date: datetime.date, name: str) -> None:
        # Kristi himmelsfärd kan sammanfalla med 1 maj, pingst med nationaldagen
        holidays[date] = f"{holidays[date]} / {name}" if date in holidays else name

    for month, day, name in FIXED_HOLIDAYS:
        add(datetime.date(year, month, day), name)

    easter = easter_sunday(year)
    for offset, name in EASTER_OFFSETS:
        add(easter + datetime.timedelta(days=offset), name)

    add(midsommardagen(year), "Midsommardagen")
    add(alla_helgons_dag(year), "Alla helgons dag")
    return holidays


def get_all_holidays(year: int) -> dict[str, str]:
    """
    Alla helgdagar för ett år.

    Returns:
        Dict med "YYYY-MM-DD" -> namn, sorterad på datum
    """
    return {d.isoformat(): name for d, name in sorted(_holidays_for_year(year).items())}


def get_holiday_name(value: Any) -> str | None:
    """Namnet på helgdagen, eller None. Ogiltiga datum ger None."""
    date = parse_iso_date(value)
    if date is None:
        return None
    return _holidays_for_year(date.year).get(date)


def is_holiday(value: Any) -> bool:
    return get_holiday_name(value) is not None


def is_red_day(value: Any) -> bool:
    """Röd dag = helgdag eller söndag. Ogiltiga datum ger False."""
    date = parse_iso_date(value)
    if date is None:
        return False
    return date.weekday() == 6 or date in _holidays_for_year(date.year)
