"""
HRF/Kommunal-regler för semester, anställningstid och uppsägningstid.

Stöd för både privat och kommunal sektor. Alla funktioner som beror på
dagens datum tar ett valfritt `today` så att resultatet går att återskapa.
"""

import datetime
import logging
import math
from typing import Any, Final

from bemanning.core.agreements import get_agreement, get_agreement_for_sector, get_minimum_hourly_wage
from bemanning.core.constants import MONTH_NAMES, SECTOR_MUNICIPAL, SECTOR_PRIVATE, SECTORS
from bemanning.core.models import Person
from bemanning.core.types import HRValidationResult, VacationYearInfo
from bemanning.core.utils import get_today, parse_iso_date, round_half_up

logger = logging.getLogger(__name__)

BRACKET_0_2: Final[str] = "0-2"
BRACKET_2_5: Final[str] = "2-5"
BRACKET_5_PLUS: Final[str] = "5+"

#: Tabell-val för semesterdagar.
TABLE_FULLTIME: Final[str] = "fulltime"
TABLE_PARTTIME: Final[str] = "parttime"

#: Felkoder från validate_person_against_hrf.
HRF_START_DATE_MISSING: Final[str] = "START_DATE_MISSING"
HRF_START_DATE_FUTURE: Final[str] = "START_DATE_FUTURE"
HRF_EMPLOYMENT_PCT: Final[str] = "EMPLOYMENT_PCT"
HRF_UNKNOWN_SECTOR: Final[str] = "UNKNOWN_SECTOR"
HRF_WAGE_BELOW_MINIMUM: Final[str] = "WAGE_BELOW_MINIMUM"
HRF_NOTICE_TOO_SHORT: Final[str] = "NOTICE_TOO_SHORT"

HRF_VACATION_RULES: Final[dict[str, dict[str, Any]]] = {
    SECTOR_PRIVATE: {
        "name": "Privat sektor",
        "calculation_period_fulltime": 26,
        "calculation_period_parttime": 16,
        # 1 april
        "vacation_year_start_month": 4,
        "fulltime": {BRACKET_0_2: 25, BRACKET_2_5: 28, BRACKET_5_PLUS: 31},
        # Redan justerad för typisk deltidsgrad, skalas aldrig om
        "parttime": {BRACKET_0_2: 16, BRACKET_2_5: 18, BRACKET_5_PLUS: 20},
        "age_overlays": None,
        "description": "Privat hotell- och restaurangsektor",
        "url": "https://www.hrf.se/arbetsvillkor/lon-och-arbetstid/semester",
    },
    SECTOR_MUNICIPAL: {
        "name": "Kommunal sektor",
        "calculation_period_fulltime": 26,
        "calculation_period_parttime": 16,
        # 1 juni
        "vacation_year_start_month": 6,
        "fulltime": {BRACKET_0_2: 28, BRACKET_2_5: 30, BRACKET_5_PLUS: 32},
        "parttime": {BRACKET_0_2: 18, BRACKET_2_5: 19, BRACKET_5_PLUS: 21},
        # (minsta ålder, dagar) – lägger sig ovanpå anställningstiden
        "age_overlays": {
            TABLE_FULLTIME: ((50, 32), (40, 31)),
            TABLE_PARTTIME: ((50, 21), (40, 20)),
        },
        "description": "Kommunal sektor (enligt HÖK)",
        "url": "https://www.kommunal.se/kollektivavtal",
    },
}

#: (minsta antal år, månader) för lagstadgad uppsägningstid (LAS 11 §).
NOTICE_PERIOD_STEPS: Final[tuple[tuple[int, int], ...]] = (
    (10, 6),
    (8, 5),
    (6, 4),
    (4, 3),
    (2, 2),
    (0, 1),
)


def get_vacation_rules_for_sector(sector: str | None) -> dict[str, Any]:
    """Regler för sektorn. Okänd sektor ger privat sektor."""
    rules = HRF_VACATION_RULES.get(sector or "")
    if rules is None:
        logger.warning("Okänd sektor %r, använder privat sektor", sector)
        return HRF_VACATION_RULES[SECTOR_PRIVATE]
    return rules


def _tenure_bracket(years_employed: int) -> str:
    if years_employed < 2:
        return BRACKET_0_2
    if years_employed < 5:
        return BRACKET_2_5
    return BRACKET_5_PLUS


def _apply_age_overlay(rules: dict[str, Any], table: str, base_days: int, age: int | None) -> int:
    overlays = rules.get("age_overlays")
    if not overlays or age is None:
        return base_days
    for min_age, days in overlays[table]:
        if age >= min_age:
            return max(base_days, days)
    return base_days


def get_vacation_days_per_year(
    years_employed: int | None,
    employment_pct: float | None = 100,
    sector: str | None = SECTOR_PRIVATE,
    age: int | None = None,
    table: str | None = None,
) -> int:
    """
    Semesterdagar per år enligt HRF/Kommunal.

    Heltidstabellen pro-rateras mot tjänstgöringsgraden. Deltidstabellen är
    redan justerad och används som den är när `table="parttime"` anges.

    Args:
        years_employed: Antal år anställd (negativa/None räknas som 0)
        employment_pct: Tjänstgöringsgrad 10–100 (None räknas som 100)
        sector: "private" eller "municipal"
        age: Ålder, ger åldersbaserade dagar i kommunal sektor
        table: "fulltime" (standard) eller "parttime"

    Returns:
        Antal semesterdagar
    """
    years = max(0, years_employed or 0)
    pct = 100 if employment_pct is None else employment_pct
    rules = get_vacation_rules_for_sector(sector)
    bracket = _tenure_bracket(years)

    if table == TABLE_PARTTIME:
        return _apply_age_overlay(rules, TABLE_PARTTIME, rules[TABLE_PARTTIME][bracket], age)

    base_days = _apply_age_overlay(rules, TABLE_FULLTIME, rules[TABLE_FULLTIME][bracket], age)
    return round_half_up(base_days * pct / 100)


def get_calculation_period_weeks(employment_pct: float | None = 100, sector: str | None = SECTOR_PRIVATE) -> int:
    """Beräkningsperiod i veckor: 26 för heltid, 16 för deltid."""
    rules = get_vacation_rules_for_sector(sector)
    pct = 100 if employment_pct is None else employment_pct
    if pct >= 100:
        return rules["calculation_period_fulltime"]
    return rules["calculation_period_parttime"]


def get_vacation_year_start_month(sector: str | None = SECTOR_PRIVATE) -> int:
    """Startmånad (1–12) för semesteråret."""
    return get_vacation_rules_for_sector(sector)["vacation_year_start_month"]


def _vacation_year_start_year(date: datetime.date, sector: str | None) -> int:
    if date.month >= get_vacation_year_start_month(sector):
        return date.year
    return date.year - 1


def get_vacation_year(value: Any, sector: str | None = SECTOR_PRIVATE) -> str | None:
    """
    Semesterår för ett datum, t.ex. "2026-2027".

    Ett datum före startmånaden tillhör föregående semesterår.
    Ogiltigt datum ger None.
    """
    date = parse_iso_date(value)
    if date is None:
        return None
    start_year = _vacation_year_start_year(date, sector)
    return f"{start_year}-{start_year + 1}"


def get_vacation_year_start(
    sector: str | None = SECTOR_PRIVATE, today: datetime.date | None = None
) -> datetime.date:
    """Första dagen i det semesterår som `today` ligger i."""
    today = today or get_today()
    return datetime.date(_vacation_year_start_year(today, sector), get_vacation_year_start_month(sector), 1)


def calculate_years_employed(
    start_date: Any, sector: str | None = SECTOR_PRIVATE, today: datetime.date | None = None
) -> int:
    """
    Anställningsår räknat i semesterår, inte kalenderdagar.

    Både startdatum och dagens datum mappas till sitt semesterår och
    skillnaden mellan startåren returneras. Saknat eller ogiltigt startdatum
    ger 0. Ett startdatum i ett framtida semesterår ger ett negativt värde.
    """
    start = parse_iso_date(start_date)
    if start is None:
        return 0
    today = today or get_today()
    return _vacation_year_start_year(today, sector) - _vacation_year_start_year(start, sector)


def _person_sector(person: Person, sector: str | None) -> str:
    return sector or person.sector or SECTOR_PRIVATE


def get_person_vacation_days_per_year(
    person: Person, sector: str | None = None, today: datetime.date | None = None
) -> int:
    """Personens rätt till semesterdagar utifrån anställningstid, grad och ålder."""
    sector = _person_sector(person, sector)
    years = calculate_years_employed(person.start_date, sector, today)
    return get_vacation_days_per_year(years, person.employment_pct, sector, person.age, person.vacation_table)


def get_accumulated_vacation_days(
    person: Person | None, sector: str | None = None, today: datetime.date | None = None
) -> int:
    """
    Intjänade semesterdagar hittills under innevarande semesterår.

    floor(rätt * veckor sedan semesterårets start / beräkningsperiod),
    som mest hela årets rätt.
    """
    if person is None:
        return 0

    sector = _person_sector(person, sector)
    today = today or get_today()
    entitlement = get_person_vacation_days_per_year(person, sector, today)

    weeks_passed = max(0, (today - get_vacation_year_start(sector, today)).days // 7)
    period = get_calculation_period_weeks(person.employment_pct, sector)
    accumulated = math.floor(entitlement * weeks_passed / period)
    return min(accumulated, entitlement)


def get_remaining_vacation_days(
    person: Person | None, sector: str | None = None, today: datetime.date | None = None
) -> int:
    """Kvarvarande dagar: rätt + sparade - uttagna, aldrig under 0."""
    if person is None:
        return 0

    entitlement = get_person_vacation_days_per_year(person, sector, today)
    available = entitlement + (person.saved_vacation_days or 0) - (person.used_vacation_days or 0)
    return max(0, available)


def get_notice_period_months(years_employed: int | None) -> int:
    """Lagstadgad uppsägningstid i månader utifrån anställningstid."""
    years = max(0, years_employed or 0)
    for min_years, months in NOTICE_PERIOD_STEPS:
        if years >= min_years:
            return months
    return 1


def get_person_vacation_year_info(
    person: Person | None, sector: str | None = None, today: datetime.date | None = None
) -> VacationYearInfo | None:
    """Sammanställning av personens semesterår."""
    if person is None:
        return None

    sector = _person_sector(person, sector)
    today = today or get_today()
    rules = get_vacation_rules_for_sector(sector)
    years = calculate_years_employed(person.start_date, sector, today)

    return {
        "sector": sector,
        "sector_name": rules["name"],
        "vacation_year": get_vacation_year(today, sector) or "",
        "years_employed": years,
        "vacation_days_per_year": get_person_vacation_days_per_year(person, sector, today),
        "calculation_period_weeks": get_calculation_period_weeks(person.employment_pct, sector),
        "accumulated": get_accumulated_vacation_days(person, sector, today),
        "used_this_year": person.used_vacation_days or 0,
        "saved_from_last_year": person.saved_vacation_days or 0,
        "remaining": get_remaining_vacation_days(person, sector, today),
        "employment_pct": person.employment_pct,
        "vacation_year_start_month": get_vacation_year_start_month(sector),
        "notice_period_months": get_notice_period_months(years),
    }


def update_vacation_days_on_year_change(
    person: Person | None, sector: str | None = None, today: datetime.date | None = None
) -> Person | None:
    """
    Ny semesterårsrätt vid årsskifte.

    Outtagna dagar från föregående år läggs till sparade dagar, uttaget
    nollställs. Returnerar en ny Person, originalet ändras inte.
    """
    if person is None:
        return None

    sector = _person_sector(person, sector)
    today = today or get_today()
    remaining_from_last_year = max(0, (person.vacation_days_per_year or 0) - (person.used_vacation_days or 0))

    updated = person.model_copy(
        update={
            "vacation_days_per_year": get_person_vacation_days_per_year(person, sector, today),
            "used_vacation_days": 0,
            "saved_vacation_days": (person.saved_vacation_days or 0) + remaining_from_last_year,
            "last_vacation_year_update": today.isoformat(),
            "sector": sector,
        },
        deep=True,
    )
    logger.info(
        "Vacation year rolled over",
        extra={
            "extra_fields": {
                "person_id": person.id,
                "vacation_days_per_year": updated.vacation_days_per_year,
                "saved_vacation_days": updated.saved_vacation_days,
            }
        },
    )
    return updated


def validate_person_against_hrf(
    person: Person, sector: str | None = None, today: datetime.date | None = None
) -> HRValidationResult:
    """
    Kontrollerar en person mot HRF-reglerna.

    Alla fel samlas i en lista i stället för att avbryta vid första felet.
    """
    sector = sector or person.sector
    today = today or get_today()
    errors: list[str] = []
    codes: list[str] = []

    def fail(code: str, message: str) -> None:
        codes.append(code)
        errors.append(message)

    start = parse_iso_date(person.start_date)
    if start is None:
        fail(HRF_START_DATE_MISSING, "Startdatum saknas")

    pct = person.employment_pct
    if pct is None or pct < 10 or pct > 100:
        fail(HRF_EMPLOYMENT_PCT, "Tjänstgöringsgrad måste vara 10-100%")

    if sector not in SECTORS:
        fail(HRF_UNKNOWN_SECTOR, f"Okänd sektor: {sector}")

    years = calculate_years_employed(person.start_date, sector, today)
    if years < 0 or (start is not None and start > today):
        fail(HRF_START_DATE_FUTURE, "Startdatum kan inte vara i framtiden")

    agreement = get_agreement(person.agreement_id) or get_agreement_for_sector(sector)
    if person.hourly_wage is not None:
        minimum = get_minimum_hourly_wage(agreement, years)
        if person.hourly_wage < minimum:
            fail(
                HRF_WAGE_BELOW_MINIMUM,
                f"Timlön {person.hourly_wage:.2f} kr understiger avtalets minimum {minimum:.2f} kr",
            )

    if person.notice_period_months is not None:
        statutory = get_notice_period_months(years)
        if person.notice_period_months < statutory:
            fail(
                HRF_NOTICE_TOO_SHORT,
                f"Uppsägningstid {person.notice_period_months} mån är kortare än lagstadgade {statutory} mån",
            )

    return {
        "valid": not errors,
        "errors": errors,
        "error_codes": codes,
        "years_employed": years,
        "vacation_days_per_year": get_vacation_days_per_year(years, pct, sector, person.age, person.vacation_table),
        "sector": sector,
    }


def get_rules_as_text(sector: str | None = SECTOR_PRIVATE) -> str:
    """Sektorns semesterregler som markdown."""
    rules = get_vacation_rules_for_sector(sector)
    start_month = rules["vacation_year_start_month"]
    month_name = MONTH_NAMES[start_month - 1]
    ft = rules[TABLE_FULLTIME]
    pt = rules[TABLE_PARTTIME]

    lines = [
        f"# Semesterregler: {rules['name']}",
        "",
        "## Sektor",
        f"- **{rules['name']}**",
        f"- {rules['description']}",
        f"- Källa: {rules['url']}",
        "",
        "## Beräkningsperiod",
        f"- **Heltidare (100%)**: {rules['calculation_period_fulltime']} veckor",
        f"- **Deltidare (<100%)**: {rules['calculation_period_parttime']} veckor",
        f"- **Semesteråret börjar**: 1 {month_name.lower()}",
        "",
        "## Semesterdagar per år",
        "",
        "### Heltid (100%)",
        f"- **År 1-2**: {ft[BRACKET_0_2]} dagar",
        f"- **År 3-5**: {ft[BRACKET_2_5]} dagar",
        f"- **År 6+**: {ft[BRACKET_5_PLUS]} dagar",
        "",
        "### Deltid (<100%)",
        f"- **År 1-2**: {pt[BRACKET_0_2]} dagar",
        f"- **År 3-5**: {pt[BRACKET_2_5]} dagar",
        f"- **År 6+**: {pt[BRACKET_5_PLUS]} dagar",
    ]

    overlays = rules.get("age_overlays")
    if overlays:
        lines += ["", "## Åldersbaserade dagar"]
        for min_age, days in sorted(overlays[TABLE_FULLTIME]):
            lines.append(f"- **{min_age} år och äldre (heltid)**: minst {days} dagar")
        for min_age, days in sorted(overlays[TABLE_PARTTIME]):
            lines.append(f"- **{min_age} år och äldre (deltid)**: minst {days} dagar")

    lines += [
        "",
        "## Anpassning för deltid",
        "Heltidstabellen justeras efter tjänstgöringsgraden:",
        f"- Exempel: 80% × {ft[BRACKET_0_2]} dagar = {round_half_up(0.8 * ft[BRACKET_0_2])} dagar",
        "",
        "## Sparade semesterdagar",
        "- Outnyttjade semesterdagar förs över till nästa semesterår",
        "",
        "## Röda dagar",
        "- Arbetade röda dagar ger en extra ledig dag",
    ]
    return "\n".join(lines) + "\n"


def compare_sectors() -> dict[str, list[dict[str, Any]]]:
    """Jämförelse av sektorernas nyckeltal."""
    sectors = []
    for key, rules in HRF_VACATION_RULES.items():
        sectors.append(
            {
                "sector": key,
                "name": rules["name"],
                "fulltime_2_years": rules[TABLE_FULLTIME][BRACKET_0_2],
                "fulltime_6_years": rules[TABLE_FULLTIME][BRACKET_5_PLUS],
                "parttime_2_years": rules[TABLE_PARTTIME][BRACKET_0_2],
                "parttime_6_years": rules[TABLE_PARTTIME][BRACKET_5_PLUS],
                "calculation_weeks": rules["calculation_period_fulltime"],
                "year_start_month": rules["vacation_year_start_month"],
            }
        )
    return {"sectors": sectors}
