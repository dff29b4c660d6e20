# bemanning/core/config.py

import os
from typing import Final

# ==========================
# Miljö
# ==========================

#: Produktionsläge styr loggformat och Sentry.
IS_PRODUCTION: Final[bool] = os.getenv("PRODUCTION", "false").lower() == "true"

#: Katalog för loggfiler.
LOG_DIR_NAME: Final[str] = os.getenv("LOG_DIR", "logs")

#: Lägsta loggnivå. Tom sträng ger INFO i produktion och DEBUG annars.
LOG_LEVEL: Final[str] = os.getenv("LOG_LEVEL", "").upper()

#: Databas-URL för state-lagret.
DATABASE_URL: Final[str] = os.getenv("DATABASE_URL", "sqlite:///./bemanning.db")

#: Version som rapporteras av /health och till Sentry.
APP_VERSION: Final[str] = "0.1.0"

#: Tillåtna CORS-origins i produktion, kommaseparerade.
CORS_ORIGINS: Final[list[str]] = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]


# ==========================
# Datum och tidformat
# ==========================

#: ISO-format för datumsträngar i state-trädet.
DATE_FORMAT_ISO: Final[str] = "%Y-%m-%d"


# ==========================
# Arbetstid
# ==========================

#: Standardlängd på en arbetsdag i timmar vid 100 % tjänstgöringsgrad.
STANDARD_DAY_HOURS: Final[int] = 8

#: Tolerans (timmar) innan månadsstatus blir YELLOW eller RED.
STATUS_TOLERANCE_HOURS: Final[float] = 0.25

#: Längsta tillåtna arbetspass innan MAX_10H (minuter).
MAX_WORK_MINUTES_PER_DAY: Final[int] = 10 * 60

#: Minsta dygnsvila mellan två arbetsdagar (minuter).
MIN_DAILY_REST_MINUTES: Final[int] = 11 * 60

#: Antal arbetsdagar i rad som ger P1-varning.
STREAK_WARNING_DAYS: Final[int] = 10

#: Antal arbetsdagar inom 7 dagar som bryter veckovilan (36 h).
WEEKLY_REST_BREACH_DAYS: Final[int] = 7

#: Standardtider när varken entry eller månad anger tider.
DEFAULT_TIMES: Final[dict[str, str]] = {
    "start": "07:00",
    "end": "16:00",
    "break_start": "12:00",
    "break_end": "13:00",
}


# ==========================
# Schemagenerering
# ==========================

#: Längsta period (dagar mellan från- och till-datum) i period-läge.
MAX_PERIOD_DAYS: Final[int] = 93

#: Minsta avstånd i dagar mellan planerade X-dagar för samma person.
EXTRA_DAY_MIN_SPACING: Final[int] = 3

#: Standardtak för planerade X-dagar per person och månad.
DEFAULT_MAX_EXTRA_PER_PERSON: Final[int] = 2

#: Poängpolicy för röda dagar i kandidatrankningen.
#: "red_day_bonus" (+10 på röd dag) eller "vacation_balance" (-10 vid stort semestersaldo).
SCORING_POLICY: Final[str] = os.getenv("SCORING_POLICY", "red_day_bonus")
