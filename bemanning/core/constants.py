# bemanning/core/constants.py
from typing import Final

# ==========================
# Statuskoder för entries
# ==========================

#: Arbetar.
STATUS_WORK: Final[str] = "A"

#: Ledig.
STATUS_OFF: Final[str] = "L"

#: Uttagen extra-dag (intjänad på röd dag).
STATUS_EXTRA_DAY: Final[str] = "X"

#: Semester.
STATUS_VACATION: Final[str] = "SEM"

#: Sjuk.
STATUS_SICK: Final[str] = "SJ"

#: Vård av barn.
STATUS_CHILD_CARE: Final[str] = "VAB"

#: Permission / tjänstledighet.
STATUS_LEAVE: Final[str] = "PERM"

#: Utbildning.
STATUS_TRAINING: Final[str] = "UTB"

#: Otillsatt vakans (personId saknas).
STATUS_VACANCY: Final[str] = "EXTRA"

#: Hela statusvokabulären. Får inte utökas i tysthet.
ENTRY_STATUSES: Final[tuple[str, ...]] = (
    STATUS_WORK,
    STATUS_OFF,
    STATUS_EXTRA_DAY,
    STATUS_VACATION,
    STATUS_SICK,
    STATUS_CHILD_CARE,
    STATUS_LEAVE,
    STATUS_TRAINING,
    STATUS_VACANCY,
)

#: Statusar som extra-planeraren aldrig skriver över.
PROTECTED_STATUSES: Final[frozenset[str]] = frozenset(
    {STATUS_VACATION, STATUS_SICK, STATUS_CHILD_CARE, STATUS_LEAVE, STATUS_TRAINING}
)


# ==========================
# Kompetensroller
# ==========================

ROLE_KITCHEN: Final[str] = "KITCHEN"
ROLE_PACK: Final[str] = "PACK"
ROLE_DISH: Final[str] = "DISH"
ROLE_SYSTEM: Final[str] = "SYSTEM"
ROLE_ADMIN: Final[str] = "ADMIN"

ROLES: Final[tuple[str, ...]] = (ROLE_KITCHEN, ROLE_PACK, ROLE_DISH, ROLE_SYSTEM, ROLE_ADMIN)

#: Ordning som rollslots fylls i. Knappa/kritiska roller först.
ROLE_PRIORITY: Final[tuple[str, ...]] = (ROLE_SYSTEM, ROLE_ADMIN, ROLE_DISH, ROLE_KITCHEN, ROLE_PACK)


# ==========================
# Sektorer
# ==========================

SECTOR_PRIVATE: Final[str] = "private"
SECTOR_MUNICIPAL: Final[str] = "municipal"

SECTORS: Final[tuple[str, ...]] = (SECTOR_PRIVATE, SECTOR_MUNICIPAL)


# ==========================
# Regelnivåer
# ==========================

#: Hård regel – blockerar placering.
LEVEL_P0: Final[str] = "P0"

#: Mjuk regel – endast information.
LEVEL_P1: Final[str] = "P1"


# ==========================
# Veckostruktur / datum
# ==========================

#: Antal dagar per vecka.
DAYS_PER_WEEK: Final[int] = 7

#: Antal minuter per dygn. Används för pass över midnatt.
MINUTES_PER_DAY: Final[int] = 24 * 60

#: Svenska månadsnamn (index 0 = januari).
MONTH_NAMES: Final[tuple[str, ...]] = (
    "Januari",
    "Februari",
    "Mars",
    "April",
    "Maj",
    "Juni",
    "Juli",
    "Augusti",
    "September",
    "Oktober",
    "November",
    "December",
)

#: Schemaversion för lagrade state-träd.
SCHEMA_VERSION: Final[str] = "1.0"
