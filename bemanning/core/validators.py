import datetime

from fastapi import HTTPException, status


def validate_year_month(year: int, month: int | None = None) -> datetime.date | None:
    """
    Validerar år och (valfri) månad från en URL.

    - Om month är satt: validera genom att skapa dag 1 och returnera datumet.
    - Om endast year: kontrollera intervallet och returnera None.
    - Ogiltiga värden ger HTTP 400.
    """
    if not 1900 <= year <= 2100:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Year must be between 1900 and 2100",
        )

    if month is None:
        return None

    try:
        return datetime.date(year, month, 1)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Month must be 1-12",
        )


def validate_mode(mode: str) -> str:
    """Endast "preview" eller "apply" tillåts."""
    if mode not in ("preview", "apply"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Mode must be 'preview' or 'apply'",
        )
    return mode
