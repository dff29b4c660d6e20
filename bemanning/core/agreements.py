"""Kollektivavtal: statisk referensdata för lönegolv, OB och semester."""

import logging

from pydantic import ConfigDict, Field

from bemanning.core.constants import SECTOR_MUNICIPAL, SECTOR_PRIVATE
from bemanning.core.models import CamelModel

logger = logging.getLogger(__name__)


class WageTier(CamelModel):
    """Lägstalön från och med ett visst antal års branschvana."""

    model_config = ConfigDict(frozen=True)

    min_years: int
    monthly_salary: int
    hourly_wage: float


class CollectiveAgreement(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    sector: str
    wage_tiers: tuple[WageTier, ...]
    ob_rates: dict[str, float] = Field(default_factory=dict)
    vacation_days_per_year: int
    red_day_compensation: bool = True
    url: str | None = None


HRF_PRIVATE = CollectiveAgreement(
    id="hrf-gastronomi",
    name="Gröna Riksavtalet (HRF / Visita)",
    sector=SECTOR_PRIVATE,
    wage_tiers=(
        WageTier(min_years=0, monthly_salary=24_552, hourly_wage=141.52),
        WageTier(min_years=1, monthly_salary=25_188, hourly_wage=145.19),
        WageTier(min_years=2, monthly_salary=25_841, hourly_wage=148.95),
        WageTier(min_years=4, monthly_salary=26_757, hourly_wage=154.23),
        WageTier(min_years=6, monthly_salary=27_520, hourly_wage=158.63),
    ),
    ob_rates={
        "weekday_evening": 24.92,
        "weekday_night": 29.93,
        "saturday": 29.93,
        "sunday": 34.93,
        "holiday": 59.86,
    },
    vacation_days_per_year=25,
    red_day_compensation=True,
    url="https://www.hrf.se/arbetsvillkor/lon-och-arbetstid",
)

KOMMUNAL_MUNICIPAL = CollectiveAgreement(
    id="kommunal-hok",
    name="Huvudöverenskommelse (HÖK) Kommunal / SKR",
    sector=SECTOR_MUNICIPAL,
    wage_tiers=(
        WageTier(min_years=0, monthly_salary=25_800, hourly_wage=148.71),
        WageTier(min_years=1, monthly_salary=26_500, hourly_wage=152.74),
    ),
    ob_rates={
        "weekday_evening": 25.10,
        "weekday_night": 51.30,
        "saturday": 61.10,
        "sunday": 61.10,
        "holiday": 132.20,
    },
    vacation_days_per_year=28,
    red_day_compensation=True,
    url="https://www.kommunal.se/kollektivavtal",
)

AGREEMENTS: dict[str, CollectiveAgreement] = {a.id: a for a in (HRF_PRIVATE, KOMMUNAL_MUNICIPAL)}

_DEFAULT_BY_SECTOR: dict[str, CollectiveAgreement] = {
    SECTOR_PRIVATE: HRF_PRIVATE,
    SECTOR_MUNICIPAL: KOMMUNAL_MUNICIPAL,
}


def get_agreement(agreement_id: str | None) -> CollectiveAgreement | None:
    if not agreement_id:
        return None
    return AGREEMENTS.get(agreement_id)


def get_agreement_for_sector(sector: str | None) -> CollectiveAgreement:
    """Standardavtalet för sektorn. Okänd sektor ger privat sektor."""
    agreement = _DEFAULT_BY_SECTOR.get(sector or "")
    if agreement is None:
        logger.warning("Unknown sector %r, using private sector agreement", sector)
        return HRF_PRIVATE
    return agreement


def list_agreements() -> list[CollectiveAgreement]:
    return list(AGREEMENTS.values())


def get_minimum_hourly_wage(agreement: CollectiveAgreement, years_employed: int) -> float:
    """
    Lägsta timlön för given branschvana.

    Args:
        agreement: Avtalet
        years_employed: Antal år (negativa värden räknas som 0)

    Returns:
        Timlön i kronor från högsta trappsteg som uppnåtts
    """
    years = max(0, years_employed or 0)
    eligible = [t for t in agreement.wage_tiers if t.min_years <= years]
    if not eligible:
        return agreement.wage_tiers[0].hourly_wage
    return max(eligible, key=lambda t: t.min_years).hourly_wage
