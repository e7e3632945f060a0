"""Pytest configuration and shared fixtures for the ranking engine tests."""

import sys
from pathlib import Path

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from domain.scoring.models import (  # noqa: E402
    City,
    CityMetrics,
    ClimateMetrics,
    CostMetrics,
    DemographicsMetrics,
    QualityOfLifeMetrics,
)


# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


# ============================================================================
# Builders
# ============================================================================


def make_city(city_id, name=None, state="TX", **attributes):
    """Build a City with sensible defaults."""
    return City(id=city_id, name=name or city_id.title(), state=state, **attributes)


def make_metrics(climate=None, cost=None, demographics=None, quality_of_life=None, **groups):
    """Build CityMetrics from plain dicts, leaving every other leaf unknown."""
    return CityMetrics(
        climate=ClimateMetrics(**(climate or {})),
        cost=CostMetrics(**(cost or {})),
        demographics=DemographicsMetrics(**(demographics or {})),
        quality_of_life=QualityOfLifeMetrics(**(quality_of_life or {})),
        **groups,
    )


# ============================================================================
# Shared Fixtures - Cities
# ============================================================================


@pytest.fixture
def three_cities():
    """Three synthetic cities with sunshine, crime and team data only."""
    return [
        (
            make_city("alderton", "Alderton", "TX", sports_teams={"nfl": ["Alderton Anchors"]}),
            make_metrics(
                climate={"sunshine_days": 300},
                quality_of_life={"violent_crime_rate": 300},
            ),
        ),
        (
            make_city("brookfield", "Brookfield", "OH", sports_teams={}),
            make_metrics(
                climate={"sunshine_days": 250},
                quality_of_life={"violent_crime_rate": 500},
            ),
        ),
        (
            make_city("cedar-falls", "Cedar Falls", "IA", sports_teams={"nba": ["Cedar Hawks"]}),
            make_metrics(
                climate={"sunshine_days": 200},
                quality_of_life={"violent_crime_rate": 400},
            ),
        ),
    ]


@pytest.fixture
def rich_cities():
    """Cities with most categories populated, including some gaps."""
    return [
        (
            make_city(
                "harbor-city",
                "Harbor City",
                "CA",
                sports_teams={"nfl": ["Harbor Gulls"], "mlb": ["Harbor Pilots"]},
                has_international_airport=True,
            ),
            make_metrics(
                climate={"avg_temp": 64, "comfort_days": 180, "sunshine_days": 260, "rain_days": 40},
                cost={
                    "regional_price_parity": 118.0,
                    "rpp_housing": 160.0,
                    "median_household_income": 98000,
                    "median_home_price": 850000,
                    "effective_tax_rate": 17.5,
                    "per_capita_disposable_income": 70000,
                },
                demographics={
                    "population": 3900000,
                    "diversity_index": 72,
                    "bachelors_percent": 44,
                    "poverty_rate": 12,
                    "community_percent": {"hispanic": 38.0},
                },
                quality_of_life={"walk_score": 78, "violent_crime_rate": 480},
            ),
        ),
        (
            make_city(
                "prairie-view",
                "Prairie View",
                "KS",
                sports_teams={},
                has_international_airport=False,
            ),
            make_metrics(
                climate={"avg_temp": 55, "comfort_days": 120, "sunshine_days": 230, "freeze_days": 110},
                cost={
                    "regional_price_parity": 88.0,
                    "rpp_housing": 70.0,
                    "median_household_income": 61000,
                    "median_home_price": 190000,
                    "effective_tax_rate": 11.0,
                    "per_capita_disposable_income": 48000,
                },
                demographics={
                    "population": 240000,
                    "diversity_index": 30,
                    "bachelors_percent": 29,
                    "poverty_rate": 14,
                    "community_percent": {"hispanic": 9.0},
                },
                quality_of_life={"walk_score": 35, "violent_crime_rate": 310},
            ),
        ),
        (
            make_city(
                "lakeshore",
                "Lakeshore",
                "IL",
                sports_teams={"nfl": ["Lakeshore Bears"], "nhl": ["Lakeshore Blades"]},
                has_international_airport=True,
            ),
            make_metrics(
                climate={"avg_temp": 50, "comfort_days": 110, "snow_days": 30},
                cost={
                    "regional_price_parity": 103.0,
                    "rpp_housing": 110.0,
                    "median_household_income": 78000,
                    "median_home_price": 320000,
                    "effective_tax_rate": 16.0,
                },
                demographics={"population": 9400000, "diversity_index": 66, "median_age": 37},
                quality_of_life={"walk_score": 88, "transit_score": 65},
            ),
        ),
        (
            make_city("mesa-verde", "Mesa Verde", "AZ"),
            make_metrics(),
        ),
    ]
