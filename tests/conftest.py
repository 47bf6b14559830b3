"""
Shared fixtures: a small in-memory dataset and seeded engines built on it.
"""

import copy

import pytest

from covidsim.etl.data_loader import build_dataset
from covidsim.engines.simulation_engine import SimulationEngine

POPULATION = {
    "CHN": 1_400_000_000,
    "ITA": 60_000_000,
    "USA": 330_000_000,
    "NUL": 0,
}

HISTORICAL_COUNTRIES = {
    "CHN": {"total_cases": 4_900_000, "total_deaths": 15_400, "total_recovered": 4_800_000},
    "ITA": {"total_cases": 25_000_000, "total_deaths": 184_000, "total_recovered": 24_600_000},
    "USA": {"total_cases": 100_000_000, "total_deaths": 1_090_000, "total_recovered": 98_000_000},
}

VARIANTS = {
    "original": {"name": "Original", "transmissibility": 1.0, "severity": 1.0, "first_detected": "2019-12-31"},
    "alpha": {"name": "Alpha", "transmissibility": 1.5, "severity": 1.3, "first_detected": "2020-09-20"},
    "delta": {"name": "Delta", "transmissibility": 1.6, "severity": 1.2, "first_detected": "2020-10-05"},
    "omicron": {"name": "Omicron", "transmissibility": 1.3, "severity": 0.5, "first_detected": "2021-11-09"},
}


def _months(year, first, last):
    return {f"{year}-{m:02d}": {} for m in range(first, last + 1)}


@pytest.fixture
def dataset_factory():
    """Build a Dataset, overriding any of the raw sections."""
    def make(population=None, monthly=None, countries=None, variants=None, events=None):
        covid_raw = {
            "monthly_data": _months(2020, 1, 6) if monthly is None else monthly,
            "countries": copy.deepcopy(HISTORICAL_COUNTRIES if countries is None else countries),
            "variants": copy.deepcopy(VARIANTS if variants is None else variants),
        }
        return build_dataset(
            dict(POPULATION if population is None else population),
            covid_raw,
            {"events": list(events or [])},
        )
    return make


@pytest.fixture
def dataset(dataset_factory):
    return dataset_factory()


@pytest.fixture
def engine(dataset):
    return SimulationEngine(dataset, seed=7)


@pytest.fixture
def procedural_engine(dataset_factory):
    """Engine whose every date falls on the procedural path."""
    return SimulationEngine(dataset_factory(monthly={}), seed=11)


class FixedRng:
    """Stand-in generator returning a constant draw."""

    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value

    def integers(self, low, high):
        return low


@pytest.fixture
def fixed_rng():
    return FixedRng
