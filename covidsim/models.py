import math
from dataclasses import dataclass, field, asdict
from datetime import date
from typing import Optional

# Static catalog of government measures: id -> effectiveness / cost
GOVERNMENT_MEASURES = {
    'border_closure': {'effectiveness': 0.3, 'cost': 50},
    'lockdown_partial': {'effectiveness': 0.5, 'cost': 80},
    'lockdown_full': {'effectiveness': 0.8, 'cost': 100},
    'mask_mandate': {'effectiveness': 0.2, 'cost': 10},
    'event_ban': {'effectiveness': 0.3, 'cost': 30},
    'curfew': {'effectiveness': 0.4, 'cost': 40},
    'vaccine_program': {'effectiveness': 0.9, 'cost': 200},
}

EVENT_TYPES = ('lockdown', 'vaccine', 'variant')


@dataclass
class VirusParameters:
    infectivity: float = 2.5      # R0
    severity_pct: float = 15.0    # % severe cases
    mortality_pct: float = 2.0    # % mortality
    incubation_days: float = 5.0
    infectious_days: float = 10.0

    def update(self, **params):
        """
        Partial update. Unknown keys and non-finite values are ignored.
        Returns the list of keys that were applied.
        """
        applied = []
        for key, value in params.items():
            if value is None or key not in self.__dataclass_fields__:
                continue
            try:
                value = float(value)
            except (TypeError, ValueError):
                continue
            if not math.isfinite(value):
                continue
            setattr(self, key, value)
            applied.append(key)
        return applied

    def copy(self):
        return VirusParameters(**asdict(self))

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class Variant:
    id: str
    name: str
    transmissibility_multiplier: float
    severity_multiplier: float
    first_detected_date: Optional[date] = None

    def to_dict(self):
        d = asdict(self)
        d['first_detected_date'] = self.first_detected_date.isoformat() if self.first_detected_date else None
        return d


@dataclass(frozen=True)
class HistoricalEvent:
    date: date
    type: str
    description: str = ""

    def to_dict(self):
        return {"date": self.date.isoformat(), "type": self.type, "description": self.description}


@dataclass
class GovernmentResponse:
    alert_level: int = 0
    compliance: float = 1.0            # [0.6, 1.0]
    medical_capacity: float = 1.0      # [0.5, 1.0]
    political_stability: float = 1.0   # [0.7, 1.0]


def risk_level(cases_per_capita):
    """Map cases per 100k to the map's risk buckets."""
    if cases_per_capita >= 1000:
        return 'high'
    if cases_per_capita >= 100:
        return 'medium'
    if cases_per_capita > 0:
        return 'low'
    return 'no_data'


@dataclass
class Country:
    code: str
    name: str
    population: int
    cases: int = 0
    deaths: int = 0
    recovered: int = 0
    active: int = 0
    daily_cases: int = 0
    daily_deaths: int = 0
    cases_per_capita: float = 0.0
    infected: bool = False
    first_case_date: Optional[date] = None
    active_measures: set = field(default_factory=set)
    last_measure_date: Optional[date] = None
    effective_infectivity: Optional[float] = None
    government_response: GovernmentResponse = field(default_factory=GovernmentResponse)

    def update_per_capita(self):
        # Guard: population may be zero or missing in the source table
        if self.population and self.population > 0:
            self.cases_per_capita = self.cases / self.population * 100000
        else:
            self.cases_per_capita = 0.0

    def sync_active(self):
        self.active = max(0, self.cases - self.deaths - self.recovered)

    def clear(self):
        """Zero every counter ("not yet arrived" state)."""
        self.cases = self.deaths = self.recovered = self.active = 0
        self.daily_cases = self.daily_deaths = 0
        self.cases_per_capita = 0.0
        self.infected = False

    def to_dict(self):
        return {
            "code": self.code,
            "name": self.name,
            "population": self.population,
            "cases": self.cases,
            "deaths": self.deaths,
            "recovered": self.recovered,
            "active": self.active,
            "daily_cases": self.daily_cases,
            "daily_deaths": self.daily_deaths,
            "cases_per_capita": self.cases_per_capita,
            "risk_level": risk_level(self.cases_per_capita),
            "infected": self.infected,
            "first_case_date": self.first_case_date.isoformat() if self.first_case_date else None,
            "active_measures": sorted(self.active_measures),
            "last_measure_date": self.last_measure_date.isoformat() if self.last_measure_date else None,
            "effective_infectivity": self.effective_infectivity,
            "government_response": asdict(self.government_response),
        }


@dataclass
class GlobalStats:
    total_cases: int = 0
    active_cases: int = 0
    total_deaths: int = 0
    total_recovered: int = 0
    daily_cases: int = 0
    daily_deaths: int = 0

    def to_dict(self):
        return asdict(self)
