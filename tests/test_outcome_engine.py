import math

import numpy as np

from covidsim.engines.outcome_engine import OutcomeEngine
from covidsim.engines.world_state import WorldState
from covidsim.models import VirusParameters


def _world(dataset):
    return WorldState(dataset.population, np.random.default_rng(0))


def test_outcomes_resolve_active_cases(dataset):
    world = _world(dataset)
    usa = world.get("USA")
    usa.cases = usa.active = 1700

    recoveries, deaths = OutcomeEngine().update_outcomes(world, VirusParameters())

    rate = 1 / (10 + 7)
    assert recoveries == math.floor(1700 * rate * 0.95)
    assert deaths == math.floor(1700 * rate * 0.02)
    assert usa.recovered == recoveries
    assert usa.deaths == deaths
    assert usa.daily_deaths == deaths
    assert usa.active == 1700 - recoveries - deaths
    assert usa.active == max(0, usa.cases - usa.deaths - usa.recovered)


def test_outcomes_accumulate_global_stats(dataset):
    world = _world(dataset)
    for code in ("USA", "ITA"):
        country = world.get(code)
        country.cases = country.active = 10_000
    world.global_stats.active_cases = 20_000

    recoveries, deaths = OutcomeEngine().update_outcomes(world, VirusParameters())

    stats = world.global_stats
    assert stats.total_recovered == recoveries
    assert stats.total_deaths == deaths
    assert stats.active_cases == 20_000 - recoveries - deaths


def test_outcomes_never_overdraw_active(dataset):
    world = _world(dataset)
    ita = world.get("ITA")
    ita.cases = ita.active = 3
    params = VirusParameters(infectious_days=-6.5, mortality_pct=500)

    OutcomeEngine().update_outcomes(world, params)

    assert ita.active >= 0
    assert ita.recovered + ita.deaths + ita.active == 3


def test_outcomes_skip_non_positive_duration(dataset):
    world = _world(dataset)
    ita = world.get("ITA")
    ita.cases = ita.active = 100

    assert OutcomeEngine().update_outcomes(world, VirusParameters(infectious_days=-7)) == (0, 0)
    assert ita.active == 100
