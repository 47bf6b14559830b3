from datetime import date, timedelta

import numpy as np

from ..models import VirusParameters
from .clock import SimulationClock
from .event_engine import EventTrigger
from .government_engine import GovernmentResponseEngine
from .history import StatsHistory
from .notifications import (
    NotificationBus, Tick, VariantChanged, HistoricalEventFired, SimulationReset,
)
from .outcome_engine import OutcomeEngine
from .spread_engine import SpreadEngine
from .variant_engine import VariantScheduler
from .world_state import WorldState

DEFAULT_START_DATE = date(2020, 1, 1)
DEFAULT_END_DATE = date(2022, 12, 31)
DEFAULT_INDEX_CASE = ("CHN", date(2019, 12, 31))
TOP_COUNTRIES = 10


def _to_date(value):
    if isinstance(value, str):
        return date.fromisoformat(value)
    return value


class SimulationEngine:
    def __init__(self, dataset, start_date=DEFAULT_START_DATE, end_date=DEFAULT_END_DATE,
                 speed=1.0, seed=None, virus_params=None, variant_schedule=None,
                 index_case=DEFAULT_INDEX_CASE, first_case_dates=None):
        """
        Single-timeline epidemic model over a loaded Dataset.

        seed: fixes every stochastic draw (country traits, spread, measure adoption).
              When omitted a seed is drawn once and reused by reset().
        index_case: (country_code, first_case_date) seeded with one active case, or None.
        """
        self.dataset = dataset
        self.start_date = _to_date(start_date)
        self.end_date = _to_date(end_date)
        self.seed = seed if seed is not None else np.random.SeedSequence().entropy
        self.initial_virus_params = (virus_params or VirusParameters()).copy()
        self.index_case = (index_case[0], _to_date(index_case[1])) if index_case else None
        self.first_case_dates = first_case_dates

        self.bus = NotificationBus()
        self.clock = SimulationClock(self.advance_day, speed)
        self.variant_scheduler = VariantScheduler(dataset.variants, variant_schedule)
        self.event_trigger = EventTrigger(dataset.events)
        self.outcome_engine = OutcomeEngine()
        self.history = StatsHistory()
        self.mode = 'virus'

        self._initialize_state()

    def _initialize_state(self):
        self.rng = np.random.default_rng(self.seed)
        self.virus_params = self.initial_virus_params.copy()
        self.current_date = self.start_date
        self.day_counter = 0
        self.variant_scheduler.reset()
        self.event_trigger.reset()
        self.history.clear()

        self.world = WorldState(self.dataset.population, self.rng, self.index_case,
                                base_infectivity=self.virus_params.infectivity)
        self.spread_engine = SpreadEngine(self.dataset, self.rng, self.start_date, self.first_case_dates)
        self.government_engine = GovernmentResponseEngine(self.rng, mode=self.mode)

    # --- Lifecycle ---

    @property
    def is_running(self):
        return self.clock.is_running

    @property
    def is_paused(self):
        return self.clock.is_paused

    @property
    def speed(self):
        return self.clock.speed

    @property
    def current_variant(self):
        return self.variant_scheduler.current_variant

    def start(self):
        if self.clock.start():
            print("Simulation started.")

    def pause(self):
        paused = self.clock.pause()
        print("Simulation paused." if paused else "Simulation resumed.")
        return paused

    def stop(self):
        self.clock.stop()
        print("Simulation stopped.")

    def reset(self):
        self.clock.stop()
        self.bus.clear()
        self._initialize_state()
        print("Simulation reset.")
        self.bus.emit(SimulationReset(snapshot=self.get_state()))
        self.bus.drain()

    def set_speed(self, speed):
        return self.clock.set_speed(speed)

    def set_mode(self, mode):
        if not self.government_engine.set_mode(mode):
            return False
        self.mode = mode
        return True

    # --- Day pipeline ---

    def advance_day(self):
        """
        Run one full simulated day and move the date forward.
        Returns the day's snapshot, or None once past the end date.
        """
        if self.current_date > self.end_date:
            return None

        today = self.current_date
        world = self.world

        variant = self.variant_scheduler.check_variant_change(today, self.virus_params)
        if variant is not None:
            print(f"Variant changed: {variant.name} ({today.isoformat()})")
            self.bus.emit(VariantChanged(variant_id=variant.id, variant=variant, date=today))

        for event in self.event_trigger.check_events(today, world, self.virus_params):
            print(f"Historical event: {event.description} ({event.type}, {today.isoformat()})")
            self.bus.emit(HistoricalEventFired(event=event))

        path = self.spread_engine.update_virus_spread(world, today, self.virus_params)
        self.government_engine.update_responses(world, today)
        if path == 'procedural':
            self.outcome_engine.update_outcomes(world, self.virus_params)
        world.sum_daily_stats()

        self.history.record(today, world.global_stats, self.current_variant)
        snapshot = self.snapshot(today)

        self.current_date = today + timedelta(days=1)
        self.day_counter += 1
        self.bus.emit(Tick(snapshot=snapshot))
        self.bus.drain()
        return snapshot

    def run_days(self, days):
        """Advance up to ``days`` days synchronously. Returns the number advanced."""
        advanced = 0
        for _ in range(days):
            if self.advance_day() is None:
                break
            advanced += 1
        return advanced

    # --- Consumer -> engine operations ---

    def update_virus_params(self, params=None, **kwargs):
        updates = dict(params or {}, **kwargs)
        return self.virus_params.update(**updates)

    def apply_government_measure(self, country_code, measure):
        country = self.world.get(country_code)
        return self.government_engine.apply_measure(country, measure, self.virus_params.infectivity)

    def apply_measure_to_all(self, measure):
        toggled = 0
        for code in self.world.countries:
            if self.apply_government_measure(code, measure):
                toggled += 1
        return toggled

    # --- Queries ---

    def get_top_countries(self, limit=TOP_COUNTRIES):
        return [c.to_dict() for c in self.world.top_countries(limit)]

    def get_country_data(self, country_code):
        country = self.world.get(country_code)
        return country.to_dict() if country else None

    def get_timeseries(self, tail=None):
        return self.history.to_frame(tail)

    def snapshot(self, day=None):
        variant = self.variant_scheduler.active()
        return {
            "date": (day or self.current_date).isoformat(),
            "day_counter": self.day_counter,
            "variant": variant.id,
            "variant_data": variant.to_dict(),
            "virus_params": self.virus_params.to_dict(),
            "global_stats": self.world.global_stats.to_dict(),
            "countries": {code: c.to_dict() for code, c in self.world.countries.items()},
            "top_countries": self.get_top_countries(TOP_COUNTRIES),
        }

    def get_state(self):
        state = self.snapshot()
        state.update({
            "is_running": self.is_running,
            "is_paused": self.is_paused,
            "speed": self.speed,
            "mode": self.mode,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
        })
        return state

    # --- Subscriptions ---

    def on_tick(self, handler):
        self.bus.subscribe(Tick, handler)

    def on_historical_event(self, handler):
        self.bus.subscribe(HistoricalEventFired, handler)

    def on_variant_changed(self, handler):
        self.bus.subscribe(VariantChanged, handler)

    def on_reset(self, handler):
        self.bus.subscribe(SimulationReset, handler)
