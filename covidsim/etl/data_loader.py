import os
import json
from dataclasses import dataclass

import pandas as pd
import requests

from ..models import Variant, HistoricalEvent, EVENT_TYPES

# Configuration
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.path.normpath(os.path.join(BASE_DIR, "../data"))
POPULATION_FILE = "country_population.json"
COVID_DATA_FILE = "covid_data.json"
EVENTS_FILE = "events.json"
HTTP_TIMEOUT = 10  # seconds

HISTORICAL_COLUMNS = ['total_cases', 'total_deaths', 'total_recovered']


class DataLoadError(Exception):
    """Raised when any input table cannot be fetched or parsed."""

    def __init__(self, source, reason):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to load {source}: {reason}")


@dataclass(frozen=True, eq=False)
class Dataset:
    """
    Immutable input tables consumed by the simulation engine.
    population: Series code -> population
    monthly_data: 'YYYY-MM' -> record (presence selects the historical path)
    historical: DataFrame indexed by code with total_cases/total_deaths/total_recovered
    variants: id -> Variant
    events: HistoricalEvent tuple ordered by date
    """
    population: pd.Series
    monthly_data: dict
    historical: pd.DataFrame
    variants: dict
    events: tuple

    def has_month(self, month_key):
        return month_key in self.monthly_data

    def historical_totals(self, code):
        if code not in self.historical.index:
            return None
        row = self.historical.loc[code]
        return {col: int(row[col]) for col in HISTORICAL_COLUMNS}


def fetch_json(source, filename):
    """Read ``filename`` from a local directory or an http(s) base URL."""
    if str(source).startswith(("http://", "https://")):
        url = f"{str(source).rstrip('/')}/{filename}"
        try:
            response = requests.get(url, timeout=HTTP_TIMEOUT)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            raise DataLoadError(url, str(e)) from e

    path = os.path.join(source, filename)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        raise DataLoadError(path, str(e)) from e


def load_population(raw):
    """Population table: country code -> integer population."""
    if not isinstance(raw, dict) or not raw:
        raise DataLoadError(POPULATION_FILE, "expected a non-empty country -> population mapping")

    # Missing (null) populations are kept as 0 and guarded downstream
    series = pd.Series(raw, dtype=object).fillna(0)
    series = pd.to_numeric(series, errors='coerce')
    bad = series[series.isna()].index.tolist()
    if bad:
        raise DataLoadError(POPULATION_FILE, f"non-numeric population for {bad}")
    return series.clip(lower=0).astype('int64').sort_index()


def load_historical(raw):
    """
    Historical series: monthly presence records and per-country cumulative totals.
    Returns (monthly_data, historical_df)
    """
    if not isinstance(raw, dict):
        raise DataLoadError(COVID_DATA_FILE, "expected a JSON object")
    monthly = raw.get('monthly_data')
    countries = raw.get('countries')
    if not isinstance(monthly, dict):
        raise DataLoadError(COVID_DATA_FILE, "missing 'monthly_data' section")
    if not isinstance(countries, dict):
        raise DataLoadError(COVID_DATA_FILE, "missing 'countries' section")

    frame = pd.DataFrame.from_dict(countries, orient='index')
    frame = frame.reindex(columns=HISTORICAL_COLUMNS)
    for col in HISTORICAL_COLUMNS:
        frame[col] = pd.to_numeric(frame[col], errors='coerce').fillna(0).clip(lower=0).astype('int64')

    return dict(monthly), frame


def load_variants(raw):
    """Variant catalog from the historical file: id -> Variant."""
    variants = raw.get('variants') if isinstance(raw, dict) else None
    if not isinstance(variants, dict) or not variants:
        raise DataLoadError(COVID_DATA_FILE, "missing 'variants' catalog")

    frame = pd.DataFrame.from_dict(variants, orient='index')
    for col in ('transmissibility', 'severity'):
        if col not in frame.columns:
            raise DataLoadError(COVID_DATA_FILE, f"variant catalog lacks '{col}'")
        frame[col] = pd.to_numeric(frame[col], errors='coerce')
        if frame[col].isna().any():
            raise DataLoadError(COVID_DATA_FILE, f"non-numeric variant '{col}'")
    if 'name' not in frame.columns:
        frame['name'] = None
    if 'first_detected' not in frame.columns:
        frame['first_detected'] = None
    frame['first_detected'] = pd.to_datetime(frame['first_detected'], errors='coerce')

    catalog = {}
    for variant_id, row in frame.iterrows():
        detected = row['first_detected']
        catalog[variant_id] = Variant(
            id=variant_id,
            name=row['name'] if isinstance(row['name'], str) else variant_id,
            transmissibility_multiplier=float(row['transmissibility']),
            severity_multiplier=float(row['severity']),
            first_detected_date=None if pd.isna(detected) else detected.date(),
        )
    return catalog


def load_events(raw):
    """One-off historical events, ordered by date."""
    events = raw.get('events') if isinstance(raw, dict) else None
    if not isinstance(events, list):
        raise DataLoadError(EVENTS_FILE, "missing 'events' list")
    if not events:
        return ()

    frame = pd.DataFrame(events)
    for col in ('date', 'type'):
        if col not in frame.columns:
            raise DataLoadError(EVENTS_FILE, f"events lack '{col}'")
    frame['date'] = pd.to_datetime(frame['date'], errors='coerce')
    if frame['date'].isna().any():
        raise DataLoadError(EVENTS_FILE, "malformed event date")
    unknown = set(frame['type']) - set(EVENT_TYPES)
    if unknown:
        raise DataLoadError(EVENTS_FILE, f"unknown event types {sorted(map(str, unknown))}")
    if 'description' not in frame.columns:
        frame['description'] = ''
    frame['description'] = frame['description'].fillna('').astype(str)

    frame = frame.sort_values('date', kind='stable')
    return tuple(
        HistoricalEvent(date=row.date.date(), type=row.type, description=row.description)
        for row in frame.itertuples(index=False)
    )


def build_dataset(population_raw, covid_raw, events_raw):
    """Assemble a Dataset from already-parsed JSON documents."""
    population = load_population(population_raw)
    monthly, historical = load_historical(covid_raw)
    variants = load_variants(covid_raw)
    events = load_events(events_raw)
    return Dataset(
        population=population,
        monthly_data=monthly,
        historical=historical,
        variants=variants,
        events=events,
    )


def load_dataset(source=DATA_DIR):
    """
    Load all four input tables. Any failure raises DataLoadError;
    there is no partially-loaded dataset.
    """
    population_raw = fetch_json(source, POPULATION_FILE)
    covid_raw = fetch_json(source, COVID_DATA_FILE)
    events_raw = fetch_json(source, EVENTS_FILE)

    dataset = build_dataset(population_raw, covid_raw, events_raw)
    print(f"Dataset loaded: {len(dataset.population)} countries, "
          f"{len(dataset.monthly_data)} historical months, "
          f"{len(dataset.variants)} variants, {len(dataset.events)} events.")
    return dataset
