import json
from datetime import date

import pytest
import requests

from covidsim.etl import data_loader
from covidsim.etl.data_loader import (
    DataLoadError, build_dataset, load_dataset, load_events, load_population, load_variants,
)


def _write_tables(directory, population, covid, events):
    for name, payload in (
        (data_loader.POPULATION_FILE, population),
        (data_loader.COVID_DATA_FILE, covid),
        (data_loader.EVENTS_FILE, events),
    ):
        (directory / name).write_text(json.dumps(payload), encoding="utf-8")


COVID_RAW = {
    "monthly_data": {"2020-01": {}},
    "countries": {"CHN": {"total_cases": 100, "total_deaths": 1, "total_recovered": 90}},
    "variants": {"original": {"name": "Original", "transmissibility": 1.0, "severity": 1.0}},
}


def test_bundled_dataset_loads():
    dataset = load_dataset()

    assert dataset.population["CHN"] > 1_000_000_000
    assert {"original", "alpha", "delta", "omicron"} <= set(dataset.variants)
    assert dataset.has_month("2020-03")
    assert not dataset.has_month("2022-06")
    dates = [e.date for e in dataset.events]
    assert dates == sorted(dates)


def test_load_from_directory(tmp_path):
    _write_tables(tmp_path, {"CHN": 1000, "ITA": None}, COVID_RAW,
                  {"events": [{"date": "2020-01-23", "type": "lockdown", "description": "Wuhan"}]})

    dataset = load_dataset(str(tmp_path))

    assert dataset.population["ITA"] == 0
    assert dataset.historical_totals("CHN") == {
        "total_cases": 100, "total_deaths": 1, "total_recovered": 90,
    }
    assert dataset.historical_totals("ITA") is None
    assert dataset.events[0].date == date(2020, 1, 23)


def test_missing_directory_is_fatal(tmp_path):
    with pytest.raises(DataLoadError) as exc:
        load_dataset(str(tmp_path / "nowhere"))
    assert data_loader.POPULATION_FILE in exc.value.source


def test_malformed_json_is_fatal(tmp_path):
    _write_tables(tmp_path, {"CHN": 1}, COVID_RAW, {"events": []})
    (tmp_path / data_loader.COVID_DATA_FILE).write_text("{not json", encoding="utf-8")

    with pytest.raises(DataLoadError):
        load_dataset(str(tmp_path))


def test_population_rejects_non_numeric():
    with pytest.raises(DataLoadError):
        load_population({"CHN": "lots"})


def test_population_clips_negative_values():
    population = load_population({"AAA": -5, "BBB": 12})
    assert population["AAA"] == 0
    assert population["BBB"] == 12


def test_historical_requires_monthly_section():
    with pytest.raises(DataLoadError):
        build_dataset({"CHN": 1}, {"countries": {}, "variants": COVID_RAW["variants"]}, {"events": []})


def test_variants_require_numeric_multipliers():
    with pytest.raises(DataLoadError):
        load_variants({"variants": {"alpha": {"transmissibility": "fast", "severity": 1.0}}})


def test_variant_catalog_fields():
    variants = load_variants({"variants": {
        "alpha": {"name": "Alpha", "transmissibility": 1.5, "severity": 1.3, "first_detected": "2020-09-20"},
        "beta": {"transmissibility": 1.2, "severity": 1.1},
    }})

    assert variants["alpha"].transmissibility_multiplier == 1.5
    assert variants["alpha"].first_detected_date == date(2020, 9, 20)
    assert variants["beta"].name == "beta"
    assert variants["beta"].first_detected_date is None


def test_events_sorted_and_validated():
    events = load_events({"events": [
        {"date": "2020-12-08", "type": "vaccine"},
        {"date": "2020-03-09", "type": "lockdown", "description": "Italy"},
    ]})
    assert [e.type for e in events] == ["lockdown", "vaccine"]
    assert events[1].description == ""

    with pytest.raises(DataLoadError):
        load_events({"events": [{"date": "2020-03-09", "type": "party"}]})
    with pytest.raises(DataLoadError):
        load_events({"events": [{"date": "someday", "type": "lockdown"}]})


class _FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        return self.payload


def test_remote_source(monkeypatch):
    tables = {
        data_loader.POPULATION_FILE: {"CHN": 1000},
        data_loader.COVID_DATA_FILE: COVID_RAW,
        data_loader.EVENTS_FILE: {"events": []},
    }
    requested = []

    def fake_get(url, timeout):
        requested.append(url)
        return _FakeResponse(tables[url.rsplit("/", 1)[-1]])

    monkeypatch.setattr(data_loader.requests, "get", fake_get)
    dataset = load_dataset("https://data.example.org/covid/")

    assert requested[0] == "https://data.example.org/covid/" + data_loader.POPULATION_FILE
    assert dataset.population["CHN"] == 1000
    assert dataset.events == ()


def test_remote_failure_is_fatal(monkeypatch):
    monkeypatch.setattr(data_loader.requests, "get", lambda url, timeout: _FakeResponse({}, status=404))

    with pytest.raises(DataLoadError):
        load_dataset("https://data.example.org/covid")
