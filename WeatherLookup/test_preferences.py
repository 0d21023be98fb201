"""Tests for persisted recent searches and unit preference."""
import json
import pytest
from preferences import PreferencesStore, convert_temperature


@pytest.fixture
def store(tmp_path):
    return PreferencesStore(str(tmp_path / "state" / "prefs.json"))


def test_empty_store(store):
    assert store.recent_searches() == []
    assert store.unit == "celsius"


def test_recent_searches_newest_first_and_capped(store):
    for city in ["Paris", "Berlin", "Rome", "Oslo", "Lima", "Quito"]:
        store.add_recent_search(city)

    assert store.recent_searches() == ["Quito", "Lima", "Oslo", "Rome", "Berlin"]


def test_recent_searches_case_insensitive_dedupe(store):
    store.add_recent_search("London")
    store.add_recent_search("Paris")
    store.add_recent_search("london")

    assert store.recent_searches() == ["london", "Paris"]


def test_blank_search_is_ignored(store):
    store.add_recent_search("Paris")
    store.add_recent_search("   ")

    assert store.recent_searches() == ["Paris"]


def test_persisted_shape(store):
    store.add_recent_search("Paris")
    store.unit = "fahrenheit"

    with open(store.path, encoding="utf-8") as f:
        data = json.load(f)

    assert data == {"recentSearches": ["Paris"], "temperatureUnit": "fahrenheit"}
    assert PreferencesStore(store.path).unit == "fahrenheit"


def test_unknown_unit_rejected(store):
    with pytest.raises(ValueError):
        store.unit = "kelvin"


def test_unreadable_file_treated_as_empty(tmp_path):
    path = tmp_path / "prefs.json"
    path.write_text("{not json", encoding="utf-8")

    store = PreferencesStore(str(path))

    assert store.recent_searches() == []
    assert store.add_recent_search("Oslo") == ["Oslo"]


def test_convert_temperature():
    assert convert_temperature(100.0, "fahrenheit") == 212.0
    assert convert_temperature(-40.0, "fahrenheit") == -40.0
    assert convert_temperature(21.5, "celsius") == 21.5
    with pytest.raises(ValueError):
        convert_temperature(0.0, "kelvin")
