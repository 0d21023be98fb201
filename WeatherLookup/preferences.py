"""Locally persisted user state: recent searches and the temperature unit."""
import json
import logging
import os
from typing import List

RECENT_SEARCHES_KEY = "recentSearches"
UNIT_KEY = "temperatureUnit"
MAX_RECENT_SEARCHES = 5
UNITS = ("celsius", "fahrenheit")
DEFAULT_UNIT = "celsius"


def convert_temperature(celsius: float, unit: str) -> float:
    """Convert a °C reading for display in the given unit."""
    if unit == "fahrenheit":
        return celsius * 9 / 5 + 32
    if unit == "celsius":
        return celsius
    raise ValueError(f"Unknown temperature unit: {unit}")


class PreferencesStore:
    """
    JSON file holding recent searches and the unit preference.

    Layout:
        {"recentSearches": ["Paris", "london"], "temperatureUnit": "celsius"}

    Recent searches are distinct case-insensitively, newest first, at most
    MAX_RECENT_SEARCHES long.
    """

    def __init__(self, path: str):
        self.path = path

    def _load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logging.warning(f"Ignoring unreadable preferences file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logging.warning(f"Ignoring preferences file {self.path}: not a JSON object")
            return {}
        return data

    def _save(self, data: dict) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        logging.debug(f"Preferences saved to {self.path}")

    def recent_searches(self) -> List[str]:
        searches = self._load().get(RECENT_SEARCHES_KEY, [])
        if not isinstance(searches, list):
            return []
        return [s for s in searches if isinstance(s, str)][:MAX_RECENT_SEARCHES]

    def add_recent_search(self, term: str) -> List[str]:
        """Move term to the front of the history and return the new list."""
        term = term.strip()
        if not term:
            return self.recent_searches()

        data = self._load()
        searches = [s for s in self.recent_searches() if s.lower() != term.lower()]
        searches.insert(0, term)
        data[RECENT_SEARCHES_KEY] = searches[:MAX_RECENT_SEARCHES]
        self._save(data)
        return data[RECENT_SEARCHES_KEY]

    @property
    def unit(self) -> str:
        unit = self._load().get(UNIT_KEY, DEFAULT_UNIT)
        return unit if unit in UNITS else DEFAULT_UNIT

    @unit.setter
    def unit(self, value: str) -> None:
        if value not in UNITS:
            raise ValueError(f"Unknown temperature unit: {value}")
        data = self._load()
        data[UNIT_KEY] = value
        self._save(data)
