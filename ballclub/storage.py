"""Pluggable persistence for the club's collections.

Stores hold plain records (dicts) per collection name. The engine, roster
registry and identity provider load their collections once at startup and
save a whole collection after every command that touched it.
"""

import copy
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Iterable, Optional

from .constants import COLLECTIONS
from .schemas import COLLECTION_SCHEMAS
from .utils import load_json, save_json

logger = logging.getLogger('ballclub.storage')


def to_records(items: Iterable[Any]) -> list[dict]:
    """Convert model dataclasses to plain dicts for storage."""
    return [asdict(item) for item in items]


class Storage:
    """Base storage adapter. Subclasses implement load and save."""

    def load(self, collection: str) -> Optional[list[dict]]:
        """Return the stored records, or None if the collection was never saved."""
        raise NotImplementedError

    def save(self, collection: str, records: list[dict]) -> None:
        raise NotImplementedError

    def _check_collection(self, collection: str) -> None:
        if collection not in COLLECTIONS:
            raise ValueError(f'Unknown collection: {collection}')


class MemoryStorage(Storage):
    """Keeps deep copies of each saved collection in a dict."""

    def __init__(self):
        self._data: dict[str, list[dict]] = {}
        self.save_count: dict[str, int] = {}

    def load(self, collection: str) -> Optional[list[dict]]:
        self._check_collection(collection)
        if collection not in self._data:
            return None
        return copy.deepcopy(self._data[collection])

    def save(self, collection: str, records: list[dict]) -> None:
        self._check_collection(collection)
        self._data[collection] = copy.deepcopy(records)
        self.save_count[collection] = self.save_count.get(collection, 0) + 1


class JsonFileStorage(Storage):
    """
    One JSON file per collection in a data directory.

    Layout:
        data/games.json   -> {"games": [...]}
        data/scores.json  -> {"scores": [...]}
        ...

    Each file is validated against its schema in ballclub.schemas on load.
    """

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)

    def path_for(self, collection: str) -> Path:
        return self.data_dir / f'{collection}.json'

    def load(self, collection: str) -> Optional[list[dict]]:
        self._check_collection(collection)
        path = self.path_for(collection)
        if not path.exists():
            logger.debug(f'No {collection} file at {path}')
            return None

        validated = load_json(path, schema=COLLECTION_SCHEMAS[collection])
        return validated.model_dump()[collection]

    def save(self, collection: str, records: list[dict]) -> None:
        self._check_collection(collection)
        # Validate before writing so a bad record never reaches disk
        payload = COLLECTION_SCHEMAS[collection].model_validate({collection: records})
        save_json(self.path_for(collection), payload)
