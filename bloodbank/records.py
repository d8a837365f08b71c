"""Record store — named collections of id-keyed records over a key-value port.

Every mutation reads the whole collection, changes it in memory and writes
the whole collection back. There is no locking: two writers sharing one
backing store can clobber each other.
"""

import json
import logging
from typing import Any

from bloodbank.errors import DuplicateIdError
from bloodbank.models import (
    Admin,
    BloodRequest,
    BloodStock,
    BloodSupply,
    Donation,
    Notification,
    Record,
    User,
)
from bloodbank.storage import KeyValueStore

logger = logging.getLogger("bloodbank.records")

USERS = "users"
ADMINS = "admins"
DONATIONS = "donations"
REQUESTS = "requests"
STOCK = "stock"
SUPPLIES = "supplies"
NOTIFICATIONS = "notifications"

# collection name -> (storage key, record model)
COLLECTIONS: dict[str, tuple[str, type[Record]]] = {
    USERS: ("blood_management_users", User),
    ADMINS: ("blood_management_admins", Admin),
    DONATIONS: ("blood_management_donations", Donation),
    REQUESTS: ("blood_management_requests", BloodRequest),
    STOCK: ("blood_management_stock", BloodStock),
    SUPPLIES: ("blood_management_supplies", BloodSupply),
    NOTIFICATIONS: ("blood_management_notifications", Notification),
}

AUTH_KEY = "blood_management_auth"


class RecordStore:
    def __init__(self, backend: KeyValueStore):
        self.backend = backend

    # -- raw collection access --

    def _entry(self, collection: str) -> tuple[str, type[Record]]:
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}") from None

    def _read(self, collection: str) -> list[dict]:
        key, _ = self._entry(collection)
        raw = self.backend.get(key)
        return json.loads(raw) if raw else []

    def _write(self, collection: str, items: list[dict]) -> None:
        key, _ = self._entry(collection)
        self.backend.set(key, json.dumps(items))

    def _load(self, collection: str, item: dict) -> Record:
        _, model = self._entry(collection)
        return model.model_validate(item)

    # -- CRUD --

    def get_all(self, collection: str) -> list[Any]:
        return [self._load(collection, item) for item in self._read(collection)]

    def get_by_id(self, collection: str, record_id: str) -> Any | None:
        for item in self._read(collection):
            if item.get("id") == record_id:
                return self._load(collection, item)
        return None

    def add(self, collection: str, record: Record) -> Any:
        items = self._read(collection)
        if any(item.get("id") == record.id for item in items):
            raise DuplicateIdError(collection, record.id)
        items.append(record.to_json())
        self._write(collection, items)
        logger.debug("Added %s to %s", record.id, collection)
        return record

    def update(self, collection: str, record: Record) -> Any | None:
        """Replace the record with a matching id. Returns None if absent."""
        items = self._read(collection)
        for i, item in enumerate(items):
            if item.get("id") == record.id:
                items[i] = record.to_json()
                self._write(collection, items)
                return record
        return None

    def delete(self, collection: str, record_id: str) -> bool:
        items = self._read(collection)
        remaining = [item for item in items if item.get("id") != record_id]
        if len(remaining) == len(items):
            return False
        self._write(collection, remaining)
        logger.debug("Deleted %s from %s", record_id, collection)
        return True

    # -- queries --

    def filter(self, collection: str, **fields: Any) -> list[Any]:
        """Records whose attributes equal every given field value."""
        return [
            r for r in self.get_all(collection)
            if all(getattr(r, name) == value for name, value in fields.items())
        ]

    def find_one(self, collection: str, **fields: Any) -> Any | None:
        matches = self.filter(collection, **fields)
        return matches[0] if matches else None

    # -- single documents (not collections) --

    def get_document(self, key: str) -> dict | None:
        raw = self.backend.get(key)
        return json.loads(raw) if raw else None

    def set_document(self, key: str, data: dict) -> None:
        self.backend.set(key, json.dumps(data))

    def remove_document(self, key: str) -> None:
        self.backend.remove(key)

    # -- seeding --

    def initialize(self, seed: dict[str, list[Record]]) -> list[str]:
        """Write each seeded collection whose key is still absent.

        Returns the names of the collections that were written.
        """
        written = []
        for collection, records in seed.items():
            key, _ = self._entry(collection)
            if self.backend.has(key):
                continue
            self._write(collection, [r.to_json() for r in records])
            written.append(collection)
        if written:
            logger.info("Seeded collections: %s", ", ".join(written))
        return written
