# Overview: Service-layer operations for storage; key-value persistence of the stationary data set.

"""
Storage Service

WHY: The engine is persistence-agnostic. This module is the only place that
knows where the collections live. Each collection is one row in data_slots,
read in full and overwritten in full.

KEYS:
    stationaryInventory, stationaryIssues, stationaryEmployees,
    stationaryCategories       - the data set, cleared by wipe
    stationaryRegisteredUsers  - accounts, preserved by wipe

An absent key loads as its default (an empty list unless told otherwise).
save_data_set writes all four data collections in one commit so a reader never
sees issues and inventory from different operations.
"""

from __future__ import annotations

import copy
from typing import Any, Optional

from ..extensions import db
from ..models import DataSlot
from ..records import DataSet


STORAGE_KEYS = {
    "INVENTORY": "stationaryInventory",
    "ISSUES": "stationaryIssues",
    "EMPLOYEES": "stationaryEmployees",
    "CATEGORIES": "stationaryCategories",
    "USERS": "stationaryRegisteredUsers",
}

DATA_KEYS = (
    STORAGE_KEYS["INVENTORY"],
    STORAGE_KEYS["ISSUES"],
    STORAGE_KEYS["EMPLOYEES"],
    STORAGE_KEYS["CATEGORIES"],
)


def load_collection(key: str, default: Optional[list] = None) -> Any:
    """Load a collection by logical name; absent keys load as `default` (or [])."""
    slot = db.session.get(DataSlot, key)
    if slot is None:
        return [] if default is None else copy.deepcopy(default)
    # Hand out a copy so callers can not mutate the session-tracked value
    return copy.deepcopy(slot.value_json)


def _write(key: str, value: Any) -> None:
    slot = db.session.get(DataSlot, key)
    if slot is None:
        slot = DataSlot(key=key, value_json=value)
        db.session.add(slot)
    else:
        slot.value_json = value


def save_collection(key: str, value: Any) -> None:
    """Overwrite a collection."""
    _write(key, value)
    db.session.commit()


def load_data_set() -> DataSet:
    """
    Load and validate the four data collections.

    Raises:
        InvalidRecord: If a stored record violates an invariant
    """
    return DataSet.from_dict({
        "inventory": load_collection(STORAGE_KEYS["INVENTORY"]),
        "issues": load_collection(STORAGE_KEYS["ISSUES"]),
        "employees": load_collection(STORAGE_KEYS["EMPLOYEES"]),
        "categories": load_collection(STORAGE_KEYS["CATEGORIES"]),
    })


def save_data_set(data_set: DataSet) -> None:
    """Overwrite all four data collections in a single commit."""
    payload = data_set.to_dict()
    _write(STORAGE_KEYS["INVENTORY"], payload["inventory"])
    _write(STORAGE_KEYS["ISSUES"], payload["issues"])
    _write(STORAGE_KEYS["EMPLOYEES"], payload["employees"])
    _write(STORAGE_KEYS["CATEGORIES"], payload["categories"])
    db.session.commit()


def wipe_collections() -> None:
    """Set every data collection to empty. Registered users are kept."""
    for key in DATA_KEYS:
        _write(key, [])
    db.session.commit()
