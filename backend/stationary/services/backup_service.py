# Overview: Service-layer operations for backups; JSON export, validated import and data wipe.

"""
Backup Service

EXPORT FORMAT:
{
    "inventory": [...], "issues": [...], "employees": [...], "categories": [...],
    "exportMetadata": {
        "version": "1.0.0",
        "exportDate": "2026-01-31T09:15:00Z",
        "totalItems": 12, "totalIssues": 40, "totalEmployees": 8, "totalCategories": 4
    }
}

IMPORT:
1. Structural check: an object with the four arrays, and the required fields
   present on the first record of inventory, employees and issues.
2. Record check: every record goes through records.from_dict, so negative
   stock, an issue without lines, or a signed status without a signature is
   rejected here rather than reaching the engine.
3. Replace: the whole data set is written in one commit. Accounts are untouched.
Nothing is written unless both checks pass.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from flask import current_app

from ..errors import InvalidRecord, StationaryError
from ..records import DataSet
from ..time_utils import to_utc_z, utcnow
from . import storage_service


EXPORT_VERSION = "1.0.0"

REQUIRED_COLLECTIONS = ("inventory", "issues", "employees", "categories")
REQUIRED_INVENTORY_FIELDS = ("id", "name", "category", "stockQuantity", "unit", "threshold")
REQUIRED_EMPLOYEE_FIELDS = ("id", "name", "department")
REQUIRED_ISSUE_FIELDS = ("id", "employeeId", "employeeName", "department", "items", "issueDate", "status")


class ImportFormatError(StationaryError):
    """Raised when an import file does not have the export structure."""
    pass


def build_export(data_set: DataSet, *, now: datetime | None = None) -> dict:
    payload = data_set.to_dict()
    payload["exportMetadata"] = {
        "version": EXPORT_VERSION,
        "exportDate": to_utc_z(now or utcnow()),
        "totalItems": len(data_set.inventory),
        "totalIssues": len(data_set.issues),
        "totalEmployees": len(data_set.employees),
        "totalCategories": len(data_set.categories),
    }
    return payload


def export_filename(now: datetime | None = None) -> str:
    stamp = (now or utcnow()).strftime("%Y-%m-%dT%H-%M-%S")
    return f"stationary-data-backup-{stamp}.json"


def export_to_file(directory: str | Path) -> Path:
    """Write the stored data set to a dated JSON file in `directory`."""
    now = utcnow()
    data_set = storage_service.load_data_set()

    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / export_filename(now)
    path.write_text(json.dumps(build_export(data_set, now=now), indent=2), encoding="utf-8")

    current_app.logger.info(
        "Exported %d items, %d issues, %d employees, %d categories to %s",
        len(data_set.inventory), len(data_set.issues),
        len(data_set.employees), len(data_set.categories), path,
    )
    return path


def _check_sample(rows: list, fields: tuple[str, ...], label: str) -> None:
    if not rows:
        return
    sample = rows[0]
    if not isinstance(sample, dict):
        raise ImportFormatError(f"Invalid {label} structure - records must be objects")
    for field in fields:
        if field not in sample:
            raise ImportFormatError(f"Invalid {label} structure - missing field: {field}")


def validate_import_payload(data: Any) -> None:
    """
    Structural validation of an import document.

    Raises:
        ImportFormatError: Naming the first problem found
    """
    if not isinstance(data, dict):
        raise ImportFormatError("Invalid file format - not a valid JSON object")

    for prop in REQUIRED_COLLECTIONS:
        if prop not in data:
            raise ImportFormatError(f"Missing required property: {prop}")

    for prop in REQUIRED_COLLECTIONS:
        if not isinstance(data[prop], list):
            raise ImportFormatError(f"{prop.capitalize()} data is not a valid array")

    _check_sample(data["inventory"], REQUIRED_INVENTORY_FIELDS, "inventory")
    _check_sample(data["employees"], REQUIRED_EMPLOYEE_FIELDS, "employee")
    _check_sample(data["issues"], REQUIRED_ISSUE_FIELDS, "issue")


def _ensure_unique_ids(records, record_type: str) -> None:
    seen: set[str] = set()
    for record in records:
        if record.id in seen:
            raise InvalidRecord(record_type, record.id, "duplicate id")
        seen.add(record.id)


def parse_import(data: Any) -> DataSet:
    """
    Validate an import document and build the data set it describes.

    Raises:
        ImportFormatError: If the structure is wrong
        InvalidRecord: If any record breaks an invariant
    """
    validate_import_payload(data)

    if not all(isinstance(c, str) for c in data["categories"]):
        raise ImportFormatError("Categories data must be a list of strings")

    data_set = DataSet.from_dict(data)
    _ensure_unique_ids(data_set.inventory, "InventoryItem")
    _ensure_unique_ids(data_set.issues, "Issue")
    _ensure_unique_ids(data_set.employees, "Employee")
    return data_set


def import_data_set(data: Any) -> DataSet:
    """Validate and store an import document, replacing the current data set."""
    data_set = parse_import(data)
    storage_service.save_data_set(data_set)

    current_app.logger.info(
        "Imported %d inventory items, %d issues, %d employees, and %d categories",
        len(data_set.inventory), len(data_set.issues),
        len(data_set.employees), len(data_set.categories),
    )
    return data_set


def import_from_file(path: str | Path) -> DataSet:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ImportFormatError(
            "Could not parse the imported file. Please ensure it's a valid JSON file exported from this system."
        ) from e
    return import_data_set(data)


def clear_all_data() -> None:
    """Empty inventory, issues, employees and categories. Accounts are kept."""
    storage_service.wipe_collections()
    current_app.logger.info("Cleared all stationary data")
