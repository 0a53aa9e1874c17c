from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

import orjson

from ..domain import BusinessHours, ResourceIdentity

logger = logging.getLogger(__name__)


def _read_json(path: Path) -> Any:
    if not path.exists():
        logger.warning("Catalog file not found: %s", path)
        return None
    try:
        raw = path.read_bytes().strip()
    except OSError:
        logger.exception("Catalog file could not be read: %s", path)
        return None
    if not raw:
        logger.warning("Catalog file is empty: %s", path)
        return None
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError:
        logger.exception("Catalog file is not valid JSON: %s", path)
        return None


def parse_resources(payload: Any) -> Dict[str, ResourceIdentity]:
    """Accept ``{id: {...}}`` or ``[{id?, name, calendarId}, ...]``."""

    resources: Dict[str, ResourceIdentity] = {}
    if isinstance(payload, dict):
        for resource_id, record in payload.items():
            if isinstance(record, dict):
                resources[str(resource_id)] = ResourceIdentity.from_record(str(resource_id), record)
            elif isinstance(record, str):
                resources[str(resource_id)] = ResourceIdentity(
                    id=str(resource_id),
                    display_name=str(resource_id),
                    calendar_id=record,
                )
    elif isinstance(payload, list):
        for record in payload:
            if not isinstance(record, dict):
                continue
            resource_id = record.get("id") or record.get("name") or record.get("displayName")
            if not resource_id:
                continue
            resources[str(resource_id)] = ResourceIdentity.from_record(str(resource_id), record)
    elif payload is not None:
        logger.error("Unsupported resource catalog shape: %s", type(payload).__name__)
    return resources


def parse_business_hours(payload: Any) -> Dict[str, BusinessHours]:
    hours: Dict[str, BusinessHours] = {}
    if payload is None:
        return hours
    if not isinstance(payload, dict):
        logger.error("Unsupported business hours shape: %s", type(payload).__name__)
        return hours
    for key, record in payload.items():
        if not isinstance(record, dict):
            continue
        try:
            hours[str(key)] = BusinessHours.from_record(record, source=str(key))
        except (KeyError, ValueError) as exc:
            logger.error("Skipping invalid business hours for %s: %s", key, exc)
    return hours


def load_resources(path: Path) -> Dict[str, ResourceIdentity]:
    resources = parse_resources(_read_json(path))
    logger.info("Loaded %d resources from %s", len(resources), path)
    return resources


def load_business_hours(path: Path) -> Dict[str, BusinessHours]:
    hours = parse_business_hours(_read_json(path))
    logger.info("Loaded business hours for %s from %s", sorted(hours), path)
    return hours
