"""Load JSON or CSV files into dataclass records for export."""

from __future__ import annotations

import csv
import dataclasses
import json
import keyword
import logging
import re
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .exceptions import RecordLoadError

LOGGER = logging.getLogger(__name__)

_INTEGER = re.compile(r"^[+-]?(0|[1-9]\d*)$")
_DECIMAL = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+(\.\d*)?[eE][+-]?\d+)$")
_NON_IDENTIFIER = re.compile(r"\W+")


def load_records(path: Path, record_name: str = "Record") -> Tuple[type, List[Any]]:
    """Read ``path`` and return an inferred record type with its instances.

    JSON input must be an array of objects; numbers with a fractional part
    are read as ``Decimal``. CSV input uses the header row as field names and
    empty cells become ``None``.

    Raises:
        RecordLoadError: When the file cannot be read or has the wrong shape.
    """
    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            rows = _read_json(path)
        elif suffix == ".csv":
            rows = _read_csv(path)
        else:
            raise RecordLoadError(f"Unsupported input format '{path.suffix}'. Use .json or .csv.")
    except OSError as exc:
        raise RecordLoadError(f"Could not read {path}: {exc}") from exc

    record_type, columns = infer_record_type(rows, record_name)
    records = [
        record_type(**{attribute: _coerce(row.get(key), tp) for key, attribute, tp in columns})
        for row in rows
    ]
    LOGGER.info("Loaded %d records with %d fields from %s", len(records), len(columns), path)
    return record_type, records


def infer_record_type(
    rows: Sequence[Mapping[str, Any]], record_name: str = "Record"
) -> Tuple[type, List[Tuple[str, str, type]]]:
    """Build a dataclass whose optional fields match the keys of ``rows``.

    Returns:
        The dataclass and ``(source key, attribute name, value type)`` per column.
    """
    keys: Dict[str, None] = {}
    for row in rows:
        for key in row:
            keys.setdefault(key, None)

    columns: List[Tuple[str, str, type]] = []
    used: Dict[str, int] = {}
    for index, key in enumerate(keys):
        attribute = _attribute_name(str(key), index)
        if attribute in used:
            used[attribute] += 1
            attribute = f"{attribute}_{used[attribute]}"
        else:
            used[attribute] = 1
        columns.append((key, attribute, _infer_type(row.get(key) for row in rows)))

    record_type = dataclasses.make_dataclass(
        record_name,
        [
            (attribute, Optional[tp], dataclasses.field(default=None))
            for _, attribute, tp in columns
        ],
    )
    return record_type, columns


def parse_scalar(text: str) -> Any:
    """Interpret one CSV cell."""
    value = text.strip()
    if not value:
        return None
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if _INTEGER.match(value):
        return int(value)
    if _DECIMAL.match(value):
        return Decimal(value)
    return _parse_temporal(value) or value


def _read_json(path: Path) -> List[Dict[str, Any]]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"), parse_float=Decimal)
    except json.JSONDecodeError as exc:
        raise RecordLoadError(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
        raise RecordLoadError(f"{path} must contain a JSON array of objects.")
    return payload


def _read_csv(path: Path) -> List[Dict[str, Any]]:
    with path.open(newline="", encoding="utf-8-sig") as handle:
        reader = csv.DictReader(handle)
        return [
            {key: parse_scalar(value or "") for key, value in row.items() if key is not None}
            for row in reader
        ]


def _attribute_name(key: str, index: int) -> str:
    attribute = _NON_IDENTIFIER.sub("_", key).strip("_")
    if not attribute:
        return f"column_{index + 1}"
    if attribute[0].isdigit():
        attribute = f"column_{attribute}"
    if keyword.iskeyword(attribute):
        attribute = f"{attribute}_"
    return attribute


def _parse_temporal(value: Any) -> Optional[date]:
    if not isinstance(value, str) or len(value) < 10 or not value[:4].isdigit():
        return None
    try:
        if len(value) == 10:
            return date.fromisoformat(value)
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def _value_type(value: Any) -> type:
    if isinstance(value, bool):
        return bool
    if isinstance(value, int):
        return int
    if isinstance(value, (float, Decimal)):
        return Decimal
    if isinstance(value, datetime):
        return datetime
    if isinstance(value, date):
        return date
    if isinstance(value, str):
        temporal = _parse_temporal(value)
        return type(temporal) if temporal is not None else str
    return str


def _infer_type(values: Any) -> type:
    seen = {_value_type(value) for value in values if value is not None}
    if not seen:
        return str
    if len(seen) == 1:
        return seen.pop()
    if seen == {int, Decimal}:
        return Decimal
    if seen == {date, datetime}:
        return datetime
    return str


def _coerce(value: Any, target: type) -> Any:
    if value is None:
        return None
    if target is Decimal:
        return value if isinstance(value, Decimal) else Decimal(str(value))
    if target in (date, datetime) and isinstance(value, str):
        value = _parse_temporal(value)
    if target is datetime and type(value) is date:
        return datetime.combine(value, datetime.min.time())
    if target is str and not isinstance(value, str):
        if isinstance(value, (dict, list)):
            return json.dumps(value, default=str)
        return str(value)
    return value
