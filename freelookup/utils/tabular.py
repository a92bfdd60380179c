"""CSV <-> JSON conversion with flattening of nested records.

Nested objects become dotted column names (`address.city`) and list items
become indexed columns (`tags.0`), so API payloads fit a spreadsheet.
"""

import csv
import io
import json
import math
import re
from typing import Any, Dict, Iterable, List, Union

Record = Dict[str, Any]

# Plain decimal literals only: no leading zeros ("01234" is a code, not 1234),
# no underscores, no surrounding whitespace.
_INT_RE = re.compile(r"-?(0|[1-9][0-9]*)\Z")
_FLOAT_RE = re.compile(r"-?(0|[1-9][0-9]*)(\.[0-9]+)?([eE][+-]?[0-9]+)?\Z")


def flatten_record(obj: Any, sep: str = ".", prefix: str = "") -> Record:
    """Flattens nested dicts/lists into a single-level dict.

    >>> flatten_record({"a": {"b": 1}, "tags": ["x", "y"]})
    {'a.b': 1, 'tags.0': 'x', 'tags.1': 'y'}
    """
    flat: Record = {}
    if isinstance(obj, dict):
        if not obj and prefix:
            flat[prefix] = None
        for key, value in obj.items():
            child = f"{prefix}{sep}{key}" if prefix else str(key)
            flat.update(flatten_record(value, sep, child))
    elif isinstance(obj, list):
        if not obj and prefix:
            flat[prefix] = None
        for index, value in enumerate(obj):
            child = f"{prefix}{sep}{index}" if prefix else str(index)
            flat.update(flatten_record(value, sep, child))
    else:
        flat[prefix or "value"] = obj
    return flat


def unflatten_record(flat: Record, sep: str = ".") -> Record:
    """Rebuilds nesting from dotted keys. Numeric segments stay dict keys."""
    nested: Record = {}
    for key, value in flat.items():
        parts = key.split(sep)
        node = nested
        for part in parts[:-1]:
            existing = node.get(part)
            if not isinstance(existing, dict):
                existing = {}
                node[part] = existing
            node = existing
        node[parts[-1]] = value
    return nested


def _ordered_union(records: Iterable[Record]) -> List[str]:
    header: List[str] = []
    seen = set()
    for record in records:
        for key in record:
            if key not in seen:
                seen.add(key)
                header.append(key)
    return header


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def json_to_csv(records: Union[str, List[Any], Record], sep: str = ".") -> str:
    """Converts a JSON array (or a single object) to CSV text.

    The header is the ordered union of all flattened keys; missing cells are
    left empty.
    """
    if isinstance(records, str):
        records = json.loads(records)
    if isinstance(records, dict):
        records = [records]
    if not isinstance(records, list):
        raise ValueError("JSON input must be an object or an array of objects")

    flat_rows = [flatten_record(r, sep) for r in records]
    header = _ordered_union(flat_rows)
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=header, lineterminator="\n")
    writer.writeheader()
    for row in flat_rows:
        writer.writerow({k: _cell(row.get(k)) for k in header})
    return buffer.getvalue()


def _parse_cell(text: str) -> Any:
    if text == "":
        return None
    lowered = text.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if _INT_RE.match(text):
        return int(text)
    if _FLOAT_RE.match(text):
        number = float(text)
        if math.isfinite(number):
            return number
    return text


def csv_to_json(text: str, unflatten: bool = False, infer_types: bool = True, sep: str = ".") -> List[Record]:
    """Parses CSV text (with header row) into a list of records."""
    reader = csv.DictReader(io.StringIO(text))
    if reader.fieldnames is None:
        return []
    rows: List[Record] = []
    for raw in reader:
        row = {k: (_parse_cell(v or "") if infer_types else v) for k, v in raw.items() if k is not None}
        rows.append(unflatten_record(row, sep) if unflatten else row)
    return rows
