"""
JSON-lines encoding of intermediate (key, value) records
"""

import json
from typing import Any, Tuple


def _freeze(obj: Any) -> Any:
    """JSON arrays come back as lists; keys must be hashable tuples again"""
    if isinstance(obj, list):
        return tuple(_freeze(item) for item in obj)
    return obj


def dump_record(key: Any, value: Any) -> str:
    return json.dumps({'key': key, 'value': value}, ensure_ascii=False)


def load_record(line: str) -> Tuple[Any, Any]:
    """
    Decode one record line

    Raises:
        json.JSONDecodeError, KeyError: If the line is not a record
    """
    record = json.loads(line)
    return _freeze(record['key']), _freeze(record['value'])
