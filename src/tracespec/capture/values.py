"""
Captured value model.

Request parameters arrive from different capture points as native Python
objects (form strings, decoded JSON, mitmproxy multidicts). They are converted
once, at capture time, into a small closed set of value types so the schema
inferencer can match on them exhaustively.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Union


@dataclass(frozen=True)
class IntegerValue:
    """A native number (int or float)."""
    raw: Union[int, float]


@dataclass(frozen=True)
class BoolValue:
    """A native boolean."""
    raw: bool


@dataclass(frozen=True)
class StringValue:
    """A string scalar. May still look numeric or boolean."""
    raw: str


@dataclass(frozen=True)
class ListValue:
    items: List['Value'] = field(default_factory=list)


@dataclass(frozen=True)
class MapValue:
    entries: Dict[str, 'Value'] = field(default_factory=dict)


Value = Union[IntegerValue, BoolValue, StringValue, ListValue, MapValue]


def from_native(obj: Any) -> Value:
    """
    Convert a native Python object into a Value.

    bool is checked before int since bool subclasses int. None and any
    other unrecognized object become an empty MapValue, which the
    inferencer classifies as an object with no properties.
    """
    if isinstance(obj, bool):
        return BoolValue(obj)
    if isinstance(obj, (int, float)):
        return IntegerValue(obj)
    if isinstance(obj, bytes):
        return StringValue(obj.decode('utf-8', errors='replace'))
    if isinstance(obj, str):
        return StringValue(obj)
    if isinstance(obj, (list, tuple)):
        return ListValue([from_native(item) for item in obj])
    if isinstance(obj, dict):
        return MapValue({str(k): from_native(v) for k, v in obj.items()})
    return MapValue({})


def to_native(value: Value) -> Any:
    """Convert a Value back into plain Python data (for YAML examples)."""
    if isinstance(value, (IntegerValue, BoolValue, StringValue)):
        return value.raw
    if isinstance(value, ListValue):
        return [to_native(item) for item in value.items]
    return {k: to_native(v) for k, v in value.entries.items()}
