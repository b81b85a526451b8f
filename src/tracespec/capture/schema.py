"""
Schema inference for captured values.

Classifies a captured value into a structural type (integer, boolean,
string, array, object) plus a representative example. The rules are a
fixed, first-match-wins heuristic:

    1. numerically parseable       -> integer, example = parsed integer
    2. "true"/"false" (any case)   -> boolean, no example
    3. string scalar               -> string, example = the value
    4. list                        -> array, no element schema
    5. anything else               -> object, properties inferred per key

Numeric strings lose their formatting ("007" becomes 7). Output files
depend on this exact behavior, so it is not to be "fixed".
"""

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .values import (
    Value, IntegerValue, BoolValue, StringValue, ListValue, MapValue, to_native
)

INTEGER = 'integer'
BOOLEAN = 'boolean'
STRING = 'string'
ARRAY = 'array'
OBJECT = 'object'

_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')


@dataclass
class SchemaNode:
    """Structural type descriptor with an optional example."""

    type: str
    example: Any = None
    properties: Optional[Dict[str, 'SchemaNode']] = None

    def to_dict(self, with_example: bool = True) -> Dict[str, Any]:
        """Serialize as an OpenAPI schema fragment."""
        data: Dict[str, Any] = {'type': self.type}
        if with_example and self.example is not None:
            data['example'] = self.example
        if self.properties is not None:
            data['properties'] = {
                name: node.to_dict() for name, node in self.properties.items()
            }
        return data


def is_numeric(value: Value) -> bool:
    """True when the value parses as a finite number."""
    if isinstance(value, IntegerValue):
        return True
    if not isinstance(value, StringValue):
        return False
    try:
        return math.isfinite(float(value.raw))
    except (TypeError, ValueError):
        return False


def parse_integer(value: Value) -> int:
    """
    Integer example for a numeric value.

    Strings keep only their leading integer part ("1.5" -> 1, ".5" -> 0).
    """
    if isinstance(value, IntegerValue):
        return int(value.raw)
    match = _LEADING_INT.match(value.raw)
    return int(match.group(1)) if match else 0


def is_boolean(value: Value) -> bool:
    if isinstance(value, BoolValue):
        return True
    return isinstance(value, StringValue) and value.raw.lower() in ('true', 'false')


def schema_type(value: Value) -> str:
    """Structural type name for a value."""
    if is_numeric(value):
        return INTEGER
    if is_boolean(value):
        return BOOLEAN
    if isinstance(value, StringValue):
        return STRING
    if isinstance(value, ListValue):
        return ARRAY
    return OBJECT


def infer_schema(value: Value) -> SchemaNode:
    """
    Build a SchemaNode for a value.

    Example:
        infer_schema(from_native("123"))      -> integer, example 123
        infer_schema(from_native({"a": "x"})) -> object, properties a: string "x"
    """
    kind = schema_type(value)

    if kind == INTEGER:
        return SchemaNode(INTEGER, example=parse_integer(value))
    if kind == STRING:
        return SchemaNode(STRING, example=value.raw)
    if kind == OBJECT:
        entries = value.entries if isinstance(value, MapValue) else {}
        return SchemaNode(
            OBJECT,
            properties={name: property_schema(v) for name, v in entries.items()}
        )
    return SchemaNode(kind)


def property_schema(value: Value) -> SchemaNode:
    """
    Schema for a single property or form field.

    Same as infer_schema, except that booleans and arrays carry the raw
    captured value as their example.
    """
    node = infer_schema(value)
    if node.example is None and node.type in (BOOLEAN, ARRAY):
        node.example = to_native(value)
    return node


def simple_example(value: Value) -> Any:
    """
    Example value used for parameters.

    Numbers become integers, strings stay as-is, everything else (and any
    blank string) yields None, meaning "no example".
    """
    if is_numeric(value):
        return parse_integer(value)
    if isinstance(value, StringValue) and value.raw.strip():
        return value.raw
    return None
