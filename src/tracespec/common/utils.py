"""
TraceSpec Common Utilities

Small helpers shared by the capture points and the recorder.
"""

import json
from typing import Any, Optional, Union


def decode_body(raw: Optional[Union[bytes, str]]) -> str:
    """
    Decode a captured body into text.

    Args:
        raw: Body as bytes or str (may be None)

    Returns:
        Body as string; invalid UTF-8 sequences are replaced
    """
    if raw is None:
        return ""
    if isinstance(raw, str):
        return raw
    return raw.decode('utf-8', errors='replace')


def safe_json_parse(json_string: Optional[Union[bytes, str]], default: Any = None) -> Any:
    """
    Safely parse a JSON body with error handling.

    Args:
        json_string: JSON text or bytes to parse
        default: Value to return if parsing fails or the body is empty

    Returns:
        Parsed JSON object, or default if parsing fails

    Example:
        value = safe_json_parse(response_body, default={'file': 'file/data'})
    """
    text = decode_body(json_string)
    if not text:
        return default

    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError, ValueError):
        return default
