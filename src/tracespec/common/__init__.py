"""
TraceSpec Common Utilities

Shared utilities and helpers used across TraceSpec modules.
"""

from .utils import decode_body, safe_json_parse

__all__ = [
    'decode_body',
    'safe_json_parse',
]
