"""
TraceSpec Capture Module

Turns captured request/response exchanges into observations:
- Value model and schema inference
- Path templating
- Trace recording

The ASGI middleware (capture.middleware) and the mitmproxy addon
(capture.tracespec_addon) are imported explicitly since they need
starlette and mitmproxy respectively.
"""

from .paths import RouteTable, normalize_path
from .recorder import Exchange, Observation, Parameter, TraceRecorder
from .schema import SchemaNode, infer_schema

__all__ = [
    'Exchange',
    'Observation',
    'Parameter',
    'RouteTable',
    'SchemaNode',
    'TraceRecorder',
    'infer_schema',
    'normalize_path',
]
