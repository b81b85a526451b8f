"""
TraceSpec

Records HTTP exchanges captured during test runs and incrementally maintains
an OpenAPI description of the observed API.
"""

from .config import ConfigError, TraceConfig
from .session import TraceSession

__all__ = ['ConfigError', 'TraceConfig', 'TraceSession']

__version__ = '1.0.0'
