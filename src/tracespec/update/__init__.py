"""
TraceSpec Description Update Module

Merges observations into persisted API descriptions while preserving what
earlier runs recorded.
"""

from .accumulator import Accumulator
from .descriptions import LocaleDescriptions, StaticDescriptions
from .merger import MergeResult, SpecMerger

__all__ = ['Accumulator', 'LocaleDescriptions', 'MergeResult', 'SpecMerger', 'StaticDescriptions']
