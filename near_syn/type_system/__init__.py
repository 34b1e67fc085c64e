"""
Types module for near-syn.

This module provides the Rust to TypeScript type translator and its
lookup tables.
"""

from .translator import TypeTranslator, UNKNOWN_TYPE, VOID_TYPE
from .mappings import (
    RUST_TO_TS_MAP,
    OPTION_TYPES,
    SEQUENCE_TYPES,
    MAP_TYPES,
    TRANSPARENT_TYPES,
    RESULT_TYPES,
    NEAR_PRELUDE_TYPES,
)

__all__ = [
    'TypeTranslator',
    'UNKNOWN_TYPE',
    'VOID_TYPE',
    'RUST_TO_TS_MAP',
    'OPTION_TYPES',
    'SEQUENCE_TYPES',
    'MAP_TYPES',
    'TRANSPARENT_TYPES',
    'RESULT_TYPES',
    'NEAR_PRELUDE_TYPES',
]
