"""
Lead field extraction subpackage

Exports:
- detect_* : one extractor per lead field
- extract_fields: runs all extractors, skipping filled fields
- FIELD_EXTRACTORS: field -> extractor, in priority order
"""

from .field_extractors import (
    FIELD_EXTRACTORS,
    detect_budget,
    detect_business,
    detect_goal,
    detect_name,
    detect_phone,
    detect_timeline,
    extract_fields,
)
from .normalizers import normalize_budget, sanitize_name

__all__ = [
    'FIELD_EXTRACTORS',
    'detect_budget',
    'detect_business',
    'detect_goal',
    'detect_name',
    'detect_phone',
    'detect_timeline',
    'extract_fields',
    'normalize_budget',
    'sanitize_name',
]
