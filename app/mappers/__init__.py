"""
app/mappers package marker.
"""

from app.mappers.field_normalizer import (
    DEFAULT_FALLBACK_RULES,
    DEFAULT_FIELD_ALIASES,
    FieldNormalizer,
    normalize_header,
)

__all__ = [
    "DEFAULT_FALLBACK_RULES",
    "DEFAULT_FIELD_ALIASES",
    "FieldNormalizer",
    "normalize_header",
]
