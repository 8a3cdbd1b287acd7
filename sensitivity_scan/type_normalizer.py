"""
Type Normalizer

Canonicalizes catalog type descriptors into a single display string:
- Numeric types: BASE(precision,scale)
- Character types: BASE(max_length)
- Everything else: unchanged
"""

from decimal import Decimal
from typing import Any, Optional

NUMERIC_PREFIXES = ("NUMBER", "NUMERIC", "DECIMAL")
CHARACTER_PREFIXES = ("VARCHAR", "NVARCHAR", "CHAR", "NCHAR", "TEXT", "STRING")


def _render_attribute(value: Any) -> str:
    """Render a precision/scale/length attribute, empty when missing."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, Decimal) and value.is_finite() and value == value.to_integral_value():
        return str(int(value))
    return str(value).strip()


def normalize_type(
    data_type: Optional[str],
    precision: Any = None,
    scale: Any = None,
    max_length: Any = None
) -> str:
    """
    Render a catalog type tuple as one human-readable string.

    Missing components are left empty but the separator is kept, so
    NUMBER with no scale renders as ``NUMBER(38,)``.

    Args:
        data_type: Type name as reported by the catalog
        precision: Numeric precision
        scale: Numeric scale
        max_length: Character maximum length

    Returns:
        Normalized type string
    """
    base = (data_type or "").strip()
    family = base.upper()

    if family.startswith(NUMERIC_PREFIXES):
        return f"{base}({_render_attribute(precision)},{_render_attribute(scale)})"

    if family.startswith(CHARACTER_PREFIXES):
        return f"{base}({_render_attribute(max_length)})"

    return base
