"""
Helper utilities for RUT handling and date display.

This module provides the Chilean RUT codec (strip, check digit, format,
validate) and date formatting used by customer views.
"""

from .rut import (
    InvalidRUTError,
    check_digit,
    format_rut,
    format_rut_body,
    sanitize_for_storage,
    strip_rut,
    validate_rut,
)
from .dates import format_date

__all__ = [
    "InvalidRUTError",
    "check_digit",
    "format_rut",
    "format_rut_body",
    "sanitize_for_storage",
    "strip_rut",
    "validate_rut",
    "format_date",
]
