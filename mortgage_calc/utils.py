"""Utility functions for the mortgage calculator.

This module provides helpers for turning user input (form fields, JSON
payloads and command-line options) into ``Decimal`` values and canonical
enumeration labels.
"""

from __future__ import annotations

import unicodedata
from decimal import Decimal, InvalidOperation, getcontext
from typing import Any

getcontext().prec = 28  # increase decimal precision to avoid rounding errors


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas used as thousands separators and handles
    both integer and float-like strings. It raises ``ValueError`` if
    conversion fails.
    """
    try:
        cleaned = value.strip().replace(",", "")
        return Decimal(cleaned)
    except (InvalidOperation, AttributeError) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc


def decimal_from_value(value: Any) -> Decimal:
    """Convert a string, int, float or ``Decimal`` into a ``Decimal``.

    Floats go through ``str`` so that ``0.17`` becomes ``Decimal("0.17")``
    rather than its binary expansion.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    return decimal_from_str(str(value))


def parse_amount(value: str) -> Decimal:
    """Parse a monetary amount with optional ``k``/``m`` suffixes.

    Accepts plain numbers ("166078") and shorthand such as "200k" meaning
    200 000 or "1.5m" meaning 1 500 000.
    """
    cleaned = value.strip().lower().replace(",", "")
    factor = Decimal(1)
    if cleaned.endswith("k"):
        factor = Decimal(1_000)
        cleaned = cleaned[:-1]
    elif cleaned.endswith("m"):
        factor = Decimal(1_000_000)
        cleaned = cleaned[:-1]
    return decimal_from_str(cleaned) * factor


def parse_percent(value: str) -> Decimal:
    """Parse a percentage such as "5.64" or "5.64%" into ``Decimal("5.64")``.

    Unlike a fraction, the value is kept in percent: the engine divides by
    100 itself.
    """
    cleaned = value.strip()
    if cleaned.endswith("%"):
        cleaned = cleaned[:-1]
    return decimal_from_str(cleaned)


def normalize_label(value: str) -> str:
    """Canonicalize an enumeration label.

    Accents are stripped, letters upper-cased and spaces or hyphens turned
    into underscores, so "Reduzir parcela", "REDUZIR PARCELA" and
    "reduzir-parcela" all map to ``REDUZIR_PARCELA``.
    """
    decomposed = unicodedata.normalize("NFKD", value)
    ascii_only = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return "_".join(ascii_only.replace("-", " ").upper().split())
