"""
Unit normalization so equivalent measurements (2 h and 120 min) compare equal.
"""

from __future__ import annotations

_CANONICAL_UNITS = {
    "C": "°C",
    "°C": "°C",
    "K": "°C",
    "h": "min",
    "min": "min",
    "M": "M",
    "mM": "M",
    "g": "g",
    "mg": "g",
    "kg": "g",
    "mL": "mL",
    "µL": "mL",
    "L": "mL",
    "mol": "mmol",
    "mmol": "mmol",
}

_CONVERSIONS = {
    "K": lambda v: v - 273.15,
    "h": lambda v: v * 60.0,
    "mM": lambda v: v / 1000.0,
    "mg": lambda v: v / 1000.0,
    "kg": lambda v: v * 1000.0,
    "µL": lambda v: v / 1000.0,
    "L": lambda v: v * 1000.0,
    "mol": lambda v: v * 1000.0,
}


def canonical_unit(unit: str) -> str:
    return _CANONICAL_UNITS.get(unit, unit)


def normalize(value: float, unit: str) -> tuple[float, str]:
    """Convert ``value`` in ``unit`` to the canonical unit."""
    convert = _CONVERSIONS.get(unit)
    if convert is not None:
        value = convert(value)
    return value, canonical_unit(unit)
