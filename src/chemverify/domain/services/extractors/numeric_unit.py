"""
Numeric Unit Extractor
======================

Matches numbers followed by a recognized unit ("82%", "0.5 M", "2 h",
"-78 °C", "60–65 °C") and resolves the domain context each value
belongs to, so that values can later be grouped and compared.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from chemverify.domain.entities import Claim, ClaimType
from chemverify.domain.services.evidence_locator import format_locator
from chemverify.domain.services.text_steps import segment_steps, step_index_at
from chemverify.ports.claim_extractor import ClaimExtractor

if TYPE_CHECKING:
    from uuid import UUID

# A dash, tilde or en-dash between two numbers is a range marker; a
# dash or minus sign with no digit before it is a negative sign.
NUMERIC_UNIT_PATTERN = re.compile(
    r"(?<![\w.])"
    r"(?:(?P<low>[-−]?\d+(?:\.\d+)?)\s*[-–~]\s*)?"
    r"(?P<num>[-−]?\d+(?:\.\d+)?)\s*"
    r"(?P<unit>%|°\s?C\b|mol\s?%|"
    r"(?:mmol|mol|mM|mL|µL|mg|min|kg|kPa|hrs|hr|h|g|L|M|K|C|atm|bar|ppm)\b)"
)

_UNIT_ALIASES = {"C": "°C", "° C": "°C", "hr": "h", "hrs": "h", "mol %": "mol%"}

_FIXED_CONTEXT = {
    "°C": "temp",
    "K": "temp",
    "h": "time",
    "min": "time",
    "kPa": "pressure",
    "atm": "pressure",
    "bar": "pressure",
}

_CONTEXT_LABEL_PATTERN = re.compile(
    r"\b(yield|temp(?:erature)?|time|equiv|conc(?:entration)?|molarity|pressure|mass|"
    r"volume|purity|conversion|selectivity|ee|enantiomeric\s+excess|dr|"
    r"diastereomeric\s+ratio)\b",
    re.IGNORECASE,
)

_LABEL_ALIASES = {
    "temperature": "temp",
    "concentration": "conc",
    "molarity": "conc",
    "enantiomeric excess": "ee",
    "diastereomeric ratio": "dr",
}

# Labels a unit can plausibly carry, and the fallback when none is near.
_LABELS_BY_UNIT: dict[str, tuple[frozenset[str], str | None]] = {
    "M": (frozenset({"conc"}), "conc"),
    "mM": (frozenset({"conc"}), "conc"),
    "g": (frozenset({"mass", "yield"}), None),
    "mg": (frozenset({"mass", "yield"}), None),
    "kg": (frozenset({"mass", "yield"}), None),
    "mL": (frozenset({"volume"}), None),
    "µL": (frozenset({"volume"}), None),
    "L": (frozenset({"volume"}), None),
    "ppm": (frozenset({"conc", "purity"}), None),
}

_PERCENT_COMPOSITION_PATTERN = re.compile(
    r"\b(?:silica|column|chromatography|eluent|hexanes?|EtOAc|ethyl\s+acetate|gradient|"
    r"flash|TLC|Rf)\b",
    re.IGNORECASE,
)
_PERCENT_CONC_PATTERN = re.compile(
    r"\b(?:HCl|NaOH|H2SO4|HNO3|KOH|NaHCO3|NH[34]|aq\b|aqueous|solution|w/w|v/v|"
    r"wt\s*%|vol\s*%|conc\.?|dispersion)",
    re.IGNORECASE,
)
_PERCENT_LABELS = frozenset({"yield", "purity", "conversion", "selectivity", "ee", "dr"})

_TIME_ACTIONS = (
    (
        "addition",
        re.compile(
            r"\b(?:added?\s+(?:drop\s*wise\s+)?over|portion\s*wise(?:\s+over)?|"
            r"drop\s*wise(?:\s+over)?)\b",
            re.IGNORECASE,
        ),
    ),
    ("stir", re.compile(r"\bstirr?(?:ed|ing)?\s+for\b", re.IGNORECASE)),
    (
        "hold",
        re.compile(
            r"\b(?:maintain(?:ed|ing)?|held?|kept)\s+(?:at\s+.{1,20}?\s+)?for\b",
            re.IGNORECASE,
        ),
    ),
    (
        "heat",
        re.compile(
            r"\b(?:heat(?:ed|ing)?\s+(?:to\s+.{1,20}?\s+)?for|reflux(?:ed|ing)?\s+for)\b",
            re.IGNORECASE,
        ),
    ),
)

_ENTITY_TOKEN_PATTERN = re.compile(
    r"\b(?:[A-Z][a-z]*(?:[A-Z][a-z]*)*\d*"  # NaBH4, MeOH
    r"|[A-Z][a-z]{2,}(?:\s+[a-z]{2,})?"  # Benzaldehyde, Ethyl acetate
    r"|[a-z]{3,}(?:ene|ane|ine|ide|ate|ite|ol|one|ium|yne)"  # chemical suffixes
    r"|(?:NaH|LiAlH4|LAH|NaBH4|BuLi|DIBAL|TBAF|KOH|NaOH|K2CO3|Cs2CO3|Pd|Ni|Cu|Zn|Mg|Fe|Rh|Ir|Ru)"
    r")\b"
)
_GENERIC_WORDS = frozenset({"the", "was", "with", "and", "for", "into", "from", "then", "after"})
_NO_ENTITY_UNITS = frozenset({"°C", "K", "h", "min", "%"})

CONTEXT_WINDOW_CHARS = 40
ENTITY_WINDOW_CHARS = 35


def normalize_unit(unit: str) -> str:
    return _UNIT_ALIASES.get(unit, unit)


def _signed(number: str) -> str:
    return number.replace("−", "-")


def _window(text: str, start: int, end: int, radius: int) -> tuple[str, int]:
    left = max(0, start - radius)
    return text[left : min(len(text), end + radius)], left


def _nearest_label(text: str, start: int, end: int, allowed: frozenset[str] | None) -> str | None:
    window, offset = _window(text, start, end, CONTEXT_WINDOW_CHARS)
    best: tuple[int, str] | None = None
    for match in _CONTEXT_LABEL_PATTERN.finditer(window):
        label = match.group(1).lower()
        label = _LABEL_ALIASES.get(re.sub(r"\s+", " ", label), label)
        if allowed is not None and label not in allowed:
            continue
        label_start, label_end = match.start() + offset, match.end() + offset
        distance = start - label_end if label_end <= start else max(0, label_start - end)
        if best is None or distance < best[0]:
            best = (distance, label)
    return best[1] if best else None


def _percent_context(text: str, start: int, end: int) -> str:
    labelled = _nearest_label(text, start, end, _PERCENT_LABELS)
    if labelled:
        return labelled
    window, _ = _window(text, start, end, CONTEXT_WINDOW_CHARS)
    if _PERCENT_COMPOSITION_PATTERN.search(window):
        return "composition"
    if _PERCENT_CONC_PATTERN.search(window):
        return "conc"
    return "yield"


def resolve_context_key(text: str, start: int, end: int, unit: str) -> str | None:
    """Domain tag for a value, from its unit or the vocabulary around it."""
    fixed = _FIXED_CONTEXT.get(unit)
    if fixed is not None:
        return fixed
    if unit == "%":
        return _percent_context(text, start, end)

    allowed, fallback = _LABELS_BY_UNIT.get(unit, (None, None))
    return _nearest_label(text, start, end, allowed) or fallback


def resolve_time_action(text: str, start: int, end: int) -> str | None:
    window, _ = _window(text, start, end, CONTEXT_WINDOW_CHARS)
    for action, pattern in _TIME_ACTIONS:
        if pattern.search(window):
            return action
    return None


def resolve_entity_key(text: str, start: int, unit: str) -> str | None:
    """Nearest chemical-looking token to the left of a value."""
    if unit in _NO_ENTITY_UNITS:
        return None
    window = text[max(0, start - ENTITY_WINDOW_CHARS) : start]
    tokens = _ENTITY_TOKEN_PATTERN.findall(window)
    if not tokens:
        return None
    token = tokens[-1].strip()
    if len(token) < 2 or token.lower() in _GENERIC_WORDS:
        return None
    return token.lower()


class NumericUnitExtractor(ClaimExtractor):
    """Extracts numeric values with units, including ranges and negatives."""

    def extract(self, run_id: UUID, text: str) -> list[Claim]:
        if not text or not text.strip():
            return []

        steps = segment_steps(text)
        claims: list[Claim] = []

        for match in NUMERIC_UNIT_PATTERN.finditer(text):
            start, end = match.span()
            unit = normalize_unit(re.sub(r"\s+", " ", match.group("unit")))
            value = _signed(match.group("num"))

            payload: dict[str, Any] = {}
            context_key = resolve_context_key(text, start, end, unit)
            if context_key:
                payload["context_key"] = context_key
            if context_key == "time":
                time_action = resolve_time_action(text, start, end)
                if time_action:
                    payload["time_action"] = time_action
            if match.group("low") is not None:
                payload["range_low"] = _signed(match.group("low"))
                payload["range_high"] = value

            claims.append(
                Claim(
                    run_id=run_id,
                    claim_type=ClaimType.NUMERIC_WITH_UNIT,
                    raw_text=match.group(0),
                    normalized_value=value,
                    unit=unit,
                    source_locator=format_locator(start, end),
                    step_index=step_index_at(steps, start),
                    entity_key=resolve_entity_key(text, start, unit),
                    payload=payload,
                )
            )

        return claims
