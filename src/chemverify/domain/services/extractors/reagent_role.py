"""
Reagent Role Extractor
======================

Detects reagent, solvent, atmosphere, dryness and symbolic temperature
vocabulary. Every claim carries the step it appears in and a lower-cased
entity key.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from chemverify.domain.entities import Claim, ClaimType
from chemverify.domain.services.evidence_locator import format_locator
from chemverify.domain.services.text_steps import TextStep, segment_steps, step_index_at
from chemverify.ports.claim_extractor import ClaimExtractor

if TYPE_CHECKING:
    from uuid import UUID

REAGENT_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    (
        "reductant",
        re.compile(
            r"\b(?:NaBH4|sodium\s+borohydride|LiAlH4|lithium\s+alumin\w+\s+hydride|LAH|"
            r"DIBAL(?:-H)?|L-Selectride|K-Selectride|Red-Al)\b"
        ),
    ),
    (
        "base",
        re.compile(
            r"\b(?:NaH|sodium\s+hydride|NaOMe|sodium\s+methoxide|NaOEt|sodium\s+ethoxide|"
            r"KOtBu|potassium\s+tert-butoxide|K2CO3|Cs2CO3|Na2CO3|NaHCO3|Et3N|triethylamine|"
            r"TEA|DIPEA|[Hh]ünig'?s?\s+base|DBU|DMAP|pyridine|imidazole|LDA|LiHMDS|NaHMDS|"
            r"KHMDS|n-BuLi|t-BuLi|s-BuLi|BuLi)\b"
        ),
    ),
    (
        "acid",
        re.compile(
            r"\b(?:HCl|hydrochloric\s+acid|H2SO4|sulfuric\s+acid|HNO3|nitric\s+acid|AcOH|"
            r"acetic\s+acid|TFA|trifluoroacetic\s+acid|p-?TsOH|PTSA|CSA|camphorsulfonic\s+acid|"
            r"HBF4|H3PO4|TfOH|triflic\s+acid)\b"
        ),
    ),
    (
        "oxidant",
        re.compile(r"\b(?:mCPBA|PDC|PCC|DMP|Dess-Martin|IBX|TEMPO|NaOCl|KMnO4|OsO4|Swern|Jones)\b"),
    ),
    (
        "catalyst",
        re.compile(
            r"(?<!\w)(?:Pd\(PPh[₃3]\)[₄4]|Pd2\(dba\)3|Pd\(OAc\)2|PdCl2|Ni\(cod\)2|CuI|CuBr|ZnCl2)(?!\w)"
        ),
    ),
    (
        "organometallic",
        re.compile(r"\b(?:[Gg]rignard|MgBr|MgCl|organolithium|organomagnesium|organozinc)\b"),
    ),
)

SOLVENT_PATTERN = re.compile(
    r"\b(?:THF|tetrahydrofuran|DCM|CH2Cl2|dichloromethane|DMF|dimethylformamide|DMSO|"
    r"dimethyl\s+sulfoxide|MeCN|acetonitrile|toluene|benzene|hexanes?|pentane|heptane|"
    r"diethyl\s+ether|Et2O|ether|MTBE|1,4-dioxane|dioxane|EtOAc|ethyl\s+acetate|MeOH|"
    r"methanol|EtOH|ethanol|iPrOH|isopropanol|acetone|chloroform|CHCl3|DME|"
    r"dimethoxyethane|NMP|water|H2O|brine)\b",
    re.IGNORECASE,
)

ATMOSPHERE_PATTERN = re.compile(
    r"\b(?:(?:in|under)\s+(?:an?\s+)?(?:atmosphere\s+of\s+)?(?:nitrogen|argon|N2|Ar)|"
    r"(?:under\s+)?(?:N2|nitrogen|argon|Ar|inert\s+atmosphere|inert\s+gas)|"
    r"(?:open\s+to\s+)?air)\b",
    re.IGNORECASE,
)

DRYNESS_PATTERN = re.compile(
    r"\b(?:anhydrous|oven-dried|flame-dried|dry|dried|molecular\s+sieves|"
    r"freshly\s+distilled|Schlenk|glovebox)\b",
    re.IGNORECASE,
)

SYMBOLIC_TEMPERATURE_PATTERN = re.compile(
    r"\b(?:reflux(?:ed|ing)?|room\s+temperature|r\.?t\.?(?!\w)|ambient\s+temperature|"
    r"ice[\s-]bath|ice[\s/-]water|dry\s+ice(?:[\s/-]acetone)?)",
    re.IGNORECASE,
)


def normalize_atmosphere(token: str) -> str:
    lower = token.lower()
    if re.search(r"\bair\b", lower):
        return "air"
    if "argon" in lower or re.search(r"\bar\b", lower):
        return "argon"
    return "nitrogen"


def normalize_symbolic_temperature(token: str) -> str:
    lower = re.sub(r"\s+", " ", token.lower())
    if lower.startswith("reflux"):
        return "reflux"
    if lower.startswith("dry ice"):
        return "dry_ice"
    if lower.startswith("ice"):
        return "ice_bath"
    return "room_temperature"


class ReagentRoleExtractor(ClaimExtractor):
    """Tags reagents with their role and records reaction conditions."""

    def extract(self, run_id: UUID, text: str) -> list[Claim]:
        if not text:
            return []

        steps = segment_steps(text)
        claims: list[Claim] = []

        for role, pattern in REAGENT_PATTERNS:
            for match in pattern.finditer(text):
                token = match.group(0).strip()
                claims.append(
                    self._claim(run_id, steps, match, ClaimType.REAGENT_MENTION, role, token)
                )

        for match in SOLVENT_PATTERN.finditer(text):
            token = match.group(0).strip()
            claims.append(
                self._claim(run_id, steps, match, ClaimType.SOLVENT_MENTION, "solvent", token)
            )

        for match in ATMOSPHERE_PATTERN.finditer(text):
            token = match.group(0).strip()
            atmosphere = normalize_atmosphere(token)
            claims.append(
                self._claim(
                    run_id,
                    steps,
                    match,
                    ClaimType.ATMOSPHERE_CONDITION,
                    "atmosphere",
                    token,
                    normalized=atmosphere,
                )
            )

        for match in DRYNESS_PATTERN.finditer(text):
            token = match.group(0).strip()
            claims.append(
                self._claim(
                    run_id,
                    steps,
                    match,
                    ClaimType.DRYNESS_CONDITION,
                    "dryness",
                    token,
                    normalized=token.lower(),
                )
            )

        for match in SYMBOLIC_TEMPERATURE_PATTERN.finditer(text):
            token = match.group(0).strip()
            claims.append(
                self._claim(
                    run_id,
                    steps,
                    match,
                    ClaimType.SYMBOLIC_TEMPERATURE,
                    "temperature",
                    token,
                    normalized=normalize_symbolic_temperature(token),
                )
            )

        return claims

    @staticmethod
    def _claim(
        run_id: UUID,
        steps: list[TextStep],
        match: re.Match[str],
        claim_type: ClaimType,
        role: str,
        token: str,
        normalized: str | None = None,
    ) -> Claim:
        entity = normalized if claim_type == ClaimType.ATMOSPHERE_CONDITION else token.lower()
        return Claim(
            run_id=run_id,
            claim_type=claim_type,
            raw_text=token,
            normalized_value=normalized or token,
            source_locator=format_locator(match.start(), match.end()),
            step_index=step_index_at(steps, match.start()),
            entity_key=entity,
            payload={"role": role, "token": token},
        )
