"""
Reagent and solvent checks. Each validator here looks at how the reagents
of a procedure meet their solvent or medium.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from chemverify.domain.entities import ClaimType, FindingKind, ValidationStatus
from chemverify.domain.services.evidence_locator import format_locator
from chemverify.domain.services.validators.base import StepAnalysis, ValidatorBase

if TYPE_CHECKING:
    from uuid import UUID

    from chemverify.domain.entities import Claim, Finding
    from chemverify.domain.run import AuditRun

MOISTURE_SENSITIVE_PATTERN = re.compile(
    r"\b(?:NaH|sodium\s+hydride|LiAlH4|lithium\s+aluminum\s+hydride|LAH|[Gg]rignard|MgBr|"
    r"MgCl|n-BuLi|t-BuLi|BuLi|organolithium)\b"
)
PROTIC_MEDIA_PATTERN = re.compile(
    r"\b(?:water|aqueous|H2O|methanol|ethanol|isopropanol|tert-butanol|alcohol)\b",
    re.IGNORECASE,
)

_PROCEDURE_VERB_PATTERN = re.compile(
    r"\b(?:dissolve[ds]?|stirr?(?:ed|ing)?|reflux(?:ed|ing)?|heat(?:ed|ing)?|cool(?:ed|ing)?|"
    r"add(?:ed|ing)?|quench(?:ed|ing)?|extract(?:ed|ing)?|wash(?:ed|ing)?)\b",
    re.IGNORECASE,
)
_MEDIUM_PATTERN = re.compile(r"\b(?:aqueous|xylene|neat|solvent-free)\b", re.IGNORECASE)

REAGENT_IN_SOLVENT_PATTERN = re.compile(
    r"\b(?:solution\s+of\s+)?(?P<reagent>[A-Za-z][A-Za-z0-9\-]{1,20}(?:\s+[a-z]{2,15})?)"
    r"\s+in\s+(?P<solvent>[A-Za-z][A-Za-z0-9\-, ]{1,30}?)(?:\s*\(|\s*$|\s*[,.])",
    re.IGNORECASE,
)


def _form(reagent: str, solvent: str) -> tuple[re.Pattern[str], re.Pattern[str]]:
    return (
        re.compile(rf"\b(?:{reagent})\b", re.IGNORECASE),
        re.compile(rf"\b(?:{solvent})\b", re.IGNORECASE),
    )


_ETHER = r"(?:diethyl\s+)?ether|Et2O"
_THF = r"THF|tetrahydrofuran"

# Reagents sold as solutions, with the solvents they are sold in
KNOWN_REAGENT_FORMS = (
    _form(r"HCl", r"dioxane|1,4-dioxane"),
    _form(r"HCl", rf"{_ETHER}|MTBE"),
    _form(r"HCl", r"MeOH|methanol"),
    _form(r"HCl", r"EtOH|ethanol|iPrOH|isopropanol"),
    _form(r"HBr", r"AcOH|acetic\s+acid"),
    _form(r"NH3|ammonia", r"MeOH|methanol"),
    _form(r"BH3|borane", _THF),
    _form(r"BH3|borane", r"DMS|dimethyl\s+sulfide|Me2S"),
    _form(r"LiAlH4|LAH", rf"{_THF}|{_ETHER}"),
    _form(r"DIBAL(?:-H)?", r"toluene|hexanes?|DCM|CH2Cl2"),
    _form(
        r"[nts]-?BuLi|BuLi|(?:[nts]-?)?butyllithium",
        r"hexanes?|pentane|cyclohexane",
    ),
    _form(
        r"(?:Me|Et|Ph)Mg(?:Br|Cl)|(?:methyl|ethyl|phenyl)magnesium\s+(?:bromide|chloride)",
        rf"{_THF}|{_ETHER}",
    ),
    _form(r"TFA|trifluoroacetic\s+acid", r"DCM|CH2Cl2|dichloromethane"),
)


class IncompatibleReagentSolventValidator(ValidatorBase):
    """Flags moisture-sensitive reagents that meet water or alcohols in procedure steps."""

    def validate(self, run_id: UUID, claims: list[Claim], run: AuditRun) -> list[Finding]:
        text = run.analyzed_text
        if not text:
            return []

        analysis = StepAnalysis.of(text)
        reagent: re.Match[str] | None = None
        protic: re.Match[str] | None = None
        reagent_offset = protic_offset = 0

        for step in analysis.procedure_steps():
            step_text = analysis.step_text(step)
            if reagent is None and (match := MOISTURE_SENSITIVE_PATTERN.search(step_text)):
                reagent, reagent_offset = match, step.start
            if protic is None and (match := PROTIC_MEDIA_PATTERN.search(step_text)):
                protic, protic_offset = match, step.start
            if reagent and protic:
                break

        if reagent is None or protic is None:
            return []

        reagent_start = reagent_offset + reagent.start()
        return [
            self._finding(
                run_id,
                ValidationStatus.FAIL,
                f"[CHEM.INCOMPATIBLE_REAGENT_SOLVENT] Moisture-sensitive reagent "
                f"({reagent.group(0)}) appears in aqueous/protic conditions ({protic.group(0)}).",
                0.9,
                kind=FindingKind.INCOMPATIBLE_REAGENT_SOLVENT,
                evidence_ref=format_locator(reagent_start, reagent_start + len(reagent.group(0))),
                payload={
                    "reagent": reagent.group(0),
                    "medium": protic.group(0),
                    "medium_offset": protic_offset + protic.start(),
                },
            )
        ]


class MissingSolventValidator(ValidatorBase):
    """Flags procedures that describe reaction steps without any solvent or medium."""

    def validate(self, run_id: UUID, claims: list[Claim], run: AuditRun) -> list[Finding]:
        text = run.analyzed_text
        if not text:
            return []

        verb = _PROCEDURE_VERB_PATTERN.search(text)
        if verb is None:
            return []
        if any(c.claim_type == ClaimType.SOLVENT_MENTION for c in claims):
            return []
        if _MEDIUM_PATTERN.search(text):
            return []

        return [
            self._finding(
                run_id,
                ValidationStatus.FAIL,
                "[CHEM.MISSING_SOLVENT] Procedure includes reaction steps "
                "but no solvent/medium is specified.",
                0.8,
                kind=FindingKind.MISSING_SOLVENT,
                evidence_ref=format_locator(verb.start(), verb.end()),
            )
        ]


class ConcentrationSanityValidator(ValidatorBase):
    """Confirms reagent solutions that match a known commercial form ("HCl in dioxane")."""

    def validate(self, run_id: UUID, claims: list[Claim], run: AuditRun) -> list[Finding]:
        text = run.analyzed_text
        if not text:
            return []

        findings: list[Finding] = []
        for match in REAGENT_IN_SOLVENT_PATTERN.finditer(text):
            reagent = match.group("reagent").strip()
            solvent = match.group("solvent").strip()
            if not any(
                reagent_form.search(reagent) and solvent_form.search(solvent)
                for reagent_form, solvent_form in KNOWN_REAGENT_FORMS
            ):
                continue
            phrase = match.group(0).strip().rstrip("(,.").strip()
            findings.append(
                self._finding(
                    run_id,
                    ValidationStatus.PASS,
                    f'[CHEM.KNOWN_REAGENT_FORM] "{phrase}" is a recognized commercial '
                    "reagent form.",
                    0.8,
                    kind=FindingKind.KNOWN_REAGENT_FORM,
                    evidence_ref=format_locator(match.start(), match.end()),
                    payload={"reagent": reagent, "solvent": solvent},
                )
            )
        return findings
