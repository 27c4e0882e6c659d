"""
Text Step Services
==================

Segments analyzed text into procedural steps, decides whether the text
reads as an experimental procedure at all, and assigns each step a role
so that validators can ignore headings, questions and reference lists.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum, auto

# Sentence ends, newlines, list markers and sequencing words. The
# sequencing word itself stays in the following step.
_BOUNDARY_PATTERN = re.compile(
    r"(?<=[.;])\s+"
    r"|(?:\r?\n)+"
    r"|(?:^|\s)(?:\d+[.)]\s|[-•]\s)"
    r"|(?<=\S)\s+(?=[Tt]hen\b|[Aa]fter(?:ward)?s?\b|[Ss]ubsequently\b|[Nn]ext\b|[Ff]inally\b)"
)

_LAB_VERBS = (
    r"added|stirred|quenched|extracted|washed|dried|filtered|concentrated|"
    r"purified|refluxed|cooled|warmed|heated|dissolved|evaporated|decanted|"
    r"cannulated|sonicated|centrifuged|distilled|recrystallized|precipitated|"
    r"titrated|degassed|charged|transferred|poured|diluted"
)

LAB_ACTION_VERB_PATTERN = re.compile(rf"\b(?:{_LAB_VERBS})\b", re.IGNORECASE)

_STEP_ACTION_VERB_PATTERN = re.compile(
    rf"\b(?:{_LAB_VERBS}|collected|neutralized|acidified|adjusted|triturated|"
    r"filtration|acidification)\b",
    re.IGNORECASE,
)

_NUMERIC_QUANTITY_PATTERN = re.compile(
    r"\d+(?:\.\d+)?\s*(?:mmol|mol|mg|g|kg|µ?L|mL|°C|K|°F|min|hr?|equiv|eq|wt%|atm|psi|bar|torr|M\b)",
    re.IGNORECASE,
)

_MEASURED_QUANTITY_PATTERN = re.compile(
    r"\d+(?:\.\d+)?\s*(?:%|°?C|M|h|min|mg|mL|g|L|K|mol|mmol|kPa|atm|ppm|equiv)"
)

_NARRATIVE_HEDGE_PATTERN = re.compile(
    r"\b(?:reported(?:ly)?|previously|in\s+(?:prior|earlier)\s+work|literature|was\s+shown|"
    r"has\s+been\s+described|it\s+is\s+known|typically\s+used|commonly\s+employed|"
    r"well[\s-]established|are\s+widely\s+used|have\s+been\s+reported)\b",
    re.IGNORECASE,
)

_REFERENCES_SECTION_PATTERN = re.compile(
    r"(?:^|\n)\s*(?:#{1,6}\s+)?(?:References|Bibliography|Works\s+Cited)\s*\n",
    re.IGNORECASE,
)

_SUGGESTIVE_PATTERN = re.compile(
    r"\b(?:would\s+you|perhaps|should\s+I|could\s+you|do\s+you\s+want|shall\s+we|"
    r"may\s+I|how\s+about|why\s+not|what\s+if)\b",
    re.IGNORECASE,
)

_HEADING_PATTERN = re.compile(r"^\s*(?:#{1,6}\s|Step\s+\d+[:.]\s*|Procedure[:.]\s*)")
_URL_PATTERN = re.compile(r"https?://\S+")

MIN_LAB_VERB_MATCHES = 2
MIN_PROCEDURAL_STEPS = 4


@dataclass(frozen=True, slots=True)
class TextStep:
    """A contiguous step span ``[start, end)`` in the analyzed text."""

    index: int
    start: int
    end: int

    def contains(self, offset: int) -> bool:
        return self.start <= offset < self.end


class StepRole(StrEnum):
    """Role a step plays within the analyzed text."""

    PROCEDURE = auto()
    NARRATIVE = auto()
    QUESTION = auto()
    REFERENCE = auto()
    HEADER = auto()


@dataclass(frozen=True, slots=True)
class ProceduralContext:
    """Outcome of procedural-context detection."""

    is_procedural: bool
    step_count: int
    has_lab_action_verbs: bool
    references_start: int | None = None


def segment_steps(text: str | None) -> list[TextStep]:
    """Split text into steps covering every non-boundary character."""
    if not text:
        return []

    steps: list[TextStep] = []
    step_start = 0
    for match in _BOUNDARY_PATTERN.finditer(text):
        if match.start() > step_start:
            steps.append(TextStep(len(steps), step_start, match.start()))
        step_start = max(step_start, match.end())

    if step_start < len(text):
        steps.append(TextStep(len(steps), step_start, len(text)))
    return steps


def step_index_at(steps: list[TextStep], offset: int) -> int | None:
    """Index of the step containing ``offset``, or None inside a boundary."""
    for step in steps:
        if step.contains(offset):
            return step.index
    return None


def detect_procedural_context(
    text: str | None, steps: list[TextStep] | None = None
) -> ProceduralContext:
    """
    Decide whether text reads as an executable procedure.

    Narrative hedges ("previously reported", "literature") at least as
    frequent as lab verbs raise the bar to the step-count rule alone.
    """
    if not text:
        return ProceduralContext(False, 0, False, None)
    if steps is None:
        steps = segment_steps(text)

    step_count = len(steps)
    verb_count = len(LAB_ACTION_VERB_PATTERN.findall(text))
    has_verbs = verb_count >= MIN_LAB_VERB_MATCHES
    has_quantities = _NUMERIC_QUANTITY_PATTERN.search(text) is not None
    hedge_count = len(_NARRATIVE_HEDGE_PATTERN.findall(text))

    references_match = _REFERENCES_SECTION_PATTERN.search(text)
    references_start = references_match.start() if references_match else None

    if hedge_count > 0 and hedge_count >= verb_count:
        is_procedural = step_count >= MIN_PROCEDURAL_STEPS
    else:
        is_procedural = (
            step_count >= MIN_PROCEDURAL_STEPS
            or (has_verbs and has_quantities)
            or verb_count >= 4
        )

    return ProceduralContext(is_procedural, step_count, has_verbs, references_start)


def _classify_step(step_text: str, step_start: int, references_start: int | None) -> StepRole:
    trimmed = step_text.strip()
    if len(trimmed) < 80 and _HEADING_PATTERN.match(trimmed):
        return StepRole.HEADER

    has_verbs = _STEP_ACTION_VERB_PATTERN.search(step_text) is not None
    has_measured = _MEASURED_QUANTITY_PATTERN.search(step_text) is not None
    has_question = "?" in _URL_PATTERN.sub("", step_text)
    has_suggestive = _SUGGESTIVE_PATTERN.search(step_text) is not None

    # Trailing prompts ("Would you like ...?") win even inside a reference list
    if has_question and has_suggestive and not has_verbs:
        return StepRole.QUESTION
    if references_start is not None and step_start >= references_start:
        return StepRole.REFERENCE
    if has_question and not has_verbs and not has_measured:
        return StepRole.QUESTION
    if has_verbs or has_measured:
        return StepRole.PROCEDURE
    return StepRole.NARRATIVE


def classify_step_roles(
    text: str, steps: list[TextStep], references_start: int | None = None
) -> dict[int, StepRole]:
    """Map each step index to its role."""
    return {
        step.index: _classify_step(text[step.start : step.end], step.start, references_start)
        for step in steps
    }
