"""
Tests for CompositeClaimExtractor
=================================
"""

from uuid import UUID, uuid4

from chemverify.domain.entities import Claim, ClaimType, FindingKind, ValidationStatus
from chemverify.domain.services.extractors.composite import (
    CompositeClaimExtractor,
    default_extractors,
    run_extractor,
)
from chemverify.domain.services.extractors.doi import DoiExtractor
from chemverify.domain.services.extractors.numeric_unit import NumericUnitExtractor
from chemverify.ports.claim_extractor import ClaimExtractor


class BrokenExtractor(ClaimExtractor):
    def extract(self, run_id: UUID, text: str) -> list[Claim]:
        raise RuntimeError("pattern table missing")


class TestCompositeClaimExtractor:
    """Fan-out with per-extractor failure isolation."""

    def test_concatenates_in_extractor_order(self) -> None:
        composite = CompositeClaimExtractor([NumericUnitExtractor(), DoiExtractor()])
        claims = composite.extract(uuid4(), "Yield 82%. See 10.1021/acs.orglett.1c02345.")

        assert [c.claim_type for c in claims] == [
            ClaimType.NUMERIC_WITH_UNIT,
            ClaimType.CITATION_DOI,
        ]

    def test_failing_extractor_becomes_diagnostic(self) -> None:
        run_id = uuid4()
        composite = CompositeClaimExtractor(
            [BrokenExtractor(), NumericUnitExtractor(), DoiExtractor()]
        )
        result = composite.extract_all(run_id, "Yield 82%. See 10.1021/acs.orglett.1c02345.")

        assert len(result.claims) == 2
        assert len(result.diagnostics) == 1
        diagnostic = result.diagnostics[0]
        assert diagnostic.run_id == run_id
        assert diagnostic.validator_name == "BrokenExtractor"
        assert diagnostic.status == ValidationStatus.UNVERIFIED
        assert diagnostic.kind == FindingKind.EXTRACTION_FAILURE
        assert diagnostic.confidence == 0.0
        assert "pattern table missing" in diagnostic.message

    def test_extract_hides_diagnostics(self) -> None:
        composite = CompositeClaimExtractor([BrokenExtractor()])

        assert composite.extract(uuid4(), "Yield 82%.") == []

    def test_run_extractor_success(self) -> None:
        outcome = run_extractor(DoiExtractor(), uuid4(), "10.1021/abc.123")

        assert outcome.succeeded
        assert outcome.extractor_name == "DoiExtractor"
        assert len(outcome.claims) == 1

    def test_default_extractors(self) -> None:
        names = [e.name for e in default_extractors()]

        assert names == ["NumericUnitExtractor", "DoiExtractor", "ReagentRoleExtractor"]
