"""
Deterministic model connector for demos and tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from chemverify.ports.model_connector import GenerationCancelledError, ModelConnector

if TYPE_CHECKING:
    import asyncio

DEFAULT_OUTPUT = (
    "The reaction was carried out at 78 °C for 2 h in 0.5 M aqueous solution, "
    "achieving a yield of 82%. An alternative route at -78C was also tested with "
    "120 min reaction time. See DOI 10.1021/acs.orglett.1c02345 and DOI "
    "10.1038/s41586-020-2649-2 for related procedures."
)


class MockModelConnector(ModelConnector):
    """Returns a fixed chemistry paragraph regardless of the prompt."""

    def __init__(self, output: str = DEFAULT_OUTPUT) -> None:
        self._output = output
        self.prompts: list[str] = []

    async def generate(self, prompt: str, cancel_event: asyncio.Event | None = None) -> str:
        if cancel_event is not None and cancel_event.is_set():
            raise GenerationCancelledError("Generation cancelled")
        self.prompts.append(prompt)
        return self._output
