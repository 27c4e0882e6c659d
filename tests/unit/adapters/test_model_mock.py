"""Unit tests for the mock model connector."""
from __future__ import annotations

import asyncio

import pytest

from chemverify.adapters.outbound.model_mock import DEFAULT_OUTPUT, MockModelConnector
from chemverify.ports.model_connector import GenerationCancelledError


class TestMockModelConnector:
    """Test MockModelConnector."""

    @pytest.mark.asyncio
    async def test_fixed_output(self):
        connector = MockModelConnector()

        assert await connector.generate("anything") == DEFAULT_OUTPUT
        assert connector.prompts == ["anything"]

    @pytest.mark.asyncio
    async def test_custom_output(self):
        assert await MockModelConnector("Yield 82%.").generate("p") == "Yield 82%."

    @pytest.mark.asyncio
    async def test_cancelled(self):
        cancel_event = asyncio.Event()
        cancel_event.set()

        with pytest.raises(GenerationCancelledError):
            await MockModelConnector().generate("p", cancel_event)

    @pytest.mark.asyncio
    async def test_health_check(self):
        assert await MockModelConnector().health_check() is True
