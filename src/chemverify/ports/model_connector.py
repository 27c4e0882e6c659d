"""
ModelConnector Port
===================

Abstract interface for the text generation backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import asyncio


class ModelConnectorError(Exception):
    """Raised when the generation backend fails."""

    pass


class GenerationCancelledError(ModelConnectorError):
    """Raised when a run is cancelled while waiting on generation."""

    pass


class ModelConnector(ABC):
    """
    Port for model inference.

    This is the only suspension point of an audit run, and the only
    place cancellation is honoured.
    """

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def generate(self, prompt: str, cancel_event: asyncio.Event | None = None) -> str:
        """
        Generate text for a prompt.

        Args:
            prompt: Prompt text.
            cancel_event: Set by the caller to abandon generation.

        Returns:
            Generated text.

        Raises:
            ModelConnectorError: If the backend fails.
            GenerationCancelledError: If ``cancel_event`` is set.
        """
        ...

    async def health_check(self) -> bool:
        """Check if the backend is reachable."""
        return True
