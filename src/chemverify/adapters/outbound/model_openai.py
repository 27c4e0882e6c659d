"""
OpenAI-Compatible Model Connector
=================================

Connector for OpenAI-compatible chat completion APIs (OpenAI, vLLM,
Ollama and similar servers).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx
from openai import APIConnectionError, APIStatusError, AsyncOpenAI

from chemverify.ports.model_connector import (
    GenerationCancelledError,
    ModelConnector,
    ModelConnectorError,
)

if TYPE_CHECKING:
    import asyncio

    from chemverify.infrastructure.config import ModelSettings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a careful synthetic chemist. Answer with precise procedures, "
    "state every temperature, time, amount and solvent explicitly, and cite "
    "sources by DOI."
)


class OpenAIModelConnector(ModelConnector):
    """
    Connector wrapping the openai async client.

    Connection failures and API status errors surface as
    ``ModelConnectorError`` so the orchestrator can fail the run.
    """

    def __init__(self, settings: ModelSettings) -> None:
        self._settings = settings

        timeout_config = httpx.Timeout(
            connect=10.0,
            read=settings.timeout_seconds,
            write=30.0,
            pool=5.0,
        )
        http_client = httpx.AsyncClient(
            transport=httpx.AsyncHTTPTransport(retries=2),
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=5),
            timeout=timeout_config,
        )

        self._client = AsyncOpenAI(
            base_url=settings.base_url,
            api_key=settings.api_key.get_secret_value(),
            timeout=settings.timeout_seconds,
            max_retries=settings.max_retries,
            http_client=http_client,
        )
        self._model = settings.model

    @property
    def model_name(self) -> str:
        return self._model

    async def generate(self, prompt: str, cancel_event: asyncio.Event | None = None) -> str:
        if cancel_event is not None and cancel_event.is_set():
            raise GenerationCancelledError("Generation cancelled before request")

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=self._settings.temperature,
                max_tokens=self._settings.max_tokens,
            )
        except APIConnectionError as e:
            logger.warning(f"Model backend not reachable: {e}")
            raise ModelConnectorError(f"Failed to connect to model backend: {e}") from e
        except APIStatusError as e:
            logger.error(f"Model API error: {e.status_code} - {e.message}")
            raise ModelConnectorError(f"Model API error: {e.message}") from e

        if not response.choices:
            raise ModelConnectorError("Model returned no choices")
        return response.choices[0].message.content or ""

    async def health_check(self) -> bool:
        try:
            await self._client.models.list()
            return True
        except (APIConnectionError, APIStatusError) as e:
            logger.warning(f"Model health check failed: {e}")
            return False

    async def close(self) -> None:
        await self._client.close()
