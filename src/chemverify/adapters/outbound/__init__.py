"""
Outbound adapters implementing the connector and repository ports.
"""

from chemverify.adapters.outbound.model_mock import MockModelConnector
from chemverify.adapters.outbound.model_openai import OpenAIModelConnector
from chemverify.adapters.outbound.repository_memory import InMemoryRunRepository

__all__ = [
    "InMemoryRunRepository",
    "MockModelConnector",
    "OpenAIModelConnector",
]
