from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from nl2sql.config import LLMConfig, SchemaIntrospectionConfig
from nl2sql.llm_client import GroqClient
from nl2sql.models import ConnectionParams, Dialect
from nl2sql.schema_service import SchemaService


def chat_reply(content: Any) -> Dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def _handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_handler)

    def last_payload(self) -> Dict[str, Any]:
        return json.loads(self.requests[-1].content)


def reply_with(content: Any, status_code: int = 200) -> RecordingTransport:
    return RecordingTransport(lambda request: httpx.Response(status_code, json=chat_reply(content)))


class StubSchemaService(SchemaService):
    def __init__(self, summary: str = "TABLE customers:\n  id int NOT NULL PRIMARY KEY"):
        super().__init__(SchemaIntrospectionConfig())
        self.summary = summary
        self.calls: List[tuple] = []

    async def fetch_schema_summary(
        self,
        dialect: Dialect,
        params: ConnectionParams,
        max_tables: Optional[int] = None,
        max_columns: Optional[int] = None,
    ) -> str:
        self.calls.append((dialect, params, max_tables, max_columns))
        return self.summary


@pytest.fixture
def llm_cfg() -> LLMConfig:
    return LLMConfig(api_url="https://llm.test/v1/chat/completions")


@pytest.fixture
def make_client(llm_cfg: LLMConfig) -> Callable[[httpx.AsyncBaseTransport], GroqClient]:
    def _make(transport: httpx.AsyncBaseTransport) -> GroqClient:
        return GroqClient(llm_cfg, "test-key", transport=transport)

    return _make
