from __future__ import annotations

import time

from .config import LLMConfig
from .llm_client import GroqClient
from .logging_utils import get_logger
from .models import SchemaGenerationRequest, SchemaGenerationResponse
from .normalizer import ModelOutputError, ReplyDocument, dump_compact, parse_model_json
from .observability import REQUEST_COUNTER, elapsed_ms, record_latency
from .prompts import render_schema_prompt

logger = get_logger(__name__)

FALLBACK_SCHEMA_JSON = '{"entities":[],"relationships":[],"description":"Error generating schema"}'


class SchemaGenerator:
    """Turns a business-model name into a schema description plus DDL."""

    def __init__(self, cfg: LLMConfig, llm: GroqClient):
        self._cfg = cfg
        self._llm = llm

    async def generate(self, request: SchemaGenerationRequest) -> SchemaGenerationResponse:
        start = time.perf_counter()
        prompt = render_schema_prompt(request.model_name)
        logger.info("schema_generation_request", model_name=request.model_name)

        with record_latency("schema"):
            try:
                raw = await self._llm.complete(prompt, temperature=self._cfg.generation_temperature)
                schema_description, sql_script = split_schema_reply(raw)
                error = None
            except Exception as exc:  # noqa: BLE001
                logger.exception("schema_generation_failed", model_name=request.model_name, error=str(exc))
                schema_description = FALLBACK_SCHEMA_JSON
                sql_script = ""
                error = str(exc) or exc.__class__.__name__

        REQUEST_COUNTER.labels(endpoint="schema", status="error" if error else "success").inc()
        return SchemaGenerationResponse(
            model_name=request.model_name,
            schema_description=schema_description,
            diagram=None,
            latency_ms=elapsed_ms(start),
            error=error,
            sql_script=sql_script,
        )


def split_schema_reply(raw: str) -> tuple[str, str]:
    """Return (schema JSON without ``sql_script``, the ``sql_script`` text)."""
    document = ReplyDocument(parse_model_json(raw))
    if not document.is_object:
        raise ModelOutputError("Model output is not a JSON object", raw)
    sql_script = document.text("sql_script", "")
    return dump_compact(document.without("sql_script")), sql_script


__all__ = ["FALLBACK_SCHEMA_JSON", "SchemaGenerator", "split_schema_reply"]
