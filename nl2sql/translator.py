from __future__ import annotations

import time

from .config import LLMConfig, SchemaIntrospectionConfig
from .llm_client import GroqClient, LLMResponseFormatError, LLMTransportError
from .logging_utils import get_logger
from .models import Dialect, TranslateRequest, TranslateResponse
from .normalizer import ModelOutputError, ReplyDocument, parse_model_json
from .observability import REQUEST_COUNTER, elapsed_ms, record_latency
from .prompts import render_optimize_prompt, render_translate_prompt
from .schema_service import SchemaService

logger = get_logger(__name__)

ERROR_REQUEST_FAILED = "Request failed"
ERROR_INVALID_FORMAT = "Invalid response format"
ERROR_PARSE_FAILED = "Failed to parse model output"

UNKNOWN = "Unknown"


class Translator:
    """Natural language to SQL, or an optimization report for existing SQL."""

    def __init__(
        self,
        cfg: LLMConfig,
        schema_cfg: SchemaIntrospectionConfig,
        llm: GroqClient,
        schema_service: SchemaService,
    ):
        self._cfg = cfg
        self._schema_cfg = schema_cfg
        self._llm = llm
        self._schema_service = schema_service

    async def translate(self, request: TranslateRequest) -> TranslateResponse:
        start = time.perf_counter()
        dialect = request.resolved_dialect()
        with record_latency("translate"):
            response = await self._translate(request, dialect, start)
        status = "error" if response.error else "success"
        REQUEST_COUNTER.labels(endpoint="translate", status=status).inc()
        return response

    async def _translate(self, request: TranslateRequest, dialect: Dialect, start: float) -> TranslateResponse:
        text = request.resolved_text()
        prompt = await self._build_prompt(request, dialect, text)
        logger.info("translate_request", dialect=dialect.value, optimize=request.optimize)

        try:
            raw = await self._llm.complete(prompt)
        except LLMTransportError as exc:
            logger.warning("translate_failed", stage="request", error=str(exc))
            return self._failure(dialect, start, ERROR_REQUEST_FAILED, f"Groq API call failed: {exc}")
        except LLMResponseFormatError as exc:
            logger.warning("translate_failed", stage="response_format", error=str(exc))
            return self._failure(dialect, start, ERROR_INVALID_FORMAT, f"Groq response error: {exc}")

        try:
            document = ReplyDocument(parse_model_json(raw))
        except ModelOutputError as exc:
            logger.warning("translate_failed", stage="parse", error=str(exc))
            return self._failure(
                dialect,
                start,
                ERROR_PARSE_FAILED,
                f"JSON Parse Error: {exc}\nRAW: {exc.raw}",
            )

        if not request.optimize:
            return TranslateResponse(
                sql=document.text("sql"),
                dialect=dialect.value,
                model_name=self._cfg.response_model_label,
                latency_ms=elapsed_ms(start),
                explanation=document.text("explanation"),
            )

        defaulted = document.missing("optimized_sql", "suggestions", "indexes", "complexity", "cost")
        if defaulted:
            # Missing optimization data still yields a successful response.
            logger.warning("optimization_fields_defaulted", fields=defaulted)
        return TranslateResponse(
            sql=document.text("sql"),
            dialect=dialect.value,
            model_name=self._cfg.response_model_label,
            latency_ms=elapsed_ms(start),
            explanation=document.text("explanation"),
            optimized_sql=document.text("optimized_sql"),
            suggestions=document.text_list("suggestions"),
            indexes=document.text_list("indexes"),
            complexity=document.text("complexity", UNKNOWN),
            cost=document.text("cost", UNKNOWN),
        )

    async def _build_prompt(self, request: TranslateRequest, dialect: Dialect, text: str) -> str:
        if request.optimize:
            return render_optimize_prompt(text)
        schema_summary = await self._schema_service.fetch_schema_summary(
            dialect,
            request.connection(),
            self._schema_cfg.max_tables,
            self._schema_cfg.max_columns,
        )
        return render_translate_prompt(request.resolved_query_type(), dialect, schema_summary, text)

    def _failure(self, dialect: Dialect, start: float, error: str, message: str) -> TranslateResponse:
        return TranslateResponse(
            sql=message,
            dialect=dialect.value,
            model_name=self._cfg.response_model_label,
            latency_ms=elapsed_ms(start),
            error=error,
        )


__all__ = [
    "ERROR_INVALID_FORMAT",
    "ERROR_PARSE_FAILED",
    "ERROR_REQUEST_FAILED",
    "Translator",
]
