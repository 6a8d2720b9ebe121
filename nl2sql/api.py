from __future__ import annotations

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .llm_client import GroqClient
from .logging_utils import REQUEST_ID_HEADER, bind_request_context, configure_logging, get_logger
from .models import (
    SchemaGenerationRequest,
    SchemaGenerationResponse,
    TranslateRequest,
    TranslateResponse,
)
from .observability import init_metrics_server
from .schema_generator import SchemaGenerator
from .schema_service import SchemaService
from .translator import Translator

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    schema_service: SchemaService | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.app.log_level, settings.app.json_logs)
    init_metrics_server(settings.observability)

    app = FastAPI(title="nl2sql", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = bind_request_context(request.url.path, request.headers.get(REQUEST_ID_HEADER))
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    api_key = settings.llm_api_key()
    if not api_key:
        logger.warning("llm_api_key_missing", env=settings.llm.api_key_env)
    llm_client = GroqClient(settings.llm, api_key, transport=transport)
    schema_service = schema_service or SchemaService(settings.schema_introspection)

    schema_generator = SchemaGenerator(settings.llm, llm_client)
    translator = Translator(settings.llm, settings.schema_introspection, llm_client, schema_service)

    async def get_schema_generator() -> SchemaGenerator:
        return schema_generator

    async def get_translator() -> Translator:
        return translator

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.post("/api/business-model/schema", response_model=SchemaGenerationResponse)
    async def generate_schema(
        request: SchemaGenerationRequest,
        generator: SchemaGenerator = Depends(get_schema_generator),
    ) -> SchemaGenerationResponse:
        return await generator.generate(request)

    @app.post("/api/translate", response_model=TranslateResponse)
    async def translate(
        request: TranslateRequest,
        translator: Translator = Depends(get_translator),
    ) -> TranslateResponse:
        return await translator.translate(request)

    logger.info("app_created", environment=settings.environment, model=settings.llm.model)
    return app


__all__ = ["create_app"]
