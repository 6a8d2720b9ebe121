from __future__ import annotations

import functools
import os
import pathlib
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field


class AppConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "info"
    json_logs: bool = False


class LLMConfig(BaseModel):
    api_url: str = "https://api.groq.com/openai/v1/chat/completions"
    model: str = "groq/compound"
    # Label reported back in translation responses.
    response_model_label: str = "llama-3.1-70b-versatile"
    generation_temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    request_timeout_s: Optional[float] = Field(default=60.0, gt=0)
    api_key_env: str = "GROQ_API_KEY"


class SchemaIntrospectionConfig(BaseModel):
    max_tables: int = Field(default=50, ge=1)
    max_columns: int = Field(default=50, ge=1)
    connect_timeout_s: int = Field(default=10, ge=1)


class ObservabilityConfig(BaseModel):
    metrics_port: int = Field(default=0, ge=0)


class CorsConfig(BaseModel):
    allow_origins: List[str] = Field(default_factory=lambda: ["http://localhost:5173"])


class Settings(BaseModel):
    environment: str = "development"
    app: AppConfig = Field(default_factory=AppConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    schema_introspection: SchemaIntrospectionConfig = Field(default_factory=SchemaIntrospectionConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
    cors: CorsConfig = Field(default_factory=CorsConfig)

    def llm_api_key(self) -> str:
        return os.environ.get(self.llm.api_key_env, "")


def _load_yaml(path: pathlib.Path) -> Dict:
    with path.open("r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


@functools.lru_cache(maxsize=1)
def load_settings(path: Optional[str] = None) -> Settings:
    cfg_path = pathlib.Path(path or "config.yaml").resolve()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found at {cfg_path}")
    raw = _load_yaml(cfg_path)
    return Settings(**raw)


def get_settings() -> Settings:
    return load_settings(os.environ.get("NL2SQL_CONFIG"))


__all__ = [
    "AppConfig",
    "CorsConfig",
    "LLMConfig",
    "ObservabilityConfig",
    "SchemaIntrospectionConfig",
    "Settings",
    "get_settings",
    "load_settings",
]
