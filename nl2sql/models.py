from __future__ import annotations

import enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Dialect(str, enum.Enum):
    MYSQL = "MYSQL"
    POSTGRES = "POSTGRES"

    @property
    def label(self) -> str:
        return {"MYSQL": "MySQL", "POSTGRES": "PostgreSQL"}[self.value]


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )


class SchemaGenerationRequest(_Record):
    model_name: str


class SchemaGenerationResponse(_Record):
    model_name: str
    schema_description: str
    diagram: Optional[str] = None
    latency_ms: int
    error: Optional[str] = None
    sql_script: str = ""


class ConnectionParams(_Record):
    """Where to read a live schema summary from."""

    host: Optional[str] = None
    port: Optional[str] = None
    database: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None


class TranslateRequest(ConnectionParams):
    dialect: Optional[Dialect] = None
    text: Optional[str] = None
    query_type: Optional[str] = None
    optimize: bool = False

    def resolved_dialect(self) -> Dialect:
        return self.dialect or Dialect.MYSQL

    def resolved_text(self) -> str:
        return self.text if self.text is not None else ""

    def resolved_query_type(self) -> str:
        return self.query_type.upper() if self.query_type is not None else "SELECT"

    def connection(self) -> ConnectionParams:
        return ConnectionParams(
            host=self.host,
            port=self.port,
            database=self.database,
            username=self.username,
            password=self.password,
        )


class TranslateResponse(_Record):
    sql: str
    dialect: str
    model_name: str
    latency_ms: int
    error: Optional[str] = None
    explanation: Optional[str] = None
    optimized_sql: Optional[str] = None
    suggestions: Optional[List[str]] = None
    indexes: Optional[List[str]] = None
    complexity: Optional[str] = None
    cost: Optional[str] = None


__all__ = [
    "ConnectionParams",
    "Dialect",
    "SchemaGenerationRequest",
    "SchemaGenerationResponse",
    "TranslateRequest",
    "TranslateResponse",
]
