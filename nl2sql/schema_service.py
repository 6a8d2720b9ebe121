from __future__ import annotations

import asyncio
from collections import OrderedDict
from typing import Dict, Iterable, List, Sequence

import aiomysql
import asyncpg

from .config import SchemaIntrospectionConfig
from .logging_utils import get_logger
from .models import ConnectionParams, Dialect

logger = get_logger(__name__)

DEFAULT_PORTS = {Dialect.MYSQL: 3306, Dialect.POSTGRES: 5432}

NO_SCHEMA_NOTE = "(no schema available: no database connection details were given)"

_MYSQL_COLUMNS_SQL = """
SELECT
    c.table_name,
    c.column_name,
    c.column_type,
    c.is_nullable,
    c.column_key
FROM information_schema.columns c
WHERE c.table_schema = %s
ORDER BY c.table_name, c.ordinal_position
"""

_POSTGRES_COLUMNS_SQL = """
SELECT
    c.table_schema || '.' || c.table_name AS table_name,
    c.column_name,
    c.data_type,
    c.is_nullable,
    CASE
        WHEN tc.constraint_type = 'PRIMARY KEY' THEN 'PRI'
        WHEN tc.constraint_type = 'UNIQUE' THEN 'UNI'
        ELSE ''
    END AS column_key
FROM information_schema.columns c
LEFT JOIN information_schema.key_column_usage kcu
    ON kcu.table_schema = c.table_schema
    AND kcu.table_name = c.table_name
    AND kcu.column_name = c.column_name
LEFT JOIN information_schema.table_constraints tc
    ON tc.constraint_name = kcu.constraint_name
    AND tc.table_schema = kcu.table_schema
    AND tc.constraint_type IN ('PRIMARY KEY', 'UNIQUE')
WHERE c.table_catalog = $1
  AND c.table_schema NOT IN ('pg_catalog', 'information_schema')
ORDER BY c.table_schema, c.table_name, c.ordinal_position
"""


class SchemaService:
    """Reads a bounded, prompt-friendly digest of a live database schema.

    Lookup failures never propagate: the summary degrades to a note so the
    translation request can still go ahead without grounding.
    """

    def __init__(self, cfg: SchemaIntrospectionConfig):
        self._cfg = cfg

    async def fetch_schema_summary(
        self,
        dialect: Dialect,
        params: ConnectionParams,
        max_tables: int | None = None,
        max_columns: int | None = None,
    ) -> str:
        max_tables = max_tables or self._cfg.max_tables
        max_columns = max_columns or self._cfg.max_columns
        if not params.host or not params.database:
            return NO_SCHEMA_NOTE
        try:
            rows = await self._fetch_columns(dialect, params)
        except (OSError, ValueError, asyncio.TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError, aiomysql.Error) as exc:
            logger.warning(
                "schema_lookup_failed",
                dialect=dialect.value,
                host=params.host,
                database=params.database,
                error=str(exc),
            )
            return f"(schema unavailable: {exc})"
        if not rows:
            return f"No tables found in database '{params.database}'."
        summary = format_schema_summary(rows, max_tables, max_columns)
        logger.info("schema_lookup_done", dialect=dialect.value, database=params.database, columns=len(rows))
        return summary

    async def _fetch_columns(self, dialect: Dialect, params: ConnectionParams) -> List[Sequence]:
        port = resolve_port(dialect, params.port)
        if dialect is Dialect.POSTGRES:
            return await self._fetch_postgres(params, port)
        return await self._fetch_mysql(params, port)

    async def _fetch_mysql(self, params: ConnectionParams, port: int) -> List[Sequence]:
        conn = await aiomysql.connect(
            host=params.host,
            port=port,
            user=params.username or "",
            password=params.password or "",
            db=params.database,
            connect_timeout=self._cfg.connect_timeout_s,
        )
        try:
            async with conn.cursor() as cur:
                await cur.execute(_MYSQL_COLUMNS_SQL, (params.database,))
                return list(await cur.fetchall())
        finally:
            conn.close()

    async def _fetch_postgres(self, params: ConnectionParams, port: int) -> List[Sequence]:
        conn = await asyncpg.connect(
            host=params.host,
            port=port,
            user=params.username,
            password=params.password,
            database=params.database,
            timeout=self._cfg.connect_timeout_s,
        )
        try:
            records = await conn.fetch(_POSTGRES_COLUMNS_SQL, params.database)
        finally:
            await conn.close()
        return [tuple(record) for record in records]


def resolve_port(dialect: Dialect, port: str | None) -> int:
    if port is None or not str(port).strip():
        return DEFAULT_PORTS[dialect]
    try:
        return int(str(port).strip())
    except ValueError as exc:
        raise ValueError(f"Invalid port {port!r}") from exc


def format_schema_summary(rows: Iterable[Sequence], max_tables: int, max_columns: int) -> str:
    """Render (table, column, type, is_nullable, column_key) rows as text.

    Tables keep their first-seen order. Anything past ``max_tables`` tables or
    ``max_columns`` columns of a table is dropped.
    """
    tables: Dict[str, Dict[str, str]] = OrderedDict()
    for table, column, data_type, is_nullable, column_key in rows:
        if table not in tables:
            if len(tables) >= max_tables:
                continue
            tables[table] = OrderedDict()
        columns = tables[table]
        # A column under several constraints comes back once per constraint.
        if column in columns or len(columns) >= max_columns:
            continue
        line = f"  {column} {data_type}"
        if str(is_nullable).upper() == "NO":
            line += " NOT NULL"
        if column_key == "PRI":
            line += " PRIMARY KEY"
        elif column_key == "UNI":
            line += " UNIQUE"
        columns[column] = line

    parts = []
    for table, columns in tables.items():
        parts.append(f"TABLE {table}:\n" + "\n".join(columns.values()))
    return "\n\n".join(parts)


__all__ = ["NO_SCHEMA_NOTE", "SchemaService", "format_schema_summary", "resolve_port"]
