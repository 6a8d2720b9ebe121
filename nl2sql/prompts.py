"""Prompt templates sent to the chat-completion model.

Caller-supplied values are substituted verbatim. Nothing is escaped, so a
model name or query text can carry instructions of its own into the prompt.
"""

from __future__ import annotations

from .models import Dialect

SCHEMA_PROMPT = """\
You are an expert database architect.

Generate a COMPLETE database schema for the following business model:

{model_name}

OUTPUT MUST BE STRICT JSON WITH FIELDS:
{{
  "entities": [...],
  "relationships": [...],
  "description": "...",
  "sql_script": "..."
}}

RULES:
Entities must include:
 - name
 - attributes → name, data_type, PK, FK, unique, AI, not_null, default

Relationships must include:
 - from_entity
 - to_entity
 - type
 - FK details

SQL must:
 - be valid MySQL
 - no comments or markdown
 - include PK, FK, AUTO_INCREMENT
 - be ordered correctly

Output ONLY valid JSON.
"""

TRANSLATE_PROMPT = """\
You are an expert at generating correct {query_type} SQL queries for {dialect}.
Below is the **actual schema** of the target database.

=== SCHEMA START ===
{schema_summary}
=== SCHEMA END ===

Return STRICT JSON ONLY:
{{
  "sql": "...",
  "explanation": "..."
}}

User intent: {text}
"""

OPTIMIZE_PROMPT = """\
You are a SQL optimization engine.
Return a STRICT JSON object with ALL of the following fields ALWAYS present:
  "optimized_sql": string,
  "suggestions": array of strings,
  "indexes": array of strings,
  "complexity": string,
  "cost": string,
  "explanation": string

SQL Query:
{text}
"""


def render_schema_prompt(model_name: str) -> str:
    return SCHEMA_PROMPT.format(model_name=model_name)


def render_translate_prompt(query_type: str, dialect: Dialect, schema_summary: str, text: str) -> str:
    return TRANSLATE_PROMPT.format(
        query_type=query_type,
        dialect=dialect.label,
        schema_summary=schema_summary,
        text=text,
    )


def render_optimize_prompt(text: str) -> str:
    return OPTIMIZE_PROMPT.format(text=text)


__all__ = [
    "OPTIMIZE_PROMPT",
    "SCHEMA_PROMPT",
    "TRANSLATE_PROMPT",
    "render_optimize_prompt",
    "render_schema_prompt",
    "render_translate_prompt",
]
