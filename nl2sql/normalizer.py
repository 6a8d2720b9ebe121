from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping


class ModelOutputError(ValueError):
    def __init__(self, message: str, raw: str):
        super().__init__(message)
        self.raw = raw


def strip_code_fences(text: str) -> str:
    """Remove literal ```json / ``` markers anywhere in ``text`` and trim."""
    return text.replace("```json", "").replace("```", "").strip()


_DECODER = json.JSONDecoder()


def parse_model_json(raw: str) -> Any:
    """Decode the first JSON value in ``raw``; trailing prose is ignored."""
    cleaned = strip_code_fences(raw)
    try:
        value, _ = _DECODER.raw_decode(cleaned)
    except (ValueError, RecursionError) as exc:
        raise ModelOutputError(str(exc), cleaned) from exc
    return value


def _as_text(value: Any, default: str) -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    # Objects and arrays have no text form.
    return ""


class ReplyDocument:
    """Read-only view over a parsed model reply.

    Accessors never raise: an absent key, a null or a non-object document
    yields the default.
    """

    def __init__(self, data: Any):
        self._data = data

    @property
    def is_object(self) -> bool:
        return isinstance(self._data, Mapping)

    def has(self, key: str) -> bool:
        return self.is_object and key in self._data

    def get(self, key: str) -> Any:
        if not self.is_object:
            return None
        return self._data.get(key)

    def text(self, key: str, default: str = "") -> str:
        if not self.has(key):
            return default
        return _as_text(self._data[key], default)

    def text_list(self, key: str) -> List[str]:
        value = self.get(key)
        if isinstance(value, Mapping):
            value = list(value.values())
        if not isinstance(value, list):
            return []
        # A null element reads as the text "null", not as a gap.
        return [_as_text(item, "null") for item in value]

    def without(self, key: str) -> Dict[str, Any]:
        if not self.is_object:
            raise TypeError("reply is not a JSON object")
        return {k: v for k, v in self._data.items() if k != key}

    def missing(self, *keys: str) -> List[str]:
        return [key for key in keys if self.get(key) is None]


def dump_compact(document: Mapping[str, Any]) -> str:
    return json.dumps(document, separators=(",", ":"), ensure_ascii=False)


__all__ = [
    "ModelOutputError",
    "ReplyDocument",
    "dump_compact",
    "parse_model_json",
    "strip_code_fences",
]
