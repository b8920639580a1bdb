"""
Shared helpers for MCP tool responses.
"""

from __future__ import annotations

import json
from typing import Any


class ResponseFormatter:
    """Uniform error payloads so agents can recover from bad calls."""

    @staticmethod
    def error(
        message: str,
        *,
        suggestion: str | None = None,
        example: str | None = None,
        tool_name: str | None = None,
    ) -> str:
        payload: dict[str, Any] = {"success": False, "error": message}
        if suggestion:
            payload["suggestion"] = suggestion
        if example:
            payload["example"] = example
        if tool_name:
            payload["tool"] = tool_name
        return json.dumps(payload, indent=2, ensure_ascii=False)

    @staticmethod
    def json(data: Any) -> str:
        return json.dumps(data, indent=2, ensure_ascii=False)


def parse_key_list(value: str | list[str] | None) -> list[str]:
    """Accept ``"a,b"``, ``"a b"``, a JSON array string or a list."""
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    value = value.strip()
    if value.startswith("["):
        try:
            return parse_key_list(json.loads(value))
        except json.JSONDecodeError:
            pass
    return [part for part in value.replace(",", " ").split() if part]
