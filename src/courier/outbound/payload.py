"""Extract a caller-facing payload from a plugin ``ToolResult``.

Extractors run in order; the first one that produces a value wins:

1. structured ``details``
2. the first text content block, parsed as JSON (raw text if not JSON)
3. the raw ``content`` list
4. the whole result object
"""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from typing import Any, TypeAlias

from courier.types import ToolResult

_MISSING = object()

PayloadExtractor: TypeAlias = Callable[[ToolResult], Any]


def _from_details(result: ToolResult) -> Any:
    return result.details if result.details is not None else _MISSING


def _from_text_block(result: ToolResult) -> Any:
    if not isinstance(result.content, list):
        return _MISSING
    block = next(
        (
            b
            for b in result.content
            if isinstance(b, dict) and b.get("type") == "text" and isinstance(b.get("text"), str)
        ),
        None,
    )
    text = block["text"] if block else ""
    if not text:
        return _MISSING
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def _from_content(result: ToolResult) -> Any:
    return result.content if result.content is not None else _MISSING


def _from_result(result: ToolResult) -> Any:
    return result


PAYLOAD_EXTRACTORS: tuple[PayloadExtractor, ...] = (
    _from_details,
    _from_text_block,
    _from_content,
    _from_result,
)


def extract_tool_payload(
    result: ToolResult, extractors: Sequence[PayloadExtractor] = PAYLOAD_EXTRACTORS
) -> Any:
    for extractor in extractors:
        value = extractor(result)
        if value is not _MISSING:
            return value
    return result
