"""Best-effort recovery of JSON objects from free-text model output.

Models asked for "single-line JSON" still wrap it in prose, fences or raw
control characters. parse_model_json makes two explicit attempts:

  1. the whole reply, as-is
  2. the first {...} span, with control characters stripped

and returns Parsed(data) or Malformed(raw). It never raises.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Union

_OBJECT_SPAN = re.compile(r"\{.*\}", re.DOTALL)
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")


@dataclass(frozen=True)
class Parsed:
    data: dict[str, Any]


@dataclass(frozen=True)
class Malformed:
    raw: str


ParseResult = Union[Parsed, Malformed]


def _loads_object(text: str) -> dict[str, Any] | None:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def parse_model_json(text: str) -> ParseResult:
    data = _loads_object(text)
    if data is not None:
        return Parsed(data)

    match = _OBJECT_SPAN.search(text)
    if match:
        data = _loads_object(_CONTROL_CHARS.sub("", match.group(0)))
        if data is not None:
            return Parsed(data)

    return Malformed(text)
