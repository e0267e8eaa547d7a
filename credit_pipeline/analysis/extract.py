"""Pull a JSON value out of model text that may carry prose or code fences around it."""
from __future__ import annotations

import json
import re
from typing import Any

_FENCE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)


def extract_json(text: str) -> Any:
    """
    Parse text as JSON: directly, else the first fenced block, else the outermost {...} span.
    Raises ValueError if none of these parse.
    """
    raw = (text or "").strip()
    if not raw:
        raise ValueError("empty model output")
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        pass
    for match in _FENCE.finditer(raw):
        try:
            return json.loads(match.group(1))
        except json.JSONDecodeError:
            continue
    start, end = raw.find("{"), raw.rfind("}")
    if start != -1 and end > start:
        try:
            return json.loads(raw[start : end + 1])
        except json.JSONDecodeError as e:
            raise ValueError(f"no parsable JSON object in model output: {e.msg}") from e
    raise ValueError("no JSON object found in model output")
