"""Helpers for parsing JSON embedded in LLM outputs."""

from __future__ import annotations

import json
from typing import Any


def strip_code_fences(text: str) -> str:
    s = text.strip()
    if s.startswith("```"):
        first_nl = s.find("\n")
        if first_nl != -1:
            s = s[first_nl + 1 :]
        if s.rstrip().endswith("```"):
            s = s.rstrip()[:-3]
    return s.strip()


def _find_json_object(raw: str) -> str | None:
    depth = 0
    start = None
    in_string = False
    escaped = False
    for idx, ch in enumerate(raw):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            if depth == 0:
                start = idx
            depth += 1
        elif ch == "}":
            if depth == 0:
                continue
            depth -= 1
            if depth == 0 and start is not None:
                return raw[start : idx + 1]
    return None


def parse_json_object(raw_text: str | None) -> Any:
    """
    Parse the first JSON object in ``raw_text``.

    Tries the whole (fence-stripped) text first, then the first balanced
    ``{...}`` span. Raises ``ValueError`` when nothing parses.
    """
    if not raw_text or not raw_text.strip():
        raise ValueError("empty model output")
    s = strip_code_fences(raw_text)
    try:
        return json.loads(s)
    except json.JSONDecodeError:
        pass
    snippet = _find_json_object(s)
    if snippet is None:
        raise ValueError("no JSON object found in model output")
    return json.loads(snippet)
