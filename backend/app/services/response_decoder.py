"""Best-effort decoding of free-text LLM replies.

Models do not reliably honour "return only JSON" or "no code fences", so
replies are decoded in stages:

1. strict ``json.loads`` of the whole reply
2. the first balanced top-level ``{...}`` span (after stripping fences)
3. give up and return ``Unparseable`` instead of raising

Callers decide what a failed decode means for them.
"""

import json
import re
from dataclasses import dataclass
from typing import Any

_LEADING_FENCE_RE = re.compile(r"^\s*```[a-zA-Z]*[ \t]*\n?")
_TRAILING_FENCE_RE = re.compile(r"\s*```\s*$")


@dataclass(frozen=True)
class Decoded:
    """Successfully decoded JSON value."""
    value: Any


@dataclass(frozen=True)
class Unparseable:
    """Reply contained no decodable JSON."""
    reason: str


DecodeResult = Decoded | Unparseable


def strip_code_fence(text: str) -> str:
    """Remove a wrapping ```lang ... ``` fence and surrounding whitespace."""
    content = _LEADING_FENCE_RE.sub("", text, count=1)
    content = _TRAILING_FENCE_RE.sub("", content, count=1)
    return content.strip()


def find_balanced_object(text: str) -> str | None:
    """Return the first top-level ``{...}`` span, ignoring braces in strings."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for pos in range(start, len(text)):
            char = text[pos]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start:pos + 1]
        # Unbalanced from this brace; try the next one
        start = text.find("{", start + 1)
    return None


def decode_json_reply(text: str | None) -> DecodeResult:
    """Decode a JSON value from an LLM reply without raising."""
    if not text or not text.strip():
        return Unparseable("empty response")

    try:
        return Decoded(json.loads(text))
    except json.JSONDecodeError:
        pass

    span = find_balanced_object(strip_code_fence(text))
    if span is None:
        return Unparseable("no JSON object found")

    try:
        return Decoded(json.loads(span))
    except json.JSONDecodeError as e:
        return Unparseable(f"invalid JSON: {e.msg}")
