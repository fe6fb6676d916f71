"""Turns raw model text into display text or JSON payloads."""

import json
import re
from typing import Any

from sagecli.domain.errors import TransportError, INVALID_RESPONSE

_FENCE_PATTERN = re.compile(r"```(?:json)?")

def clean_text(text: str) -> str:
    """Strips markdown code fences and surrounding whitespace."""
    return _FENCE_PATTERN.sub("", text or "").strip()

def parse_json_payload(text: str) -> Any:
    """Parses a JSON reply, raising a non-retryable TransportError if it is malformed."""
    cleaned = clean_text(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise TransportError(f"Model returned malformed JSON: {e}", failure_class=INVALID_RESPONSE) from e
