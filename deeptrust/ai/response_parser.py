"""
response_parser.py: Pull the JSON object out of a model reply.

Models are asked for bare JSON but frequently wrap it in a markdown code
block or add a sentence before it. Order of attempts:

  1. a ```json fenced block
  2. any ``` fenced block
  3. the whole reply
  4. the outermost {...} span in the reply

If none of these parse to a JSON object the request fails closed with
ResponseParseError; no half-built result is ever returned.
"""

import json
import logging
import re
from typing import Any

from deeptrust.core.errors import ResponseParseError

logger = logging.getLogger(__name__)

_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)
_ANY_FENCE = re.compile(r"```\s*([\s\S]*?)\s*```")
_OBJECT_SPAN = re.compile(r"\{[\s\S]*\}")


def _loads_object(text: str) -> dict[str, Any] | None:
    try:
        value = json.loads(text.strip())
    except (json.JSONDecodeError, ValueError):
        return None
    return value if isinstance(value, dict) else None


def extract_json(content: str) -> dict[str, Any]:
    """Extract and parse the JSON object embedded in `content`."""
    match = _JSON_FENCE.search(content) or _ANY_FENCE.search(content)
    candidate = match.group(1) if match else content

    data = _loads_object(candidate)
    if data is None:
        span = _OBJECT_SPAN.search(content)
        if span:
            data = _loads_object(span.group())

    if data is None:
        logger.error("Failed to parse AI response: %s", content[:500])
        raise ResponseParseError()
    return data
