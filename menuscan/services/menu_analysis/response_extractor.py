import json
import re
from typing import Any, Union

from ...errors import MalformedOutputError

_FENCE_RE = re.compile(r"```[a-zA-Z]*")
_OPENERS = {"array": ("[", "]", list), "object": ("{", "}", dict)}


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def _is_payload(value: Any, expected: str) -> bool:
    """A dish array holds at least one mapping; an advanced result carries "dishes"."""
    if expected == "array":
        return isinstance(value, list) and any(isinstance(item, dict) for item in value)
    return isinstance(value, dict) and "dishes" in value


def extract_json(raw: Any, expected: str = "array") -> Union[list, dict]:
    """
    Isolate the JSON array/object payload embedded in free model text.

    Every opening bracket of the expected kind is tried left to right; from
    each one a complete value is bracket-matched (string aware) by the JSON
    decoder, so leading prose and trailing commentary are ignored. Prose
    fragments such as "[1]" or "[]" also decode, so the first candidate that
    looks like a dish payload wins. Without one, the greedy region from the
    first opener to the last closer is tried, then the first candidate.

    Args:
        raw: RawModelResponse text
        expected: "array" or "object"

    Returns:
        The decoded list or dict

    Raises:
        MalformedOutputError: no bracketed region decodes to the expected shape
    """
    if expected not in _OPENERS:
        raise ValueError(f"Unsupported expected shape: {expected}")
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", "ignore")
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedOutputError("No JSON found in AI response")

    opener, closer, shape = _OPENERS[expected]
    text = strip_code_fences(raw)
    decoder = json.JSONDecoder()

    first = text.find(opener)
    if first < 0:
        raise MalformedOutputError(f"No JSON {expected} found in AI response")

    fallback = None
    start = first
    while start >= 0:
        try:
            value, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            value = None
        if _is_payload(value, expected):
            return value
        if fallback is None and isinstance(value, shape):
            fallback = value
        start = text.find(opener, start + 1)

    try:
        greedy = json.loads(text[first:text.rfind(closer) + 1])
    except json.JSONDecodeError:
        greedy = None
    if isinstance(greedy, shape):
        return greedy
    if fallback is not None:
        return fallback

    raise MalformedOutputError(f"Failed to parse JSON {expected} from AI response")
