"""Fast, type-safe JSON parsing with multiple backends."""

from typing import Any
import json
import sys

import msgspec
import orjson
from json_repair import repair_json


class JSONParseError(Exception):
    """JSON parsing failed."""

    def __init__(self, message: str, original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


_decoder = msgspec.json.Decoder()


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code block (```json ... ```), if any."""
    working_text = text.strip()
    if "```" not in working_text:
        return working_text

    if "```json" in working_text:
        start_marker = working_text.find("```json") + 7
    else:
        start_marker = working_text.find("```") + 3

    end_marker = working_text.find("```", start_marker)
    if end_marker == -1:
        return working_text[start_marker:].strip()
    return working_text[start_marker:end_marker].strip()


def extract_json(text: str, repair: bool = False) -> dict[str, Any]:
    """
    Extract and parse the JSON object embedded in model output.

    Code fences and prose around the outermost ``{...}`` are dropped.

    Args:
        text: Text containing a JSON object
        repair: Attempt to repair invalid JSON with json_repair

    Returns:
        Parsed JSON dictionary

    Raises:
        JSONParseError: If no object is found or it cannot be decoded
    """
    working_text = strip_code_fences(text)

    start = working_text.find("{")
    end = working_text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise JSONParseError("No JSON object found in text")

    json_str = working_text[start : end + 1]

    try:
        result = _decoder.decode(json_str.encode("utf-8"))
    except msgspec.DecodeError as e:
        if not repair:
            raise JSONParseError(f"Invalid JSON: {e}", e) from e
        try:
            result = _decoder.decode(repair_json(json_str).encode("utf-8"))
        except (msgspec.DecodeError, ValueError) as repair_error:
            raise JSONParseError(f"JSON repair failed: {repair_error}", repair_error) from repair_error

    if not isinstance(result, dict):
        raise JSONParseError(f"Expected dict, got {type(result).__name__}")
    return result


def loads(data: str | bytes) -> Any:
    """Decode a JSON document of any shape."""
    try:
        return orjson.loads(data)
    except orjson.JSONDecodeError as e:
        raise JSONParseError(f"Invalid JSON: {e}", e) from e


def dumps_bytes(obj: Any) -> bytes:
    """Compact UTF-8 encoding for storage."""
    return orjson.dumps(obj)


def safe_json_dumps(obj: Any, **kwargs: Any) -> str:
    """
    Encode object to JSON string using fastest available library.

    Args:
        obj: Object to encode
        **kwargs: Additional arguments (indent, etc.)

    Returns:
        JSON string
    """
    indent = kwargs.get("indent", 0)

    if indent == 0:
        try:
            return orjson.dumps(obj).decode("utf-8")
        except (TypeError, ValueError):
            # Fallback for edge cases (e.g., integers outside 64-bit range)
            pass

    return json.dumps(obj, indent=indent if indent > 0 else None, default=str)


def validate_json_size(data: str, max_size: int, name: str = "JSON") -> None:
    """
    Reject oversized payloads before decoding.

    Raises:
        JSONParseError: If size exceeds limit
    """
    size = sys.getsizeof(data)
    if size > max_size:
        raise JSONParseError(f"{name} size {size} bytes exceeds maximum {max_size} bytes")


def validate_json_depth(obj: Any, max_depth: int = 20, current_depth: int = 0) -> None:
    """
    Reject pathologically nested documents.

    Raises:
        JSONParseError: If depth exceeds limit
    """
    if current_depth > max_depth:
        raise JSONParseError(f"JSON nesting depth {current_depth} exceeds maximum {max_depth}")

    if isinstance(obj, dict):
        for value in obj.values():
            validate_json_depth(value, max_depth, current_depth + 1)
    elif isinstance(obj, list):
        for item in obj:
            validate_json_depth(item, max_depth, current_depth + 1)
