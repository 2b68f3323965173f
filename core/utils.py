"""Small request helpers shared by the JSON endpoints."""

import json


class BadRequestBody(ValueError):
    """The request body was not a JSON object."""


def read_json(request) -> dict:
    """Decode the request body as a JSON object ({} for an empty body)."""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise BadRequestBody(f"Malformed JSON body: {e}") from e
    if not isinstance(data, dict):
        raise BadRequestBody("Expected a JSON object.")
    return data


def as_int(value, default=None):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def text_field(data: dict, key: str, default: str = "") -> str:
    """A string member of a decoded body; null counts as missing."""
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise BadRequestBody(f"'{key}' must be a string.")
    return value


def bool_field(data: dict, key: str, default: bool = False) -> bool:
    """A JSON true/false member; "false" and 0 are rejected, not coerced."""
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise BadRequestBody(f"'{key}' must be true or false.")
    return value
