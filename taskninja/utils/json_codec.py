"""Envelope-shaped JSON bodies.

Responses are single-key mappings such as {"task": {...}} or {"error": ...}.
Request bodies are decoded strictly: one JSON value, no unknown keys, no type
mismatches and nothing past the configured size limit.
"""
import json
from datetime import datetime

from flask import current_app, request
from flask.json.provider import DefaultJSONProvider
from pydantic import ValidationError
from werkzeug.exceptions import BadRequest

from taskninja.models.custom_time import InvalidTimeFormat, format_time

_decoder = json.JSONDecoder()


class EnvelopeJSONProvider(DefaultJSONProvider):
    """Flask JSON provider that writes datetimes in the wire layout."""

    sort_keys = False

    @staticmethod
    def default(o):
        if isinstance(o, datetime):
            return format_time(o)
        if hasattr(o, "to_dict"):
            return o.to_dict()
        return DefaultJSONProvider.default(o)


def write_json(status, data, headers=None):
    # Raises on unserializable data; the recovery handler turns that into a 500
    response = current_app.json.response(data)
    response.status_code = status
    if headers:
        for key, value in headers.items():
            response.headers[key] = value
    return response


def _read_body(max_bytes):
    body = b""
    while len(body) <= max_bytes:
        chunk = request.stream.read(max_bytes + 1 - len(body))
        if not chunk:
            break
        body += chunk
    if len(body) > max_bytes:
        raise BadRequest(f"body must not be larger than {max_bytes} bytes")
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise BadRequest(f"body contains badly-formed JSON (at character {exc.start})") from exc


def decode_json(text):
    """Decode exactly one JSON value from text."""
    if not text.strip():
        raise BadRequest("body must not be empty")

    start = len(text) - len(text.lstrip())
    try:
        value, end = _decoder.raw_decode(text, start)
    except json.JSONDecodeError as exc:
        if exc.pos >= len(text.rstrip()):
            raise BadRequest("body contains badly-formed JSON") from exc
        raise BadRequest(f"body contains badly-formed JSON (at character {exc.pos})") from exc
    except RecursionError as exc:
        raise BadRequest("body contains badly-formed JSON") from exc

    if text[end:].strip():
        raise BadRequest("body must only contain a single JSON value")
    return value


def _shape_error(exc: ValidationError):
    err = exc.errors()[0]
    loc = err.get("loc") or ()
    kind = err.get("type", "")
    cause = (err.get("ctx") or {}).get("error")

    if kind == "extra_forbidden":
        return BadRequest(f'body contains unknown key "{loc[0]}"')
    if isinstance(cause, InvalidTimeFormat):
        return BadRequest(str(cause))
    if loc:
        return BadRequest(f'body contains incorrect JSON type for field "{loc[0]}"')
    return BadRequest("body contains incorrect JSON type")


def read_json(model):
    """Decode the request body into an instance of the pydantic model."""
    text = _read_body(current_app.config["MAX_BODY_BYTES"])
    value = decode_json(text)
    try:
        return model.model_validate(value)
    except ValidationError as exc:
        raise _shape_error(exc) from exc
