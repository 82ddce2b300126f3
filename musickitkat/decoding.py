"""
Response body decode pipeline.

Raw bodies are buffered before decoding and passed through an ordered
series of stages. Each stage either returns or raises a DecodeError
naming the stage that rejected the body, so callers and logs can tell
an empty body from HTML from a document of the wrong shape.

Stages, in order:
    1. check_not_empty       -> DecodeFailure.EMPTY
    2. check_not_whitespace  -> DecodeFailure.WHITESPACE
    3. check_json_like       -> DecodeFailure.NON_JSON
    4. parse_json            -> DecodeFailure.SCHEMA_MISMATCH (syntax)
    5. validate_shape        -> DecodeFailure.SCHEMA_MISMATCH (model)
"""

import json
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .enums import DecodeFailure
from .exceptions import DecodeError


M = TypeVar("M", bound=BaseModel)

PREVIEW_LENGTH = 100
CONTEXT_RADIUS = 20


def preview(text: str, limit: int = PREVIEW_LENGTH) -> str:
    """Truncate text for inclusion in messages."""
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def _to_text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


def check_not_empty(raw: bytes) -> None:
    if len(raw) == 0:
        raise DecodeError(DecodeFailure.EMPTY, "empty response body")


def check_not_whitespace(raw: bytes) -> None:
    if len(raw.strip()) == 0:
        raise DecodeError(
            DecodeFailure.WHITESPACE, "whitespace-only response body"
        )


def check_json_like(raw: bytes) -> None:
    """Reject bodies that do not open with an object or array."""
    trimmed = raw.strip()
    if trimmed[:1] not in (b"{", b"["):
        sample = preview(_to_text(raw))
        raise DecodeError(
            DecodeFailure.NON_JSON,
            f"non-JSON response: {sample}",
            preview=sample,
        )


def parse_json(raw: bytes) -> Any:
    """
    Parse the body as JSON.

    Raises:
        DecodeError: With the byte offset of the syntax error and the text
            surrounding it.
    """
    text = _to_text(raw)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        start = max(e.pos - CONTEXT_RADIUS, 0)
        end = min(e.pos + CONTEXT_RADIUS, len(text))
        context = text[start:end]
        offset = len(text[:e.pos].encode("utf-8"))
        raise DecodeError(
            DecodeFailure.SCHEMA_MISMATCH,
            f"JSON syntax error at offset {offset}: {e.msg} (context: ...{context}...)",
            offset=offset,
            context=context,
        ) from e


def validate_shape(data: Any, model: Type[M]) -> M:
    """Validate parsed JSON against a pydantic model."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise DecodeError(
            DecodeFailure.SCHEMA_MISMATCH,
            f"response does not match {model.__name__}: "
            f"{e.error_count()} validation error(s)",
        ) from e


def decode_body(raw: bytes, model: Optional[Type[M]] = None) -> Any:
    """
    Run a raw body through every decode stage.

    Args:
        raw: The buffered response body.
        model: Optional pydantic model the document must match.

    Returns:
        The model instance when a model is given, otherwise the parsed JSON.

    Raises:
        DecodeError: From the first stage that rejects the body.
    """
    check_not_empty(raw)
    check_not_whitespace(raw)
    check_json_like(raw)
    data = parse_json(raw)
    if model is None:
        return data
    return validate_shape(data, model)
