"""
Classification of Gopher API response bodies.

The result endpoint answers with one of three shapes: a JSON array of
result objects, a ``{"status": "processing"}`` object, or an error object
``{error, message, code}``. These helpers parse each shape and return None
when a body does not match, so callers can try them in priority order.
"""

import json
import math
from typing import Any, List, Optional

from .errors import GopherError, ServiceError, TransportError
from .schema import JobHandle, ResultItem

PROCESSING_STATUS = "processing"

_MISSING = object()


def decode_json(body: str) -> Any:
    """Decode a JSON body, returning _MISSING when it is not valid JSON."""
    try:
        return json.loads(body)
    except (ValueError, RecursionError):
        # RecursionError: nesting deeper than the decoder can follow
        return _MISSING


def is_success_status(status_code: int) -> bool:
    return 200 <= status_code < 300


def _field(data: dict, key: str) -> Any:
    """Look up a wire field by name, ignoring case; the last matching key wins."""
    value = None
    wanted = key.lower()
    for k, v in data.items():
        if k.lower() == wanted:
            value = v
    return value


def _optional_str(data: dict, key: str) -> str:
    value = _field(data, key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(key)
    return value


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def parse_result_items(body: str) -> Optional[List[ResultItem]]:
    """
    Parse a body as a JSON array of ``{ID, Content, Metadata, Score}`` objects.

    Field names match case-insensitively. Missing or null fields take their
    zero value. A field of the wrong type, a score that is not a finite
    float, a non-object element or a non-array body means the body is not a
    result set and None is returned. Order is preserved.
    """
    data = decode_json(body)
    if not isinstance(data, list):
        return None

    items: List[ResultItem] = []
    for entry in data:
        if not isinstance(entry, dict):
            return None
        try:
            item_id = _optional_str(entry, "ID")
            content = _optional_str(entry, "Content")
        except TypeError:
            return None
        score = _field(entry, "Score")
        if score is None:
            score = 0.0
        elif not _is_number(score):
            return None
        try:
            score = float(score)
        except OverflowError:
            return None
        if not math.isfinite(score):
            return None
        items.append(ResultItem(
            id=item_id,
            content=content,
            metadata=_field(entry, "Metadata"),
            score=score,
        ))
    return items


def is_processing(body: str) -> bool:
    """True if the body is an object whose ``status`` is "processing"."""
    data = decode_json(body)
    return isinstance(data, dict) and data.get("status") == PROCESSING_STATUS


def error_from_response(status_code: int, body: str) -> GopherError:
    """
    Build the error for a non-2xx response.

    A readable ``{error, message, code}`` body with a non-empty message is a
    ServiceError; anything else is a TransportError carrying status and body.
    """
    data = decode_json(body)
    if not isinstance(data, dict):
        return TransportError(f"HTTP {status_code}: {body}", status_code, body)

    message = _field(data, "message")
    code = _field(data, "code")
    if message is not None and not isinstance(message, str):
        return TransportError(f"HTTP {status_code}: {body}", status_code, body)
    if code is not None and not (isinstance(code, int) and not isinstance(code, bool)):
        return TransportError(f"HTTP {status_code}: {body}", status_code, body)

    if not message:
        return TransportError(
            f"API error (HTTP {status_code}): {body}", status_code, body
        )
    return ServiceError(message, code=code, status_code=status_code)


def handle_from_submission(body: str, job_kind: str) -> JobHandle:
    """
    Read the ``{uuid, error}`` body of a 2xx job-creation response.

    Raises:
        ServiceError: If the service reported an error
        TransportError: If the body is unreadable or carries no uuid
    """
    data = decode_json(body)
    if not isinstance(data, dict):
        raise TransportError(f"failed to unmarshal response: {body}", body=body)

    error = _field(data, "error")
    if error:
        raise ServiceError(str(error))

    uuid = _field(data, "uuid")
    if not isinstance(uuid, str) or not uuid.strip():
        raise TransportError(f"response carried no job uuid: {body}", body=body)
    return JobHandle(id=uuid, job_kind=job_kind)
