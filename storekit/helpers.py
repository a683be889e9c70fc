import json
from typing import Any, Optional, Union

import httpx
from pydantic import ValidationError

from storekit.exceptions import UNKNOWN_ERROR, APIException, InvalidArgument
from storekit.schemas.api_schemas import ErrorPayload

_FORBIDDEN_ID_CHARS = frozenset("/?#%")
_DOT_SEGMENTS = frozenset({".", ".."})


def validate_transaction_id(transaction_id: Any) -> str:
    if not isinstance(transaction_id, str) or not transaction_id:
        raise InvalidArgument("transaction id must be a non-empty string")
    if transaction_id in _DOT_SEGMENTS:
        raise InvalidArgument("transaction id must not be a relative path segment")
    if any(ch.isspace() or ch in _FORBIDDEN_ID_CHARS for ch in transaction_id):
        raise InvalidArgument("transaction id contains characters that are not allowed in a path segment")
    return transaction_id


def read_json(response: httpx.Response) -> Optional[Any]:
    """
    Decode a response body as JSON, returning None when it is empty or not JSON.
    """
    if not response.content:
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


def _error_field(body: dict, name: str) -> Optional[Any]:
    if name not in body:
        return None
    try:
        payload = ErrorPayload.model_validate({name: body[name]})
    except ValidationError:
        return None
    return getattr(payload, name)


def api_exception_from_response(response: httpx.Response) -> APIException:
    """
    Build the APIException for a non-success response.

    The HTTP status always survives. Each error field is read on its own;
    one the body does not provide in a usable form falls back to
    ``UNKNOWN_ERROR``.
    """
    api_error: Union[int, str] = UNKNOWN_ERROR
    error_message = UNKNOWN_ERROR
    body = read_json(response)
    if isinstance(body, dict):
        error_code = _error_field(body, "errorCode")
        if error_code is not None:
            api_error = error_code
        message = _error_field(body, "errorMessage")
        if message is not None:
            error_message = message
    return APIException(
        http_status_code=response.status_code,
        api_error=api_error,
        error_message=error_message,
    )
