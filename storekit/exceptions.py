from enum import IntEnum
from typing import Optional, Union

UNKNOWN_ERROR = "unknown"


class APIError(IntEnum):
    """Documented App Store Server API error codes seen on transaction lookups."""

    GENERAL_BAD_REQUEST = 4000000
    INVALID_TRANSACTION_ID = 4000006
    INVALID_ORIGINAL_TRANSACTION_ID = 4000008
    ACCOUNT_NOT_FOUND = 4040001
    ACCOUNT_NOT_FOUND_RETRYABLE = 4040002
    APP_NOT_FOUND = 4040003
    APP_NOT_FOUND_RETRYABLE = 4040004
    TRANSACTION_ID_NOT_FOUND = 4040010
    RATE_LIMIT_EXCEEDED = 4290000
    GENERAL_INTERNAL = 5000000
    GENERAL_INTERNAL_RETRYABLE = 5000001


class StoreKitError(Exception):
    """Base class for every error raised by this package."""


class InvalidArgument(StoreKitError, ValueError):
    """A caller-supplied value was rejected before any network activity."""


class SigningError(StoreKitError):
    """The signing key could not be loaded or the token could not be signed."""


class NetworkError(StoreKitError):
    """The request never produced an HTTP response."""


class MalformedResponse(StoreKitError):
    """A success response whose body does not match the expected shape."""

    def __init__(self, detail: str, status_code: Optional[int] = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


class APIException(StoreKitError):
    """
    The App Store Server API answered with a non-success status.

    ``api_error`` is the raw ``errorCode`` from the response body, or
    ``UNKNOWN_ERROR`` when the body carried none.
    """

    def __init__(self, http_status_code: int, api_error: Union[int, str], error_message: str) -> None:
        super().__init__(f"App Store API error: status={http_status_code} errorCode={api_error} errorMessage={error_message}")
        self.http_status_code = http_status_code
        self.api_error = api_error
        self.error_message = error_message

    @property
    def known_error(self) -> Optional[APIError]:
        if isinstance(self.api_error, bool) or not isinstance(self.api_error, int):
            return None
        try:
            return APIError(self.api_error)
        except ValueError:
            return None
