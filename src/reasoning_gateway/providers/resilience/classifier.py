"""Failure classification for provider attempts.

Maps whatever an attempt ended with (an exception, a transport response,
an ``httpx.Response`` or a bare status code) to exactly one FailureLabel.

Label Mapping:
    Deadline exceeded                 -> Timeout
    HTTP 429                          -> RateLimited
    HTTP 500-599                      -> ServerError
    HTTP 400-499 (except 429)         -> ClientError
    2xx without expected content      -> Malformed
    Other network failures            -> ServerError (transient)
    Anything unrecognised             -> Malformed

classify() is total: it never raises.
"""

import asyncio
import logging

import httpx

from reasoning_gateway.errors import MalformedResponse, TransportError, TransportTimeout
from reasoning_gateway.types import FailureLabel

logger = logging.getLogger(__name__)

_TIMEOUT_ERRORS = (asyncio.TimeoutError, TimeoutError, TransportTimeout, httpx.TimeoutException)
_NETWORK_ERRORS = (TransportError, httpx.TransportError, ConnectionError)


def classify_status(status_code: int) -> FailureLabel:
    """Label an HTTP status code.

    2xx means the request went through but no usable content came back,
    so it is Malformed. Codes outside 2xx/4xx/5xx count as ServerError.
    """
    if status_code == 429:
        return FailureLabel.RATE_LIMITED
    if 500 <= status_code <= 599:
        return FailureLabel.SERVER_ERROR
    if 400 <= status_code <= 499:
        return FailureLabel.CLIENT_ERROR
    if 200 <= status_code <= 299:
        return FailureLabel.MALFORMED
    return FailureLabel.SERVER_ERROR


def classify(error_or_response: object) -> FailureLabel:
    """Label the outcome of a failed attempt.

    Args:
        error_or_response: Exception, response object with ``status_code``,
            or an integer status code

    Returns:
        Exactly one FailureLabel
    """
    try:
        if isinstance(error_or_response, BaseException):
            return _classify_error(error_or_response)

        if isinstance(error_or_response, bool):
            return FailureLabel.MALFORMED
        if isinstance(error_or_response, int):
            return classify_status(error_or_response)

        status_code = getattr(error_or_response, "status_code", None)
        if isinstance(status_code, int) and not isinstance(status_code, bool):
            return classify_status(status_code)
    except Exception as e:
        logger.debug(f"Unclassifiable attempt outcome {type(error_or_response).__name__}: {e}")

    return FailureLabel.MALFORMED


def _classify_error(error: BaseException) -> FailureLabel:
    if isinstance(error, _TIMEOUT_ERRORS):
        return FailureLabel.TIMEOUT
    if isinstance(error, MalformedResponse):
        return FailureLabel.MALFORMED
    if isinstance(error, httpx.HTTPStatusError):
        return classify_status(error.response.status_code)
    if isinstance(error, _NETWORK_ERRORS):
        return FailureLabel.SERVER_ERROR

    # Errors that carry a status code (SDK exceptions, etc.)
    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int) and not isinstance(status_code, bool):
        return classify_status(status_code)

    return FailureLabel.MALFORMED
