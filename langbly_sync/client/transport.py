"""
HTTP helpers for the Langbly API

Timeout construction, response classification and error message extraction
used by TranslationClient. Each request is classified into one attempt
outcome; the retry loop in service.py only looks at that outcome.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Any, Dict, Optional

import httpx

from langbly_sync.exceptions import (
    PermanentServiceError,
    ServiceError,
    TransientServiceError,
)

RETRIABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class AttemptState(Enum):
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    FAILED_TRANSIENT = "failed_transient"
    FAILED_PERMANENT = "failed_permanent"


@dataclass
class AttemptOutcome:
    """Result of a single request attempt."""
    state: AttemptState
    payload: Optional[Dict[str, Any]] = None
    error: Optional[ServiceError] = None
    retry_after: Optional[float] = None


def get_httpx_timeout(timeout_config: Any) -> httpx.Timeout:
    """
    Convert timeout configuration to httpx.Timeout object.

    Args:
        timeout_config: Either a number (seconds for every phase, connect
            capped at 10s) or a dict with connect, write, read, pool keys

    Returns:
        httpx.Timeout object
    """
    if isinstance(timeout_config, dict):
        return httpx.Timeout(
            connect=timeout_config.get('connect', 10.0),
            write=timeout_config.get('write', 30.0),
            read=timeout_config.get('read', 30.0),
            pool=timeout_config.get('pool', 10.0),
        )
    timeout_value = float(timeout_config) if timeout_config else 30.0
    return httpx.Timeout(timeout_value, connect=min(10.0, timeout_value))


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """
    Parse a Retry-After header (delta seconds or HTTP date) into seconds.

    Returns None when the header is absent or unparseable.
    """
    if not value:
        return None
    value = value.strip()
    try:
        seconds = float(value)
    except ValueError:
        try:
            retry_at = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None
        if retry_at.tzinfo is None:
            retry_at = retry_at.replace(tzinfo=timezone.utc)
        seconds = (retry_at - datetime.now(timezone.utc)).total_seconds()
    return max(seconds, 0.0)


def extract_error_message(response: httpx.Response) -> str:
    """Server-provided error message, falling back to the reason phrase."""
    try:
        error_json = response.json()
    except ValueError:
        error_json = None

    if isinstance(error_json, dict) and "error" in error_json:
        error_detail = error_json["error"]
        if isinstance(error_detail, dict) and error_detail.get("message"):
            return str(error_detail["message"])
        if isinstance(error_detail, str) and error_detail:
            return error_detail

    return response.reason_phrase or f"HTTP {response.status_code}"


def classify_response(response: httpx.Response) -> AttemptOutcome:
    """Map an HTTP response onto an attempt outcome."""
    status_code = response.status_code

    if response.is_success:
        try:
            payload = response.json()
        except ValueError:
            return AttemptOutcome(
                AttemptState.FAILED_PERMANENT,
                error=PermanentServiceError(
                    f"Langbly API returned invalid JSON ({status_code})", status_code=status_code
                ),
            )
        return AttemptOutcome(AttemptState.SUCCEEDED, payload=payload)

    message = f"Langbly API error ({status_code}): {extract_error_message(response)}"

    if status_code in RETRIABLE_STATUS_CODES:
        retry_after = parse_retry_after(response.headers.get("retry-after"))
        return AttemptOutcome(
            AttemptState.FAILED_TRANSIENT,
            error=TransientServiceError(message, status_code=status_code, retry_after=retry_after),
            retry_after=retry_after,
        )

    return AttemptOutcome(
        AttemptState.FAILED_PERMANENT,
        error=PermanentServiceError(message, status_code=status_code),
    )


def classify_transport_error(error: httpx.TransportError) -> AttemptOutcome:
    """Timeouts and network failures are always transient."""
    if isinstance(error, httpx.TimeoutException):
        message = f"Langbly API request timeout: {error}"
    else:
        message = f"Langbly API network error: {error}"
    return AttemptOutcome(AttemptState.FAILED_TRANSIENT, error=TransientServiceError(message))
