import logging
import time
import uuid
from datetime import datetime, timezone

import requests

from src.models.dispatch import DispatchAttempt, DispatchTarget
from src.senders.logger import DispatchLogger

logger = logging.getLogger(__name__)


def timed_request(
    method: str,
    url: str,
    *,
    target: DispatchTarget,
    transaction_id: str,
    dispatch_logger: DispatchLogger | None,
    timeout: float,
    **kwargs,
) -> tuple[requests.Response | None, DispatchAttempt]:
    """Issue one outbound request and record it as a dispatch attempt.

    Never raises for transport problems: the response is None and the
    attempt carries the error instead.
    """
    start = time.monotonic()
    response = None
    status_code = None
    error = None

    try:
        response = requests.request(method, url, timeout=timeout, **kwargs)
        status_code = response.status_code
    except requests.exceptions.Timeout:
        error = "timeout"
    except requests.exceptions.ConnectionError:
        error = "connection_error"
    except requests.exceptions.RequestException as e:
        error = str(e)

    elapsed_ms = (time.monotonic() - start) * 1000

    attempt = DispatchAttempt(
        attempt_id=f"att_{uuid.uuid4().hex[:16]}",
        target=target,
        transaction_id=transaction_id,
        url=url,
        status_code=status_code,
        timestamp=datetime.now(timezone.utc),
        response_time_ms=elapsed_ms,
        error=error,
    )
    if dispatch_logger is not None:
        dispatch_logger.log(attempt)

    logger.debug(
        "%s %s for %s -> status=%s error=%s (%.1f ms)",
        method, target.value, transaction_id, status_code, error, elapsed_ms,
    )
    return response, attempt


def response_body(response: requests.Response | None):
    """Decoded JSON body when there is one, else the raw text (or None)."""
    if response is None:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text or None
