# checkout/utils/retry.py
import redis
import requests
from tenacity import (
    retry,
    retry_if_exception,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
    wait_fixed,
)

from checkout.utils.logging import get_logger

logger = get_logger(__name__)


def _is_transient_http(exc: BaseException) -> bool:
    # a 4xx answer will not change on retry
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return exc.response.status_code >= 500
    return isinstance(exc, requests.RequestException)


def _log_retry(retry_state) -> None:
    name = getattr(retry_state.fn, "__qualname__", "call")
    logger.warning(
        f"Retrying {name} after attempt {retry_state.attempt_number}: "
        f"{retry_state.outcome.exception()}"
    )


def http_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception(_is_transient_http),
        before_sleep=_log_retry,
    )


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
        before_sleep=_log_retry,
    )


def lock_wait_retry(max_wait: float):
    """Poll while the wrapped acquire returns False; gives up with False after max_wait."""
    return retry(
        stop=stop_after_delay(max_wait),
        wait=wait_fixed(0.05),
        retry=retry_if_result(lambda acquired: acquired is False),
        retry_error_callback=lambda retry_state: retry_state.outcome.result(),
    )
