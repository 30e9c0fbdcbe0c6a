# storefront/utils/retry.py
import smtplib

import redis
import requests
from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _log_retry(state: RetryCallState) -> None:
    logger.warning(
        "Retrying after transient failure",
        call=getattr(state.fn, "__qualname__", "?"),
        attempt=state.attempt_number,
        error=repr(state.outcome.exception()) if state.outcome else None,
    )


def _transient(errors, base: float, cap: float, attempts: int = 3):
    """Ponawia tylko bledy transportu, po ostatniej probie rzuca oryginalny wyjatek."""
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=base, min=base, max=cap),
        retry=retry_if_exception_type(errors),
        before_sleep=_log_retry,
    )


def http_retry(attempts: int = 3):
    # identity service, webhook activity logu
    return _transient(requests.RequestException, base=0.3, cap=3, attempts=attempts)


def redis_retry(attempts: int = 3):
    # lock sweepa
    return _transient(redis.RedisError, base=0.2, cap=2, attempts=attempts)


def smtp_retry(attempts: int = 3):
    #OSError lapie zerwane polaczenia i timeouty socketu
    return _transient((smtplib.SMTPException, OSError), base=0.5, cap=5, attempts=attempts)
