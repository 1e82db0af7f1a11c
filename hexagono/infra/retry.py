# hexagono/infra/retry.py
import random
import time
from typing import Callable, Optional, TypeVar

from hexagono.core.logging_config import logger

T = TypeVar("T")


def _backoff_delay(base: float, factor: float, attempt: int, cap: float) -> float:
    # exponential backoff con jitter
    delay = min(base * (factor ** attempt), cap)
    jitter = random.uniform(0, delay * 0.25)
    return delay + jitter


def retry_on(
    fn: Callable[[], T],
    *,
    attempts: int = 3,
    base: float = 1.0,
    factor: float = 2.0,
    cap: float = 8.0,
    is_retryable: Optional[Callable[[Exception], bool]] = None,
    on_retry: Optional[Callable[[int, Exception, float], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Ejecuta `fn` hasta `attempts` veces. Si `is_retryable` devuelve False la
    excepción sube enseguida; si se agotan los intentos sube la última.
    """
    last_exc: Optional[Exception] = None
    for i in range(attempts):
        try:
            return fn()
        except Exception as e:
            if is_retryable and not is_retryable(e):
                raise
            last_exc = e
            if i == attempts - 1:
                break
            delay = _backoff_delay(base, factor, i, cap)
            if on_retry:
                on_retry(i + 1, e, delay)
            else:
                logger.warning("retry_scheduled", attempt=i + 1, delay=round(delay, 2), error=repr(e))
            sleep(delay)
    assert last_exc is not None
    raise last_exc


def retryable(
    *,
    attempts: int = 3,
    base: float = 1.0,
    factor: float = 2.0,
    cap: float = 8.0,
    is_retryable: Optional[Callable[[Exception], bool]] = None,
):
    """Versión decorator."""

    def _wrap(func: Callable[..., T]) -> Callable[..., T]:
        def _inner(*args, **kwargs) -> T:
            return retry_on(
                lambda: func(*args, **kwargs),
                attempts=attempts,
                base=base,
                factor=factor,
                cap=cap,
                is_retryable=is_retryable,
            )

        return _inner

    return _wrap
