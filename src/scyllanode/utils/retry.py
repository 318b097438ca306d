# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/scyllanode/utils/retry.py

from __future__ import annotations

import time
import functools
from typing import Callable

from ..errors import ScyllaNodeError


class RetryError(ScyllaNodeError):
    def __init__(self, what: str, attempts: int):
        self.attempts = attempts
        super().__init__(f"{what} failed after {attempts} attempts")


def retry(
    *,
    retries: int,
    delay: float,
    backoff: float = 1.0,
    retry_on: tuple[type[Exception], ...] = (Exception,),
    on_retry: Callable[[int, Exception], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
):
    """
    Retry an idempotent call, e.g. opening an SSH session to a node that is
    still booting.

    retries: total attempts, at least one
    delay: seconds to wait after the first failure
    backoff: factor applied to the wait after every further failure
    on_retry: callback(attempt, exception) for each failed attempt

    The last failure surfaces as RetryError chained to the original exception.
    """

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            wait = delay
            for attempt in range(1, retries + 1):
                try:
                    return fn(*args, **kwargs)
                except retry_on as exc:
                    if on_retry:
                        on_retry(attempt, exc)
                    if attempt == retries:
                        raise RetryError(fn.__name__, attempt) from exc
                    sleep(wait)
                    wait *= backoff
            raise RetryError(fn.__name__, 0)
        return wrapper
    return decorator
