"""Timing decorator for long-running tokenizer operations."""

import functools
import logging
import time
from typing import Callable

log = logging.getLogger(__name__)


def measure_time(label: str) -> Callable[[Callable], Callable]:
    """
    Log how long the wrapped tokenizer method took, labelled with ``label``.

    The elapsed time is logged even when the call raises. On success the
    realized vocabulary size of the tokenizer (``self``) is included.
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            start = time.perf_counter()
            ok = False
            try:
                result = func(self, *args, **kwargs)
                ok = True
                return result
            finally:
                elapsed = time.perf_counter() - start
                if ok:
                    log.info(
                        f"{label} completed in {elapsed:.2f} s "
                        f"(vocab size: {self.vocab_size()})"
                    )
                else:
                    log.info(f"{label} failed after {elapsed:.2f} s")

        return wrapper

    return decorator
