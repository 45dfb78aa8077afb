"""A future that computes a function's result in the background after a delay."""

from __future__ import annotations

import threading
import time
from typing import Callable, Generic, TypeVar

A = TypeVar("A")
R = TypeVar("R")


class DelayedFuture(Generic[A, R]):
    """Runs ``fn`` once, after ``delay`` seconds, when first asked for its value."""

    def __init__(self, delay: float, fn: Callable[[A], R], arg: A) -> None:
        self._fn = fn
        self._arg = arg
        self._delay = delay
        self._ready = threading.Event()
        self._lock = threading.Lock()
        self._started = False
        self._result: R | None = None
        self._error: BaseException | None = None

    def _run(self, arg: A) -> None:
        time.sleep(self._delay)
        try:
            result = self._fn(arg)
        except BaseException as exc:  # handed back to the caller of get()
            with self._lock:
                self._error = exc
        else:
            with self._lock:
                self._result = result
        self._ready.set()

    def get(self, arg: A, timeout: float | None = None) -> R:
        """Start the computation on first call and wait for its result.

        Raises :class:`TimeoutError` if the result is not ready within ``timeout``
        seconds, and re-raises any exception the function raised.
        """
        with self._lock:
            if not self._started:
                self._started = True
                threading.Thread(target=self._run, args=(arg,), daemon=True).start()

        if not self._ready.wait(timeout):
            raise TimeoutError("future result not ready before timeout")
        with self._lock:
            if self._error is not None:
                raise self._error
            return self._result  # type: ignore[return-value]

    def is_ready(self) -> bool:
        """Whether the computation has finished."""
        return self._ready.is_set()

    def arg(self) -> A:
        """The argument the future was created with."""
        return self._arg