"""Single-flight coordination of concurrent computations per key.

Concurrent callers asking for the same key share one in-flight task; only
the first caller's ``compute`` is ever invoked. The entry is removed as
soon as the task settles, so a caller arriving afterwards starts a new
flight. This deduplicates requests that arrive close together; it is not a
cache.

The table is guarded by a ``threading.Lock`` so insert-if-absent and
remove-after-settle stay atomic even when callers run on several threads.
Flights are asyncio tasks and belong to the event loop that created them;
share one SingleFlight per event loop.
"""

from __future__ import annotations

import asyncio
from threading import Lock
from typing import Awaitable, Callable, Generic, TypeVar

from oauth2_introspection.observability import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """Get-or-create-and-await table of in-flight computations.

    Example:
        >>> flights: SingleFlight[int] = SingleFlight()
        >>> async def compute() -> int:
        ...     return 42
        >>> await asyncio.gather(*(flights.coordinate("k", compute) for _ in range(3)))
        [42, 42, 42]
    """

    def __init__(self) -> None:
        self._flights: dict[str, asyncio.Task[T]] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._flights)

    def in_flight(self, key: str) -> bool:
        with self._lock:
            return key in self._flights

    async def coordinate(self, key: str, compute: Callable[[], Awaitable[T]]) -> T:
        """Await the flight for ``key``, starting one with ``compute`` if none exists.

        Every caller of a flight receives the same result. If ``compute``
        raised, the caller that started the flight gets the exception itself
        and each joined caller gets its own copy, chained to the original
        through ``__cause__``. Cancelling one caller does not cancel the
        flight for the others.
        """
        with self._lock:
            task = self._flights.get(key)
            started = task is None
            if task is None:
                task = asyncio.ensure_future(compute())
                self._flights[key] = task
                task.add_done_callback(lambda settled: self._on_settled(key, settled))

        if started:
            logger.debug("oauth2_introspection.flight.started")
        else:
            logger.debug("oauth2_introspection.flight.joined")

        try:
            return await asyncio.shield(task)
        except Exception as exc:
            duplicate = None if started else _detached_copy(exc)
            if duplicate is None:
                raise
            raise duplicate from exc
        finally:
            if task.done():
                self._discard(key, task)

    def _on_settled(self, key: str, task: asyncio.Task[T]) -> None:
        self._discard(key, task)
        if not task.cancelled():
            # Marks the exception as retrieved when every waiter was cancelled
            task.exception()

    def _discard(self, key: str, task: asyncio.Task[T]) -> None:
        """Remove ``key`` only while it still maps to ``task``."""
        with self._lock:
            if self._flights.get(key) is task:
                del self._flights[key]


def _detached_copy(exc: Exception) -> Exception | None:
    """Copy ``exc`` so a joined caller does not share its traceback.

    ``__init__`` is bypassed since subclasses often take different arguments
    than the ``args`` they pass up. Returns None when the type's ``__new__``
    rejects its own args.
    """
    cls = type(exc)
    try:
        duplicate = cls.__new__(cls, *exc.args)
    except Exception:
        return None
    duplicate.__dict__.update(exc.__dict__)
    return duplicate
