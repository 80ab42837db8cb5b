"""Session cache for decoded assets with a bounded worker pool."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, Generic, Iterable, List, Optional, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_WORKERS = 4


@dataclass
class _Flight:
    """A running load and the cancel events of everyone waiting on it."""

    future: Optional[Future] = None
    waiters: List[Optional[threading.Event]] = field(default_factory=list)

    def abandoned(self) -> bool:
        return all(event is not None and event.is_set() for event in self.waiters)


def _resolved(value) -> Future:
    done: Future = Future()
    done.set_result(value)
    return done


class AssetCache(Generic[T]):
    """
    Load assets at most once per key and keep the results for the session.

    Loads run on a thread pool limited to ``max_workers``. While a key is
    being loaded, further requests for it join that load instead of starting
    a second one. Loader errors listed in ``invalid_errors`` make the result
    None and are not cached, so a later request retries.

    Cancellation is per caller. A caller whose ``cancel_event`` is set gets
    None; the shared load still completes and is cached for everyone else,
    unless every caller cancelled before it started.

    Args:
        loader: Callable turning an asset key into a value
        max_workers: Upper bound on concurrent loads
        invalid_errors: Exception types that mean "not a usable asset"
    """

    def __init__(
        self,
        loader: Callable[[str], T],
        max_workers: int = DEFAULT_MAX_WORKERS,
        invalid_errors: Tuple[Type[BaseException], ...] = (ValueError, OSError),
    ):
        if max_workers <= 0:
            raise ValueError(f"max_workers must be positive, got {max_workers}")
        self._loader = loader
        self._invalid_errors = invalid_errors
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="asset-load")
        self._lock = threading.Lock()
        self._values: Dict[str, T] = {}
        self._in_flight: Dict[str, _Flight] = {}

    def __enter__(self) -> "AssetCache[T]":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def cached(self, key: str) -> Optional[T]:
        """Return the cached value for ``key`` without loading it."""
        with self._lock:
            return self._values.get(key)

    def submit(self, key: str, cancel_event: Optional[threading.Event] = None) -> Future:
        """
        Start (or join) the load of ``key``.

        Returns:
            Future resolving to the value, or None if the asset is unusable or
            this caller cancelled through ``cancel_event``
        """
        with self._lock:
            if key in self._values:
                return _resolved(self._values[key])
            if cancel_event is not None and cancel_event.is_set():
                logger.debug(f"Skipping {key}: cancelled before load")
                return _resolved(None)

            flight = self._in_flight.get(key)
            if flight is None:
                flight = _Flight()
                flight.future = self._executor.submit(self._load, key, flight)
                self._in_flight[key] = flight
            flight.waiters.append(cancel_event)
            shared = flight.future

        if cancel_event is None:
            return shared
        return self._wait_for(key, shared, cancel_event)

    def get(self, key: str, cancel_event: Optional[threading.Event] = None) -> Optional[T]:
        """Load ``key`` (sharing any in-flight load) and wait for the result."""
        return self.submit(key, cancel_event).result()

    def prefetch(
        self, keys: Iterable[str], cancel_event: Optional[threading.Event] = None
    ) -> List[Tuple[str, Future]]:
        """Queue loads for every key, returning (key, future) pairs in order."""
        return [(key, self.submit(key, cancel_event)) for key in keys]

    def clear(self) -> None:
        with self._lock:
            self._values.clear()

    def close(self) -> None:
        self._executor.shutdown(wait=True, cancel_futures=True)

    @staticmethod
    def _wait_for(key: str, shared: Future, cancel_event: threading.Event) -> Future:
        """Future for one caller that turns into None once its own event is set."""
        waiter: Future = Future()

        def finish(done: Future) -> None:
            if done.cancelled() or cancel_event.is_set():
                logger.debug(f"Dropping {key} for a cancelled request")
                waiter.set_result(None)
            elif done.exception() is not None:
                waiter.set_exception(done.exception())
            else:
                waiter.set_result(done.result())

        shared.add_done_callback(finish)
        return waiter

    def _load(self, key: str, flight: _Flight) -> Optional[T]:
        try:
            with self._lock:
                if flight.abandoned():
                    logger.debug(f"Skipping {key}: every request was cancelled")
                    # Later requests start a fresh load
                    if self._in_flight.get(key) is flight:
                        del self._in_flight[key]
                    return None

            try:
                value = self._loader(key)
            except self._invalid_errors as e:
                logger.warning(f"Could not load {key}: {e}")
                return None

            with self._lock:
                self._values[key] = value
            return value
        finally:
            with self._lock:
                if self._in_flight.get(key) is flight:
                    del self._in_flight[key]
