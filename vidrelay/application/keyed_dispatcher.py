"""
Keyed Dispatcher

Runs submitted work serially per key and concurrently across keys on a
shared thread pool.
"""

import logging
import threading
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Deque, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

_Work = Tuple[Callable, tuple]


class KeyedDispatcher:
    """
    Per-key FIFO executor.

    Each key with pending work has exactly one drain loop scheduled on the
    pool; the loop runs that key's work items in submission order and
    retires when the queue is empty. Exceptions raised by a work item are
    logged and do not affect later items.
    """

    def __init__(self, max_workers: int = 8, thread_name_prefix: str = "dispatch"):
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix=thread_name_prefix
        )
        self._queues: Dict[str, Deque[_Work]] = {}
        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._closed = False

    def submit(self, key: str, fn: Callable, *args) -> bool:
        """
        Queue fn(*args) behind earlier work for the same key.

        Returns:
            False if the dispatcher has been shut down, True otherwise
        """
        with self._lock:
            if self._closed:
                logger.warning(f"Dispatcher closed; dropping work for {key}")
                return False

            queue = self._queues.get(key)
            if queue is not None:
                queue.append((fn, args))
                return True

            self._queues[key] = deque([(fn, args)])

        try:
            self._executor.submit(self._drain, key)
        except RuntimeError:
            # Executor shut down between the check above and scheduling
            with self._lock:
                self._queues.pop(key, None)
                self._idle.notify_all()
            return False
        return True

    def _drain(self, key: str) -> None:
        while True:
            with self._lock:
                queue = self._queues[key]
                if not queue:
                    del self._queues[key]
                    self._idle.notify_all()
                    return
                fn, args = queue.popleft()

            try:
                fn(*args)
            except Exception as e:
                logger.error(f"Error handling work for {key}: {e}", exc_info=True)

    def pending_keys(self) -> int:
        """Number of keys with queued or running work."""
        with self._lock:
            return len(self._queues)

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Block until no work is queued or running.

        Returns:
            True if idle, False on timeout
        """
        with self._lock:
            return self._idle.wait_for(lambda: not self._queues, timeout=timeout)

    def shutdown(self, wait: bool = True) -> None:
        """Refuse new work and optionally wait for queued work to finish."""
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait)
