"""Single-writer update context and observer notification.

Network work runs on executor threads. Those threads never mutate shared
state; they post closures to an UpdateQueue, and the owning thread applies
them by draining the queue. Observers are always called from the owning
thread.
"""

import queue
import time
from concurrent.futures import Future
from typing import Any, Callable


class UpdateQueue:
    """Serialises state mutations onto the thread that drains it."""

    def __init__(self):
        self._pending: queue.SimpleQueue = queue.SimpleQueue()

    def post(self, fn: Callable[..., Any], *args: Any):
        """Schedule fn(*args) on the update context. Safe from any thread."""
        self._pending.put((fn, args))

    def drain(self) -> int:
        """Apply every pending update. Returns how many ran."""
        count = 0
        while True:
            try:
                fn, args = self._pending.get_nowait()
            except queue.Empty:
                return count
            fn(*args)
            count += 1

    def wait(self, future: Future, timeout: float | None = None) -> Any:
        """Apply updates until future completes, then return its result.

        Workers post their update before returning, so a final drain after
        completion picks up anything posted in the last moments.

        Raises:
            TimeoutError: future did not complete in time
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while not future.done():
            if deadline is not None and time.monotonic() >= deadline:
                raise TimeoutError("Timed out waiting for bridge operation")
            try:
                fn, args = self._pending.get(timeout=0.05)
            except queue.Empty:
                continue
            fn(*args)
        self.drain()
        return future.result()


def completed(result: Any = None) -> Future:
    """Return an already-finished future."""
    future: Future = Future()
    future.set_result(result)
    return future


class Observable:
    """Minimal subscribe/notify support.

    Callbacks receive the topic that changed, e.g. 'lights' or 'registry'.
    """

    def __init__(self):
        self._observers: list[Callable[[str], None]] = []

    def subscribe(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """Register callback; returns a function that unsubscribes it."""
        self._observers.append(callback)

        def unsubscribe():
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def notify(self, topic: str):
        for callback in list(self._observers):
            callback(topic)
