"""Background worker that runs pipeline requests off the calling thread.

The caller talks to the worker only through messages: `send()` a request,
read responses from `responses` (or `iter_run()` for one run). At most one
run is live; sending a new compute request cancels the previous one first.
"""

from __future__ import annotations

import itertools
import logging
import queue
import threading
from collections import deque
from collections.abc import Iterator
from types import TracebackType

from .messages import (
    COMPUTE_REQUESTS,
    Cancel,
    ComputeManifold,
    ComputeSpectrogram,
    Error,
    Request,
    Response,
    RunCancelled,
    is_terminal,
)
from .orchestrator import CancellationToken, PipelineRun

logger = logging.getLogger(__name__)

_Job = tuple[int, ComputeSpectrogram | ComputeManifold, CancellationToken]


class ManifoldWorker:
    """Single background thread executing compute requests in order."""

    def __init__(self, *, name: str = "syrinx-worker") -> None:
        self.responses: queue.Queue[Response] = queue.Queue()
        self._requests: queue.Queue[_Job | None] = queue.Queue()
        self._lock = threading.Lock()
        self._live: tuple[int, CancellationToken] | None = None
        self._run_ids = itertools.count(1)
        # responses read off the queue on behalf of a run nobody was iterating yet
        self._pending: dict[int | None, deque[Response]] = {}
        self._thread = threading.Thread(target=self._loop, name=name, daemon=True)
        self._started = False
        self._closed = False

    # --- lifecycle ---

    def start(self) -> ManifoldWorker:
        with self._lock:
            if self._closed:
                raise RuntimeError("worker is closed")
            if not self._started:
                self._thread.start()
                self._started = True
        return self

    def close(self, timeout: float | None = None) -> None:
        """Cancel the live run, stop the thread and wait for it."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            if self._live is not None:
                self._live[1].cancel()
        self._requests.put(None)
        if self._started:
            self._thread.join(timeout)

    def __enter__(self) -> ManifoldWorker:
        return self.start()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def live_run_id(self) -> int | None:
        with self._lock:
            return self._live[0] if self._live is not None else None

    # --- requests ---

    def send(self, request: Request) -> int | None:
        """Submit a request.

        Returns:
            The run id for compute requests; None for `Cancel` and for
            rejected requests (which get an `Error` response with no run id).
        """
        if isinstance(request, Cancel):
            self.cancel()
            return None
        if not isinstance(request, COMPUTE_REQUESTS):
            message = f"Unknown message type: {type(request).__name__}"
            logger.error("Rejected request: %s", message)
            self.responses.put(Error(run_id=None, message=message))
            return None

        with self._lock:
            if self._closed:
                raise RuntimeError("worker is closed")
            if self._live is not None:
                logger.info("Run %d superseded; requesting cancellation", self._live[0])
                self._live[1].cancel()
            run_id = next(self._run_ids)
            token = CancellationToken()
            self._live = (run_id, token)
        self._requests.put((run_id, request, token))
        logger.debug("Queued run %d (%s)", run_id, type(request).__name__)
        return run_id

    def cancel(self) -> None:
        """Request cancellation of the live run. Takes effect at its next checkpoint."""
        with self._lock:
            if self._live is not None:
                logger.info("Cancellation requested for run %d", self._live[0])
                self._live[1].cancel()

    # --- responses ---

    def iter_run(self, run_id: int, timeout: float | None = None) -> Iterator[Response]:
        """Yield responses for one run up to and including its terminal message.

        Responses for other runs met on the way are held back and handed out
        when their own run is iterated, so runs can be read in any order.
        Meant for a single consuming thread.

        Raises:
            queue.Empty: If no response arrives within `timeout` seconds.
        """
        while True:
            message = self._next_for(run_id, timeout)
            yield message
            if is_terminal(message):
                return

    def _next_for(self, run_id: int, timeout: float | None) -> Response:
        with self._lock:
            held = self._pending.get(run_id)
            if held:
                message = held.popleft()
                if not held:
                    del self._pending[run_id]
                return message
        while True:
            message = self.responses.get(timeout=timeout)
            if message.run_id == run_id:
                return message
            with self._lock:
                self._pending.setdefault(message.run_id, deque()).append(message)

    # --- worker thread ---

    def _loop(self) -> None:
        while True:
            job = self._requests.get()
            if job is None:
                break
            run_id, request, token = job
            if token.cancelled:
                logger.info("Run %d cancelled before start", run_id)
                self.responses.put(RunCancelled(run_id=run_id))
            else:
                PipelineRun(run_id, request, self.responses.put, token).execute()
            with self._lock:
                if self._live is not None and self._live[0] == run_id:
                    self._live = None
