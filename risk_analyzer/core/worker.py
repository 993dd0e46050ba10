"""
Background Worker — runs a CPU-bound demonstration computation off the request thread.

Each request gets its own child process and a one-shot pipe:
    parent → start process with the input
    child  → compute, send exactly one reply, exit
    parent → wait for the reply until timeout or cancellation, then terminate the child

Every wait is bounded by a timeout.
"""

import logging
import multiprocessing
import threading
import time
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from risk_analyzer.config import WORKER_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

_mp = multiprocessing.get_context("spawn")


class ComputationTimeout(Exception):
    """The child produced no reply before the deadline."""


class ComputationCancelled(Exception):
    """The caller cancelled the computation before a reply arrived."""


class ComputationFailed(Exception):
    """The child exited or raised without producing a result."""


def fibonacci(n: int) -> int:
    """Naive doubly recursive Fibonacci. Deliberately slow."""
    if n <= 1:
        return n
    return fibonacci(n - 1) + fibonacci(n - 2)


def _child_main(conn, n: int) -> None:
    try:
        conn.send(("ok", fibonacci(n)))
    except Exception as exc:  # reported back to the parent as ComputationFailed
        conn.send(("error", repr(exc)))
    finally:
        conn.close()


class CancellationToken:
    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class BackgroundWorker:
    """Starts one child process per computation and tears down whatever is still running on terminate()."""

    def __init__(self, timeout_seconds: float = WORKER_TIMEOUT_SECONDS, poll_interval: float = 0.05):
        self.timeout_seconds = timeout_seconds
        self.poll_interval = poll_interval
        self._lock = threading.Lock()
        self._active: set = set()
        self._closed = False

    def run(self, n: int, timeout: Optional[float] = None, token: Optional[CancellationToken] = None) -> int:
        timeout = self.timeout_seconds if timeout is None else timeout
        parent_conn, child_conn = _mp.Pipe(duplex=False)
        process = _mp.Process(target=_child_main, args=(child_conn, n), daemon=True)

        with self._lock:
            if self._closed:
                parent_conn.close()
                child_conn.close()
                raise ComputationCancelled("Worker has been terminated")
            process.start()
            self._active.add(process)
        child_conn.close()

        deadline = time.monotonic() + timeout
        try:
            while True:
                if token is not None and token.cancelled:
                    raise ComputationCancelled(f"Computation of fibonacci({n}) was cancelled")
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise ComputationTimeout(f"fibonacci({n}) did not finish within {timeout:g}s")
                if parent_conn.poll(min(self.poll_interval, remaining)):
                    try:
                        status, payload = parent_conn.recv()
                    except EOFError as exc:
                        raise ComputationFailed(f"Worker exited without a result (exit code {process.exitcode})") from exc
                    if status != "ok":
                        raise ComputationFailed(payload)
                    return payload
                if not process.is_alive() and not parent_conn.poll():
                    raise ComputationFailed(f"Worker exited without a result (exit code {process.exitcode})")
        finally:
            self._stop(process)
            parent_conn.close()

    async def run_async(self, n: int, timeout: Optional[float] = None,
                        token: Optional[CancellationToken] = None) -> int:
        return await run_in_threadpool(self.run, n, timeout, token)

    def _stop(self, process) -> None:
        if process.is_alive():
            logger.info("Terminating worker process %s", process.pid)
            process.terminate()
        process.join(timeout=5)
        with self._lock:
            self._active.discard(process)

    def terminate(self) -> None:
        """Kill every in-flight child. Later calls to run() are refused."""
        with self._lock:
            self._closed = True
            active = list(self._active)
        for process in active:
            self._stop(process)
        logger.info("Background worker terminated (%d in-flight)", len(active))

    @property
    def active_count(self) -> int:
        with self._lock:
            return len(self._active)
