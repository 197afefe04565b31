"""Background execution of generate-and-persist workflows.

HTTP handlers acknowledge a request as soon as its work is submitted. The
returned TaskHandle wraps a future, so callers that need to (the CLI,
tests, shutdown) can still wait for completion and see the outcome.
"""

from __future__ import annotations

import logging
import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class TaskHandle:
    id: str
    name: str
    future: Future

    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: Optional[float] = None) -> Any:
        return self.future.result(timeout=timeout)

    def exception(self, timeout: Optional[float] = None) -> Optional[BaseException]:
        return self.future.exception(timeout=timeout)


class TaskDispatcher:
    def __init__(self, max_workers: int = 4):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="notion-forge")
        self._futures: set[Future] = set()
        self._lock = threading.Lock()

    def submit(self, name: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> TaskHandle:
        task_id = uuid.uuid4().hex
        future = self._executor.submit(self._run, task_id, name, fn, args, kwargs)
        with self._lock:
            self._futures.add(future)
        future.add_done_callback(self._discard)
        logger.info("Task submitted | task=%s name=%s", task_id, name)
        return TaskHandle(task_id, name, future)

    @staticmethod
    def _run(task_id: str, name: str, fn: Callable[..., Any], args: tuple, kwargs: dict) -> Any:
        # logged here rather than in a done-callback so the record exists before the future resolves
        try:
            result = fn(*args, **kwargs)
        except Exception as e:
            logger.exception("Task failed | task=%s name=%s error=%s", task_id, name, e)
            raise
        logger.info("Task complete | task=%s name=%s", task_id, name)
        return result

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._futures.discard(future)

    def _prune(self) -> list[Future]:
        with self._lock:
            self._futures = {f for f in self._futures if not f.done()}
            return list(self._futures)

    def pending(self) -> int:
        return len(self._prune())

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for every submitted task; True if none are left running."""
        _, not_done = wait(self._prune(), timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
