"""Non-blocking ingestion: producers enqueue, worker threads learn."""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Callable, Dict, List, Optional

from ..core.models import RecordSource
from .base import Learner, LearningTask
from .tasks import CompleteGeneration, ObjectObservation, ReasonedReplacement

logger = logging.getLogger(__name__)

# Consumer name under which the offline engine itself generates code
OFFLINE_PROVIDER = "autolearn"

_STOP = object()


class LearningPipeline:
    """FIFO queue of learning tasks drained by a small pool of worker threads.

    Entry points never block and never raise because of learning. A failing
    task is logged and counted; the next task proceeds. Workers start on the
    first accepted task or on ``start()``.
    """

    def __init__(
        self,
        learner: Learner,
        workers: int = 1,
        queue_maxsize: int = 0,
        active_consumer: Optional[Callable[[], Optional[str]]] = None,
        drain_timeout: float = 30.0,
    ):
        self.learner = learner
        self.workers = max(1, int(workers))
        self.active_consumer = active_consumer
        self.drain_timeout = drain_timeout

        self._queue: "queue.Queue[Any]" = queue.Queue(maxsize=max(0, int(queue_maxsize)))
        self._threads: List[threading.Thread] = []
        self._state_lock = threading.Lock()
        self._stopped = False

        # guards the counters below
        self._idle = threading.Condition()
        self._pending = 0
        self.processed = 0
        self.failed = 0
        self.dropped = 0


    # -- lifecycle --------------------------------------------------------------

    def start(self) -> None:
        with self._state_lock:
            if self._stopped or self._threads:
                return
            for i in range(self.workers):
                thread = threading.Thread(target=self._worker, name=f"autolearn-learner-{i}", daemon=True)
                thread.start()
                self._threads.append(thread)
        logger.debug(f"Started {self.workers} learning worker(s)")

    @property
    def running(self) -> bool:
        return any(t.is_alive() for t in self._threads)

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until every accepted task has finished. False on timeout."""
        with self._idle:
            return self._idle.wait_for(lambda: self._pending == 0, timeout)

    def stop(self, drain: bool = True, timeout: Optional[float] = None) -> None:
        """Stop the workers, first finishing queued tasks unless ``drain`` is False."""
        timeout = self.drain_timeout if timeout is None else timeout
        with self._state_lock:
            if self._stopped:
                return
            self._stopped = True
            threads = list(self._threads)

        if not threads:
            return
        if drain:
            if not self.wait_until_idle(timeout):
                logger.warning(f"Learning queue not drained after {timeout}s, {self._pending} task(s) left")
        else:
            self._discard_queued()

        for _ in threads:
            try:
                self._queue.put(_STOP, timeout=timeout)
            except queue.Full:
                logger.warning("Could not signal a learning worker to stop")
        for thread in threads:
            thread.join(timeout)
        logger.debug(f"Learning pipeline stopped: {self.stats()}")

    def _discard_queued(self) -> None:
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return
            self._queue.task_done()
            with self._idle:
                self._pending -= 1
                self.dropped += 1
                self._idle.notify_all()

    def __enter__(self) -> "LearningPipeline":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop(drain=True)

    # -- producers --------------------------------------------------------------

    def should_learn(self) -> bool:
        """False while the offline engine itself is the active consumer."""
        if self.active_consumer is None:
            return True
        try:
            return self.active_consumer() != OFFLINE_PROVIDER
        except Exception as e:
            logger.warning(f"Active consumer lookup failed, learning anyway: {e}")
            return True

    def submit(self, task: LearningTask) -> bool:
        """Enqueue a task; False when it was skipped or dropped."""
        name = type(task).__name__
        if not self.should_learn():
            logger.debug(f"Skipping {name}: offline engine is the active consumer")
            return False

        self.start()
        # stop() sets _stopped under the same lock, so no task is queued behind the stop sentinels
        with self._state_lock:
            stopped = self._stopped
            if not stopped:
                with self._idle:
                    self._pending += 1
                try:
                    self._queue.put_nowait(task)
                    return True
                except queue.Full:
                    pass
            with self._idle:
                if not stopped:
                    self._pending -= 1
                self.dropped += 1
                self._idle.notify_all()

        if stopped:
            logger.warning(f"Learning pipeline stopped, dropping {name}")
        else:
            logger.warning(f"Learning queue full, dropping {name}")
        return False

    def ingest_complete_generation(
        self,
        prompt: str,
        code: str,
        metadata: Optional[Dict[str, Any]] = None,
        source: RecordSource = RecordSource.NORMAL_FLOW,
    ) -> bool:
        logger.info(
            "Learning from complete generation",
            extra={"activity": {"prompt_length": len(prompt), "code_length": len(code), "source": source.value}},
        )
        return self.submit(CompleteGeneration(prompt, code, dict(metadata) if metadata else None, source))

    def ingest_reasoned_replacement(
        self,
        prompt: str,
        old_code: Optional[str],
        new_code: str,
        reason: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> bool:
        return self.submit(ReasonedReplacement(prompt, old_code, new_code, reason, dict(metadata) if metadata else None))

    def ingest_object_observation(
        self,
        object_name: str,
        object_type: str,
        properties: Dict[str, str],
        prompt: str,
        context: str,
    ) -> bool:
        return self.submit(ObjectObservation(object_name, object_type, dict(properties), prompt, context))

    # -- workers ----------------------------------------------------------------

    def _worker(self) -> None:
        while True:
            task = self._queue.get()
            try:
                if task is _STOP:
                    return
                self._run(task)
            finally:
                self._queue.task_done()

    def _run(self, task: LearningTask) -> None:
        ok = False
        try:
            self.learner.learn(task)
            ok = True
        except Exception:
            logger.exception(
                f"Learning task {type(task).__name__} failed",
                extra={"activity": {"event": "task_failed", "task": type(task).__name__}},
            )
        finally:
            with self._idle:
                if ok:
                    self.processed += 1
                else:
                    self.failed += 1
                self._pending -= 1
                self._idle.notify_all()

    def stats(self) -> Dict[str, int]:
        with self._idle:
            return {
                "workers": self.workers,
                "pending": self._pending,
                "processed": self.processed,
                "failed": self.failed,
                "dropped": self.dropped,
            }
