import logging
import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone

from puttlab.physics.best_line import HintSolver

logger = logging.getLogger(__name__)

_executor = None
_executor_lock = threading.Lock()


def get_executor() -> ThreadPoolExecutor:
    global _executor
    with _executor_lock:
        if _executor is None:
            logger.info("Starting hint worker")
            _executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="puttlab-hint")
    return _executor


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


class HintJob:
    """
    Background hint search with cooperative cancellation.

    status: pending -> running -> completed | cancelled | failed
    The solver checks the cancel event between directions, so cancel()
    takes effect within one direction's search.
    """

    def __init__(self, solver: HintSolver, ball_pos, job_id: str | None = None):
        self.solver = solver
        self.ball_pos = tuple(float(v) for v in ball_pos)
        self.job_id = job_id or uuid.uuid4().hex[:12]
        self.status = "pending"
        self.error = None
        self.started_at = None
        self.completed_at = None
        self._cancel = threading.Event()
        self.future: Future | None = None

    def _update(self, **updates):
        for key, value in updates.items():
            setattr(self, key, value)
        logger.debug("Hint job %s -> %s", self.job_id, self.status, extra={"job_id": self.job_id})

    def _run(self):
        if self._cancel.is_set():
            self._update(status="cancelled", completed_at=_now_iso())
            return None
        self._update(status="running", started_at=_now_iso())
        try:
            result = self.solver.solve(self.ball_pos, cancel=self._cancel)
        except Exception as exc:
            logger.exception("Hint job failed", extra={"job_id": self.job_id})
            self._update(status="failed", error=str(exc), completed_at=_now_iso())
            return None
        status = "cancelled" if self._cancel.is_set() else "completed"
        self._update(status=status, completed_at=_now_iso())
        return result

    def start(self, executor: ThreadPoolExecutor | None = None) -> "HintJob":
        self.future = (executor or get_executor()).submit(self._run)
        return self

    def cancel(self) -> None:
        self._cancel.set()
        if self.future is not None and self.future.cancel():
            self._update(status="cancelled", completed_at=_now_iso())

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def done(self) -> bool:
        return self.future is not None and self.future.done()

    def result(self, timeout: float | None = None):
        """
        HintResult, or None if nothing holed, the job was cancelled or failed.
        """
        if self.future is None:
            raise RuntimeError("HintJob not started. Call start() first.")
        if self.future.cancelled():
            return None
        return self.future.result(timeout=timeout)
