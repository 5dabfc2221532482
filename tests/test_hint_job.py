from concurrent.futures import ThreadPoolExecutor

import pytest

from puttlab.physics.ball_roll import BALL_RADIUS_M
from puttlab.physics.best_line import HintSolver
from puttlab.physics.hint_job import HintJob, get_executor

BALL = (1.0, BALL_RADIUS_M, 0.0)


class ExplodingSolver:
    def solve(self, ball_pos, cancel=None):
        raise RuntimeError("boom")


@pytest.fixture
def executor():
    pool = ThreadPoolExecutor(max_workers=1)
    yield pool
    pool.shutdown(wait=True)


def test_completed_job(flat_terrain, flat_shot, executor):
    solver = HintSolver(flat_terrain, None, flat_shot, directions_deg=[180])
    job = HintJob(solver, BALL, job_id="job-1").start(executor)
    result = job.result(timeout=60)
    assert result is not None
    assert result.directions_holed == 1
    assert job.status == "completed"
    assert job.started_at is not None and job.completed_at is not None
    assert job.done()


def test_cancel_before_run(flat_terrain, flat_shot, executor):
    solver = HintSolver(flat_terrain, None, flat_shot, directions_deg=[180])
    job = HintJob(solver, BALL)
    job.cancel()
    assert job.cancelled
    job.start(executor)
    assert job.result(timeout=60) is None
    assert job.status == "cancelled"


def test_failed_job_reports_error(executor):
    job = HintJob(ExplodingSolver(), BALL).start(executor)
    assert job.result(timeout=60) is None
    assert job.status == "failed"
    assert job.error == "boom"


def test_result_requires_start(flat_terrain, flat_shot):
    job = HintJob(HintSolver(flat_terrain, None, flat_shot), BALL)
    with pytest.raises(RuntimeError):
        job.result()


def test_shared_executor_is_reused():
    assert get_executor() is get_executor()
