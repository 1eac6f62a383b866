"""
Worker pool dispatcher for challenges.

Challenges run in separate worker processes so that a crash while
fragmenting one challenge cannot corrupt another. The parent keeps at
most one submitted challenge per worker and hands out the next one only
when a running one completes. Results come back in completion order
and all bookkeeping happens in the parent.

Key principles:
1. Simple, pickleable worker function
2. Workers never raise across the process boundary; they return an outcome
3. The first failed outcome aborts the group: no further challenge is
   submitted, running ones are left to finish and their results dropped
"""

import logging
import time
import traceback
from concurrent.futures import FIRST_COMPLETED, ProcessPoolExecutor, wait
from concurrent.futures.process import BrokenProcessPool
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from .config import ChallengerConfig
from .exceptions import ChallengeFailedError
from .fragmentation import fragment_masses
from .models import Challenge, ChallengeResult
from .runner import run_challenge
from .utils import format_elapsed, init_worker_logging


logger = logging.getLogger(__name__)


@dataclass
class ChallengeTask:
    """Everything a worker needs to run one challenge."""
    challenge: Challenge
    config: ChallengerConfig
    index: int
    total: int
    start_time: float
    runner: Callable = run_challenge
    fragmenter: Callable = fragment_masses


@dataclass
class WorkerOutcome:
    """What a worker sends back: a result, or the description of an error."""
    challenge: Challenge
    ok: bool
    result: Optional[ChallengeResult] = None
    error: str = ""
    error_type: str = ""
    remote_traceback: str = ""


def run_challenge_worker(task: ChallengeTask) -> WorkerOutcome:
    """
    Worker entry point: run one challenge and report how it went.

    Exceptions are turned into a failed outcome because arbitrary
    exception objects do not always survive pickling.
    """
    challenge = task.challenge
    logger.info(
        f"{challenge.name} | mode={challenge.ion_mode} | {task.index}/{task.total} | "
        f"elapsed={format_elapsed(task.start_time)}"
    )

    try:
        result = task.runner(challenge, task.config, fragmenter=task.fragmenter)
    except Exception as e:
        return WorkerOutcome(
            challenge=challenge,
            ok=False,
            error=str(e),
            error_type=type(e).__name__,
            remote_traceback=traceback.format_exc(),
        )
    return WorkerOutcome(challenge=challenge, ok=True, result=result)


def _unwrap(outcome: WorkerOutcome) -> Tuple[Challenge, ChallengeResult]:
    if not outcome.ok:
        raise ChallengeFailedError(
            outcome.challenge.name,
            f"{outcome.error_type}: {outcome.error}",
            outcome.remote_traceback,
        )
    return outcome.challenge, outcome.result


class ChallengeDispatcher:
    """
    Runs challenges in a bounded pool of worker processes.

    At most `n_processes` challenges run at the same time; the default is
    half of the available cores, at least one.
    """

    def __init__(self, config: ChallengerConfig, runner: Callable = run_challenge,
                 fragmenter: Callable = fragment_masses, n_processes: Optional[int] = None,
                 start_time: Optional[float] = None):
        """
        Args:
            config: Run configuration, shipped to every worker
            runner: runner(challenge, config, fragmenter=...) -> ChallengeResult;
                must be a module-level function so it can be pickled
            fragmenter: Fragmentation engine handed to the runner
            n_processes: Pool size (defaults to config.concurrency)
            start_time: Start of the run, for elapsed times in progress lines
        """
        self.config = config
        self.runner = runner
        self.fragmenter = fragmenter
        self.n_processes = n_processes or config.concurrency
        self.start_time = start_time if start_time is not None else time.time()

    def make_tasks(self, challenges: List[Challenge]) -> List[ChallengeTask]:
        return [
            ChallengeTask(
                challenge=challenge,
                config=self.config,
                index=i,
                total=len(challenges),
                start_time=self.start_time,
                runner=self.runner,
                fragmenter=self.fragmenter,
            )
            for i, challenge in enumerate(challenges, 1)
        ]

    def workers_for(self, n_tasks: int) -> int:
        return max(1, min(self.n_processes, n_tasks))

    def dispatch(self, challenges: Iterable[Challenge]) -> Iterator[Tuple[Challenge, ChallengeResult]]:
        """
        Run challenges and yield (challenge, result) pairs as they complete.

        Raises:
            ChallengeFailedError: When a challenge fails or a worker dies;
                challenges that have not started yet are never run
        """
        tasks = self.make_tasks(list(challenges))
        if not tasks:
            return

        n_workers = self.workers_for(len(tasks))
        if n_workers == 1:
            # Sequential fallback, stops at the first failure
            for task in tasks:
                yield _unwrap(run_challenge_worker(task))
            return

        logger.debug(f"Running {len(tasks)} challenges with {n_workers} worker processes")
        yield from self._dispatch_parallel(tasks, n_workers)

    def _dispatch_parallel(self, tasks: List[ChallengeTask],
                           n_workers: int) -> Iterator[Tuple[Challenge, ChallengeResult]]:
        log_level = logging.getLogger("frag_challenger").getEffectiveLevel()
        executor = ProcessPoolExecutor(
            max_workers=n_workers,
            initializer=init_worker_logging,
            initargs=(log_level,),
        )
        queue = iter(tasks)
        in_flight = {}

        def submit_next() -> None:
            task = next(queue, None)
            if task is None:
                return
            try:
                in_flight[executor.submit(run_challenge_worker, task)] = task
            except BrokenProcessPool as e:
                raise ChallengeFailedError(
                    task.challenge.name, f"worker process terminated abruptly: {e}"
                )

        try:
            # Never more submitted work than workers, so a failure leaves nothing queued
            for _ in range(n_workers):
                submit_next()

            while in_flight:
                done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                for future in done:
                    task = in_flight.pop(future)
                    try:
                        outcome = future.result()
                    except BrokenProcessPool as e:
                        raise ChallengeFailedError(
                            task.challenge.name, f"worker process terminated abruptly: {e}"
                        )
                    yield _unwrap(outcome)
                    submit_next()
        finally:
            # Running challenges are not interrupted
            executor.shutdown(wait=True, cancel_futures=True)
