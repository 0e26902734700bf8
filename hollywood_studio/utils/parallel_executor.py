"""Parallel Executor - bounded thread pool for network-bound pipeline work."""

import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Optional

from hollywood_studio.core.config import Settings

TaskOutcome = tuple[Any, Optional[Exception]]


class ParallelExecutor:
    """Runs independent callables side by side and collects per-task outcomes."""

    def __init__(self, settings: Settings, logger: Any):
        """
        Initialize parallel executor.

        Args:
            settings: Application settings (max_parallel_downloads bounds the pool)
            logger: Logger instance
        """
        self.settings = settings
        self.logger = logger
        self.default_workers = max(1, settings.max_parallel_downloads)

    def execute_api_calls(
        self,
        tasks: list[Callable[[], Any]],
        task_names: Optional[list[str]] = None,
        run_id: Optional[str] = None,
        max_workers: Optional[int] = None,
    ) -> list[TaskOutcome]:
        """
        Run tasks concurrently.

        A failing task never aborts its siblings: its slot holds
        ``(None, exception)``. Outcomes are returned in task order.

        Args:
            tasks: Zero-argument callables
            task_names: Labels for logging (defaults to task_<n>)
            run_id: Optional run id prefixed to log lines
            max_workers: Pool size (defaults to max_parallel_downloads)

        Returns:
            One (result, exception) tuple per task
        """
        if not tasks:
            return []

        names = self._names(tasks, task_names)
        prefix = f"[{run_id}] " if run_id else ""
        workers = self._workers(tasks, max_workers)
        started = time.monotonic()

        if workers == 1:
            outcomes = [self._run_one(task, name, prefix) for task, name in zip(tasks, names)]
        else:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="pipeline") as pool:
                futures = [pool.submit(self._run_one, task, name, prefix) for task, name in zip(tasks, names)]
                wait(futures)
                outcomes = [future.result() for future in futures]

        failed = sum(1 for _, error in outcomes if error is not None)
        self.logger.debug(
            f"{prefix}{len(tasks) - failed}/{len(tasks)} task(s) succeeded on {workers} worker(s) "
            f"in {time.monotonic() - started:.2f}s"
        )
        return outcomes

    def submit_api_calls(
        self,
        tasks: list[Callable[[], Any]],
        task_names: Optional[list[str]] = None,
        run_id: Optional[str] = None,
        max_workers: Optional[int] = None,
    ) -> list["Future[TaskOutcome]"]:
        """
        Start tasks concurrently without waiting for them.

        Each future resolves to the same (result, exception) tuple that
        execute_api_calls returns, so the caller can act on whichever
        task finishes first.
        """
        if not tasks:
            return []
        names = self._names(tasks, task_names)
        prefix = f"[{run_id}] " if run_id else ""
        pool = ThreadPoolExecutor(max_workers=self._workers(tasks, max_workers), thread_name_prefix="pipeline")
        futures = [pool.submit(self._run_one, task, name, prefix) for task, name in zip(tasks, names)]
        # Submitted tasks still run to completion; the workers exit afterwards.
        pool.shutdown(wait=False)
        return futures

    def _names(self, tasks: list[Callable[[], Any]], task_names: Optional[list[str]]) -> list[str]:
        return [
            task_names[i] if task_names and i < len(task_names) else f"task_{i + 1}" for i in range(len(tasks))
        ]

    def _workers(self, tasks: list[Callable[[], Any]], max_workers: Optional[int]) -> int:
        return min(len(tasks), max(1, max_workers or self.default_workers))

    def _run_one(self, task: Callable[[], Any], name: str, prefix: str) -> TaskOutcome:
        started = time.monotonic()
        try:
            result = task()
        except Exception as e:
            self.logger.warning(f"{prefix}{name} failed after {time.monotonic() - started:.2f}s: {e}")
            return None, e
        self.logger.debug(f"{prefix}{name} finished in {time.monotonic() - started:.2f}s")
        return result, None
