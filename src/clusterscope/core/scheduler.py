"""
Last-request-wins scheduling of clustering runs.

Interactive callers re-run the pipeline whenever the dataset, metric or
linkage changes. Runs execute on a background executor; each submission gets
a new generation number and only the result of the newest generation is ever
delivered. Results of superseded runs are discarded when they resolve.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from typing import Any

from clusterscope.core.pipeline import ClusteringResult, run_clustering
from clusterscope.core.projection import Row
from clusterscope.models.config import ClusteringConfig

logger = logging.getLogger(__name__)

Runner = Callable[[Sequence[str], Sequence[Row], ClusteringConfig], ClusteringResult]


class LatestRunScheduler:
    """
    Runs clustering requests in the background, keeping only the newest.

    Example:
        >>> with LatestRunScheduler(on_result=render) as scheduler:
        ...     scheduler.submit(headers, rows, metric="euclidean", linkage="ward")
        ...     scheduler.submit(headers, rows, metric="euclidean", linkage="single")
        # render() is only ever called with the single-linkage result
    """

    def __init__(
        self,
        on_result: Callable[[ClusteringResult], None] | None = None,
        on_error: Callable[[BaseException], None] | None = None,
        max_workers: int = 1,
        runner: Runner = run_clustering,
    ) -> None:
        """
        Initialize the scheduler.

        Args:
            on_result: Called with each delivered (newest) result.
            on_error: Called with the exception of a failed newest run. When
                omitted, failures are logged; they remain available on the
                returned future either way.

            Both callbacks run on the worker thread without the scheduler
            lock held, so they may call back into the scheduler. A submission
            racing with delivery can supersede a result while its callback
            runs; ``latest_result`` then returns None.
            max_workers: Background threads running pipelines.
            runner: Pipeline function, ``run_clustering`` by default.
        """
        self._on_result = on_result
        self._on_error = on_error
        self._runner = runner
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="clusterscope",
        )
        self._lock = threading.RLock()
        self._generation = 0
        self._latest: ClusteringResult | None = None
        self._latest_generation = 0
        self._pending: dict[int, Future[ClusteringResult]] = {}

    @property
    def generation(self) -> int:
        """Generation number of the newest submission."""
        with self._lock:
            return self._generation

    @property
    def latest_result(self) -> ClusteringResult | None:
        """Result of the newest completed request, if it is still the newest."""
        with self._lock:
            if self._latest_generation == self._generation:
                return self._latest
            return None

    def is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def submit(
        self,
        headers: Sequence[str],
        rows: Sequence[Row],
        config: ClusteringConfig | None = None,
        **selectors: Any,
    ) -> Future[ClusteringResult]:
        """
        Schedule a clustering run, superseding every earlier request.

        Selector values are validated before the run is queued.

        Raises:
            InvalidMetricError: If the metric selector is not recognized.
            InvalidLinkageError: If the linkage selector is not recognized.
        """
        if config is None:
            config = ClusteringConfig()
        if selectors:
            config = config.with_selectors(**selectors)

        with self._lock:
            self._generation += 1
            generation = self._generation
            future = self._executor.submit(self._runner, tuple(headers), rows, config)
            self._pending[generation] = future

        future.add_done_callback(partial(self._deliver, generation))
        logger.debug(f"Submitted clustering run {generation}")
        return future

    def cancel_pending(self) -> None:
        """Mark every submitted run as stale and cancel those not yet started."""
        with self._lock:
            self._generation += 1
            # cancel() runs _deliver inline, which pops from _pending
            for future in list(self._pending.values()):
                future.cancel()

    def _deliver(self, generation: int, future: Future[ClusteringResult]) -> None:
        # state changes under the lock, user callbacks after releasing it
        with self._lock:
            self._pending.pop(generation, None)
            if future.cancelled():
                return
            if generation != self._generation:
                logger.debug(
                    f"Discarding stale clustering run {generation} "
                    f"(newest is {self._generation})"
                )
                return

            error = future.exception()
            result = None
            if error is None:
                result = future.result()
                self._latest = result
                self._latest_generation = generation

        if error is not None:
            if self._on_error is not None:
                self._on_error(error)
            else:
                logger.error(f"Clustering run {generation} failed: {error}")
        elif self._on_result is not None:
            self._on_result(result)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> LatestRunScheduler:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown(wait=True)
