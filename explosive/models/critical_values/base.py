# explosive/models/critical_values/base.py

"""
Abstract base class for the critical value engines.

Every engine repeats the same pattern: draw a synthetic sample under the null
hypothesis, run the recursive ADF recursion on it and keep the resulting
statistics, many times over; then reduce the collected statistics to sample
quantiles. This module holds the parts that do not depend on how the synthetic
samples are drawn:

- Eager validation of the shared arguments (replications, probability levels,
  seed, parallel execution)
- One independent random stream per replication, derived from a single
  ``numpy.random.SeedSequence`` so that parallel runs reproduce sequential
  runs exactly
- Execution of the replications sequentially or on a thread pool, with
  results stored by replication index and progress reported from the
  coordinating thread only
- Quantile reduction helpers and the immutable ``CriticalValueSet`` result
"""

import abc
import asyncio
import logging
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np

from explosive.core.config import get_config, get_numerical_config, get_simulation_config
from explosive.core.exceptions import ComputationError, ConfigError
from explosive.core.types import CriticalValueMethod, Probabilities, ProgressCallback
from explosive.core.validation import (
    validate_parallel, validate_probs, validate_replications, validate_seed
)

# Set up module-level logger
logger = logging.getLogger("explosive.models.critical_values.base")


@dataclass(frozen=True)
class CriticalValueSet:
    """
    Critical values produced by one engine run.

    Quantile arrays keep the probability levels on their own axis, in the
    order of ``probs``. Arrays that do not apply to a method are None.

    Attributes:
        method: Engine that produced the critical values
        probs: Probability levels of the quantiles
        minw: Minimum window used
        lag: Lag order used
        iterations: Number of replications
        nobs: Length of the simulated or resampled series
        n_series: Number of series (1 for Monte Carlo)
        seed: Entropy of the root seed sequence (reproduces the run)
        adf_cv: Full-sample ADF critical values
        sadf_cv: SADF critical values
        gsadf_cv: GSADF critical values
        badf_cv: Per-index BADF critical values
        bsadf_cv: Per-index BSADF critical values (cumulative maximum in time)
        bsadf_panel_cv: Per-index panel BSADF critical values (cumulative maximum in time)
        gsadf_panel_cv: Panel GSADF critical values
        names: Series names the critical values were computed for

    Shapes, with ``T = nobs - minw - lag`` and ``P = len(probs)``:

    ============  ==============  ====================  ===============
    array         Monte Carlo     Wild Bootstrap        Sieve Bootstrap
    ============  ==============  ====================  ===============
    adf_cv        (P,)            (n_series, P)         None
    sadf_cv       (P,)            (n_series, P)         None
    gsadf_cv      (P,)            (n_series, P)         None
    badf_cv       (T, P)          (T, P, n_series)      None
    bsadf_cv      (T, P)          (T, P, n_series)      None
    panel arrays  None            None                  (T, P) and (P,)
    ============  ==============  ====================  ===============
    """
    method: CriticalValueMethod
    probs: Probabilities
    minw: int
    lag: int
    iterations: int
    nobs: int
    n_series: int
    seed: int
    adf_cv: Optional[np.ndarray] = None
    sadf_cv: Optional[np.ndarray] = None
    gsadf_cv: Optional[np.ndarray] = None
    badf_cv: Optional[np.ndarray] = None
    bsadf_cv: Optional[np.ndarray] = None
    bsadf_panel_cv: Optional[np.ndarray] = None
    gsadf_panel_cv: Optional[np.ndarray] = None
    names: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        for name in ("adf_cv", "sadf_cv", "gsadf_cv", "badf_cv", "bsadf_cv",
                     "bsadf_panel_cv", "gsadf_panel_cv"):
            value = getattr(self, name)
            if value is not None:
                value.setflags(write=False)

    @property
    def ntime(self) -> int:
        """Length of the per-index critical value vectors."""
        return self.nobs - self.minw - self.lag

    @property
    def offset(self) -> int:
        """Zero-based position in the series of the first per-index value."""
        return self.minw + self.lag

    def level_index(self, level: float) -> int:
        """
        Position of a probability level on the level axis.

        Raises:
            ConfigError: If the level was not computed
        """
        for i, p in enumerate(self.probs):
            if np.isclose(p, level):
                return i
        raise ConfigError(
            f"Probability level {level} is not among the computed levels",
            setting="probs", value=self.probs, issue=f"missing {level}"
        )

    def level_labels(self) -> List[str]:
        """Column labels of the probability levels, e.g. ``'95%'``."""
        return [f"{100 * p:g}%" for p in self.probs]

    def __repr__(self) -> str:
        return (f"CriticalValueSet(method={self.method.value!r}, nobs={self.nobs}, "
                f"minw={self.minw}, lag={self.lag}, iterations={self.iterations}, "
                f"n_series={self.n_series})")


def column_quantiles(stats: np.ndarray, probs: Probabilities) -> np.ndarray:
    """
    Quantiles across replications for each time index.

    Args:
        stats: Statistics of shape (replications, T)
        probs: Probability levels

    Returns:
        np.ndarray: Quantiles of shape (T, len(probs))
    """
    return np.quantile(stats, probs, axis=0).T


def scalar_quantiles(values: np.ndarray, probs: Probabilities) -> np.ndarray:
    """Quantiles of one scalar statistic pooled over replications."""
    return np.quantile(values, probs)


def running_max(cv: np.ndarray) -> np.ndarray:
    """Cumulative maximum along the time axis (axis 0)."""
    return np.maximum.accumulate(cv, axis=0)


def reduce_replications(badf: np.ndarray, probs: Probabilities) -> Dict[str, np.ndarray]:
    """
    Reduce per-replication BADF paths of one series to critical values.

    Args:
        badf: BADF statistics of shape (replications, T)
        probs: Probability levels

    Returns:
        Dict[str, np.ndarray]: ``adf_cv``, ``sadf_cv``, ``gsadf_cv`` of shape
        (P,) and ``badf_cv``, ``bsadf_cv`` of shape (T, P)
    """
    bsadf = np.maximum.accumulate(badf, axis=1)
    return {
        "adf_cv": scalar_quantiles(badf[:, -1], probs),
        "sadf_cv": scalar_quantiles(badf.max(axis=1), probs),
        "gsadf_cv": scalar_quantiles(bsadf[:, -1], probs),
        "badf_cv": column_quantiles(badf, probs),
        "bsadf_cv": running_max(column_quantiles(bsadf, probs)),
    }


class CriticalValueEngine(abc.ABC):
    """
    Abstract base class for critical value engines.

    Subclasses validate their data-specific arguments, then implement
    ``_run`` to execute the replications through ``_run_tasks`` and reduce
    the collected statistics to a ``CriticalValueSet``.

    Args:
        iterations: Number of replications; None reads the configuration
        probs: Probability levels; None reads the configuration
        seed: Root seed; None reads ``core.random_seed`` and falls back to
            fresh operating system entropy
        parallel: Run replications on a thread pool; None reads the configuration
        ncores: Worker count for the thread pool
        progress_callback: Optional ``callback(fraction, message)``
        name: Name used in log messages

    Raises:
        ConfigError: If a setting is invalid
    """

    method: CriticalValueMethod

    def __init__(self,
                 iterations: Optional[int],
                 probs: Optional[Sequence[float]] = None,
                 seed: Optional[int] = None,
                 parallel: Optional[bool] = None,
                 ncores: Optional[int] = None,
                 progress_callback: Optional[ProgressCallback] = None,
                 name: str = "CriticalValueEngine") -> None:
        sim_config = get_simulation_config()

        self.name = name
        self.iterations = validate_replications(iterations, "iterations")
        self.probs = validate_probs(sim_config.probs if probs is None else probs)
        if seed is None:
            seed = get_config("core", "random_seed")
        self.seed = validate_seed(seed)
        if parallel is None:
            parallel = sim_config.parallel
        if ncores is None and parallel is True:
            ncores = sim_config.ncores
        self.parallel, self.ncores = validate_parallel(parallel, ncores)
        self.progress_callback = progress_callback
        self.pivot_tolerance = get_numerical_config().pivot_tolerance

        self._result: Optional[CriticalValueSet] = None

    @property
    def result(self) -> CriticalValueSet:
        """
        Critical values of the last run.

        Raises:
            RuntimeError: If ``compute`` has not been called
        """
        if self._result is None:
            raise RuntimeError(f"{self.name} has not been run. Call compute() first.")
        return self._result

    def _report(self, fraction: float, message: str) -> None:
        if self.progress_callback is not None:
            self.progress_callback(fraction, message)

    def _root_sequence(self) -> np.random.SeedSequence:
        """Root seed sequence of a run; fresh entropy when no seed was given."""
        return np.random.SeedSequence(self.seed)

    def _run_tasks(self,
                   task: Callable[[int], Any],
                   count: int,
                   describe: Optional[Callable[[int], Dict[str, Any]]] = None) -> List[Any]:
        """
        Execute ``task(i)`` for ``i = 0, ..., count - 1``.

        Results are returned in task order regardless of completion order.
        The first failing task aborts the batch: tasks that have not started
        are cancelled and the error propagates with the task coordinates.

        Args:
            task: Function of the task index
            count: Number of tasks
            describe: Maps a task index to ``replication``/``series`` keywords
                for error reporting; defaults to ``{"replication": i}``

        Returns:
            List[Any]: One result per task, in task order

        Raises:
            ComputationError: If any task fails numerically
        """
        if describe is None:
            def describe(index: int) -> Dict[str, Any]:
                return {"replication": index}

        results: List[Any] = [None] * count
        step = max(1, count // 20)

        def failed(index: int, error: ComputationError) -> ComputationError:
            coords = describe(index)
            return ComputationError(
                error.message,
                operation=error.operation,
                window_end=error.window_end,
                replication=coords.get("replication"),
                series=coords.get("series"),
                details=error.details,
                context=error.context,
            )

        if not self.parallel or self.ncores == 1 or count == 1:
            for i in range(count):
                try:
                    results[i] = task(i)
                except ComputationError as e:
                    raise failed(i, e) from e
                if (i + 1) % step == 0 or i + 1 == count:
                    self._report((i + 1) / count, f"Completed {i + 1} of {count} replications")
            return results

        logger.debug(f"{self.name}: running {count} tasks on {self.ncores} threads")
        executor = ThreadPoolExecutor(max_workers=self.ncores)
        try:
            futures = {executor.submit(task, i): i for i in range(count)}
            pending = set(futures)
            done_count = 0
            while pending:
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    index = futures[future]
                    error = future.exception()
                    if error is not None:
                        for other in pending:
                            other.cancel()
                        if isinstance(error, ComputationError):
                            raise failed(index, error) from error
                        raise error
                    results[index] = future.result()
                    done_count += 1
                    if done_count % step == 0 or done_count == count:
                        self._report(done_count / count, f"Completed {done_count} of {count} replications")
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

        return results

    @abc.abstractmethod
    def _run(self, root: np.random.SeedSequence) -> CriticalValueSet:
        """Execute all replications and reduce them to critical values."""
        pass

    def compute(self) -> CriticalValueSet:
        """
        Run the engine.

        Returns:
            CriticalValueSet: The critical values

        Raises:
            ComputationError: If any replication is numerically degenerate
        """
        root = self._root_sequence()
        logger.info(f"{self.name}: starting {self.iterations} replications "
                    f"(parallel={self.parallel}, ncores={self.ncores})")
        self._report(0.0, f"Starting {self.name}")
        result = self._run(root)
        self._report(1.0, f"{self.name} complete")
        logger.info(f"{self.name}: finished")
        self._result = result
        return result

    async def compute_async(self) -> CriticalValueSet:
        """
        Run the engine without blocking the event loop.

        The replications run in the loop's default executor; progress
        callbacks are invoked from that worker thread.

        Returns:
            CriticalValueSet: The critical values
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.compute)

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(iterations={self.iterations}, "
                f"probs={self.probs}, seed={self.seed}, parallel={self.parallel})")
