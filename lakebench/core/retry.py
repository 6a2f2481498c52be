"""
Retrying Executor

Runs one store call per attempt, timing each attempt and retrying
immediately on any exception until the attempt ceiling is reached.

Attempt states:
    ATTEMPTING -> SUCCEEDED
    ATTEMPTING -> RETRYING -> ATTEMPTING
    ATTEMPTING -> EXHAUSTED
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

from lakebench.core.sample_registry import SampleRegistry
from lakebench.errors import classify_store_error
from lakebench.models import LatencySample, OperationKind, Outcome

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 10


class AttemptState(str, Enum):
    ATTEMPTING = "attempting"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class ExecutionResult(Generic[T]):
    """Final state of an execution and the store call's return value."""

    state: AttemptState
    attempts: int
    value: Optional[T] = None
    last_error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.state is AttemptState.SUCCEEDED


class RetryingExecutor:
    """
    Bounded, no-backoff retry loop around store calls.

    Every attempt appends exactly one sample to the registry: SUCCESS when
    the call returns, ERROR when it raises. Each failed attempt also bumps
    the registry's redo counter.
    """

    def __init__(
        self,
        registry: SampleRegistry,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        clock: Callable[[], int] = time.perf_counter_ns,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.registry = registry
        self.max_attempts = int(max_attempts)
        self._clock = clock

    def execute(
        self, kind: OperationKind, operation: Callable[[], T]
    ) -> ExecutionResult[T]:
        attempts = 0
        last_error: Optional[BaseException] = None
        state = AttemptState.ATTEMPTING

        while state is not AttemptState.EXHAUSTED:
            if state is AttemptState.RETRYING:
                # No backoff, same call.
                state = AttemptState.ATTEMPTING
            attempts += 1
            start = self._clock()
            try:
                value = operation()
            except Exception as e:
                elapsed = self._clock() - start
                self.registry.append(kind, Outcome.ERROR, LatencySample(start, elapsed))
                category = classify_store_error(e)
                self.registry.record_redo(category)
                last_error = e
                logger.debug(
                    "%s attempt %d/%d failed (%s): %s",
                    kind.value,
                    attempts,
                    self.max_attempts,
                    category,
                    e,
                )
                if attempts >= self.max_attempts:
                    state = AttemptState.EXHAUSTED
                else:
                    state = AttemptState.RETRYING
                continue

            elapsed = self._clock() - start
            self.registry.append(kind, Outcome.SUCCESS, LatencySample(start, elapsed))
            return ExecutionResult(AttemptState.SUCCEEDED, attempts, value=value)

        logger.warning(
            "%s gave up after %d attempts: %s", kind.value, attempts, last_error
        )
        return ExecutionResult(
            AttemptState.EXHAUSTED, attempts, last_error=last_error
        )
