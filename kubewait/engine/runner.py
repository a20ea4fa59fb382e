import logging
import threading
import time
from enum import Enum
from typing import Callable, Optional

from kubewait.errors import KubeWaitError, TransportFailure, WaitCancelled, WaitTimeout

from .condition import parse_condition, validate_condition
from .context import WaitResult, WaitSpec
from .dispatcher import DEFAULT_REGISTRY, StrategyRegistry
from .policy import aggregate

logger = logging.getLogger("kubewait.engine")


class WaitState(Enum):
    IDLE = "Idle"
    TICKING = "Ticking"
    SATISFIED = "Satisfied"
    TIMED_OUT = "TimedOut"
    CANCELLED = "Cancelled"
    FAILED = "Failed"


TERMINAL_STATES = frozenset(
    {WaitState.SATISFIED, WaitState.TIMED_OUT, WaitState.CANCELLED, WaitState.FAILED}
)


def format_duration(seconds: float) -> str:
    """Render seconds the way Go prints a time.Duration (``5m0s``, ``1.5s``)."""
    if seconds < 1:
        return f"{round(seconds * 1000, 3):g}ms"
    h, rem = divmod(seconds, 3600)
    m, s = divmod(rem, 60)
    secs = f"{round(s, 6):g}s"
    if h:
        return f"{int(h)}h{int(m)}m{secs}"
    if m:
        return f"{int(m)}m{secs}"
    return secs


class ConditionChecker:
    """Polls one WaitSpec until it is satisfied, times out or is cancelled.

    ``cancel`` may be anything with ``is_set()`` and ``wait(timeout)``, such as
    a ``threading.Event`` or the ``stopped`` flag kopf hands to timers.
    A checker runs once; after reaching a terminal state, ``wait()`` replays
    the outcome without contacting the cluster again.
    """

    def __init__(
        self,
        client,
        spec: WaitSpec,
        registry: Optional[StrategyRegistry] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.spec = spec
        self.registry = registry or DEFAULT_REGISTRY
        self.clock = clock
        self.condition = parse_condition(spec.condition)
        validate_condition(self.condition)

        self.state = WaitState.IDLE
        self.ticks = 0
        self.last_result: Optional[WaitResult] = None
        self.result: Optional[WaitResult] = None
        self._error: Optional[BaseException] = None

    def check(self, timeout: Optional[float] = None) -> WaitResult:
        """Evaluate the condition once."""
        outcome = self.registry.evaluate(self.client, self.spec, self.condition, timeout)
        met, message = aggregate(outcome, self.spec.match_all)
        return WaitResult(condition_met=met, message=message)

    def _tick(self, timeout: float) -> WaitResult:
        self.ticks += 1
        try:
            result = self.check(timeout)
        except TransportFailure as e:
            logger.warning("Listing %s failed, retrying on next tick: %s", self.spec.kind, e)
            result = WaitResult(False, f"Failed to list {self.spec.kind}: {e}")
        self.last_result = result
        logger.debug("tick %d: %s", self.ticks, result.message)
        return result

    def wait(self, cancel=None) -> WaitResult:
        if self.state in TERMINAL_STATES:
            if self._error is not None:
                raise self._error
            return self.result

        spec = self.spec
        cancel = cancel if cancel is not None else threading.Event()
        start = self.clock()
        deadline = start + spec.timeout
        n = 0

        self.state = WaitState.TICKING
        logger.info(
            "Waiting for %s %s (timeout=%s interval=%s)",
            spec.kind,
            spec.condition,
            format_duration(spec.timeout),
            format_duration(spec.interval),
        )

        if cancel.is_set():
            raise self._cancelled()

        while True:
            try:
                result = self._tick(deadline - self.clock())
            except Exception as e:
                self.state = WaitState.FAILED
                self._error = e
                if isinstance(e, KubeWaitError) and e.result is None:
                    e.result = self.last_result
                logger.error("Wait for %s %s failed: %s", spec.kind, spec.condition, e)
                raise

            if result.condition_met:
                self.state = WaitState.SATISFIED
                self.result = result
                logger.info("Condition met: %s", result.message)
                return result

            # skip ticks missed during a slow evaluation instead of bursting
            now = self.clock()
            n = max(n + 1, int((now - start) // spec.interval) + 1)
            wake = min(start + n * spec.interval, deadline)

            if cancel.wait(max(wake - now, 0)):
                raise self._cancelled()
            if self.clock() >= deadline:
                raise self._timed_out()

    def _cancelled(self) -> WaitCancelled:
        self.state = WaitState.CANCELLED
        self.result = WaitResult(False, "Context cancelled")
        self._error = WaitCancelled(
            f"wait for condition {self.spec.condition} cancelled", result=self.result
        )
        logger.warning("Wait for %s %s cancelled", self.spec.kind, self.spec.condition)
        return self._error

    def _timed_out(self) -> WaitTimeout:
        self.state = WaitState.TIMED_OUT
        self.result = WaitResult(False, f"Timeout after {format_duration(self.spec.timeout)}")
        self._error = WaitTimeout(
            f"timeout waiting for condition {self.spec.condition}",
            result=self.result,
            last_observed=self.last_result,
        )
        logger.warning(
            "Timed out waiting for %s %s, last observed: %s",
            self.spec.kind,
            self.spec.condition,
            self.last_result.message if self.last_result else "nothing",
        )
        return self._error


def wait_for_condition(
    client,
    spec: WaitSpec,
    cancel=None,
    registry: Optional[StrategyRegistry] = None,
) -> WaitResult:
    return ConditionChecker(client, spec, registry=registry).wait(cancel)
