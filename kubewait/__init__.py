from .engine import (
    Condition,
    ConditionChecker,
    EvaluationOutcome,
    WaitResult,
    WaitSpec,
    parse_condition,
    wait_for_condition,
)
from .errors import (
    ClientConfigError,
    KubeWaitError,
    MalformedCondition,
    TransportFailure,
    UpdateNotSupported,
    WaitCancelled,
    WaitTimeout,
)

__all__ = [
    "Condition",
    "ConditionChecker",
    "EvaluationOutcome",
    "WaitResult",
    "WaitSpec",
    "parse_condition",
    "wait_for_condition",
    "ClientConfigError",
    "KubeWaitError",
    "MalformedCondition",
    "TransportFailure",
    "UpdateNotSupported",
    "WaitCancelled",
    "WaitTimeout",
]
