from .context import Condition, EvaluationOutcome, WaitResult, WaitSpec
from .condition import parse_condition, parse_jsonpath_value
from .policy import aggregate
from .dispatcher import DEFAULT_REGISTRY, StrategyRegistry, build_default_registry
from .runner import ConditionChecker, WaitState, format_duration, wait_for_condition

__all__ = [
    "Condition",
    "EvaluationOutcome",
    "WaitResult",
    "WaitSpec",
    "parse_condition",
    "parse_jsonpath_value",
    "aggregate",
    "DEFAULT_REGISTRY",
    "StrategyRegistry",
    "build_default_registry",
    "ConditionChecker",
    "WaitState",
    "format_duration",
    "wait_for_condition",
]
