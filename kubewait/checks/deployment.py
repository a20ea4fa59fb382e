from kubewait.engine.context import Condition, WaitSpec

from .base import common_match, get_field, has_true_condition, run_check


def satisfies(obj: dict, cond: Condition) -> bool:
    if cond.type == "condition":
        return has_true_condition(obj, cond.value)
    if cond.type == "ready":
        desired = get_field(obj, "spec.replicas") or 0
        available = get_field(obj, "status.availableReplicas") or 0
        return desired == available and desired > 0
    return common_match(obj, cond)


def evaluate(client, spec: WaitSpec, cond: Condition, timeout=None):
    return run_check(client, spec, cond, "deployment", satisfies, timeout)
