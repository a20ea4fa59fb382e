from kubewait.engine.context import Condition, WaitSpec

from .base import common_match, get_field, has_true_condition, run_check


def satisfies(obj: dict, cond: Condition) -> bool:
    if cond.type == "condition":
        return has_true_condition(obj, cond.value)
    if cond.type == "phase":
        return get_field(obj, "status.phase") == cond.value
    return common_match(obj, cond)


def evaluate(client, spec: WaitSpec, cond: Condition, timeout=None):
    return run_check(client, spec, cond, "pod", satisfies, timeout)
