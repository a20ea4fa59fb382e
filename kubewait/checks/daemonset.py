from kubewait.engine.context import Condition, WaitSpec

from .base import common_match, get_field, run_check


def satisfies(obj: dict, cond: Condition) -> bool:
    if cond.type in ("condition", "ready"):
        desired = get_field(obj, "status.desiredNumberScheduled") or 0
        ready = get_field(obj, "status.numberReady") or 0
        return desired == ready
    return common_match(obj, cond)


def evaluate(client, spec: WaitSpec, cond: Condition, timeout=None):
    return run_check(client, spec, cond, "daemonset", satisfies, timeout)
