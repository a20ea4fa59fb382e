from kubewait.engine.context import Condition, WaitSpec

from .base import common_match, get_field, run_check


def satisfies(obj: dict, cond: Condition) -> bool:
    if cond.type in ("condition", "ready"):
        replicas = get_field(obj, "spec.replicas")
        if replicas is None:
            return False
        return (get_field(obj, "status.readyReplicas") or 0) == replicas
    return common_match(obj, cond)


def evaluate(client, spec: WaitSpec, cond: Condition, timeout=None):
    return run_check(client, spec, cond, "statefulset", satisfies, timeout)
