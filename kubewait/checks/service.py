from kubewait.engine.context import Condition, WaitSpec

from .base import common_match, has_lb_ingress, run_check


def satisfies(obj: dict, cond: Condition) -> bool:
    # services carry no conditions of their own
    if cond.type == "loadbalancer":
        return has_lb_ingress(obj)
    return common_match(obj, cond)


def evaluate(client, spec: WaitSpec, cond: Condition, timeout=None):
    return run_check(client, spec, cond, "service", satisfies, timeout)
