"""Best-effort checks for kinds without a dedicated strategy.

Objects are inspected by path, so a condition type only applies when the
object actually carries the fields it needs; otherwise it does not match.
"""
import logging

from kubewait.engine.context import Condition, WaitSpec

from .base import (
    common_match,
    get_field,
    has_field,
    has_lb_ingress,
    has_true_condition,
    run_check,
)

logger = logging.getLogger("kubewait.checks.generic")


def satisfies(obj: dict, cond: Condition) -> bool:
    if cond.type == "condition":
        if not has_field(obj, "status.conditions"):
            logger.debug("%s carries no status.conditions", get_field(obj, "metadata.name"))
            return False
        return has_true_condition(obj, cond.value)

    if cond.type == "phase":
        phase = get_field(obj, "status.phase")
        return isinstance(phase, str) and phase == cond.value

    if cond.type == "ready":
        replicas = get_field(obj, "spec.replicas")
        if isinstance(replicas, int) and not isinstance(replicas, bool):
            ready = get_field(obj, "status.readyReplicas") or 0
            return isinstance(ready, int) and ready == replicas
        return has_true_condition(obj, "Ready")

    if cond.type == "loadbalancer":
        return has_lb_ingress(obj)

    return common_match(obj, cond)


def evaluate(client, spec: WaitSpec, cond: Condition, timeout=None):
    return run_check(client, spec, cond, spec.kind.strip().lower(), satisfies, timeout)
