from kubewait.engine.context import Condition, WaitSpec

from .base import common_match, run_check


def evaluate(client, spec: WaitSpec, cond: Condition, timeout=None):
    return run_check(client, spec, cond, "cronjob", common_match, timeout)
