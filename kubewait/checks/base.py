import logging
from typing import Any, Callable, Dict, List, Optional

from kubewait.engine.condition import compile_jsonpath, parse_jsonpath_value
from kubewait.engine.context import Condition, EvaluationOutcome, WaitSpec

logger = logging.getLogger("kubewait.checks")

Predicate = Callable[[Dict[str, Any], Condition], bool]

_MISSING = object()


def get_field(obj: Dict[str, Any], path: str, default=None):
    """Read a dotted path (``status.numberReady``) from a wire-form object."""
    cur: Any = obj
    for key in path.split("."):
        if not isinstance(cur, dict):
            return default
        cur = cur.get(key, _MISSING)
        if cur is _MISSING:
            return default
    return cur


def has_field(obj: Dict[str, Any], path: str) -> bool:
    return get_field(obj, path, _MISSING) is not _MISSING


def has_true_condition(obj: Dict[str, Any], ctype: str) -> bool:
    conditions = get_field(obj, "status.conditions")
    # some custom resources keep conditions as a map; only the list form is understood
    if not isinstance(conditions, list):
        return False
    for c in conditions:
        if isinstance(c, dict) and c.get("type") == ctype and c.get("status") == "True":
            return True
    return False


def has_lb_ingress(obj: Dict[str, Any]) -> bool:
    ingress = get_field(obj, "status.loadBalancer.ingress")
    return isinstance(ingress, list) and len(ingress) > 0


def _render(v) -> str:
    if isinstance(v, bool):
        return "true" if v else "false"
    return str(v)


def jsonpath_matches(obj: Dict[str, Any], value: str) -> bool:
    path, literal = parse_jsonpath_value(value)
    expr = compile_jsonpath(path)
    if literal is None:
        # existence-only: being in the listed set is enough
        return True
    return any(
        m.value is not None and _render(m.value) == literal
        for m in expr.find(obj)
    )


def common_match(obj: Dict[str, Any], cond: Condition) -> bool:
    """Condition types accepted on every kind."""
    if cond.type in ("exist", "exists"):
        return True
    if cond.type == "jsonpath":
        return jsonpath_matches(obj, cond.value)
    return False


def filter_by_name(objects: List[Dict[str, Any]], name: Optional[str]) -> List[Dict[str, Any]]:
    if not name:
        return objects
    return [o for o in objects if get_field(o, "metadata.name") == name]


def run_check(
    client,
    spec: WaitSpec,
    cond: Condition,
    kind: str,
    predicate: Predicate,
    timeout: Optional[float] = None,
) -> EvaluationOutcome:
    objects = client.list(
        kind,
        namespace=spec.namespace,
        label_selector=spec.label_selector,
        field_selector=spec.field_selector,
        timeout=timeout,
    )
    objects = filter_by_name(objects, spec.name)

    matched = sum(1 for o in objects if predicate(o, cond))
    logger.debug(
        "%s: %d/%d objects match %s=%s", kind, matched, len(objects), cond.type, cond.value
    )
    return EvaluationOutcome(
        matched=matched,
        total=len(objects),
        kind=spec.kind.strip(),
        condition=spec.condition,
    )
