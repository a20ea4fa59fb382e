from types import MappingProxyType
from typing import Callable, Mapping, Optional

from kubewait.checks import (
    cronjob as check_cronjob,
    daemonset as check_daemonset,
    deployment as check_deployment,
    generic as check_generic,
    ingress as check_ingress,
    job as check_job,
    node as check_node,
    pod as check_pod,
    service as check_service,
    statefulset as check_statefulset,
)

from .context import Condition, EvaluationOutcome, WaitSpec

Strategy = Callable[..., EvaluationOutcome]

# tried in order, so "ingresses" -> "ingress" before "ingresse"
_PLURAL_SUFFIXES = ("es", "s")


def _normalize(kind: str) -> str:
    return (kind or "").strip().lower()


class StrategyRegistry:
    """Read-only map from resource kind to its evaluation strategy."""

    def __init__(self, strategies: Mapping[str, Strategy], fallback: Strategy):
        self._strategies = MappingProxyType({_normalize(k): v for k, v in strategies.items()})
        self._fallback = fallback

    @property
    def fallback(self) -> Strategy:
        return self._fallback

    def kinds(self):
        return tuple(self._strategies)

    def canonical_kind(self, kind: str) -> Optional[str]:
        k = _normalize(kind)
        if k in self._strategies:
            return k
        for suffix in _PLURAL_SUFFIXES:
            if k.endswith(suffix) and k[: -len(suffix)] in self._strategies:
                return k[: -len(suffix)]
        return None

    def resolve(self, kind: str) -> Strategy:
        canonical = self.canonical_kind(kind)
        if canonical is None:
            return self._fallback
        return self._strategies[canonical]

    def evaluate(
        self, client, spec: WaitSpec, cond: Condition, timeout: Optional[float] = None
    ) -> EvaluationOutcome:
        return self.resolve(spec.kind)(client, spec, cond, timeout)


def build_default_registry() -> StrategyRegistry:
    return StrategyRegistry(
        {
            "node": check_node.evaluate,
            "pod": check_pod.evaluate,
            "deployment": check_deployment.evaluate,
            "service": check_service.evaluate,
            "daemonset": check_daemonset.evaluate,
            "statefulset": check_statefulset.evaluate,
            "job": check_job.evaluate,
            "cronjob": check_cronjob.evaluate,
            "ingress": check_ingress.evaluate,
        },
        fallback=check_generic.evaluate,
    )


DEFAULT_REGISTRY = build_default_registry()
