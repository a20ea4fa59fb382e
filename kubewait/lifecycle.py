"""Create/read/update/delete semantics for a declared wait.

A declaration is evaluated once when created and again on every read, unless
it is marked ``check_once`` and has already succeeded, in which case the
previous record is returned untouched. Declarations are never updated in
place: a changed declaration is a new wait.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from kubewait.engine import ConditionChecker, WaitResult, WaitSpec, parse_condition
from kubewait.engine.condition import validate_condition
from kubewait.errors import UpdateNotSupported
from kubewait.kube.client import ClientSettings, ProviderConfig, build_api_clients, resolve_settings
from kubewait.kube.resources import KubeResourceClient, is_cluster_scoped

logger = logging.getLogger("kubewait.lifecycle")


@dataclass(frozen=True)
class WaitDeclaration:
    condition: str
    resource: str
    name: str = ""
    namespace: str = ""
    all: bool = False
    timeout: int = 300
    check_interval: int = 5
    check_once: bool = False
    labels: str = ""
    field_selector: str = ""
    kube_config_type: str = "provider"
    kube_config: str = ""
    context: str = ""

    @classmethod
    def from_spec(cls, spec: Dict[str, Any]) -> "WaitDeclaration":
        return cls(
            condition=spec.get("for", ""),
            resource=spec.get("resource", ""),
            name=spec.get("name", "") or "",
            namespace=spec.get("namespace", "") or "",
            all=bool(spec.get("all", False)),
            timeout=int(spec.get("timeout", 300)),
            check_interval=int(spec.get("checkInterval", 5)),
            check_once=bool(spec.get("checkOnce", False)),
            labels=spec.get("labels", "") or "",
            field_selector=spec.get("fieldSelector", "") or "",
            kube_config_type=spec.get("kubeConfigType", "") or "provider",
            kube_config=spec.get("kubeConfig", "") or "",
            context=spec.get("context", "") or "",
        )

    def client_settings(self) -> ClientSettings:
        return ClientSettings(
            config_type=self.kube_config_type or "provider",
            kube_config=self.kube_config,
            context=self.context,
        )


@dataclass(frozen=True)
class WaitRecord:
    id: str
    condition_met: bool
    last_checked: str
    message: str

    @classmethod
    def from_result(cls, record_id: str, result: WaitResult) -> "WaitRecord":
        return cls(
            id=record_id,
            condition_met=result.condition_met,
            last_checked=result.last_checked_rfc3339(),
            message=result.message,
        )

    @classmethod
    def from_status(cls, status: Optional[Dict[str, Any]]) -> Optional["WaitRecord"]:
        if not status or not status.get("id"):
            return None
        return cls(
            id=status["id"],
            condition_met=bool(status.get("conditionMet", False)),
            last_checked=status.get("lastChecked", ""),
            message=status.get("message", ""),
        )

    def to_status(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "conditionMet": self.condition_met,
            "lastChecked": self.last_checked,
            "message": self.message,
        }


def _default_client_factory(settings: ClientSettings):
    return KubeResourceClient(build_api_clients(settings))


class WaitLifecycle:
    def __init__(
        self,
        provider: Optional[ProviderConfig] = None,
        client_factory: Callable[[ClientSettings], Any] = _default_client_factory,
        clock: Callable[[], float] = time.time,
    ):
        self.provider = provider
        self.client_factory = client_factory
        self.clock = clock

    def namespace_for(self, decl: WaitDeclaration) -> str:
        if is_cluster_scoped(decl.resource):
            return ""
        if decl.namespace:
            return decl.namespace
        if self.provider is not None and self.provider.namespace:
            return self.provider.namespace
        return "default"

    def wait_spec(self, decl: WaitDeclaration) -> WaitSpec:
        return WaitSpec(
            kind=decl.resource,
            name=decl.name or None,
            namespace=self.namespace_for(decl),
            label_selector=decl.labels,
            field_selector=decl.field_selector,
            condition=decl.condition,
            match_all=decl.all,
            timeout=decl.timeout,
            interval=decl.check_interval,
        )

    def _run(self, decl: WaitDeclaration, cancel=None) -> WaitResult:
        spec = self.wait_spec(decl)
        # a malformed condition must fail before credentials are resolved
        validate_condition(parse_condition(spec.condition))
        client = self.client_factory(resolve_settings(decl.client_settings(), self.provider))
        return ConditionChecker(client, spec).wait(cancel)

    def create(self, decl: WaitDeclaration, cancel=None) -> WaitRecord:
        if not decl.resource:
            raise ValueError("resource is required")
        record_id = f"{decl.resource}-wait-{int(self.clock())}"
        logger.info("Creating wait %s for %s %s", record_id, decl.resource, decl.condition)
        return WaitRecord.from_result(record_id, self._run(decl, cancel))

    def read(self, decl: WaitDeclaration, prior: WaitRecord, cancel=None) -> WaitRecord:
        if decl.check_once and prior.condition_met:
            logger.debug("Wait %s already met and check_once is set, skipping", prior.id)
            return prior
        return WaitRecord.from_result(prior.id, self._run(decl, cancel))

    def update(self, *_args, **_kwargs) -> WaitRecord:
        raise UpdateNotSupported(
            "Wait resources cannot be updated. Any configuration change requires replacement."
        )

    def delete(self, *_args, **_kwargs) -> None:
        return None
