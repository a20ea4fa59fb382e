import logging
from typing import Any, Dict, List, Optional

import urllib3
from kubernetes.client import ApiException
from kubernetes.dynamic import DynamicClient

from kubewait.errors import ClientConfigError, TransportFailure

logger = logging.getLogger("kubewait.kube")

# kind -> (api, namespaced list call, all-namespaces list call or None if cluster-scoped)
_LISTERS = {
    "node": ("core", "list_node", None),
    "pod": ("core", "list_namespaced_pod", "list_pod_for_all_namespaces"),
    "service": ("core", "list_namespaced_service", "list_service_for_all_namespaces"),
    "deployment": ("apps", "list_namespaced_deployment", "list_deployment_for_all_namespaces"),
    "daemonset": ("apps", "list_namespaced_daemon_set", "list_daemon_set_for_all_namespaces"),
    "statefulset": ("apps", "list_namespaced_stateful_set", "list_stateful_set_for_all_namespaces"),
    "job": ("batch", "list_namespaced_job", "list_job_for_all_namespaces"),
    "cronjob": ("batch", "list_namespaced_cron_job", "list_cron_job_for_all_namespaces"),
    "ingress": ("networking", "list_namespaced_ingress", "list_ingress_for_all_namespaces"),
}

CLUSTER_SCOPED_KINDS = frozenset(
    {
        "node",
        "namespace",
        "persistentvolume",
        "storageclass",
        "clusterrole",
        "clusterrolebinding",
        "customresourcedefinition",
    }
)


def is_cluster_scoped(kind: str) -> bool:
    k = (kind or "").strip().lower()
    if k in CLUSTER_SCOPED_KINDS:
        return True
    return k.endswith("s") and k[:-1] in CLUSTER_SCOPED_KINDS


def _translate(kind: str, e: Exception) -> Exception:
    if isinstance(e, ApiException):
        if e.status in (401, 403):
            return ClientConfigError(f"not authorised to list {kind}: {e.status} {e.reason}")
        if e.status == 404:
            return ClientConfigError(f"resource type {kind!r} is not served by the cluster")
        return TransportFailure(f"{e.status} {e.reason}", status=e.status)
    return TransportFailure(str(e))


class KubeResourceClient:
    """Lists objects of one kind and returns them in wire form (camelCase dicts)."""

    def __init__(self, apis: Dict[str, Any]):
        self.apis = apis
        self._dynamic: Optional[DynamicClient] = None

    def list(
        self,
        kind: str,
        namespace: str = "",
        label_selector: str = "",
        field_selector: str = "",
        timeout: Optional[float] = None,
    ) -> List[Dict[str, Any]]:
        kwargs: Dict[str, Any] = {}
        if label_selector:
            kwargs["label_selector"] = label_selector
        if field_selector:
            kwargs["field_selector"] = field_selector
        if timeout:
            kwargs["_request_timeout"] = timeout

        key = (kind or "").strip().lower()
        logger.debug("list %s ns=%r labels=%r fields=%r", key, namespace, label_selector, field_selector)
        try:
            if key in _LISTERS:
                return self._list_typed(key, namespace, kwargs)
            return self._list_dynamic(key, namespace, kwargs)
        except (ApiException, urllib3.exceptions.HTTPError) as e:
            raise _translate(kind, e) from e

    def _list_typed(self, kind: str, namespace: str, kwargs: Dict[str, Any]) -> List[Dict[str, Any]]:
        api_name, namespaced_call, all_call = _LISTERS[kind]
        api = self.apis[api_name]
        if all_call is None:
            resp = getattr(api, namespaced_call)(**kwargs)
        elif namespace:
            resp = getattr(api, namespaced_call)(namespace, **kwargs)
        else:
            resp = getattr(api, all_call)(**kwargs)

        serialize = self.apis["dyn"].sanitize_for_serialization
        return [serialize(item) for item in resp.items or []]

    def _dynamic_client(self) -> DynamicClient:
        if self._dynamic is None:
            self._dynamic = DynamicClient(self.apis["dyn"])
        return self._dynamic

    def _find_resource(self, kind: str):
        """Resolve a plural, singular, kind or short name through discovery.

        When several group versions serve the name, a preferred version wins;
        otherwise the first one discovered is used.
        """
        candidates = self._candidates(kind)
        if not candidates:
            raise ClientConfigError(f"resource type {kind!r} is not served by the cluster")
        for r in candidates:
            if getattr(r, "preferred", False):
                return r
        return candidates[0]

    def _candidates(self, kind: str) -> list:
        found = []
        for r in self._dynamic_client().resources.search():
            name = (getattr(r, "name", None) or "").lower()
            if not name or "/" in name:
                continue
            names = {
                name,
                (getattr(r, "singular_name", None) or "").lower(),
                (getattr(r, "kind", None) or "").lower(),
            }
            names.update(s.lower() for s in getattr(r, "short_names", None) or [])
            if kind in names:
                found.append(r)
        return found

    def _list_dynamic(self, kind: str, namespace: str, kwargs: Dict[str, Any]) -> List[Dict[str, Any]]:
        resource = self._find_resource(kind)
        if resource.namespaced and namespace:
            kwargs["namespace"] = namespace
        resp = self._dynamic_client().get(resource, **kwargs)
        return list(resp.to_dict().get("items") or [])
