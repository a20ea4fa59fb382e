from .client import (
    ClientSettings,
    ProviderConfig,
    build_api_clients,
    get_k8s_api_clients,
    resolve_settings,
)
from .crd import ensure_crd_installed
from .resources import KubeResourceClient, is_cluster_scoped

__all__ = [
    "ClientSettings",
    "ProviderConfig",
    "build_api_clients",
    "get_k8s_api_clients",
    "resolve_settings",
    "ensure_crd_installed",
    "KubeResourceClient",
    "is_cluster_scoped",
]
