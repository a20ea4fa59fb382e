import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml
from kubernetes import client, config
from kubernetes.config.config_exception import ConfigException

from kubewait.errors import ClientConfigError

logger = logging.getLogger("kubewait.kube")

CONFIG_TYPES = ("auto", "raw", "file", "provider")


@dataclass(frozen=True)
class ClientSettings:
    """Where to find cluster credentials.

    ``kube_config`` holds the kubeconfig content for ``raw`` and a path for
    ``file``; it is ignored for ``auto``.
    """

    config_type: str = "provider"
    kube_config: str = ""
    context: str = ""

    def __post_init__(self):
        if self.config_type not in CONFIG_TYPES:
            raise ClientConfigError(
                f"kube_config_type must be one of {', '.join(CONFIG_TYPES)}, got {self.config_type!r}"
            )


@dataclass(frozen=True)
class ProviderConfig:
    """Operator-wide defaults inherited by every wait declaration."""

    kube_config_type: str = "auto"
    kube_config: str = ""
    context: str = ""
    namespace: str = ""

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        return cls(
            kube_config_type=os.getenv("KUBEWAIT_KUBE_CONFIG_TYPE", "auto") or "auto",
            kube_config=os.getenv("KUBEWAIT_KUBE_CONFIG", ""),
            context=os.getenv("KUBEWAIT_CONTEXT", ""),
            namespace=os.getenv("KUBEWAIT_NAMESPACE", ""),
        )

    def settings(self) -> ClientSettings:
        ctype = self.kube_config_type if self.kube_config_type in ("raw", "file") else "auto"
        return ClientSettings(config_type=ctype, kube_config=self.kube_config, context=self.context)


def resolve_settings(
    resource: Optional[ClientSettings], provider: Optional[ProviderConfig]
) -> ClientSettings:
    """Pick the effective settings: raw, then file, then auto, then provider."""
    if resource is None or resource.config_type == "provider":
        if provider is None:
            ctx = resource.context if resource else ""
            return ClientSettings(config_type="auto", context=ctx)
        return provider.settings()
    return resource


def _expand_path(path: str) -> str:
    return os.path.expanduser(path) if path.startswith("~") else path


def _api_client_from_settings(settings: ClientSettings) -> client.ApiClient:
    ctx = settings.context or None

    if settings.config_type == "raw":
        if not settings.kube_config:
            raise ClientConfigError("kube_config_type 'raw' requires kube_config content")
        try:
            cfg_dict = yaml.safe_load(settings.kube_config)
        except yaml.YAMLError as e:
            raise ClientConfigError(f"failed to parse raw kubeconfig: {e}") from e
        if not isinstance(cfg_dict, dict):
            raise ClientConfigError("raw kubeconfig must be a YAML mapping")
        return config.new_client_from_config_dict(cfg_dict, context=ctx)

    if settings.config_type == "file":
        path = _expand_path(settings.kube_config)
        if not path:
            raise ClientConfigError("kube_config_type 'file' requires a kubeconfig path")
        if not os.path.isfile(path):
            raise ClientConfigError(f"kubeconfig file not found at {path}")
        return config.new_client_from_config(config_file=path, context=ctx)

    try:
        cfg = client.Configuration()
        config.load_incluster_config(client_configuration=cfg)
        logger.debug("Using in-cluster configuration")
        return client.ApiClient(configuration=cfg)
    except ConfigException:
        logger.debug("Not running in-cluster, falling back to default kubeconfig")
    return config.new_client_from_config(context=ctx)


def build_api_clients(settings: ClientSettings) -> Dict[str, Any]:
    try:
        api_client = _api_client_from_settings(settings)
    except ClientConfigError:
        raise
    except (ConfigException, OSError, TypeError, ValueError) as e:
        raise ClientConfigError(
            f"failed to create Kubernetes client ({settings.config_type}): {e}"
        ) from e

    return {
        "core": client.CoreV1Api(api_client),
        "apps": client.AppsV1Api(api_client),
        "batch": client.BatchV1Api(api_client),
        "networking": client.NetworkingV1Api(api_client),
        "custom": client.CustomObjectsApi(api_client),
        "dyn": api_client,
    }


def get_k8s_api_clients(
    resource: Optional[ClientSettings] = None, provider: Optional[ProviderConfig] = None
) -> Dict[str, Any]:
    return build_api_clients(resolve_settings(resource, provider))
