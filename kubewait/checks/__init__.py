from . import (
    cronjob,
    daemonset,
    deployment,
    generic,
    ingress,
    job,
    node,
    pod,
    service,
    statefulset,
)

__all__ = [
    "cronjob",
    "daemonset",
    "deployment",
    "generic",
    "ingress",
    "job",
    "node",
    "pod",
    "service",
    "statefulset",
]
