import asyncio
import functools
import logging
import os
import threading

import kopf

from kubewait.errors import (
    ClientConfigError,
    KubeWaitError,
    MalformedCondition,
    UpdateNotSupported,
    WaitCancelled,
    WaitTimeout,
)
from kubewait.kube.client import ProviderConfig, get_k8s_api_clients
from kubewait.kube.crd import GROUP, PLURAL, VERSION, ensure_crd_installed
from kubewait.lifecycle import WaitDeclaration, WaitLifecycle, WaitRecord

logger = logging.getLogger("kubewait.operator")

REFRESH_SECONDS = float(os.getenv("KUBEWAIT_REFRESH_SECONDS", "60"))

_provider = ProviderConfig.from_env()
_lifecycle = WaitLifecycle(provider=_provider)


def failure_status(e: Exception) -> dict:
    """Status patch for a wait that did not succeed."""
    status = {"conditionMet": False, "message": str(e)}
    if isinstance(e, (MalformedCondition, ClientConfigError, ValueError)):
        status["phase"] = "Invalid"
        return status

    if isinstance(e, WaitTimeout):
        status["phase"] = "TimedOut"
    elif isinstance(e, WaitCancelled):
        status["phase"] = "Cancelled"
    else:
        status["phase"] = "Failed"
    result = getattr(e, "result", None)
    if result is not None:
        status["message"] = result.message
        status["lastChecked"] = result.last_checked_rfc3339()
    last = getattr(e, "last_observed", None)
    if last is not None:
        status["lastObserved"] = last.message
    return status


def success_status(record: WaitRecord) -> dict:
    status = record.to_status()
    status["phase"] = "Satisfied" if record.condition_met else "Pending"
    return status


@kopf.on.startup()
async def _startup(settings: kopf.OperatorSettings, **_):
    settings.networking.request_timeout = 30
    settings.networking.connect_timeout = 5

    logger.info("Ensuring KubeWait CRD is installed")
    apis = get_k8s_api_clients(provider=_provider)
    await asyncio.get_event_loop().run_in_executor(None, ensure_crd_installed, apis)
    logger.info("CRD check complete")


@kopf.on.create(GROUP, VERSION, PLURAL)
async def create_wait(spec, meta, patch, **_):
    ns = meta.get("namespace")
    name = meta.get("name")
    logger.info("Creating KubeWait %s/%s", ns, name)

    decl = WaitDeclaration.from_spec(dict(spec))
    patch.status["phase"] = "Waiting"
    cancel = threading.Event()
    try:
        record = await asyncio.get_event_loop().run_in_executor(
            None, functools.partial(_lifecycle.create, decl, cancel=cancel)
        )
    except asyncio.CancelledError:
        # the executor thread outlives the handler unless told to stop
        cancel.set()
        raise
    except (MalformedCondition, ClientConfigError, ValueError) as e:
        logger.error("KubeWait %s/%s is invalid: %s", ns, name, e)
        patch.status.update(failure_status(e))
        raise kopf.PermanentError(str(e)) from e
    except KubeWaitError as e:
        logger.warning("KubeWait %s/%s did not succeed: %s", ns, name, e)
        patch.status.update(failure_status(e))
        raise kopf.TemporaryError(str(e), delay=decl.check_interval) from e

    logger.info("KubeWait %s/%s: %s", ns, name, record.message)
    patch.status.update(success_status(record))


@kopf.on.update(GROUP, VERSION, PLURAL, field="spec")
def reject_update(meta, **_):
    try:
        _lifecycle.update()
    except UpdateNotSupported as e:
        logger.error("Rejected update of KubeWait %s/%s", meta.get("namespace"), meta.get("name"))
        raise kopf.PermanentError(str(e)) from e


@kopf.on.delete(GROUP, VERSION, PLURAL, optional=True)
def delete_wait(**_):
    _lifecycle.delete()


@kopf.timer(GROUP, VERSION, PLURAL, interval=REFRESH_SECONDS, initial_delay=REFRESH_SECONDS)
def refresh_wait(spec, status, meta, patch, stopped, **_):
    prior = WaitRecord.from_status(status)
    if prior is None:
        # creation has not recorded a result yet
        return

    decl = WaitDeclaration.from_spec(dict(spec))
    try:
        record = _lifecycle.read(decl, prior, cancel=stopped)
    except KubeWaitError as e:
        logger.warning("Refreshing KubeWait %s/%s: %s", meta.get("namespace"), meta.get("name"), e)
        patch.status.update(failure_status(e))
        return

    if record != prior:
        patch.status.update(success_status(record))


def main():
    kopf.configure(verbose=os.getenv("DEBUG", "false").lower() == "true")
    kopf.run(clusterwide=True)
