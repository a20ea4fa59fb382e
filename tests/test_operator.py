import asyncio
import threading
from types import SimpleNamespace

import kopf
import pytest

from kubewait.engine import WaitResult
from kubewait.errors import ClientConfigError, MalformedCondition, TransportFailure, WaitCancelled, WaitTimeout
from kubewait.lifecycle import WaitLifecycle, WaitRecord
from kubewait.operator import main as operator_main
from kubewait.operator.main import failure_status, success_status


def test_success_status():
    record = WaitRecord("pods-wait-1", True, "2024-01-01T00:00:00Z", "1/1 pods meet condition condition=Ready")
    assert success_status(record) == {
        "id": "pods-wait-1",
        "conditionMet": True,
        "lastChecked": "2024-01-01T00:00:00Z",
        "message": "1/1 pods meet condition condition=Ready",
        "phase": "Satisfied",
    }


def test_timeout_status_carries_result_and_last_observed():
    err = WaitTimeout(
        "timeout waiting for condition condition=Ready",
        result=WaitResult(False, "Timeout after 5m0s"),
        last_observed=WaitResult(False, "0/1 pods meet condition condition=Ready"),
    )
    status = failure_status(err)
    assert status["phase"] == "TimedOut"
    assert status["conditionMet"] is False
    assert status["message"] == "Timeout after 5m0s"
    assert status["lastObserved"] == "0/1 pods meet condition condition=Ready"
    assert status["lastChecked"].endswith("Z")


def test_cancelled_status():
    err = WaitCancelled("cancelled", result=WaitResult(False, "Context cancelled"))
    assert failure_status(err)["phase"] == "Cancelled"


def test_invalid_status():
    for err in (MalformedCondition("bad"), ClientConfigError("no creds"), ValueError("resource is required")):
        status = failure_status(err)
        assert status["phase"] == "Invalid"
        assert status["message"] == str(err)


def test_failed_status_without_result():
    status = failure_status(TransportFailure("boom"))
    assert status == {"conditionMet": False, "message": "boom", "phase": "Failed"}


# ---------------------------------------------------------------------------
# handlers
# ---------------------------------------------------------------------------

SPEC = {"for": "condition=Ready", "resource": "pods", "timeout": 30, "checkInterval": 7}
META = {"namespace": "ops", "name": "web-ready"}
MET = WaitRecord("pods-wait-1", True, "2024-01-01T00:00:00Z", "1/1 pods meet condition condition=Ready")


class FakeLifecycle:
    def __init__(self, outcome=None):
        self.outcome = outcome
        self.created = []
        self.read_calls = []

    def _reply(self):
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome

    def create(self, decl, cancel=None):
        self.created.append((decl, cancel))
        return self._reply()

    def read(self, decl, prior, cancel=None):
        self.read_calls.append((decl, prior, cancel))
        return self._reply()

    def update(self, *args, **kwargs):
        return WaitLifecycle().update()

    def delete(self, *args, **kwargs):
        return None


def new_patch():
    return SimpleNamespace(status={})


def create(lifecycle, monkeypatch, spec=SPEC):
    monkeypatch.setattr(operator_main, "_lifecycle", lifecycle)
    patch = new_patch()
    asyncio.run(operator_main.create_wait(spec=spec, meta=META, patch=patch))
    return patch


def test_create_patches_satisfied_status(monkeypatch):
    lifecycle = FakeLifecycle(MET)
    patch = create(lifecycle, monkeypatch)

    assert patch.status["phase"] == "Satisfied"
    assert patch.status["id"] == "pods-wait-1"
    decl, cancel = lifecycle.created[0]
    assert decl.resource == "pods" and decl.check_interval == 7
    assert not cancel.is_set()


@pytest.mark.parametrize(
    "err",
    [MalformedCondition("condition must be in format 'type=value'"), ClientConfigError("no credentials"), ValueError("resource is required")],
)
def test_create_invalid_input_is_permanent(monkeypatch, err):
    with pytest.raises(kopf.PermanentError):
        create(FakeLifecycle(err), monkeypatch)


def test_create_wait_failure_is_retried_after_check_interval(monkeypatch):
    err = WaitTimeout("timeout waiting for condition condition=Ready", result=WaitResult(False, "Timeout after 30s"))
    monkeypatch.setattr(operator_main, "_lifecycle", FakeLifecycle(err))
    patch = new_patch()

    with pytest.raises(kopf.TemporaryError) as exc:
        asyncio.run(operator_main.create_wait(spec=SPEC, meta=META, patch=patch))

    assert exc.value.delay == 7
    assert patch.status["phase"] == "TimedOut"
    assert patch.status["message"] == "Timeout after 30s"


def test_cancelled_create_stops_the_worker(monkeypatch):
    started = threading.Event()
    seen = {}

    class Blocking(FakeLifecycle):
        def create(self, decl, cancel=None):
            started.set()
            seen["cancelled"] = cancel.wait(5)
            raise WaitCancelled("cancelled")

    monkeypatch.setattr(operator_main, "_lifecycle", Blocking())

    async def scenario():
        task = asyncio.ensure_future(operator_main.create_wait(spec=SPEC, meta=META, patch=new_patch()))
        await asyncio.get_event_loop().run_in_executor(None, started.wait, 5)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert seen["cancelled"] is True


def test_update_is_permanently_rejected():
    with pytest.raises(kopf.PermanentError):
        operator_main.reject_update(meta=META)


def test_refresh_without_prior_record_does_nothing(monkeypatch):
    lifecycle = FakeLifecycle(MET)
    monkeypatch.setattr(operator_main, "_lifecycle", lifecycle)
    patch = new_patch()

    operator_main.refresh_wait(spec=SPEC, status={"phase": "Waiting"}, meta=META, patch=patch, stopped=threading.Event())

    assert lifecycle.read_calls == []
    assert patch.status == {}


def test_refresh_check_once_met_leaves_status_alone(monkeypatch):
    factory_calls = []
    lifecycle = WaitLifecycle(client_factory=lambda settings: factory_calls.append(settings))
    monkeypatch.setattr(operator_main, "_lifecycle", lifecycle)
    patch = new_patch()

    operator_main.refresh_wait(
        spec=dict(SPEC, checkOnce=True), status=MET.to_status(), meta=META, patch=patch, stopped=threading.Event()
    )

    assert factory_calls == []
    assert patch.status == {}


def test_refresh_passes_stop_flag_and_patches_changes(monkeypatch):
    fresh = WaitRecord("pods-wait-1", True, "2024-01-02T00:00:00Z", "2/2 pods meet condition condition=Ready")
    lifecycle = FakeLifecycle(fresh)
    monkeypatch.setattr(operator_main, "_lifecycle", lifecycle)
    stopped = threading.Event()
    patch = new_patch()

    operator_main.refresh_wait(spec=SPEC, status=MET.to_status(), meta=META, patch=patch, stopped=stopped)

    _, prior, cancel = lifecycle.read_calls[0]
    assert prior == MET
    assert cancel is stopped
    assert patch.status["message"] == "2/2 pods meet condition condition=Ready"


def test_refresh_failure_is_recorded_not_raised(monkeypatch):
    err = WaitTimeout("timeout", result=WaitResult(False, "Timeout after 30s"))
    monkeypatch.setattr(operator_main, "_lifecycle", FakeLifecycle(err))
    patch = new_patch()

    operator_main.refresh_wait(spec=SPEC, status=MET.to_status(), meta=META, patch=patch, stopped=threading.Event())

    assert patch.status["phase"] == "TimedOut"
