"""
Shared fakes for kubewait tests: an in-memory resource client, a manual
clock and a cancellation flag that advances that clock instead of sleeping.
"""

import pytest


class FakeResourceClient:
    """Replays canned list responses; the last one repeats.

    A response is a list of wire-form objects or an exception instance to raise.
    """

    def __init__(self, *responses, clock=None):
        self.responses = list(responses) or [[]]
        self.clock = clock
        self.calls = []

    def list(self, kind, namespace="", label_selector="", field_selector="", timeout=None):
        self.calls.append(
            {
                "kind": kind,
                "namespace": namespace,
                "label_selector": label_selector,
                "field_selector": field_selector,
                "timeout": timeout,
                "at": self.clock() if self.clock else None,
            }
        )
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return list(response)

    @property
    def call_times(self):
        return [c["at"] for c in self.calls]


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class FakeCancel:
    """Stands in for threading.Event; waiting moves the fake clock forward."""

    def __init__(self, clock, cancel_at=None):
        self.clock = clock
        self.cancel_at = cancel_at
        self._set = False
        self.waits = []

    def set(self):
        self._set = True

    def is_set(self):
        return self._set

    def wait(self, timeout=None):
        self.waits.append(timeout)
        if self._set:
            return True
        target = self.clock.now + (timeout or 0)
        if self.cancel_at is not None and self.cancel_at <= target:
            self.clock.now = max(self.clock.now, self.cancel_at)
            self._set = True
            return True
        self.clock.now = target
        return False


def make_object(name, namespace="default", spec=None, status=None, **metadata):
    meta = {"name": name, "namespace": namespace}
    meta.update(metadata)
    return {"metadata": meta, "spec": spec or {}, "status": status or {}}


def with_conditions(name, *conds, **kwargs):
    """Object whose status.conditions holds ``(type, status)`` pairs."""
    status = kwargs.pop("status", {})
    status = dict(status, conditions=[{"type": t, "status": s} for t, s in conds])
    return make_object(name, status=status, **kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cancel(clock):
    return FakeCancel(clock)
