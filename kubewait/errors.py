from typing import Optional


class KubeWaitError(Exception):
    """Base error. ``result`` holds the last WaitResult observed, if any."""

    def __init__(self, message: str, result=None):
        super().__init__(message)
        self.result = result


class MalformedCondition(KubeWaitError, ValueError):
    pass


class TransportFailure(KubeWaitError):
    """A list call failed in a way that may succeed on the next tick."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ClientConfigError(KubeWaitError):
    """Credentials, authorisation or resource type are unusable. Never retried."""


class WaitTimeout(KubeWaitError):
    def __init__(self, message: str, result=None, last_observed=None):
        super().__init__(message, result)
        self.last_observed = last_observed


class WaitCancelled(KubeWaitError):
    pass


class UpdateNotSupported(KubeWaitError):
    pass
