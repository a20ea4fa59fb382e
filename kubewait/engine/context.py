from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import NamedTuple, Optional


class Condition(NamedTuple):
    type: str
    value: str


@dataclass(frozen=True)
class WaitSpec:
    kind: str
    condition: str
    name: Optional[str] = None
    namespace: str = ""
    label_selector: str = ""
    field_selector: str = ""
    match_all: bool = False
    timeout: float = 300
    interval: float = 5

    def __post_init__(self):
        if not self.kind or not self.kind.strip():
            raise ValueError("kind is required")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.interval <= 0:
            raise ValueError(f"interval must be positive, got {self.interval}")


@dataclass(frozen=True)
class EvaluationOutcome:
    matched: int
    total: int
    kind: str
    condition: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class WaitResult:
    condition_met: bool
    message: str
    last_checked: datetime = field(default_factory=_utcnow)

    def last_checked_rfc3339(self) -> str:
        return self.last_checked.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
