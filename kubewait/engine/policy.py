from typing import Tuple

from .context import EvaluationOutcome


def aggregate(outcome: EvaluationOutcome, match_all: bool) -> Tuple[bool, str]:
    # message format is surfaced verbatim to users, keep it identical for every kind
    if outcome.total == 0:
        return False, f"No matching {outcome.kind} found"

    if match_all:
        met = outcome.matched == outcome.total
    else:
        met = outcome.matched > 0
    return met, f"{outcome.matched}/{outcome.total} {outcome.kind} meet condition {outcome.condition}"
