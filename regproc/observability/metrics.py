"""
Lightweight Redis counters for the two handlers.

Counters are best-effort: a Redis hiccup while counting must never change the
outcome of a workflow action or a validation.
"""
from __future__ import annotations

from typing import Dict

from regproc.store.redis_conn import get_redis

K_WF_APPLIED = "metrics:workflow:applied"        # HINCRBY actionCode
K_WF_DROPPED = "metrics:workflow:dropped"        # HINCRBY reason
K_WF_FAILED = "metrics:workflow:failed"          # HINCRBY errorType
K_VAL_OUTCOME = "metrics:validation:outcome"     # HINCRBY stage:outcome


def _hincr(key: str, field: str) -> None:
    try:
        get_redis().hincrby(key, field or "unknown", 1)
    except Exception:
        pass


def record_workflow_applied(action_code: str) -> None:
    _hincr(K_WF_APPLIED, action_code)


def record_workflow_dropped(reason: str) -> None:
    _hincr(K_WF_DROPPED, reason)


def record_workflow_failed(error_type: str) -> None:
    _hincr(K_WF_FAILED, error_type)


def record_validation_outcome(stage: str, outcome: str) -> None:
    _hincr(K_VAL_OUTCOME, f"{stage}:{outcome}")


def snapshot() -> Dict[str, Dict[str, int]]:
    r = get_redis()
    out = {}
    for name, key in (
        ("workflowApplied", K_WF_APPLIED),
        ("workflowDropped", K_WF_DROPPED),
        ("workflowFailed", K_WF_FAILED),
        ("validationOutcome", K_VAL_OUTCOME),
    ):
        raw = r.hgetall(key) or {}
        out[name] = {k: int(v) for k, v in raw.items()}
    return out
