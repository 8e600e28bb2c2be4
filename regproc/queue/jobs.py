from dataclasses import asdict
from typing import Any, Dict

from regproc.observability.logging import log
from regproc.store.models import StageMessage, WorkflowActionCommand
from regproc.validation.stage import STAGE_BUILDERS
from regproc.workflow.engine import WorkflowEngine


def process_workflow_action_job(payload: Dict[str, Any]) -> bool:
    """
    Background job applying one workflow internal action.
    The engine is the error boundary; nothing is re-raised, so RQ never retries a dropped action.
    """
    command = WorkflowActionCommand.from_dict(payload)
    log(event="workflow_job_start", rid=command.rid, actionCode=command.actionCode)
    return WorkflowEngine().process(command)


def validate_proxy_job(stage: str, message: Dict[str, Any]) -> Dict[str, Any]:
    """Background job running the introducer or supervisor validation stage."""
    builder = STAGE_BUILDERS.get(stage)
    if builder is None:
        raise ValueError(f"Unknown validation stage: {stage}")
    msg = StageMessage.from_dict(message)
    log(event="validation_job_start", rid=msg.rid, stage=stage)
    out = builder().process(msg)
    return asdict(out)
