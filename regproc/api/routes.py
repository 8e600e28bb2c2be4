from fastapi import APIRouter, Depends

from regproc.api.auth import require_api_key
from regproc.api.schemas import QueuedResponse, ValidationRequest, ValidationStageName, WorkflowActionRequest
from regproc.observability.logging import log
from regproc.queue.jobs import process_workflow_action_job, validate_proxy_job
from regproc.queue.rq_conn import get_queue
from regproc.settings import settings

router = APIRouter(dependencies=[Depends(require_api_key)])


@router.post("/workflow/internal-action", response_model=QueuedResponse)
def enqueue_workflow_action(req: WorkflowActionRequest):
    payload = req.model_dump()
    job = get_queue(settings.RQ_WORKFLOW_QUEUE).enqueue(process_workflow_action_job, payload)
    log(event="workflow_action_enqueued", rid=req.rid, actionCode=req.actionCode, jobId=job.id)
    return QueuedResponse(jobId=job.id)


@router.post("/validation/{stage}", response_model=QueuedResponse)
def enqueue_validation(stage: ValidationStageName, req: ValidationRequest):
    job = get_queue(settings.RQ_VALIDATION_QUEUE).enqueue(validate_proxy_job, stage.value, req.model_dump())
    log(event="validation_enqueued", rid=req.rid, stage=stage.value, jobId=job.id)
    return QueuedResponse(jobId=job.id)
