from typing import Optional

from regproc.observability.logging import log
from regproc.settings import settings
from regproc.store.models import WorkflowActionCommand
from regproc.utils.http import request_json


class WorkflowActionService:
    """
    Resumes the parent workflow that raised an additional-info request.

    The workflow-instance id stored on the request identifies which parent run to resume.
    """

    def __init__(self, url: Optional[str] = None, action: Optional[str] = None):
        self.url = url if url is not None else settings.WORKFLOW_ACTION_URL
        self.action = action or settings.RESUME_PARENT_FLOW_ACTION

    def process_workflow_action(self, command: WorkflowActionCommand, workflow_instance_id: str) -> None:
        request_json(
            "POST",
            self.url,
            json_body={
                "request": {
                    "workflowId": workflow_instance_id,
                    "workflowAction": self.action,
                    "rid": command.rid,
                    "sourceProcess": command.reg_type,
                    "sourceActionCode": command.actionCode,
                }
            },
            api_name="WORKFLOW_ACTION",
        )
        log(
            event="parent_flow_action_sent",
            rid=command.rid,
            workflowInstanceId=workflow_instance_id,
            action=self.action,
        )
