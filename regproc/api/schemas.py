from enum import Enum
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field

class ValidationStageName(str, Enum):
    introducer = "introducer"
    supervisor = "supervisor"

class WorkflowActionRequest(BaseModel):
    rid: str
    actionCode: str
    actionMessage: str = ""
    # ISO-8601, required by MARK_AS_PAUSED
    resumeTimestamp: Optional[str] = None
    eventTimestamp: Optional[str] = None
    defaultResumeAction: Optional[str] = None
    iteration: Optional[int] = None
    reg_type: Optional[str] = None
    workflowInstanceId: Optional[str] = None
    additionalInfoProcess: Optional[str] = None

class ValidationRequest(BaseModel):
    rid: str
    reg_type: str = "NEW"
    iteration: int = 1
    workflowInstanceId: Optional[str] = None
    messageBusAddress: Optional[str] = None

class QueuedResponse(BaseModel):
    status: Literal["queued"] = "queued"
    jobId: str

class StatusSnapshot(BaseModel):
    record: Dict[str, Any]
    history: List[Dict[str, Any]] = Field(default_factory=list)
    additionalInfoRequest: Optional[Dict[str, Any]] = None
