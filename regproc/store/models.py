from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from regproc.core import status_codes as sc


@dataclass
class RegistrationStatusRecord:
    registrationId: str = ""
    # Process / workflow name (NEW, UPDATE, CORRECTION, ...)
    registrationType: str = sc.NEW
    iteration: int = 1
    workflowInstanceId: Optional[str] = None

    statusCode: str = sc.PROCESSING
    subStatusCode: Optional[str] = None
    statusComment: str = ""
    latestTransactionStatusCode: Optional[str] = None
    latestTransactionTypeCode: Optional[str] = None

    # MARK_AS_PAUSED bookkeeping
    resumeTimestamp: Optional[str] = None
    defaultResumeAction: Optional[str] = None

    isActive: bool = True
    updatedAtEpochMs: Optional[int] = None

    def __post_init__(self):
        if self.statusCode not in sc.ALL_STATUSES:
            raise ValueError(f"Unknown registration status code: {self.statusCode!r}")
        try:
            self.iteration = int(self.iteration or 1)
        except (TypeError, ValueError):
            self.iteration = 1


@dataclass
class AdditionalInfoRequest:
    registrationId: str = ""
    additionalInfoProcess: str = ""
    additionalInfoIteration: int = 1
    workflowInstanceId: Optional[str] = None
    additionalInfoReqId: str = ""
    # Epoch ms when the request was raised
    timestamp: Optional[int] = None
    resumeTimestamp: Optional[str] = None
    defaultResumeAction: Optional[str] = None
    # Logically closed once the workflow advances past this iteration
    closed: bool = False


@dataclass
class BiometricSegment:
    bioType: str = ""
    bioSubType: Optional[str] = None
    # Opaque base64 payload; never logged
    data: str = ""


@dataclass
class WorkflowActionCommand:
    rid: str = ""
    actionCode: str = ""
    actionMessage: str = ""
    resumeTimestamp: Optional[str] = None
    eventTimestamp: Optional[str] = None
    defaultResumeAction: Optional[str] = None
    iteration: Optional[int] = None
    reg_type: Optional[str] = None
    workflowInstanceId: Optional[str] = None
    additionalInfoProcess: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkflowActionCommand":
        allowed = {f for f in cls.__dataclass_fields__}
        return cls(**{k: v for k, v in (data or {}).items() if k in allowed})


@dataclass
class StageMessage:
    rid: str = ""
    reg_type: str = sc.NEW
    iteration: int = 1
    workflowInstanceId: Optional[str] = None
    isValid: bool = False
    internalError: bool = False
    messageBusAddress: Optional[str] = None
    # Last classified failure, for the caller's routing decision
    lastError: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StageMessage":
        allowed = {f for f in cls.__dataclass_fields__}
        return cls(**{k: v for k, v in (data or {}).items() if k in allowed})


def segments_from_payload(items: Optional[List[Dict[str, Any]]]) -> Optional[List[BiometricSegment]]:
    if items is None:
        return None
    return [
        BiometricSegment(
            bioType=str(i.get("bioType") or ""),
            bioSubType=i.get("bioSubType"),
            data=str(i.get("data") or ""),
        )
        for i in items
        if isinstance(i, dict)
    ]
