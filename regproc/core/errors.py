"""
Failure taxonomy shared by the validators, the stage processor and the workflow engine.

Callers branch on `kind` (or `is_retryable`) rather than on message text:
- REJECTED: the packet is invalid; status already set to FAILED/REJECTED.
- ON_HOLD: wait for another packet; status already set to PROCESSING/on-hold.
- SYSTEM: a collaborator is unreachable; nothing is known about the packet.
- DATA: malformed command input (timestamps etc.).
"""
from typing import Optional

from regproc.core.status_util import StatusEntry

REJECTED = "REJECTED"
ON_HOLD = "ON_HOLD"
SYSTEM = "SYSTEM"
DATA = "DATA"


class RegprocError(Exception):
    kind: str = SYSTEM

    def __init__(self, code: str, message: str, subject_id: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.subject_id = subject_id

    @classmethod
    def from_status(cls, entry: StatusEntry, suffix: str = "", subject_id: Optional[str] = None):
        return cls(entry.code, entry.message + suffix, subject_id=subject_id)

    @property
    def is_retryable(self) -> bool:
        return self.kind in (ON_HOLD, SYSTEM)

    def as_dict(self) -> dict:
        return {"kind": self.kind, "code": self.code, "message": self.message, "subjectId": self.subject_id}


class ValidationError(RegprocError):
    kind = REJECTED


class ParentOnHoldError(RegprocError):
    kind = ON_HOLD


class AuthSystemError(RegprocError):
    kind = SYSTEM


class ApisResourceAccessError(RegprocError):
    kind = SYSTEM


class PacketManagerError(RegprocError):
    kind = SYSTEM


class TableNotAccessibleError(RegprocError):
    kind = SYSTEM


class TimestampParseError(RegprocError):
    kind = DATA
