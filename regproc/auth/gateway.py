"""
Client for the ID-authentication service.

One call authenticates one subject (introducer UIN or supervisor individual id)
against the biometric segments captured in the packet, and classifies the reply:

- AUTHENTICATED: no errors, authStatus true
- REJECTED: no errors, authStatus false
- SYSTEM_ERROR: the service reported errors (the list is kept for the caller)

Transport failures raise ApisResourceAccessError instead of producing an outcome.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from regproc.observability.logging import log
from regproc.settings import settings
from regproc.store.models import BiometricSegment
from regproc.utils.http import envelope_errors, request_json
from regproc.utils.time import to_iso_utc

AUTHENTICATED = "AUTHENTICATED"
REJECTED = "REJECTED"
SYSTEM_ERROR = "SYSTEM_ERROR"


@dataclass
class ProxyAuthRequest:
    subjectId: str
    subjectType: Optional[str]
    registrationId: str = ""
    segments: List[BiometricSegment] = field(default_factory=list)
    authMode: str = "bio"

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": "mosip.identity.auth.internal",
            "transactionID": uuid.uuid4().hex[:10],
            "requestTime": to_iso_utc(datetime.now(timezone.utc)),
            "individualId": self.subjectId,
            "individualIdType": self.subjectType,
            "requestedAuth": {"bio": self.authMode == "bio", "otp": self.authMode == "otp"},
            "request": {
                "biometrics": [
                    {"bioType": s.bioType, "bioSubType": s.bioSubType, "data": s.data}
                    for s in self.segments
                ],
            },
        }


@dataclass
class ProxyAuthOutcome:
    status: str
    reason: str = ""
    errors: List[Dict[str, str]] = field(default_factory=list)

    @property
    def authenticated(self) -> bool:
        return self.status == AUTHENTICATED

    def has_error_code(self, code: str) -> bool:
        target = (code or "").lower()
        return any(str(e.get("errorCode") or "").lower() == target for e in self.errors)

    def joined_error_messages(self) -> str:
        return "".join(f"{e.get('message') or e.get('errorMessage') or ''} " for e in self.errors)


def classify_auth_response(body: Dict[str, Any]) -> ProxyAuthOutcome:
    errors = envelope_errors(body)
    if errors:
        return ProxyAuthOutcome(status=SYSTEM_ERROR, errors=errors)
    response = body.get("response") or {}
    if bool(response.get("authStatus")):
        return ProxyAuthOutcome(status=AUTHENTICATED)
    return ProxyAuthOutcome(status=REJECTED, reason="authStatus=false")


class AuthGateway:
    def __init__(self, url: Optional[str] = None):
        self.url = url if url is not None else settings.ID_AUTH_URL

    def authenticate(
        self,
        subject_id: str,
        subject_type: Optional[str],
        segments: List[BiometricSegment],
        registration_id: str = "",
    ) -> ProxyAuthOutcome:
        req = ProxyAuthRequest(
            subjectId=subject_id,
            subjectType=subject_type,
            registrationId=registration_id,
            segments=list(segments or []),
        )
        body = request_json("POST", self.url, json_body=req.to_payload(), api_name="ID_AUTH")
        outcome = classify_auth_response(body)
        log(
            event="proxy_auth_outcome",
            rid=registration_id,
            subjectType=subject_type or "",
            outcome=outcome.status,
            errorCodes=[e.get("errorCode") for e in outcome.errors],
        )
        return outcome
