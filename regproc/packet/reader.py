import json
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from regproc.core import status_util
from regproc.core.errors import PacketManagerError
from regproc.settings import settings
from regproc.store.models import BiometricSegment, segments_from_payload
from regproc.utils.http import envelope_errors, request_json

# Mapping keys resolved by the packet manager
INTRODUCER_UIN = "introducerUIN"
INTRODUCER_RID = "introducerRID"
INTRODUCER_BIO = "introducerBiometrics"
SUPERVISOR_BIO = "supervisorBiometricFileName"
DATE_OF_BIRTH = "dateOfBirth"
AGE = "age"

# Meta-info keys
META_CREATION_DATE = "creationDate"
META_OPERATIONS_DATA = "operationsData"


class PacketReader:
    """Field, biometric and meta-info retrieval from the packet manager."""

    def __init__(self, base_url: Optional[str] = None):
        self.base_url = (base_url if base_url is not None else settings.PACKET_MANAGER_URL).rstrip("/")

    def _call(self, path: str, payload: Dict[str, Any], api_name: str) -> Dict[str, Any]:
        url = f"{self.base_url}/{path}" if self.base_url else ""
        body = request_json("POST", url, json_body={"request": payload}, api_name=api_name,
                            error_cls=PacketManagerError)
        errors = envelope_errors(body)
        if errors:
            first = errors[0]
            raise PacketManagerError(
                str(first.get("errorCode") or status_util.PACKET_MANAGER_EXCEPTION.code),
                str(first.get("message") or status_util.PACKET_MANAGER_EXCEPTION.message),
            )
        return body.get("response") or {}

    def get_field_by_key(self, registration_id: str, field_key: str, registration_type: str,
                         stage_name: str) -> Optional[str]:
        resp = self._call("searchField", {
            "id": registration_id,
            "field": field_key,
            "process": registration_type,
            "source": stage_name,
            "bypassCache": False,
        }, "PACKETMANAGER_SEARCH_FIELD")
        value = (resp.get("fields") or {}).get(field_key)
        return None if value is None else str(value)

    def get_biometrics_by_key(self, registration_id: str, field_key: str, registration_type: str,
                              stage_name: str) -> Optional[List[BiometricSegment]]:
        resp = self._call("biometrics", {
            "id": registration_id,
            "person": field_key,
            "process": registration_type,
            "source": stage_name,
        }, "PACKETMANAGER_SEARCH_BIOMETRICS")
        if not resp:
            return None
        return segments_from_payload(resp.get("segments"))

    def get_meta_info(self, registration_id: str, registration_type: str, stage_name: str) -> Dict[str, str]:
        resp = self._call("metaInfo", {
            "id": registration_id,
            "process": registration_type,
            "source": stage_name,
        }, "PACKETMANAGER_SEARCH_METAINFO")
        return {str(k): ("" if v is None else str(v)) for k, v in (resp.get("info") or {}).items()}

    def add_or_update_tags(self, registration_id: str, tags: Dict[str, str]) -> None:
        self._call("addOrUpdateTag", {"id": registration_id, "tags": dict(tags)}, "PACKETMANAGER_UPDATE_TAGS")

    def get_applicant_age(self, registration_id: str, registration_type: str, stage_name: str) -> int:
        dob = self.get_field_by_key(registration_id, DATE_OF_BIRTH, registration_type, stage_name)
        if dob:
            return age_from_dob(dob, settings.DOB_FORMAT)
        age = self.get_field_by_key(registration_id, AGE, registration_type, stage_name)
        try:
            return int(age) if age is not None else 0
        except ValueError:
            return 0


def age_from_dob(dob: str, dob_format: str, today: Optional[date] = None) -> int:
    born = datetime.strptime(dob.strip(), dob_format).date()
    today = today or date.today()
    return today.year - born.year - ((today.month, today.day) < (born.month, born.day))


@dataclass
class SupervisorDetails:
    supervisorId: Optional[str] = None
    supervisorPassword: Optional[str] = None
    supervisorOTPAuthentication: Optional[str] = None
    supervisorBiometricFileName: Optional[str] = None

    @classmethod
    def from_meta_info(cls, meta_info: Dict[str, str]) -> "SupervisorDetails":
        """
        Supervisor fields come from the packet meta info, either flat or as an
        `operationsData` JSON list of {"label": ..., "value": ...} pairs.
        """
        flat = dict(meta_info or {})
        ops = flat.get(META_OPERATIONS_DATA)
        if ops:
            try:
                for item in json.loads(ops):
                    if isinstance(item, dict) and item.get("label"):
                        flat.setdefault(str(item["label"]), item.get("value"))
            except (TypeError, ValueError):
                pass
        return cls(
            supervisorId=flat.get("supervisorId") or flat.get("officerId"),
            supervisorPassword=flat.get("supervisorPassword"),
            supervisorOTPAuthentication=flat.get("supervisorOTPAuthentication"),
            supervisorBiometricFileName=flat.get("supervisorBiometricFileName"),
        )
