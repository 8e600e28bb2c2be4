from dataclasses import dataclass, field
from typing import Dict, List, Optional
from urllib.parse import quote

from regproc.core import status_util
from regproc.core.errors import ApisResourceAccessError
from regproc.settings import settings
from regproc.utils.http import envelope_errors, request_json


@dataclass
class UserDetails:
    userId: str
    isActive: bool = False
    errors: List[Dict[str, str]] = field(default_factory=list)

    def first_error_message(self) -> str:
        if not self.errors:
            return ""
        e = self.errors[0]
        return str(e.get("message") or e.get("errorMessage") or "")


class Directory:
    """Identity-repository and user-directory lookups."""

    def __init__(
        self,
        idrepo_url: Optional[str] = None,
        user_details_url: Optional[str] = None,
        individual_id_url: Optional[str] = None,
    ):
        self.idrepo_url = (idrepo_url if idrepo_url is not None else settings.IDREPO_URL).rstrip("/")
        self.user_details_url = (
            user_details_url if user_details_url is not None else settings.USER_DETAILS_URL
        ).rstrip("/")
        self.individual_id_url = (
            individual_id_url if individual_id_url is not None else settings.INDIVIDUAL_ID_URL
        ).rstrip("/")

    def resolve_uin_by_rid(self, rid: str, schema_name: str) -> Optional[str]:
        url = f"{self.idrepo_url}/{quote(rid)}" if self.idrepo_url else ""
        body = request_json("GET", url, params={"type": "demo"}, api_name="IDREPO_GET_ID_BY_RID")
        if envelope_errors(body):
            return None
        identity = ((body.get("response") or {}).get(schema_name or "identity")) or {}
        uin = identity.get("UIN")
        return str(uin) if uin not in (None, "") else None

    def get_user_details(self, user_id: str, creation_date: str) -> UserDetails:
        """Was `user_id` active at `creation_date` (directory time-travel lookup)."""
        url = f"{self.user_details_url}/{quote(user_id)}/{quote(creation_date)}" if self.user_details_url else ""
        body = request_json("GET", url, api_name="USERDETAILS")
        errors = envelope_errors(body)
        if errors:
            return UserDetails(userId=user_id, errors=errors)
        users = ((body.get("response") or {}).get("userResponseDto")) or []
        active = bool(users[0].get("isActive")) if users else False
        return UserDetails(userId=user_id, isActive=active)

    def get_individual_id_by_user_id(self, user_id: str) -> Optional[str]:
        url = (
            f"{self.individual_id_url}/{quote(settings.USER_APP_ID)}/{quote(user_id)}"
            if self.individual_id_url else ""
        )
        body = request_json("GET", url, api_name="GETINDIVIDUALIDFROMUSERID")
        if envelope_errors(body):
            raise ApisResourceAccessError(
                status_util.USERID_INDIVIDUALID_LINK_FAILED.code,
                status_util.USERID_INDIVIDUALID_LINK_FAILED.message,
                subject_id=user_id,
            )
        return (body.get("response") or {}).get("individualId")
