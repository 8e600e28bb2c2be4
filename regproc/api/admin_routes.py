from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Header

from regproc.api.schemas import StatusSnapshot
from regproc.core.errors import TableNotAccessibleError
from regproc.settings import settings
from regproc.store.additional_info_repo import RedisAdditionalInfoStore
from regproc.store.status_repo import RedisStatusStore
import regproc.observability.metrics as metrics

router = APIRouter(prefix="/admin", tags=["admin"])

def require_admin(x_admin_key: str = Header(default="", alias="x-admin-key")):
    if not settings.ADMIN_RBAC_ENABLED:
        return
    # Enabled with no key configured: reject everything
    if not settings.ADMIN_API_KEY:
        raise HTTPException(status_code=403, detail="Admin access disabled (no key configured)")
    if x_admin_key != settings.ADMIN_API_KEY:
        raise HTTPException(status_code=403, detail="Invalid admin key")

@router.get("/status/{rid}", response_model=StatusSnapshot)
def get_status_snapshot(rid: str, process: Optional[str] = None, _=Depends(require_admin)):
    """
    Latest status record for a packet, its recent history, and the open
    additional-info request for `process` when one is asked for.
    """
    try:
        record = RedisStatusStore().get_status(rid)
        if record is None:
            raise HTTPException(status_code=404, detail="Unknown registration id")
        history = RedisStatusStore().history(rid, limit=20)
        request = RedisAdditionalInfoStore().get_by_rid_and_process(rid, process) if process else None
    except TableNotAccessibleError as e:
        raise HTTPException(status_code=503, detail=e.message)

    return StatusSnapshot(
        record=asdict(record),
        history=history,
        additionalInfoRequest=asdict(request) if request else None,
    )

@router.get("/metrics")
def get_metrics(_=Depends(require_admin)):
    return metrics.snapshot()
