import json
import time
from dataclasses import asdict, fields as dc_fields
from typing import Optional

from redis.exceptions import RedisError

from regproc.core import status_codes as sc
from regproc.core import status_util
from regproc.core.errors import TableNotAccessibleError
from regproc.observability.logging import log
from regproc.settings import settings
from regproc.store.models import RegistrationStatusRecord
from regproc.store.redis_conn import get_redis

PREFIX = "regstatus:"


def _record_key(rid: str, process: str, iteration: int) -> str:
    return f"{PREFIX}{rid}:{(process or '').upper()}:{int(iteration or 1)}"


def _latest_key(rid: str) -> str:
    return f"{PREFIX}latest:{rid}"


def _history_key(rid: str) -> str:
    return f"{PREFIX}history:{rid}"


def _filter_record_kwargs(data: dict) -> dict:
    """
    Drop unknown fields so RegistrationStatusRecord(**kwargs) never explodes
    """
    allowed = {f.name for f in dc_fields(RegistrationStatusRecord)}
    return {k: v for k, v in data.items() if k in allowed}


def _not_accessible(e: Exception) -> TableNotAccessibleError:
    return TableNotAccessibleError(
        status_util.TABLE_NOT_ACCESSIBLE.code,
        f"{status_util.TABLE_NOT_ACCESSIBLE.message}: {type(e).__name__}",
    )


class RedisStatusStore:
    """
    Last-value store for RegistrationStatusRecord, keyed by (rid, process, iteration).
    Every write also appends to a per-rid history list; records are never deleted.
    """

    def __init__(self, redis=None):
        self._redis = redis

    @property
    def redis(self):
        if self._redis is None:
            self._redis = get_redis()
        return self._redis

    def get_status(
        self,
        rid: str,
        process: Optional[str] = None,
        iteration: Optional[int] = None,
    ) -> Optional[RegistrationStatusRecord]:
        try:
            if process and iteration is not None:
                raw = self.redis.get(_record_key(rid, process, iteration))
            else:
                pointer = self.redis.get(_latest_key(rid))
                raw = self.redis.get(pointer) if pointer else None
        except RedisError as e:
            raise _not_accessible(e) from e

        if not raw:
            return None
        data = json.loads(raw)
        return RegistrationStatusRecord(**_filter_record_kwargs(data))

    def update_status(self, record: RegistrationStatusRecord, module_id: str = "", module_name: str = "") -> None:
        if record.statusCode not in sc.ALL_STATUSES:
            raise ValueError(f"Unknown registration status code: {record.statusCode!r}")

        record.updatedAtEpochMs = int(time.time() * 1000)
        key = _record_key(record.registrationId, record.registrationType, record.iteration)
        history_entry = {
            "ts": record.updatedAtEpochMs,
            "moduleId": module_id,
            "moduleName": module_name,
            "registrationType": record.registrationType,
            "iteration": record.iteration,
            "statusCode": record.statusCode,
            "subStatusCode": record.subStatusCode,
            "latestTransactionStatusCode": record.latestTransactionStatusCode,
            "statusComment": record.statusComment,
        }
        try:
            pipe = self.redis.pipeline()
            pipe.set(key, json.dumps(asdict(record)))
            pipe.set(_latest_key(record.registrationId), key)
            pipe.lpush(_history_key(record.registrationId), json.dumps(history_entry))
            pipe.ltrim(_history_key(record.registrationId), 0, int(settings.STATUS_HISTORY_MAX) - 1)
            pipe.execute()
        except RedisError as e:
            raise _not_accessible(e) from e

        log(
            event="status_updated",
            rid=record.registrationId,
            registrationType=record.registrationType,
            iteration=record.iteration,
            statusCode=record.statusCode,
            subStatusCode=record.subStatusCode or "",
            moduleId=module_id,
        )

    def history(self, rid: str, limit: int = 50) -> list:
        try:
            rows = self.redis.lrange(_history_key(rid), 0, max(0, int(limit) - 1))
        except RedisError as e:
            raise _not_accessible(e) from e
        return [json.loads(r) for r in rows or []]
