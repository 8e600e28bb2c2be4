import json
import time
from dataclasses import asdict, fields as dc_fields
from typing import Optional

from redis.exceptions import RedisError

from regproc.core import status_util
from regproc.core.errors import TableNotAccessibleError
from regproc.observability.logging import log
from regproc.store.models import AdditionalInfoRequest
from regproc.store.redis_conn import get_redis

PREFIX = "addinfo:"


def _key(rid: str, process: str, iteration: int) -> str:
    return f"{PREFIX}{rid}:{(process or '').upper()}:{int(iteration or 1)}"


def _latest_key(rid: str, process: str) -> str:
    return f"{PREFIX}latest:{rid}:{(process or '').upper()}"


def _load(raw) -> Optional[AdditionalInfoRequest]:
    if not raw:
        return None
    data = json.loads(raw)
    allowed = {f.name for f in dc_fields(AdditionalInfoRequest)}
    return AdditionalInfoRequest(**{k: v for k, v in data.items() if k in allowed})


class RedisAdditionalInfoStore:
    """
    Outstanding "need more information" requests per (rid, process, iteration).

    Lookups return open requests unless asked otherwise; `close` keeps the record
    but marks it closed, so earlier iterations stay readable.
    """

    def __init__(self, redis=None):
        self._redis = redis

    @property
    def redis(self):
        if self._redis is None:
            self._redis = get_redis()
        return self._redis

    def _get(self, key: str, include_closed: bool = False) -> Optional[AdditionalInfoRequest]:
        try:
            raw = self.redis.get(key)
        except RedisError as e:
            raise TableNotAccessibleError(
                status_util.TABLE_NOT_ACCESSIBLE.code, status_util.TABLE_NOT_ACCESSIBLE.message
            ) from e
        req = _load(raw)
        if req is None or (req.closed and not include_closed):
            return None
        return req

    def get_by_rid_and_process(self, rid: str, process: str,
                               include_closed: bool = False) -> Optional[AdditionalInfoRequest]:
        try:
            pointer = self.redis.get(_latest_key(rid, process))
        except RedisError as e:
            raise TableNotAccessibleError(
                status_util.TABLE_NOT_ACCESSIBLE.code, status_util.TABLE_NOT_ACCESSIBLE.message
            ) from e
        return self._get(pointer, include_closed) if pointer else None

    def get_by_rid_process_iteration(self, rid: str, process: str, iteration: int) -> Optional[AdditionalInfoRequest]:
        return self._get(_key(rid, process, iteration))

    def _write(self, req: AdditionalInfoRequest) -> None:
        key = _key(req.registrationId, req.additionalInfoProcess, req.additionalInfoIteration)
        try:
            pipe = self.redis.pipeline()
            pipe.set(key, json.dumps(asdict(req)))
            pipe.set(_latest_key(req.registrationId, req.additionalInfoProcess), key)
            pipe.execute()
        except RedisError as e:
            raise TableNotAccessibleError(
                status_util.TABLE_NOT_ACCESSIBLE.code, status_util.TABLE_NOT_ACCESSIBLE.message
            ) from e

    def add(self, req: AdditionalInfoRequest) -> None:
        if req.timestamp is None:
            req.timestamp = int(time.time() * 1000)
        req.closed = False
        self._write(req)
        log(
            event="additional_info_request_added",
            rid=req.registrationId,
            additionalInfoProcess=req.additionalInfoProcess,
            iteration=req.additionalInfoIteration,
            additionalInfoReqId=req.additionalInfoReqId,
        )

    def close(self, req: AdditionalInfoRequest) -> None:
        req.closed = True
        self._write(req)
        log(
            event="additional_info_request_closed",
            rid=req.registrationId,
            additionalInfoProcess=req.additionalInfoProcess,
            iteration=req.additionalInfoIteration,
        )
