import json
import pytest
from unittest.mock import MagicMock
from redis.exceptions import ConnectionError as RedisConnectionError

from regproc.core import status_codes as sc
from regproc.core.errors import TableNotAccessibleError
from regproc.store.models import RegistrationStatusRecord
from regproc.store.status_repo import RedisStatusStore

RID = "10001100010002720210302082429"


def _raw(**kw):
    data = {"registrationId": RID, "registrationType": "NEW", "iteration": 1, "statusCode": sc.PROCESSING}
    data.update(kw)
    return json.dumps(data)


def test_get_status_by_process_and_iteration():
    r = MagicMock()
    r.get.return_value = _raw(registrationType="CORRECTION", iteration=2)
    rec = RedisStatusStore(redis=r).get_status(RID, "correction", 2)
    r.get.assert_called_once_with(f"regstatus:{RID}:CORRECTION:2")
    assert rec.registrationType == "CORRECTION"
    assert rec.iteration == 2


def test_get_status_follows_latest_pointer():
    r = MagicMock()
    r.get.side_effect = [f"regstatus:{RID}:NEW:1", _raw()]
    rec = RedisStatusStore(redis=r).get_status(RID)
    assert rec.registrationId == RID
    assert r.get.call_args_list[0].args[0] == f"regstatus:latest:{RID}"


def test_get_status_unknown_rid():
    r = MagicMock()
    r.get.return_value = None
    assert RedisStatusStore(redis=r).get_status(RID) is None


def test_get_status_ignores_unknown_fields():
    r = MagicMock()
    r.get.return_value = _raw(legacyField="x")
    rec = RedisStatusStore(redis=r).get_status(RID, "NEW", 1)
    assert rec.statusCode == sc.PROCESSING


def test_update_status_writes_record_pointer_and_history():
    r = MagicMock()
    pipe = MagicMock()
    r.pipeline.return_value = pipe
    rec = RegistrationStatusRecord(registrationId=RID, statusCode=sc.PROCESSED)

    RedisStatusStore(redis=r).update_status(rec, "RPR-WIA-001", "WorkflowInternalAction")

    assert rec.updatedAtEpochMs is not None
    key, raw = pipe.set.call_args_list[0].args
    assert key == f"regstatus:{RID}:NEW:1"
    assert json.loads(raw)["statusCode"] == sc.PROCESSED
    assert pipe.set.call_args_list[1].args == (f"regstatus:latest:{RID}", key)
    history_key, entry = pipe.lpush.call_args.args
    assert history_key == f"regstatus:history:{RID}"
    assert json.loads(entry)["moduleId"] == "RPR-WIA-001"
    pipe.execute.assert_called_once()


def test_update_status_rejects_unknown_status():
    rec = RegistrationStatusRecord(registrationId=RID)
    rec.statusCode = "HALF_DONE"
    r = MagicMock()
    with pytest.raises(ValueError):
        RedisStatusStore(redis=r).update_status(rec)
    r.pipeline.assert_not_called()


def test_record_rejects_unknown_status_on_construction():
    with pytest.raises(ValueError):
        RegistrationStatusRecord(registrationId=RID, statusCode="HALF_DONE")


def test_redis_failure_becomes_table_not_accessible():
    r = MagicMock()
    r.get.side_effect = RedisConnectionError("refused")
    with pytest.raises(TableNotAccessibleError) as exc:
        RedisStatusStore(redis=r).get_status(RID)
    assert exc.value.is_retryable


def test_history_decodes_entries():
    r = MagicMock()
    r.lrange.return_value = [json.dumps({"statusCode": sc.PAUSED}), json.dumps({"statusCode": sc.PROCESSING})]
    rows = RedisStatusStore(redis=r).history(RID, limit=2)
    r.lrange.assert_called_once_with(f"regstatus:history:{RID}", 0, 1)
    assert [x["statusCode"] for x in rows] == [sc.PAUSED, sc.PROCESSING]
