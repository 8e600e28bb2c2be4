import json
import pytest
from unittest.mock import MagicMock
from redis.exceptions import ConnectionError as RedisConnectionError

from regproc.core.errors import TableNotAccessibleError
from regproc.store.additional_info_repo import RedisAdditionalInfoStore
from regproc.store.models import AdditionalInfoRequest

RID = "10001100010002720210302082429"


def _raw(closed=False):
    return json.dumps({
        "registrationId": RID, "additionalInfoProcess": "CORRECTION", "additionalInfoIteration": 1,
        "workflowInstanceId": "wf-new", "additionalInfoReqId": "req-1", "closed": closed,
    })


def test_open_request_by_iteration():
    r = MagicMock()
    r.get.return_value = _raw()
    req = RedisAdditionalInfoStore(redis=r).get_by_rid_process_iteration(RID, "correction", 1)
    r.get.assert_called_once_with(f"addinfo:{RID}:CORRECTION:1")
    assert req.workflowInstanceId == "wf-new"


def test_closed_request_is_invisible():
    r = MagicMock()
    r.get.return_value = _raw(closed=True)
    assert RedisAdditionalInfoStore(redis=r).get_by_rid_process_iteration(RID, "CORRECTION", 1) is None


def test_latest_request_for_process():
    r = MagicMock()
    r.get.side_effect = [f"addinfo:{RID}:CORRECTION:3", _raw()]
    req = RedisAdditionalInfoStore(redis=r).get_by_rid_and_process(RID, "CORRECTION")
    assert req.additionalInfoReqId == "req-1"
    assert r.get.call_args_list[0].args[0] == f"addinfo:latest:{RID}:CORRECTION"


def test_latest_closed_request_only_on_request():
    r = MagicMock()
    r.get.side_effect = [f"addinfo:{RID}:CORRECTION:1", _raw(closed=True)] * 2
    store = RedisAdditionalInfoStore(redis=r)

    assert store.get_by_rid_and_process(RID, "CORRECTION") is None
    req = store.get_by_rid_and_process(RID, "CORRECTION", include_closed=True)
    assert req.closed is True
    assert req.additionalInfoIteration == 1


def test_add_stamps_and_opens_request():
    r = MagicMock()
    pipe = MagicMock()
    r.pipeline.return_value = pipe
    req = AdditionalInfoRequest(registrationId=RID, additionalInfoProcess="CORRECTION", closed=True)

    RedisAdditionalInfoStore(redis=r).add(req)

    assert req.timestamp is not None
    assert req.closed is False
    key, raw = pipe.set.call_args_list[0].args
    assert key == f"addinfo:{RID}:CORRECTION:1"
    assert json.loads(raw)["closed"] is False


def test_close_keeps_the_record():
    r = MagicMock()
    pipe = MagicMock()
    r.pipeline.return_value = pipe
    req = AdditionalInfoRequest(registrationId=RID, additionalInfoProcess="CORRECTION")

    RedisAdditionalInfoStore(redis=r).close(req)

    _, raw = pipe.set.call_args_list[0].args
    assert json.loads(raw)["closed"] is True
    pipe.execute.assert_called_once()


def test_redis_failure_becomes_table_not_accessible():
    r = MagicMock()
    r.pipeline.side_effect = RedisConnectionError("refused")
    with pytest.raises(TableNotAccessibleError):
        RedisAdditionalInfoStore(redis=r).add(AdditionalInfoRequest(registrationId=RID))
