import copy
from unittest.mock import MagicMock, patch

import pytest

from regproc.core.errors import TableNotAccessibleError
from regproc.store.models import AdditionalInfoRequest, RegistrationStatusRecord


class InMemoryStatusStore:
    """Same contract as RedisStatusStore; hands out copies so unsaved mutations stay local."""

    def __init__(self):
        self.records = {}
        self.latest = {}
        self.writes = []
        self.fail_with = None

    def put(self, record: RegistrationStatusRecord) -> None:
        key = (record.registrationId, record.registrationType.upper(), int(record.iteration))
        self.records[key] = copy.deepcopy(record)
        self.latest[record.registrationId] = key

    def get_status(self, rid, process=None, iteration=None):
        if self.fail_with:
            raise self.fail_with
        if process and iteration is not None:
            key = (rid, process.upper(), int(iteration))
        else:
            key = self.latest.get(rid)
        rec = self.records.get(key)
        return copy.deepcopy(rec) if rec else None

    def update_status(self, record, module_id="", module_name=""):
        if self.fail_with:
            raise self.fail_with
        self.writes.append((copy.deepcopy(record), module_id, module_name))
        self.put(record)

    def stored(self, rid, process="NEW", iteration=1):
        return self.records.get((rid, process.upper(), int(iteration)))


class InMemoryAdditionalInfoStore:
    def __init__(self):
        self.requests = {}

    def _key(self, rid, process, iteration):
        return (rid, (process or "").upper(), int(iteration or 1))

    def get_by_rid_and_process(self, rid, process, include_closed=False):
        # Latest iteration only, like the Redis pointer
        reqs = [
            r for (k_rid, k_proc, _), r in sorted(self.requests.items())
            if k_rid == rid and k_proc == (process or "").upper()
        ]
        if not reqs or (reqs[-1].closed and not include_closed):
            return None
        return copy.deepcopy(reqs[-1])

    def iterations(self, rid, process):
        return [k_iter for (k_rid, k_proc, k_iter) in sorted(self.requests)
                if k_rid == rid and k_proc == (process or "").upper()]

    def get_by_rid_process_iteration(self, rid, process, iteration):
        req = self.requests.get(self._key(rid, process, iteration))
        if req is None or req.closed:
            return None
        return copy.deepcopy(req)

    def add(self, req: AdditionalInfoRequest):
        req.closed = False
        if req.timestamp is None:
            req.timestamp = 1
        self.requests[self._key(req.registrationId, req.additionalInfoProcess, req.additionalInfoIteration)] = \
            copy.deepcopy(req)

    def close(self, req: AdditionalInfoRequest):
        req.closed = True
        self.requests[self._key(req.registrationId, req.additionalInfoProcess, req.additionalInfoIteration)] = \
            copy.deepcopy(req)


@pytest.fixture(autouse=True)
def no_metrics_redis():
    # Counters go to a throwaway mock instead of a live Redis
    with patch("regproc.observability.metrics.get_redis", return_value=MagicMock()):
        yield


@pytest.fixture
def status_store():
    return InMemoryStatusStore()


@pytest.fixture
def additional_info_store():
    return InMemoryAdditionalInfoStore()


@pytest.fixture
def table_down():
    return TableNotAccessibleError("RPR-SYS-004", "Status store is not accessible")
