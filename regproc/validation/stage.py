"""
Stage processor around a proxy validator.

Loads the packet's status record, runs the validator, turns the outcome into the
message flags the next hop routes on, and persists the record whatever happened.

  isValid  internalError   meaning
  True     False           approved, move on
  False    False           rejected or on hold (record says which)
  False    True            system problem, reprocess later
"""
from typing import Callable, Optional

import httpx

from regproc.auth.gateway import AuthGateway
from regproc.core import status_codes as sc
from regproc.core import status_util
from regproc.core.errors import ParentOnHoldError, RegprocError, ValidationError
from regproc.directory.client import Directory
from regproc.observability.logging import log
import regproc.observability.metrics as metrics
from regproc.packet.reader import PacketReader
from regproc.store.models import RegistrationStatusRecord, StageMessage
from regproc.store.status_repo import RedisStatusStore
from regproc.validation.proxy import (
    INTRODUCER_STAGE,
    SUPERVISOR_STAGE,
    IntroducerValidator,
    SupervisorValidator,
)

# (registration_id, record) -> bool
Runner = Callable[[str, RegistrationStatusRecord], bool]


class ValidationStage:
    def __init__(self, stage_name: str, status_store, runner: Runner, module_id: str = ""):
        self.stage_name = stage_name
        self.status_store = status_store
        self.runner = runner
        self.module_id = module_id or stage_name

    def process(self, message: StageMessage) -> StageMessage:
        rid = message.rid
        message.isValid = False
        message.internalError = False
        message.lastError = {}
        record: Optional[RegistrationStatusRecord] = None
        outcome = "unknown"

        try:
            record = self.status_store.get_status(rid, message.reg_type, message.iteration)
            if record is None:
                # Stages only run for packets the pipeline already registered
                message.internalError = True
                outcome = "record_missing"
                log(event="validation_record_missing", rid=rid, stage=self.stage_name)
                return message

            record.latestTransactionTypeCode = self.stage_name
            # Success keeps PROCESSING; only a workflow completion makes the packet terminal
            record.statusCode = sc.PROCESSING
            record.subStatusCode = None

            if self.runner(rid, record):
                message.isValid = True
                record.latestTransactionStatusCode = sc.TX_SUCCESS
                record.statusComment = f"{self.stage_name} validation successful"
                outcome = "valid"
            else:
                record.statusCode = sc.FAILED
                record.latestTransactionStatusCode = sc.TX_FAILED
                outcome = "invalid"

        except ParentOnHoldError as e:
            message.lastError = e.as_dict()
            outcome = "on_hold"
        except ValidationError as e:
            message.lastError = e.as_dict()
            if record is not None:
                record.statusComment = e.message
            outcome = "rejected"
        except (RegprocError, httpx.HTTPError) as e:
            # SYSTEM-kind failures: nothing is known about the packet itself
            message.internalError = True
            message.lastError = e.as_dict() if isinstance(e, RegprocError) else {
                "kind": "SYSTEM", "code": status_util.API_RESOURCE_ACCESS_FAILED.code, "message": str(e)}
            if record is not None:
                record.statusCode = sc.REPROCESS
                record.latestTransactionStatusCode = sc.TX_REPROCESS
                record.statusComment = message.lastError.get("message") or ""
            outcome = "system_error"
        except Exception as e:
            message.internalError = True
            message.lastError = {
                "kind": "SYSTEM",
                "code": status_util.UNKNOWN_EXCEPTION_OCCURED.code,
                "message": f"{type(e).__name__}: {str(e)[:300]}",
            }
            if record is not None:
                record.statusCode = sc.FAILED
                record.latestTransactionStatusCode = status_util.transaction_status_for(status_util.EXCEPTION)
                record.statusComment = status_util.UNKNOWN_EXCEPTION_OCCURED.message
            outcome = "unexpected_error"
        finally:
            if record is not None:
                try:
                    self.status_store.update_status(record, self.module_id, self.stage_name)
                except RegprocError as e:
                    message.internalError = True
                    message.isValid = False
                    message.lastError = e.as_dict()
                    outcome = "status_write_failed"
            metrics.record_validation_outcome(self.stage_name, outcome)
            log(
                event="validation_stage_done",
                rid=rid,
                stage=self.stage_name,
                outcome=outcome,
                isValid=message.isValid,
                internalError=message.internalError,
                statusCode=getattr(record, "statusCode", ""),
                errorCode=message.lastError.get("code", ""),
            )

        return message


def build_introducer_stage(status_store=None, packet_reader=None, directory=None, gateway=None) -> ValidationStage:
    status_store = status_store or RedisStatusStore()
    validator = IntroducerValidator(
        packet_reader or PacketReader(),
        status_store,
        directory or Directory(),
        gateway or AuthGateway(),
    )
    return ValidationStage(INTRODUCER_STAGE, status_store, validator.is_valid_introducer)


def build_supervisor_stage(status_store=None, packet_reader=None, directory=None, gateway=None) -> ValidationStage:
    status_store = status_store or RedisStatusStore()
    packet_reader = packet_reader or PacketReader()
    validator = SupervisorValidator(packet_reader, directory or Directory(), gateway or AuthGateway())

    def run(rid: str, record: RegistrationStatusRecord) -> bool:
        meta_info = packet_reader.get_meta_info(rid, record.registrationType, SUPERVISOR_STAGE)
        return validator.is_valid_supervisor(rid, record, meta_info)

    return ValidationStage(SUPERVISOR_STAGE, status_store, run)


STAGE_BUILDERS = {
    "introducer": build_introducer_stage,
    "supervisor": build_supervisor_stage,
}
