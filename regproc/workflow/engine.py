"""
Workflow internal-action engine.

Applies one externally requested lifecycle action to a packet's status record.
The state machine is the TRANSITIONS table below: action -> target status and
the effect that carries it out. `process` is the error boundary for one unit of
work: it never raises, so the queue worker survives malformed or late actions.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from regproc.core import status_codes as sc
from regproc.core.errors import TableNotAccessibleError, TimestampParseError
from regproc.observability.logging import log
import regproc.observability.metrics as metrics
from regproc.settings import settings
from regproc.store.additional_info_repo import RedisAdditionalInfoStore
from regproc.store.models import AdditionalInfoRequest, RegistrationStatusRecord, WorkflowActionCommand
from regproc.store.status_repo import RedisStatusStore
from regproc.utils.time import now_ms, parse_iso_timestamp, to_iso_utc
from regproc.workflow.action_service import WorkflowActionService
from regproc.workflow.events import (
    EventPublisher,
    WorkflowCompletedEvent,
    WorkflowPausedForAdditionalInfoEvent,
)
from regproc.packet.reader import PacketReader

TRANSACTION_TYPE = "WORKFLOW_INTERNAL_ACTION"

TAG_ADDITIONAL_INFO_PROCESS = "ADDITIONAL_INFO_PROCESS"
TAG_ADDITIONAL_INFO_ITERATION = "ADDITIONAL_INFO_ITERATION"
TAG_ADDITIONAL_INFO_RESULT = "ADDITIONAL_INFO_RESULT"

_TX_FOR_STATUS = {
    sc.PROCESSED: sc.TX_SUCCESS,
    sc.REJECTED: sc.TX_REJECTED,
    sc.FAILED: sc.TX_FAILED,
    sc.REPROCESS: sc.TX_REPROCESS,
}


@dataclass(frozen=True)
class Transition:
    # None: the action does not move the status by itself
    target_status: Optional[str]
    # WorkflowEngine method names: effect(command, record, transition), precondition(command, record)
    effect: str
    # Checked after "record exists"; a falsy result drops the action
    precondition: Optional[str] = None


TRANSITIONS: Dict[str, Transition] = {
    sc.MARK_AS_PAUSED: Transition(sc.PAUSED, "_mark_paused"),
    sc.MARK_AS_REPROCESS: Transition(sc.REPROCESS, "_set_status"),
    sc.COMPLETE_AS_PROCESSED: Transition(sc.PROCESSED, "_complete"),
    sc.COMPLETE_AS_REJECTED: Transition(sc.REJECTED, "_complete"),
    sc.COMPLETE_AS_FAILED: Transition(sc.FAILED, "_complete"),
    sc.COMPLETE_AS_REJECTED_WITHOUT_PARENT_FLOW: Transition(
        sc.REJECTED, "_complete_without_parent_flow"),
    sc.PAUSE_AND_REQUEST_ADDITIONAL_INFO: Transition(
        sc.PAUSED_FOR_ADDITIONAL_INFO, "_pause_for_additional_info"),
    sc.RESTART_PARENT_FLOW: Transition(None, "_restart_parent_flow", precondition="_open_request"),
}


class WorkflowEngine:
    def __init__(
        self,
        status_store=None,
        additional_info_store=None,
        event_publisher=None,
        action_service=None,
        packet_reader=None,
    ):
        self.status_store = status_store or RedisStatusStore()
        self.additional_info_store = additional_info_store or RedisAdditionalInfoStore()
        self.event_publisher = event_publisher or EventPublisher()
        self.action_service = action_service or WorkflowActionService()
        self.packet_reader = packet_reader or PacketReader()

    # ---------------------------------------------------------------------
    # Error boundary
    # ---------------------------------------------------------------------
    def process(self, command: Union[WorkflowActionCommand, Dict[str, Any]]) -> bool:
        """
        Apply one action. Returns True when the action was applied, False when it was
        dropped or failed. Never raises.
        """
        rid = ""
        action = ""
        try:
            if not isinstance(command, WorkflowActionCommand):
                command = WorkflowActionCommand.from_dict(command)
            rid = command.rid
            action = (command.actionCode or "").upper()

            transition = TRANSITIONS.get(action)
            if transition is None:
                log(event="workflow_action_unknown", rid=rid, actionCode=command.actionCode)
                metrics.record_workflow_dropped("unknown_action")
                return False

            record = self._load_record(command)
            if record is None:
                log(event="workflow_action_record_missing", rid=rid, actionCode=action,
                    regType=command.reg_type or "", iteration=command.iteration)
                metrics.record_workflow_dropped("record_missing")
                return False

            if transition.precondition and not getattr(self, transition.precondition)(command, record):
                log(event="workflow_action_precondition_failed", rid=rid, actionCode=action,
                    precondition=transition.precondition.lstrip("_"),
                    regType=self._process_of(command, record), iteration=self._iteration_of(command, record))
                metrics.record_workflow_dropped("precondition_failed")
                return False

            applied = getattr(self, transition.effect)(command, record, transition)
            if applied:
                metrics.record_workflow_applied(action)
                log(event="workflow_action_applied", rid=rid, actionCode=action, statusCode=record.statusCode)
            return bool(applied)

        except TableNotAccessibleError as e:
            log(event="workflow_action_store_unavailable", rid=rid, actionCode=action, error=e.message)
            metrics.record_workflow_failed("TableNotAccessibleError")
        except TimestampParseError as e:
            log(event="workflow_action_bad_timestamp", rid=rid, actionCode=action, error=e.message)
            metrics.record_workflow_failed("TimestampParseError")
        except Exception as e:
            log(event="workflow_action_exception", rid=rid, actionCode=action,
                errorType=type(e).__name__, error=str(e)[:500])
            metrics.record_workflow_failed(type(e).__name__)
        return False

    # ---------------------------------------------------------------------
    # Lookups
    # ---------------------------------------------------------------------
    def _load_record(self, command: WorkflowActionCommand) -> Optional[RegistrationStatusRecord]:
        if command.reg_type and command.iteration is not None:
            return self.status_store.get_status(command.rid, command.reg_type, int(command.iteration))
        return self.status_store.get_status(command.rid)

    def _process_of(self, command: WorkflowActionCommand, record: RegistrationStatusRecord) -> str:
        return command.reg_type or record.registrationType

    def _iteration_of(self, command: WorkflowActionCommand, record: RegistrationStatusRecord) -> int:
        return int(command.iteration) if command.iteration is not None else int(record.iteration or 1)

    def _open_request(self, command: WorkflowActionCommand,
                      record: RegistrationStatusRecord) -> Optional[AdditionalInfoRequest]:
        return self.additional_info_store.get_by_rid_process_iteration(
            command.rid, self._process_of(command, record), self._iteration_of(command, record))

    # ---------------------------------------------------------------------
    # Effects
    # ---------------------------------------------------------------------
    def _write(self, record: RegistrationStatusRecord, status: str, command: WorkflowActionCommand) -> None:
        record.statusCode = status
        record.latestTransactionTypeCode = TRANSACTION_TYPE
        record.latestTransactionStatusCode = _TX_FOR_STATUS.get(status, sc.TX_IN_PROGRESS)
        record.subStatusCode = (command.actionCode or "").upper()
        record.statusComment = command.actionMessage or ""
        self.status_store.update_status(record, settings.WORKFLOW_MODULE_ID, settings.WORKFLOW_MODULE_NAME)

    def _set_status(self, command, record, transition) -> bool:
        self._write(record, transition.target_status, command)
        return True

    def _mark_paused(self, command, record, transition) -> bool:
        # Parse before touching the record so a bad timestamp leaves it as it was
        resume_at = to_iso_utc(parse_iso_timestamp(command.resumeTimestamp))
        record.resumeTimestamp = resume_at
        record.defaultResumeAction = command.defaultResumeAction
        self._write(record, transition.target_status, command)
        return True

    def _already_applied(self, command, record, transition) -> bool:
        # Replay only when this same action made the last terminal write
        return (record.statusCode in sc.TERMINAL_STATUSES
                and record.statusCode == transition.target_status
                and record.latestTransactionTypeCode == TRANSACTION_TYPE
                and (record.subStatusCode or "").upper() == (command.actionCode or "").upper())

    def _complete(self, command, record, transition) -> bool:
        request = self._open_request(command, record)
        if request is None and self._already_applied(command, record, transition):
            log(event="workflow_action_replayed", rid=command.rid, actionCode=command.actionCode,
                statusCode=record.statusCode)
            return False

        self._write(record, transition.target_status, command)
        if request is not None:
            self._resume_parent(command, request, transition.target_status)
        self._publish_completed(command, record)
        return True

    def _complete_without_parent_flow(self, command, record, transition) -> bool:
        if self._already_applied(command, record, transition):
            log(event="workflow_action_replayed", rid=command.rid, actionCode=command.actionCode,
                statusCode=record.statusCode)
            return False
        self._write(record, transition.target_status, command)
        self._publish_completed(command, record)
        return True

    def _pause_for_additional_info(self, command, record, transition) -> bool:
        # An additional-info flow cannot itself pause for more info: fail it and hand back to the parent
        nested = self._open_request(command, record)
        if nested is not None:
            log(event="additional_info_nested_pause", rid=command.rid,
                additionalInfoProcess=nested.additionalInfoProcess, iteration=nested.additionalInfoIteration)
            self._write(record, sc.FAILED, command)
            self._resume_parent(command, nested, sc.FAILED)
            self._publish_completed(command, record)
            return True

        resume_at = to_iso_utc(parse_iso_timestamp(command.resumeTimestamp)) if command.resumeTimestamp else None
        tag = command.additionalInfoProcess or ""
        # Each request for a process gets the next iteration; closed ones keep theirs
        previous = self.additional_info_store.get_by_rid_and_process(command.rid, tag, include_closed=True)
        iteration = int(previous.additionalInfoIteration) + 1 if previous else 1
        request = AdditionalInfoRequest(
            registrationId=command.rid,
            additionalInfoProcess=tag,
            additionalInfoIteration=iteration,
            workflowInstanceId=command.workflowInstanceId or record.workflowInstanceId,
            additionalInfoReqId=f"{command.rid}-{tag}-{iteration}-{now_ms()}",
            resumeTimestamp=resume_at,
            defaultResumeAction=command.defaultResumeAction,
        )

        record.resumeTimestamp = resume_at
        record.defaultResumeAction = command.defaultResumeAction
        self._write(record, transition.target_status, command)
        self.additional_info_store.add(request)
        self.event_publisher.publish_event(WorkflowPausedForAdditionalInfoEvent(
            instanceId=command.rid,
            workflowType=self._process_of(command, record),
            additionalInfoProcess=tag,
            additionalInfoRequestId=request.additionalInfoReqId,
        ))
        return True

    def _restart_parent_flow(self, command, record, transition) -> bool:
        self._resume_parent(command, self._open_request(command, record), record.statusCode)
        return True

    # ---------------------------------------------------------------------
    # Side effects shared by several actions
    # ---------------------------------------------------------------------
    def _resume_parent(self, command: WorkflowActionCommand, request: AdditionalInfoRequest, result: str) -> None:
        self.action_service.process_workflow_action(command, request.workflowInstanceId)
        self.packet_reader.add_or_update_tags(command.rid, {
            TAG_ADDITIONAL_INFO_PROCESS: request.additionalInfoProcess,
            TAG_ADDITIONAL_INFO_ITERATION: str(request.additionalInfoIteration),
            TAG_ADDITIONAL_INFO_RESULT: result,
        })
        self.additional_info_store.close(request)

    def _publish_completed(self, command: WorkflowActionCommand, record: RegistrationStatusRecord) -> None:
        self.event_publisher.publish_event(WorkflowCompletedEvent(
            instanceId=command.rid,
            workflowType=record.registrationType,
            resultCode=record.statusCode,
        ))
