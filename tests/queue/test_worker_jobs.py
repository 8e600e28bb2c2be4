import pytest
from unittest.mock import patch, MagicMock

from regproc.queue.jobs import process_workflow_action_job, validate_proxy_job
from regproc.store.models import StageMessage


@patch("regproc.queue.jobs.log")
@patch("regproc.queue.jobs.WorkflowEngine")
def test_workflow_job_runs_engine(mock_engine_cls, mock_log):
    mock_engine_cls.return_value.process.return_value = True
    assert process_workflow_action_job({"rid": "rid-1", "actionCode": "MARK_AS_REPROCESS"}) is True
    command = mock_engine_cls.return_value.process.call_args.args[0]
    assert command.rid == "rid-1"
    assert mock_log.call_args.kwargs["event"] == "workflow_job_start"


@patch("regproc.queue.jobs.log")
def test_validation_job_returns_message(mock_log):
    stage = MagicMock()
    stage.process.side_effect = lambda msg: StageMessage(rid=msg.rid, isValid=True)
    with patch.dict("regproc.queue.jobs.STAGE_BUILDERS", {"introducer": lambda: stage}):
        out = validate_proxy_job("introducer", {"rid": "rid-1"})
    assert out["rid"] == "rid-1"
    assert out["isValid"] is True
    assert out["internalError"] is False


def test_validation_job_unknown_stage():
    with pytest.raises(ValueError):
        validate_proxy_job("operator", {"rid": "rid-1"})
