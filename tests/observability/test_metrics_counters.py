from unittest.mock import patch, MagicMock

import regproc.observability.metrics as metrics


@patch("regproc.observability.metrics.get_redis")
def test_counters_increment_hash_fields(mock_get_redis):
    r = MagicMock()
    mock_get_redis.return_value = r
    metrics.record_workflow_applied("COMPLETE_AS_PROCESSED")
    metrics.record_validation_outcome("IntroducerValidatorStage", "valid")
    r.hincrby.assert_any_call("metrics:workflow:applied", "COMPLETE_AS_PROCESSED", 1)
    r.hincrby.assert_any_call("metrics:validation:outcome", "IntroducerValidatorStage:valid", 1)


@patch("regproc.observability.metrics.get_redis")
def test_counter_failures_are_ignored(mock_get_redis):
    mock_get_redis.return_value.hincrby.side_effect = RuntimeError("redis down")
    metrics.record_workflow_failed("TableNotAccessibleError")


@patch("regproc.observability.metrics.get_redis")
def test_snapshot(mock_get_redis):
    r = MagicMock()
    r.hgetall.side_effect = lambda key: {"COMPLETE_AS_PROCESSED": "3"} if key == metrics.K_WF_APPLIED else {}
    mock_get_redis.return_value = r
    snap = metrics.snapshot()
    assert snap["workflowApplied"] == {"COMPLETE_AS_PROCESSED": 3}
    assert snap["validationOutcome"] == {}
