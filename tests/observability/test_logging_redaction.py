import json
from unittest.mock import patch

from regproc.observability.logging import log
from regproc.settings import settings


def test_identity_fields_are_redacted(capsys):
    with patch.object(settings, "ENABLE_PII_REDACTION", True):
        log(event="proxy_auth_outcome", rid="rid-1", uin="2345678901",
            segments=[{"data": "abc"}], nested={"individualId": "ind-1", "stage": "s"})
    line = json.loads(capsys.readouterr().out.strip())
    assert line["event"] == "proxy_auth_outcome"
    assert line["rid"] == "rid-1"
    assert line["uin"] == "[REDACTED:10chars]"
    assert line["segments"] == "[REDACTED:1items]"
    assert line["nested"] == {"individualId": "[REDACTED:5chars]", "stage": "s"}


def test_redaction_can_be_disabled(capsys):
    with patch.object(settings, "ENABLE_PII_REDACTION", False):
        log(event="x", uin="2345678901")
    line = json.loads(capsys.readouterr().out.strip())
    assert line["uin"] == "2345678901"
