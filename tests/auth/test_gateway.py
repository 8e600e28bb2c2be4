from unittest.mock import patch

from regproc.auth.gateway import (
    AUTHENTICATED,
    REJECTED,
    SYSTEM_ERROR,
    AuthGateway,
    ProxyAuthRequest,
    classify_auth_response,
)
from regproc.store.models import BiometricSegment


def test_classify_authenticated():
    assert classify_auth_response({"response": {"authStatus": True}, "errors": None}).status == AUTHENTICATED


def test_classify_rejected():
    out = classify_auth_response({"response": {"authStatus": False}, "errors": []})
    assert out.status == REJECTED
    assert not out.authenticated


def test_errors_win_over_auth_status():
    out = classify_auth_response({
        "response": {"authStatus": True},
        "errors": [{"errorCode": "IDA-MLC-007", "message": "auth backend down"}],
    })
    assert out.status == SYSTEM_ERROR
    assert out.has_error_code("ida-mlc-007")
    assert not out.has_error_code("IDA-MLC-008")


def test_payload_carries_segments_and_id_type():
    req = ProxyAuthRequest(subjectId="2345678901", subjectType="UIN",
                           segments=[BiometricSegment(bioType="Iris", bioSubType="Left", data="abc")])
    payload = req.to_payload()
    assert payload["individualId"] == "2345678901"
    assert payload["individualIdType"] == "UIN"
    assert payload["requestedAuth"] == {"bio": True, "otp": False}
    assert payload["request"]["biometrics"][0] == {"bioType": "Iris", "bioSubType": "Left", "data": "abc"}


@patch("regproc.auth.gateway.log")
@patch("regproc.auth.gateway.request_json")
def test_authenticate_posts_and_logs_without_identity(mock_request, mock_log):
    mock_request.return_value = {"response": {"authStatus": True}}
    out = AuthGateway(url="http://ida/auth").authenticate(
        "2345678901", "UIN", [BiometricSegment(bioType="Face", data="abc")], registration_id="rid-1")

    assert out.authenticated
    method, url = mock_request.call_args.args
    assert (method, url) == ("POST", "http://ida/auth")
    logged = mock_log.call_args.kwargs
    assert logged["event"] == "proxy_auth_outcome"
    assert "2345678901" not in str(logged)
