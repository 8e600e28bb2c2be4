import pytest
from unittest.mock import patch

from regproc.core.errors import ApisResourceAccessError
from regproc.directory.client import Directory


def _directory():
    return Directory(idrepo_url="http://idrepo", user_details_url="http://users", individual_id_url="http://ind")


@patch("regproc.directory.client.request_json")
def test_resolve_uin_by_rid(mock_request):
    mock_request.return_value = {"response": {"identity": {"UIN": 2345678901}}}
    assert _directory().resolve_uin_by_rid("rid-1", "identity") == "2345678901"
    assert mock_request.call_args.args == ("GET", "http://idrepo/rid-1")
    assert mock_request.call_args.kwargs["params"] == {"type": "demo"}


@patch("regproc.directory.client.request_json")
def test_resolve_uin_by_rid_not_found(mock_request):
    mock_request.return_value = {"errors": [{"errorCode": "IDR-IDC-007", "message": "No Record Found"}]}
    assert _directory().resolve_uin_by_rid("rid-1", "identity") is None


@patch("regproc.directory.client.request_json")
def test_user_details(mock_request):
    mock_request.return_value = {"response": {"userResponseDto": [{"userId": "sup1", "isActive": True}]}}
    user = _directory().get_user_details("sup1", "2021-03-02")
    assert user.isActive is True
    assert mock_request.call_args.args == ("GET", "http://users/sup1/2021-03-02")


@patch("regproc.directory.client.request_json")
def test_user_details_errors_are_kept(mock_request):
    mock_request.return_value = {"errors": [{"errorCode": "KER-USR-007", "message": "User not found"}]}
    user = _directory().get_user_details("sup1", "2021-03-02")
    assert user.first_error_message() == "User not found"


@patch("regproc.directory.client.request_json")
def test_individual_id_link_failure(mock_request):
    mock_request.return_value = {"errors": [{"errorCode": "KER-USR-010", "message": "no link"}]}
    with pytest.raises(ApisResourceAccessError) as exc:
        _directory().get_individual_id_by_user_id("sup1")
    assert exc.value.code == "RPR-SYS-003"


@patch("regproc.directory.client.request_json")
def test_individual_id(mock_request):
    mock_request.return_value = {"response": {"individualId": "ind-1"}}
    assert _directory().get_individual_id_by_user_id("sup1") == "ind-1"
    assert mock_request.call_args.args == ("GET", "http://ind/regproc/sup1")
