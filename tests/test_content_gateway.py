import json
from unittest.mock import MagicMock

import pytest
import requests

from src.content_gateway import (
    PAYLOAD_JSON,
    ContentGateway,
    RemoteOperationError,
    RemoteTransportError,
    SubmissionPayload,
)


def _response(status=200, body=None, reason="OK", raw=None):
    response = requests.Response()
    response.status_code = status
    response.reason = reason
    if raw is not None:
        response._content = raw
    elif body is None:
        response._content = b""
    else:
        response._content = json.dumps(body).encode("utf-8")
    return response


@pytest.fixture
def session():
    mock = MagicMock(spec=requests.Session)
    mock.request.return_value = _response(body=[])
    return mock


@pytest.fixture
def gateway(session):
    return ContentGateway(
        "http://backend:4000/",
        "/api/review",
        entity_label="review",
        timeout=7,
        session=session,
    )


class TestRequests:
    def test_list_fetches_collection(self, gateway, session):
        session.request.return_value = _response(body=[{"_id": "1"}])

        assert gateway.list() == [{"_id": "1"}]
        session.request.assert_called_once_with("GET", "http://backend:4000/api/review/", timeout=7)

    def test_get_approved(self, gateway, session):
        gateway.get_approved()
        assert session.request.call_args.args == ("GET", "http://backend:4000/api/review/approved")

    def test_approve_uses_patch(self, gateway, session):
        session.request.return_value = _response(body={"_id": "42", "approved": True})

        assert gateway.approve(42)["approved"] is True
        assert session.request.call_args.args == ("PATCH", "http://backend:4000/api/review/42/approve")

    def test_delete_quotes_id(self, gateway, session):
        gateway.delete("a/b")
        assert session.request.call_args.args == ("DELETE", "http://backend:4000/api/review/a%2Fb")

    def test_blank_id_is_rejected_before_any_request(self, gateway, session):
        with pytest.raises(ValueError):
            gateway.delete("  ")
        session.request.assert_not_called()

    def test_empty_success_body(self, gateway, session):
        session.request.return_value = _response(status=204, body=None)
        assert gateway.delete("1") == {}


class TestPayloads:
    def test_multipart_lets_requests_build_the_boundary(self, gateway, session, png_image):
        payload = SubmissionPayload(fields={"name": "Ana"}, files=[("image", png_image)])

        gateway.create(payload)

        kwargs = session.request.call_args.kwargs
        assert "headers" not in kwargs
        assert "data" not in kwargs
        assert kwargs["files"] == [
            ("name", (None, "Ana", None)),
            ("image", ("avatar.png", png_image.data, "image/png")),
        ]

    def test_update_without_image_sends_no_image_part(self, gateway, session):
        gateway.update("9", SubmissionPayload(fields={"role": "CTO"}))

        assert session.request.call_args.args == ("PUT", "http://backend:4000/api/review/9")
        parts = session.request.call_args.kwargs["files"]
        assert [name for name, _ in parts] == ["role"]

    def test_json_encoding(self, session):
        gateway = ContentGateway(
            "http://backend:4000", "/api/faq", entity_label="FAQ", payload_encoding=PAYLOAD_JSON, session=session
        )
        gateway.create(SubmissionPayload(fields={"question": "Q", "answer": "A"}))

        assert session.request.call_args.kwargs["json"] == {"question": "Q", "answer": "A"}

    def test_json_encoding_refuses_files(self, png_image):
        with pytest.raises(ValueError):
            SubmissionPayload(files=[("image", png_image)]).request_kwargs(PAYLOAD_JSON)


class TestErrors:
    def test_server_message_is_kept(self, gateway, session):
        session.request.return_value = _response(400, {"message": "Email already used"}, reason="Bad Request")

        with pytest.raises(RemoteOperationError) as excinfo:
            gateway.create(SubmissionPayload(fields={"name": "Ana"}))

        assert excinfo.value.status == 400
        assert excinfo.value.server_message == "Email already used"
        assert str(excinfo.value) == "HTTP 400: Email already used"

    def test_generic_message_without_body(self, gateway, session):
        session.request.return_value = _response(500, raw=b"<html>oops</html>", reason="Internal Server Error")

        with pytest.raises(RemoteOperationError) as excinfo:
            gateway.approve("1")

        assert excinfo.value.server_message is None
        assert excinfo.value.message == "Failed to approve review: 500 Internal Server Error"

    def test_invalid_json_on_success(self, gateway, session):
        session.request.return_value = _response(200, raw=b"not json")

        with pytest.raises(RemoteOperationError):
            gateway.list()

    def test_transport_failure(self, gateway, session):
        session.request.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(RemoteTransportError) as excinfo:
            gateway.list()

        assert excinfo.value.operation == "fetch reviews"
        assert isinstance(excinfo.value.__cause__, requests.ConnectionError)
