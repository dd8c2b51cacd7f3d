from flask import Flask

from geminiproxy.core.errors import ClientInputError, CredentialsExhaustedError
from geminiproxy.utils.http import error_response_for, failure_response_for, get_client_ip, status_for


def test_client_input_errors_are_bad_requests():
    assert status_for(ClientInputError("bad")) == 400
    assert status_for(CredentialsExhaustedError()) == 500
    assert status_for(RuntimeError("boom")) == 500


def test_error_envelopes_follow_exception_kind():
    app = Flask(__name__)
    with app.test_request_context("/"):
        body, status = error_response_for(ClientInputError("missing upload"))
        assert status == 400
        assert body.get_json() == {
            "error": {"message": "missing upload", "type": "invalid_request_error", "param": None, "code": None}
        }
        body, status = error_response_for(RuntimeError("500 INTERNAL"))
        assert status == 500
        assert body.get_json()["error"]["type"] == "internal_server_error"
        body, status = failure_response_for(ClientInputError("bad images"))
        assert (status, body.get_json()) == (400, {"success": False, "error": "bad images"})


def test_client_ip_prefers_first_forwarded_hop():
    app = Flask(__name__)
    with app.test_request_context("/", headers={"X-Forwarded-For": "10.0.0.1, 10.0.0.2"}):
        assert get_client_ip() == "10.0.0.1"
    with app.test_request_context("/", environ_base={"REMOTE_ADDR": "192.0.2.7"}):
        assert get_client_ip() == "192.0.2.7"
