import json

import pytest
from structlog.testing import capture_logs

from adminportal.identity.application.api_key_gate import ExternalApiKeyGate

KEY = "s3cret-key"


def _body(response):
    return json.loads(response.body)


@pytest.fixture
def gate():
    return ExternalApiKeyGate(KEY)


def test_header_key_passes(gate, make_request):
    assert gate.authenticate(make_request(headers={"x-api-key": KEY})) is None


def test_missing_key_is_rejected(gate, make_request):
    response = gate.authenticate(make_request())
    assert response.status_code == 401
    body = _body(response)
    assert body["code"] == "api_key_required"
    assert body["message"] == "API key is required. Please provide your API key in the x-api-key header."
    assert body["details"] == {"header": "x-api-key"}


def test_wrong_key_is_rejected(gate, make_request):
    response = gate.authenticate(make_request(headers={"x-api-key": "nope"}))
    assert response.status_code == 401
    assert _body(response)["code"] == "invalid_api_key"


def test_header_takes_precedence_over_query(gate, make_request):
    request = make_request(headers={"x-api-key": "wrong"}, query=f"apiKey={KEY}")
    assert _body(gate.authenticate(request))["code"] == "invalid_api_key"


def test_query_key_passes_with_deprecation_warning(gate, make_request):
    with capture_logs() as logs:
        assert gate.authenticate(make_request(query=f"apiKey={KEY}")) is None
    assert any(e["event"] == "api_key_query_param_deprecated" and e["log_level"] == "warning" for e in logs)


def test_query_key_ignored_when_disabled(make_request):
    gate = ExternalApiKeyGate(KEY, allow_query_param=False)
    response = gate.authenticate(make_request(query=f"apiKey={KEY}"))
    assert _body(response)["code"] == "api_key_required"


@pytest.mark.parametrize("configured", [None, ""])
def test_unconfigured_key_is_server_error(configured, make_request):
    response = ExternalApiKeyGate(configured).authenticate(make_request(headers={"x-api-key": "anything"}))
    assert response.status_code == 500
    assert _body(response) == {"code": "server_configuration_error", "message": "Server configuration error"}


def test_decision_is_repeatable(gate, make_request):
    for headers in ({"x-api-key": KEY}, {"x-api-key": "bad"}, {}):
        first = gate.authenticate(make_request(headers=headers))
        second = gate.authenticate(make_request(headers=headers))
        if first is None:
            assert second is None
        else:
            assert (first.status_code, _body(first)) == (second.status_code, _body(second))


def test_custom_header_name(make_request):
    gate = ExternalApiKeyGate(KEY, header_name="x-partner-key")
    assert gate.authenticate(make_request(headers={"x-partner-key": KEY})) is None
    assert _body(gate.authenticate(make_request()))["details"] == {"header": "x-partner-key"}
