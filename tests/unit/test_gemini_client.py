import json

import httpx
import pytest

from apps.report.prompt import SYSTEM_INSTRUCTION, build_payload
from lib.clients.gemini import GeminiClient
from lib.config.report_loader import UpstreamConfig
from lib.contracts.generate_content import (
    GenerationSuccess,
    MalformedUpstream,
    TransportFailure,
    UpstreamHTTPError,
)


PAYLOAD = build_payload(["Rounding"])


def ok_body(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def make_client(responder, **config):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return responder(request, len(calls))

    client = GeminiClient(UpstreamConfig(**config), transport=httpx.MockTransport(handler))
    return client, calls


def test_request_shape():
    client, calls = make_client(lambda request, n: httpx.Response(200, json=ok_body("hi")))
    client.generate(PAYLOAD, "secret-key")

    request = calls[0]
    assert request.method == "POST"
    assert request.url.host == "generativelanguage.googleapis.com"
    assert request.url.path == "/v1beta/models/gemini-2.5-flash-preview-09-2025:generateContent"
    assert request.url.params["key"] == "secret-key"
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == {
        "contents": [{"parts": [{"text": "Here are the skills I struggled with: Rounding"}]}],
        "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
    }


def test_model_and_base_url_come_from_config():
    client, calls = make_client(
        lambda request, n: httpx.Response(200, json=ok_body("hi")),
        base_url="https://example.test/v1/",
        model="gemini-test",
    )
    client.generate(PAYLOAD, "k")
    assert str(calls[0].url).startswith("https://example.test/v1/models/gemini-test:generateContent?")


def test_success():
    client, _ = make_client(lambda request, n: httpx.Response(200, json=ok_body("**Lesson**")))
    assert client.generate(PAYLOAD, "k") == GenerationSuccess("**Lesson**")


def test_error_status_with_message():
    body = {"error": {"code": 400, "message": "API key not valid.", "status": "INVALID_ARGUMENT"}}
    client, _ = make_client(lambda request, n: httpx.Response(400, json=body))
    assert client.generate(PAYLOAD, "k") == UpstreamHTTPError(400, "API key not valid.")


@pytest.mark.parametrize("kwargs", [{"text": "Service Unavailable"}, {"json": {"unexpected": True}}, {"json": []}])
def test_error_status_without_message(kwargs):
    client, _ = make_client(lambda request, n: httpx.Response(503, **kwargs))
    assert client.generate(PAYLOAD, "k") == UpstreamHTTPError(503, "")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"json": {}},
        {"json": {"candidates": []}},
        {"json": {"candidates": [{}]}},
        {"json": {"candidates": [{"content": {"parts": []}}]}},
        {"json": {"candidates": [{"content": {"parts": [{}]}}]}},
        {"json": ok_body("")},
        {"json": {"candidates": "nope"}},
        {"text": "<html>not json</html>"},
    ],
)
def test_missing_content_is_malformed(kwargs):
    client, _ = make_client(lambda request, n: httpx.Response(200, **kwargs))
    assert isinstance(client.generate(PAYLOAD, "k"), MalformedUpstream)


def refuse(request, n):
    raise httpx.ConnectError("connection refused", request=request)


def test_transport_failure_single_attempt_by_default():
    client, calls = make_client(refuse)
    assert client.generate(PAYLOAD, "k") == TransportFailure("connection refused")
    assert len(calls) == 1


def test_transport_failures_retried_up_to_max_attempts():
    def flaky(request, n):
        if n < 3:
            raise httpx.ReadTimeout("timed out", request=request)
        return httpx.Response(200, json=ok_body("finally"))

    client, calls = make_client(flaky, max_attempts=3)
    assert client.generate(PAYLOAD, "k") == GenerationSuccess("finally")
    assert len(calls) == 3


def test_retries_exhausted_returns_last_failure():
    client, calls = make_client(refuse, max_attempts=2)
    assert isinstance(client.generate(PAYLOAD, "k"), TransportFailure)
    assert len(calls) == 2


def test_status_errors_are_not_retried():
    client, calls = make_client(lambda request, n: httpx.Response(500, json={}), max_attempts=3)
    assert client.generate(PAYLOAD, "k") == UpstreamHTTPError(500, "")
    assert len(calls) == 1
