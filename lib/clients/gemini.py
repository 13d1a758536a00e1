"""HTTP client for the Gemini ``generateContent`` endpoint.

The client never raises for upstream problems.  Each call is reported as one
of the variants in :mod:`lib.contracts.generate_content` so the caller can
map every outcome explicitly.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from lib.config.report_loader import UpstreamConfig
from lib.contracts.generate_content import (
    GenerateContentResponse,
    GenerationResult,
    GenerationSuccess,
    MalformedUpstream,
    TransportFailure,
    UpstreamErrorBody,
    UpstreamHTTPError,
)
from lib.contracts.report import UpstreamPayload
from lib.telemetry.logger import get_logger


logger = get_logger(__name__)


class GeminiClient:
    def __init__(
        self,
        config: Optional[UpstreamConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.config = config or UpstreamConfig()
        # Tests pass an ``httpx.MockTransport``; production uses the default.
        self.transport = transport

    def _post(self, body: Dict[str, Any], api_key: str) -> httpx.Response:
        with httpx.Client(transport=self.transport, timeout=self.config.timeout_seconds) as client:
            return client.post(
                self.config.endpoint,
                params={"key": api_key},
                headers={"Content-Type": "application/json"},
                json=body,
            )

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            detail = UpstreamErrorBody.model_validate(response.json()).error
        except ValueError:
            return ""
        return (detail.message or "") if detail else ""

    def _interpret(self, response: httpx.Response) -> GenerationResult:
        if not response.is_success:
            logger.error("Gemini API error %s: %s", response.status_code, response.text[:2000])
            return UpstreamHTTPError(response.status_code, self._error_message(response))

        try:
            parsed = GenerateContentResponse.model_validate(response.json())
        except ValueError as e:
            logger.error("Gemini returned an unreadable body: %s", e)
            return MalformedUpstream("response body is not a generateContent result")

        text = parsed.first_text()
        if text is None:
            logger.error("Gemini response has no candidate text: %s", response.text[:2000])
            return MalformedUpstream("no text in the first candidate")
        return GenerationSuccess(text)

    def generate(self, payload: UpstreamPayload, api_key: str) -> GenerationResult:
        """POST ``payload`` once (or up to ``max_attempts`` on transport errors)."""

        body = payload.to_request_body()
        attempts = self.config.max_attempts
        failure = TransportFailure("no request was sent")
        for attempt in range(1, attempts + 1):
            try:
                response = self._post(body, api_key)
            except httpx.HTTPError as e:
                failure = TransportFailure(str(e) or e.__class__.__name__)
                logger.warning(
                    "Gemini request failed (attempt %d/%d): %s", attempt, attempts, failure.message
                )
                continue
            return self._interpret(response)
        return failure


__all__ = ["GeminiClient"]
