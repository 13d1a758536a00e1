"""Skill report service.

:class:`ReportHandler` takes the raw body posted by the quiz page and the API
key injected at process start, asks Gemini for a mini-lesson per failed
skill and returns ``(status_code, body)`` where ``body`` is either
``{"html": ...}`` or ``{"error": ...}``.  The HTTP app in :mod:`.main` and
the serverless entry point in :mod:`.serverless` are thin wrappers around it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from lib.clients.gemini import GeminiClient
from lib.config.report_loader import ReportConfig, load_report_config
from lib.contracts.generate_content import (
    GenerationResult,
    GenerationSuccess,
    MalformedUpstream,
    TransportFailure,
    UpstreamHTTPError,
)
from lib.contracts.report import ErrorResponse, ReportRequest, ReportResponse
from lib.telemetry.logger import get_logger

from .formatter import format_ai_text
from .prompt import build_payload


logger = get_logger(__name__)

MISSING_KEY_ERROR = "API key is not configured on the server."
INVALID_BODY_ERROR = "Invalid request body."
NO_SKILLS_ERROR = "No skills provided."
NO_CONTENT_ERROR = "Invalid response from AI. No content found."

Reply = Tuple[int, Dict[str, str]]


def _error(status: int, message: str) -> Reply:
    return status, ErrorResponse(error=message).model_dump()


@dataclass
class ReportHandler:
    """Validate a report request, call the model and format its answer.

    Parameters
    ----------
    config: optional :class:`ReportConfig`; loaded from ``config_path`` when
        omitted and the file exists, otherwise built-in defaults apply.
    client: optional :class:`GeminiClient`; one is created from the
        ``upstream`` section of the configuration when omitted.
    """

    config: ReportConfig | None = field(default=None)
    config_path: str = "config/report.yaml"
    client: GeminiClient | None = field(default=None)

    def __post_init__(self) -> None:
        if self.config is None:
            if Path(self.config_path).exists():
                self.config = load_report_config(self.config_path)
            else:
                self.config = ReportConfig()
        if self.client is None:
            self.client = GeminiClient(self.config.upstream)

    @staticmethod
    def _parse(raw_body: Union[str, bytes, None]) -> Optional[ReportRequest]:
        if raw_body is None:
            return None
        try:
            return ReportRequest.model_validate_json(raw_body)
        except ValueError:
            return None

    def _reply(self, result: GenerationResult) -> Reply:
        if isinstance(result, GenerationSuccess):
            html = format_ai_text(result.text, self.config.formatter)
            return 200, ReportResponse(html=html).model_dump()
        if isinstance(result, UpstreamHTTPError):
            return _error(500, f"API Error: {result.status_code} {result.message}")
        if isinstance(result, MalformedUpstream):
            return _error(500, NO_CONTENT_ERROR)
        if isinstance(result, TransportFailure):
            logger.error("Report request failed: %s", result.message)
            return _error(500, result.message)
        raise TypeError(f"unexpected generation result {result!r}")

    def handle(self, raw_body: Union[str, bytes, None], api_key: Optional[str]) -> Reply:
        """Return ``(status_code, body)`` for one report request."""

        if not api_key:
            return _error(500, MISSING_KEY_ERROR)

        request = self._parse(raw_body)
        if request is None:
            return _error(400, INVALID_BODY_ERROR)

        skills = request.skill_list()
        if not skills:
            return _error(400, NO_SKILLS_ERROR)

        try:
            logger.info("Requesting lessons for %d skill(s)", len(skills))
            result = self.client.generate(build_payload(skills), api_key)
            return self._reply(result)
        except Exception as e:
            logger.exception("Error while building the skill report")
            return _error(500, str(e) or e.__class__.__name__)


__all__ = ["ReportHandler"]
