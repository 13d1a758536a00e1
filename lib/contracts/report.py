"""Inbound, outbound and upstream payload models for the skill report."""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class ReportRequest(BaseModel):
    """Body posted by the quiz page: the skills the student missed."""

    model_config = ConfigDict(extra="ignore")

    skills: Optional[List[str]] = None

    def skill_list(self) -> List[str]:
        return list(self.skills or [])


class ReportResponse(BaseModel):
    html: str


class ErrorResponse(BaseModel):
    error: str


class UpstreamPayload(BaseModel):
    """Prompt sent to the generative-language API for one request."""

    system_instruction: str
    user_query: str

    def to_request_body(self) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": self.user_query}]}],
            "systemInstruction": {"parts": [{"text": self.system_instruction}]},
        }
