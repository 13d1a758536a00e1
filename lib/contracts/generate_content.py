"""Wire models and call outcomes for Gemini ``generateContent``.

Every level of the response is optional so that partial bodies validate;
:meth:`GenerateContentResponse.first_text` decides whether content exists.
The client reports each call as one of the result variants below and the
handler maps each variant to a response.
"""
from dataclasses import dataclass
from typing import List, Optional, Union

from pydantic import BaseModel, Field


class Part(BaseModel):
    text: Optional[str] = None


class Content(BaseModel):
    parts: List[Part] = Field(default_factory=list)


class Candidate(BaseModel):
    content: Optional[Content] = None


class GenerateContentResponse(BaseModel):
    candidates: List[Candidate] = Field(default_factory=list)

    def first_text(self) -> Optional[str]:
        """Text of the first part of the first candidate, or ``None``."""

        if not self.candidates:
            return None
        content = self.candidates[0].content
        if content is None or not content.parts:
            return None
        return content.parts[0].text or None


class UpstreamErrorBody(BaseModel):
    class Detail(BaseModel):
        message: Optional[str] = None

    error: Optional[Detail] = None


@dataclass(frozen=True)
class GenerationSuccess:
    text: str


@dataclass(frozen=True)
class UpstreamHTTPError:
    status_code: int
    message: str = ""


@dataclass(frozen=True)
class MalformedUpstream:
    reason: str


@dataclass(frozen=True)
class TransportFailure:
    message: str


GenerationResult = Union[GenerationSuccess, UpstreamHTTPError, MalformedUpstream, TransportFailure]
