from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


def _fold(key: str) -> str:
    return key.replace("_", "").lower()


class CaseInsensitiveModel(BaseModel):
    """
    Base model whose input keys are matched case-insensitively.

    `OverallFeedback`, `overall_feedback` and `overallFeedback` all land on the
    same field. Output uses the camelCase aliases.
    """
    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _fold_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        canonical = {}
        for name, field in cls.model_fields.items():
            canonical[_fold(name)] = field.alias or name
        return {canonical.get(_fold(str(key)), key): value for key, value in data.items()}


# --- Chat Models ---

class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    TOOL = "tool"


class ChatMessage(BaseModel):
    """One transcript entry. Immutable once created."""
    model_config = ConfigDict(frozen=True)

    role: MessageRole
    content: str = Field(
        default="",
        validation_alias=AliasChoices("content", "message"),
        description="Message text. The legacy field name 'message' is accepted on input.",
    )

    @field_validator("role", mode="before")
    @classmethod
    def _lower_role(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    @field_validator("content", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class ChatRequest(BaseModel):
    """Body of a chat completion turn. Older clients send the session id as `resumeId`."""
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(
        ...,
        validation_alias=AliasChoices("sessionId", "resumeId"),
        serialization_alias="sessionId",
        min_length=1,
    )
    messages: list[ChatMessage] = Field(default_factory=list)


class InterviewDataRequest(BaseModel):
    """Body of the interview start request (document ingestion)."""
    model_config = ConfigDict(populate_by_name=True)

    resume_url: str = Field(..., alias="resumeUrl")
    job_description_url: str = Field(..., alias="jobDescriptionUrl")
    session_id: Optional[str] = Field(default=None, alias="sessionId")


class ChatResponse(BaseModel):
    """One streamed frame. `error` is set only on the final frame of a failed stream."""
    message: str
    error: Optional[str] = None
    timestamp: Optional[str] = None


# --- Session Models ---

class SessionDocuments(BaseModel):
    """Normalized resume and job-description text backing one interview."""
    resume_text: str
    job_description_text: str

    def is_complete(self) -> bool:
        return bool(self.resume_text and self.resume_text.strip()
                    and self.job_description_text and self.job_description_text.strip())


# --- Report Models ---

REPORT_CATEGORIES = ["Technical", "Experience", "Personality"]


class ChartData(CaseInsensitiveModel):
    """Question-category breakdown. Labels and values are positionally paired."""
    labels: list[str] = Field(default_factory=list)
    values: list[int] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_pairing(self) -> "ChartData":
        if len(self.labels) != len(self.values):
            raise ValueError(
                f"chartData has {len(self.labels)} labels but {len(self.values)} values"
            )
        return self


class InterviewReport(CaseInsensitiveModel):
    """Structured end-of-session feedback."""
    overall_feedback: str = Field(default="", alias="overallFeedback")
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    chart_data: ChartData = Field(default_factory=ChartData, alias="chartData")

    @field_validator("overall_feedback", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("strengths", "weaknesses", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("chart_data", mode="before")
    @classmethod
    def _none_to_chart(cls, value: Any) -> Any:
        return {} if value is None else value

    @classmethod
    def fallback(cls, feedback: str) -> "InterviewReport":
        """Degraded-but-valid report carrying only a feedback sentence."""
        return cls(overall_feedback=feedback)


class PdfDownloadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    report: InterviewReport = Field(default_factory=InterviewReport)
    chat_history: list[ChatMessage] = Field(default_factory=list, alias="chatHistory")
