"""
Pydantic models for the assistant core and its API.

Subject and conversation models are read-only inputs owned by the caller.
Invalid inputs fail closed with descriptive error messages, except for
the care stage, which is coerced rather than rejected.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from memora.config.logging_config import get_logger

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MessageRole(str, Enum):
    """Valid roles for conversation turns."""
    USER = "user"
    ASSISTANT = "assistant"


class CareStage(str, Enum):
    """Progression stage of the care recipient's condition."""
    EARLY = "early"
    MODERATE = "moderate"
    ADVANCED = "advanced"


def coerce_stage(value: Any) -> CareStage:
    """
    Map any input onto a CareStage.

    Unrecognised values (including None and non-strings) become MODERATE
    and are logged. Never raises.
    """
    if isinstance(value, CareStage):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        for stage in CareStage:
            if stage.value == normalized:
                return stage
    logger.warning(
        "Invalid stage value, coercing to moderate",
        received=repr(value)[:40],
    )
    return CareStage.MODERATE


class ResponseSource(str, Enum):
    """Where an assistant answer came from."""
    MODEL = "model"
    FALLBACK = "fallback"


class ConversationTurn(BaseModel):
    """
    A single turn in a conversation.

    Turns are immutable once created.

    Attributes:
        role: Who produced the turn (user or assistant).
        content: The turn text.
        created_at: When the turn was created (UTC).
    """
    model_config = ConfigDict(frozen=True)

    role: MessageRole = Field(..., description="Turn author role")
    content: str = Field(..., min_length=1, max_length=10000, description="Turn content")
    created_at: datetime = Field(default_factory=_utcnow, description="Turn creation time")

    @field_validator("content")
    @classmethod
    def validate_content_not_empty(cls, v: str) -> str:
        """Ensure content is not just whitespace."""
        if not v.strip():
            raise ValueError("Turn content cannot be empty or whitespace only")
        return v.strip()

    @field_validator("created_at")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Treat naive timestamps as UTC so turns stay comparable."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class SubjectProfile(BaseModel):
    """
    Identifying and clinical summary of the care recipient.

    Attributes:
        subject_id: Caller-side identifier.
        name: Display name.
        age: Declared age in years.
        date_of_birth: Used to compute the age when none is declared.
        diagnosis: Free-text diagnosis label.
        stage: Severity stage; unknown values become ``moderate``.
        case_narrative: Optional free-text case description.
    """
    subject_id: str = Field(..., min_length=1, description="Subject identifier")
    name: str = Field(..., min_length=1, max_length=200, description="Display name")
    age: int | None = Field(default=None, ge=0, le=130, description="Declared age in years")
    date_of_birth: date | None = Field(default=None, description="Date of birth")
    diagnosis: str = Field(default="", max_length=500, description="Diagnosis label")
    stage: CareStage = Field(default=CareStage.MODERATE, description="Severity stage")
    case_narrative: str | None = Field(
        default=None,
        max_length=10000,
        description="Free-text case narrative"
    )

    @field_validator("stage", mode="before")
    @classmethod
    def validate_stage(cls, v: Any) -> CareStage:
        """Coerce unknown stages instead of failing validation."""
        return coerce_stage(v)

    @field_validator("case_narrative")
    @classmethod
    def blank_narrative_to_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    def effective_age(self, today: date | None = None) -> int | None:
        """Declared age, or the age computed from the date of birth."""
        if self.age is not None:
            return self.age
        if self.date_of_birth is None:
            return None
        today = today or date.today()
        years = today.year - self.date_of_birth.year
        if (today.month, today.day) < (self.date_of_birth.month, self.date_of_birth.day):
            years -= 1
        return max(years, 0)


class AssistantRequest(BaseModel):
    """
    A caregiver question together with its situational context.

    Attributes:
        question: The free-text question.
        subject: Optional profile of the care recipient.
        case_text: Optional case narrative supplied by the caller.
        case_file_digest: Optional concatenation of case-file notes.
        history: Prior turns in chronological order.
    """
    question: str = Field(
        ...,
        max_length=5000,
        description="User question to the assistant, kept verbatim"
    )
    subject: SubjectProfile | None = Field(default=None, description="Care recipient profile")
    case_text: str | None = Field(default=None, max_length=10000, description="Case narrative")
    case_file_digest: str | None = Field(
        default=None,
        max_length=20000,
        description="Digest of uploaded case-file notes"
    )
    history: list[ConversationTurn] = Field(
        default_factory=list,
        description="Conversation so far, oldest first"
    )

    @property
    def is_blank(self) -> bool:
        """Whether the question has no content; such requests get the default answer."""
        return not self.question.strip()

    @field_validator("history")
    @classmethod
    def validate_history_order(cls, v: list[ConversationTurn]) -> list[ConversationTurn]:
        """History must already be chronological; it is never reordered."""
        for earlier, later in zip(v, v[1:]):
            if later.created_at < earlier.created_at:
                raise ValueError("History turns must be in chronological order")
        return v


class AssistantResponse(BaseModel):
    """
    Answer produced for an assistant request.

    Attributes:
        answer: The answer text, never empty.
        source: Whether the model or the fallback generator produced it.
        categories: Matched category identifiers, highest importance first.
        follow_up_questions: Suggested next questions.
        processing_time_ms: Time taken to produce the answer.
    """
    answer: str = Field(..., min_length=1, description="Assistant answer")
    source: ResponseSource = Field(..., description="Answer source")
    categories: list[str] = Field(default_factory=list, description="Matched categories")
    follow_up_questions: list[str] = Field(
        default_factory=list,
        max_length=5,
        description="Suggested follow-up questions"
    )
    processing_time_ms: int = Field(..., ge=0, description="Processing time in milliseconds")
    timestamp: datetime = Field(default_factory=_utcnow, description="Response timestamp")


class ClassificationRequest(BaseModel):
    """Question to classify."""
    question: str = Field(..., max_length=5000, description="Question text")


class ClassificationResponse(BaseModel):
    """Ranked category identifiers for a question."""
    question: str
    categories: list[str] = Field(default_factory=list)
    primary_category: str | None = None


class CategoryInfo(BaseModel):
    """Public description of one classification category."""
    identifier: str
    context_importance: int = Field(..., ge=1, le=10)
    instruction: str | None = None


class SuggestionCategory(str, Enum):
    """Families of suggested questions."""
    CASE_SPECIFIC = "case_specific"
    CAREGIVING_STRATEGIES = "caregiving_strategies"
    COGNITIVE = "cognitive"
    DAILY = "daily"
    MEDICAL = "medical"
    EMOTIONAL = "emotional"


class SuggestionRequest(BaseModel):
    """Request for suggested questions about a subject."""
    subject: SubjectProfile
    case_text: str | None = Field(default=None, max_length=10000)
    category: SuggestionCategory = Field(default=SuggestionCategory.CASE_SPECIFIC)


class SuggestionResponse(BaseModel):
    """Suggested questions and the care scenarios they were drawn from."""
    category: SuggestionCategory
    scenarios: list[str] = Field(default_factory=list)
    questions: list[str] = Field(default_factory=list)


class HealthStatus(str, Enum):
    """System health status levels."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class HealthResponse(BaseModel):
    """
    Health check response for monitoring.

    Attributes:
        status: Overall system health status.
        version: Application version.
        environment: Deployment environment.
        checks: Individual component health checks.
    """
    status: HealthStatus = Field(..., description="Overall health status")
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Deployment environment")
    timestamp: datetime = Field(default_factory=_utcnow, description="Check timestamp")
    checks: dict[str, bool] = Field(default_factory=dict, description="Component health checks")


class ErrorResponse(BaseModel):
    """
    Standardized error response.

    Attributes:
        error: Error type/code.
        message: Human-readable error message.
        details: Additional error details.
        request_id: Request ID for tracing.
    """
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: dict | None = Field(default=None, description="Additional details")
    request_id: str | None = Field(default=None, description="Request ID for tracing")
    timestamp: datetime = Field(default_factory=_utcnow, description="Error timestamp")
