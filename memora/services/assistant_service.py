"""
Assistant service for caregiver questions.

This service handles:
- Question classification and prompt assembly
- The model call through the gateway
- Deterministic fallback when the model is unavailable or fails
- Follow-up question suggestions

The user always receives an answer; gateway errors are logged and never
surfaced to the caller.
"""

import time

from memora.config.config import Settings, get_settings
from memora.config.logging_config import get_logger, preview
from memora.models.models import (
    AssistantRequest,
    AssistantResponse,
    ResponseSource,
    SuggestionCategory,
)
from memora.services.classifier import ClassificationResult, classify
from memora.services.context_assembler import build_fallback_context, compose_prompt
from memora.services.conversation import ConversationLog
from memora.services.fallback_generator import DEFAULT_ANSWER, fallback
from memora.services.model_gateway import ModelGateway, ModelGatewayError
from memora.services.question_suggester import suggest_questions

logger = get_logger(__name__)


GENERAL_FOLLOW_UPS = [
    "What are the early signs of Alzheimer's?",
    "How can I support someone with memory loss?",
    "What activities are good for brain health?",
]

CATEGORY_FOLLOW_UPS: dict[str, list[str]] = {
    "medical": [
        "What side effects should I watch for?",
        "What should I ask at the next doctor's appointment?",
        "When should I call the doctor straight away?",
    ],
    "memory": [
        "What memory aids work well at home?",
        "How should I respond to repeated questions?",
        "How can a daily routine help with confusion?",
    ],
    "emotional": [
        "How can I help them feel calmer?",
        "Where can I find caregiver support groups?",
        "How do I look after my own wellbeing as a caregiver?",
    ],
    "safety": [
        "How can I make the home safer?",
        "What can I do about wandering?",
        "What should be in an emergency plan?",
    ],
    "daily_care": [
        "How can I make bathing less stressful?",
        "How can I encourage regular meals?",
        "What routine helps with better sleep?",
    ],
}

SUGGESTION_CATEGORY_FOR: dict[str, SuggestionCategory] = {
    "medical": SuggestionCategory.MEDICAL,
    "memory": SuggestionCategory.COGNITIVE,
    "emotional": SuggestionCategory.EMOTIONAL,
    "daily_care": SuggestionCategory.DAILY,
    "safety": SuggestionCategory.DAILY,
}


class AssistantService:
    """
    Answers caregiver questions, with or without a live model.

    This service is stateless - conversation history is passed in each request.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        gateway: ModelGateway | None = None,
    ):
        """
        Initialize the assistant service.

        Args:
            settings: Application settings. Uses default if not provided.
            gateway: Model gateway. Built from settings if not provided.
        """
        self.settings = settings or get_settings()
        self.gateway = gateway or ModelGateway(self.settings)

    async def aclose(self) -> None:
        """Release the gateway's shared client."""
        await self.gateway.aclose()

    async def answer(
        self,
        request: AssistantRequest,
        credential: str | None = None,
    ) -> AssistantResponse:
        """
        Answer a question.

        Args:
            request: The question and its context.
            credential: API key for the model endpoint; None means fallback only.

        Returns:
            AssistantResponse. No exceptions are raised for gateway failures.
        """
        start_time = time.perf_counter()
        classification = classify(request.question)

        # Snapshot the window now so later turns cannot leak into this prompt
        history = ConversationLog(request.history).recent(self.settings.history_window)

        logger.info(
            "Processing assistant question",
            question_preview=preview(request.question),
            categories=classification.identifiers,
            history_turns=len(history),
            has_subject=request.subject is not None,
        )

        prompt = compose_prompt(
            request.question,
            classification,
            subject_profile=request.subject,
            case_text=request.case_text,
            case_file_digest=request.case_file_digest,
            history=history,
            history_window=self.settings.history_window,
        )

        answer, source = await self._generate_or_fallback(request, prompt, credential)

        processing_time = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            "Assistant answer produced",
            source=source.value,
            answer_length=len(answer),
            processing_time_ms=processing_time,
        )

        return AssistantResponse(
            answer=answer,
            source=source,
            categories=classification.identifiers,
            follow_up_questions=self._generate_follow_ups(request, classification),
            processing_time_ms=processing_time,
        )

    async def _generate_or_fallback(
        self,
        request: AssistantRequest,
        prompt: str,
        credential: str | None,
    ) -> tuple[str, ResponseSource]:
        if request.is_blank:
            logger.info("Blank question, using default answer")
            return DEFAULT_ANSWER, ResponseSource.FALLBACK

        if self.gateway.has_access(credential):
            try:
                text = await self.gateway.generate(prompt, credential)
                return text, ResponseSource.MODEL
            except ModelGatewayError as e:
                logger.warning(
                    "Model gateway failed, using fallback",
                    error_type=type(e).__name__,
                    error=str(e),
                )
            except Exception as e:
                logger.exception("Unexpected model gateway error, using fallback", error=str(e))
        else:
            logger.info("No model credential, using fallback")

        return self._fallback_answer(request), ResponseSource.FALLBACK

    def _fallback_answer(self, request: AssistantRequest) -> str:
        context = build_fallback_context(
            request.subject,
            request.case_text,
            request.case_file_digest,
        )
        answer = fallback(request.question, context)
        return answer or DEFAULT_ANSWER

    def _generate_follow_ups(
        self,
        request: AssistantRequest,
        classification: ClassificationResult,
    ) -> list[str]:
        """
        Suggest follow-up questions.

        Personalised when a subject is known, otherwise keyed by category.
        """
        top = classification.top.identifier if classification.top else None

        if request.subject is not None:
            case_text = "\n".join(
                part for part in (request.subject.case_narrative, request.case_text) if part
            )
            category = SUGGESTION_CATEGORY_FOR.get(top, SuggestionCategory.CASE_SPECIFIC)
            return suggest_questions(
                request.subject.name,
                request.subject.stage,
                case_text,
                category,
            )[:3]

        return list(CATEGORY_FOLLOW_UPS.get(top, GENERAL_FOLLOW_UPS))
