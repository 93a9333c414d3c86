"""
Memora Assistant API - Caregiver Question Assistant

A caregiver-support API that answers free-text questions about the
person being cared for, using their profile, case narrative, case-file
notes and recent conversation as context.

This API provides:
- Context-aware answers from a language model
- Deterministic fallback answers when no model is available
- Question classification and suggested questions
- Comprehensive logging and observability
"""

import time
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from memora.config.config import Settings, get_settings
from memora.config.logging_config import configure_logging, get_logger, log_request_context, preview
from memora.models.models import (
    AssistantRequest,
    AssistantResponse,
    CategoryInfo,
    ClassificationRequest,
    ClassificationResponse,
    ErrorResponse,
    HealthResponse,
    HealthStatus,
    SuggestionRequest,
    SuggestionResponse,
)
from memora.services.assistant_service import AssistantService
from memora.services.category_rules import CATEGORY_RULES
from memora.services.classifier import classify
from memora.services.question_suggester import extract_care_scenarios, suggest_questions

# Configure logging before anything else
configure_logging()
logger = get_logger(__name__)


def get_assistant_service(request: Request) -> AssistantService:
    """The assistant service owned by the running application."""
    return request.app.state.assistant_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events with proper logging.
    """
    settings = app.state.settings

    logger.info(
        "Application starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        config=settings.get_safe_config_dict(),
    )

    yield

    await app.state.assistant_service.aclose()
    logger.info("Application shutting down")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Optional settings override for testing.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description=__doc__,
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.dependency_overrides[get_settings] = lambda: settings
    app.state.settings = settings
    app.state.assistant_service = AssistantService(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests with timing and context."""
        request_id = str(uuid4())
        start_time = time.perf_counter()

        log_request_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        response = await call_next(request)

        processing_time = int((time.perf_counter() - start_time) * 1000)
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time-Ms"] = str(processing_time)

        logger.info(
            "Request completed",
            status_code=response.status_code,
            processing_time_ms=processing_time,
        )

        return response

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTP exceptions with structured response."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=f"HTTP_{exc.status_code}",
                message=str(exc.detail),
                request_id=request.headers.get("X-Request-ID"),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.exception("Unhandled exception", error=str(exc))
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="INTERNAL_ERROR",
                message="Could not process request",
                request_id=request.headers.get("X-Request-ID"),
            ).model_dump(mode="json"),
        )

    register_routes(app)

    return app


def register_routes(app: FastAPI) -> None:
    """Register all API routes."""

    @app.get("/", tags=["Root"])
    async def root(settings: Settings = Depends(get_settings)):
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "status": "operational",
            "docs": "/docs" if settings.debug else "disabled",
        }

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
        """
        Health check endpoint for monitoring.

        A missing model key is reported as degraded: answers still work
        through the fallback generator.
        """
        checks = {
            "api": True,
            "llm_configured": bool(settings.llm_api_key),
        }

        if all(checks.values()):
            status = HealthStatus.HEALTHY
        elif checks["api"]:
            status = HealthStatus.DEGRADED
        else:
            status = HealthStatus.UNHEALTHY

        return HealthResponse(
            status=status,
            version=settings.app_version,
            environment=settings.environment,
            checks=checks,
        )

    @app.get("/api/v1/categories", response_model=list[CategoryInfo], tags=["Assistant"])
    async def get_categories() -> list[CategoryInfo]:
        """List the question categories in declaration order."""
        return [CategoryInfo(**category.to_dict()) for category in CATEGORY_RULES]

    @app.post("/api/v1/assistant/classify", response_model=ClassificationResponse, tags=["Assistant"])
    async def classify_question(request: ClassificationRequest) -> ClassificationResponse:
        """Rank the categories a question matches."""
        result = classify(request.question)
        return ClassificationResponse(
            question=request.question,
            categories=result.identifiers,
            primary_category=result.top.identifier if result.top else None,
        )

    @app.post("/api/v1/assistant/chat", response_model=AssistantResponse, tags=["Assistant"])
    async def chat(
        request: AssistantRequest,
        x_llm_api_key: str | None = Header(default=None),
        settings: Settings = Depends(get_settings),
        service: AssistantService = Depends(get_assistant_service),
    ) -> AssistantResponse:
        """
        Ask the assistant a question.

        The model key may be supplied per request in the ``X-LLM-API-Key``
        header; otherwise the configured key is used. Without either, the
        answer comes from the fallback generator.

        **Example questions:**
        - "What approach should I take with nighttime confusion about work?"
        - "How should we manage her medication?"
        - "How can I communicate better with my father?"
        """
        logger.info("Assistant chat request received", question_preview=preview(request.question))
        credential = x_llm_api_key or settings.llm_api_key or None
        return await service.answer(request, credential)

    @app.post("/api/v1/assistant/suggestions", response_model=SuggestionResponse, tags=["Assistant"])
    async def suggestions(request: SuggestionRequest) -> SuggestionResponse:
        """Suggest questions to ask about a care recipient."""
        case_text = request.case_text or request.subject.case_narrative
        return SuggestionResponse(
            category=request.category,
            scenarios=extract_care_scenarios(case_text),
            questions=suggest_questions(
                request.subject.name,
                request.subject.stage,
                case_text,
                request.category,
            ),
        )


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "memora.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
