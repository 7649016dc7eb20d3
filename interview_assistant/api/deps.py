"""
FastAPI dependencies.

Process-wide collaborators are created once, on first use. Tests replace any
of them through `app.dependency_overrides`.
"""
from functools import lru_cache

from interview_assistant.core.config import settings
from interview_assistant.core.llm import get_chat_model
from interview_assistant.services.pipeline.interview_agent import InterviewAgent
from interview_assistant.services.pipeline.interview_pipeline import InterviewPipeline
from interview_assistant.services.pipeline.report_synthesizer import ReportSynthesizer
from interview_assistant.services.pipeline.session_store import SessionStore
from interview_assistant.services.tools.converters import ToolRegistry, build_default_registry
from interview_assistant.services.tools.fetcher import DocumentFetcher
from interview_assistant.services.tools.normalizer import ContentNormalizer
from interview_assistant.services.tools.rate_limiter import RequestThrottle


@lru_cache
def get_request_throttle() -> RequestThrottle:
    """The single admission gate shared by every interview turn."""
    return RequestThrottle(settings.MIN_REQUEST_INTERVAL_SECONDS)


@lru_cache
def get_session_store() -> SessionStore:
    return SessionStore(settings.SESSION_DB_PATH)


@lru_cache
def get_tool_registry() -> ToolRegistry:
    return build_default_registry(DocumentFetcher())


@lru_cache
def get_interview_agent() -> InterviewAgent:
    return InterviewAgent(
        llm=get_chat_model(),
        rate_limiter=get_request_throttle(),
        tools=get_tool_registry().tools,
        max_tool_rounds=settings.MAX_TOOL_ROUNDS,
    )


@lru_cache
def get_interview_pipeline() -> InterviewPipeline:
    return InterviewPipeline(
        normalizer=ContentNormalizer(get_tool_registry()),
        store=get_session_store(),
        agent=get_interview_agent(),
    )


@lru_cache
def get_report_synthesizer() -> ReportSynthesizer:
    return ReportSynthesizer(get_chat_model(), timeout=settings.REPORT_TIMEOUT_SECONDS)
