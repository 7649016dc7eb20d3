import json
import logging
from datetime import datetime, timezone
from typing import AsyncIterator, List, Optional

from fastapi import APIRouter, Body, Depends, Header, HTTPException
from fastapi.responses import StreamingResponse

from interview_assistant.api.deps import (
    get_interview_agent,
    get_interview_pipeline,
    get_report_synthesizer,
    get_session_store,
)
from interview_assistant.core.logger import set_correlation_id
from interview_assistant.schemas.interview import (
    ChatMessage,
    ChatRequest,
    ChatResponse,
    InterviewDataRequest,
    InterviewReport,
    MessageRole,
)
from interview_assistant.services.pipeline.interview_agent import InterviewAgent
from interview_assistant.services.pipeline.interview_pipeline import InterviewPipeline, new_session_id
from interview_assistant.services.pipeline.report_synthesizer import ReportSynthesizer
from interview_assistant.services.pipeline.session_store import SessionStore
from interview_assistant.services.tools.security import sanitize_message, validate_message, validate_url

logger = logging.getLogger(__name__)

chat_router = APIRouter()

NO_DATA_MESSAGE = "no data"
STREAM_ERROR_MESSAGE = "The interviewer reply was interrupted. Please try again."
SESSION_HEADER = "X-Session-Id"

STREAM_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "X-Accel-Buffering": "no",
}


def _frame(text: str) -> str:
    return json.dumps(ChatResponse(message=text).model_dump(exclude_none=True), ensure_ascii=False) + "\n"


def _error_frame(exc: Exception) -> str:
    frame = ChatResponse(
        message=STREAM_ERROR_MESSAGE,
        error=type(exc).__name__,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
    return json.dumps(frame.model_dump(exclude_none=True), ensure_ascii=False) + "\n"


async def prime_stream(chunks: AsyncIterator[str]) -> AsyncIterator[str]:
    """
    Pull the first chunk before the response starts.

    Failures before any output (fetch, conversion, LLM connect) raise here and
    reach the exception handlers as a proper error status. A later failure
    ends the stream with one error frame.
    """
    try:
        first: Optional[str] = await chunks.__anext__()
    except StopAsyncIteration:
        first = None

    async def frames() -> AsyncIterator[str]:
        try:
            if first is not None:
                yield _frame(first)
            async for chunk in chunks:
                yield _frame(chunk)
        except Exception as e:
            logger.error(f"Stream aborted after partial output: {e}", exc_info=True)
            yield _error_frame(e)
        finally:
            await chunks.aclose()

    return frames()


async def _single_frame(text: str) -> AsyncIterator[str]:
    yield _frame(text)


def _ndjson(frames: AsyncIterator[str], headers: Optional[dict] = None) -> StreamingResponse:
    return StreamingResponse(
        frames,
        media_type="application/x-ndjson",
        headers={**STREAM_HEADERS, **(headers or {})},
    )


@chat_router.post("/complete")
async def complete_chat(
    request: ChatRequest,
    store: SessionStore = Depends(get_session_store),
    agent: InterviewAgent = Depends(get_interview_agent),
):
    """
    Run one interview turn for a session.
    Streams the interviewer reply as NDJSON `{"message": ...}` frames.
    """
    set_correlation_id(request.session_id)
    transcript: List[ChatMessage] = list(request.messages)

    if transcript and transcript[-1].role == MessageRole.USER:
        is_valid, reason = validate_message(transcript[-1].content)
        if not is_valid:
            raise HTTPException(status_code=400, detail=reason)
        transcript[-1] = ChatMessage(role=MessageRole.USER, content=sanitize_message(transcript[-1].content))

    documents = await store.get(request.session_id)
    if documents is None or not documents.is_complete():
        logger.warning(f"No interview documents stored for session {request.session_id}")
        return _ndjson(_single_frame(NO_DATA_MESSAGE))

    stream = await prime_stream(
        agent.invoke_turn(documents.resume_text, documents.job_description_text, transcript)
    )
    return _ndjson(stream)


@chat_router.post("/interview-data")
async def start_interview(
    request: InterviewDataRequest,
    x_session_id: Optional[str] = Header(default=None),
    pipeline: InterviewPipeline = Depends(get_interview_pipeline),
):
    """
    Fetch and store the resume and job description, then stream the opening turn.
    The session id is returned in the `X-Session-Id` header.
    """
    for field_name, url in (("resumeUrl", request.resume_url), ("jobDescriptionUrl", request.job_description_url)):
        is_valid, reason = validate_url(url)
        if not is_valid:
            raise HTTPException(status_code=400, detail=f"{field_name}: {reason}")

    session_id = request.session_id or x_session_id or new_session_id()
    set_correlation_id(session_id)
    logger.info(f"Starting interview for session {session_id}")

    stream = await prime_stream(
        pipeline.ingest_and_start(request.resume_url, request.job_description_url, session_id)
    )
    return _ndjson(stream, headers={SESSION_HEADER: session_id})


@chat_router.post("/report", response_model=InterviewReport)
async def generate_report(
    messages: List[ChatMessage] = Body(...),
    synthesizer: ReportSynthesizer = Depends(get_report_synthesizer),
):
    """Synthesize the feedback report for a finished interview."""
    return await synthesizer.generate_report(messages)
