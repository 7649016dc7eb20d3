"""
Interview start pipeline.

1. Resume conversion (URL -> markdown)
2. Job-description conversion (URL -> markdown)
3. Atomic save of both documents for the session
4. Opening interview turn, streamed

Orchestration only; fetching, conversion, storage and the LLM turn are
delegated to the collaborators passed in.
"""
from __future__ import annotations
import logging
import uuid
from contextlib import aclosing
from typing import AsyncIterator, Optional

from interview_assistant.core.logger import log_async_execution_time, set_correlation_id
from interview_assistant.services.pipeline.interview_agent import InterviewAgent
from interview_assistant.services.pipeline.session_store import SessionStore
from interview_assistant.services.tools.normalizer import ContentNormalizer

logger = logging.getLogger(__name__)


def new_session_id() -> str:
    return str(uuid.uuid4())


class InterviewPipeline:
    """Ingests the two documents of a session and starts the interview."""

    def __init__(self, normalizer: ContentNormalizer, store: SessionStore, agent: InterviewAgent):
        self.normalizer = normalizer
        self.store = store
        self.agent = agent

    @log_async_execution_time
    async def ingest_and_start(
        self,
        resume_url: str,
        job_description_url: str,
        session_id: Optional[str] = None,
    ) -> AsyncIterator[str]:
        """
        Convert and store both documents, then stream the opening turn.

        A failure in either conversion aborts before anything is stored.
        """
        session_id = session_id or new_session_id()
        set_correlation_id(session_id)

        logger.info("Step 1: Converting resume")
        resume_text = await self.normalizer.convert(resume_url)

        logger.info("Step 2: Converting job description")
        job_description_text = await self.normalizer.convert(job_description_url)

        logger.info("Step 3: Saving session documents")
        await self.store.save(session_id, resume_text, job_description_text)

        logger.info("Step 4: Starting interview")
        async with aclosing(self.agent.invoke_turn(resume_text, job_description_text, [])) as stream:
            async for chunk in stream:
                yield chunk
