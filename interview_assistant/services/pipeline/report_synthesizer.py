"""
End-of-interview report synthesis.

One non-streaming LLM call turns the transcript into an `InterviewReport`.
The synthesizer never fails the request: every error except cancellation is
turned into a valid report whose overall feedback explains what went wrong.
"""
import asyncio
import json
import logging
from typing import List, Sequence

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage
from pydantic import ValidationError

from interview_assistant.core.config import settings
from interview_assistant.core.logger import log_async_execution_time
from interview_assistant.core.prompts import generate_report_prompt
from interview_assistant.schemas.interview import ChatMessage, InterviewReport
from interview_assistant.services.pipeline.llm_parser import content_to_text, parse_llm_response

logger = logging.getLogger(__name__)

EMPTY_RESPONSE_FEEDBACK = "No response was received from the AI."
WRONG_FORMAT_FEEDBACK = "The AI returned the analysis in the wrong format. Please try again shortly."
UNEXPECTED_ERROR_FEEDBACK = "An unexpected error occurred while generating the report."


def render_transcript(transcript: Sequence[ChatMessage]) -> str:
    """One "<role>: <content>" line per message."""
    return "\n".join(f"{message.role.value}: {message.content}" for message in transcript)


class ReportSynthesizer:
    """Builds the structured feedback report for a finished interview."""

    def __init__(self, llm: BaseChatModel, timeout: float = settings.REPORT_TIMEOUT_SECONDS):
        self.llm = llm
        self.timeout = timeout

    async def _complete(self, prompt: str) -> str:
        response = await asyncio.wait_for(
            self.llm.ainvoke([HumanMessage(content=prompt)]),
            timeout=self.timeout,
        )
        return content_to_text(response.content)

    @log_async_execution_time
    async def generate_report(self, transcript: List[ChatMessage]) -> InterviewReport:
        """
        Analyze the transcript and return the report.

        Returns a fallback report (feedback text only) when the LLM answers
        nothing, answers in the wrong shape, or fails. Cancellation propagates.
        """
        prompt = generate_report_prompt(render_transcript(transcript))
        logger.info(f"Generating interview report from {len(transcript)} messages")

        try:
            raw_text = await self._complete(prompt)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Report generation failed: {e}", exc_info=True)
            return InterviewReport.fallback(UNEXPECTED_ERROR_FEEDBACK)

        if not raw_text or not raw_text.strip():
            logger.warning("Report generation returned an empty response")
            return InterviewReport.fallback(EMPTY_RESPONSE_FEEDBACK)

        try:
            report = parse_llm_response(raw_text, InterviewReport)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Error parsing InterviewReport: {e}")
            logger.error(f"Raw output (first 500 chars): {raw_text[:500]}...")
            return InterviewReport.fallback(WRONG_FORMAT_FEEDBACK)

        logger.info(
            f"Report generated: {len(report.strengths)} strengths, "
            f"{len(report.weaknesses)} weaknesses, chart values {report.chart_data.values}"
        )
        return report
