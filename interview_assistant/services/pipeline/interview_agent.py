"""
Interview Agent Orchestrator.

Runs one conversational turn of the mock interview against the chat model:
builds the prompt context from the session documents and the transcript,
streams the reply, and executes tool calls the model asks for.
"""
from __future__ import annotations
import logging
from contextlib import aclosing
from typing import AsyncIterator, Dict, List, Optional, Sequence

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import (
    AIMessage,
    AIMessageChunk,
    BaseMessage,
    HumanMessage,
    SystemMessage,
    ToolMessage,
)
from langchain_core.tools import BaseTool

from interview_assistant.core.config import settings
from interview_assistant.core.exceptions import AppError, InvalidInputError
from interview_assistant.core.logger import log_async_execution_time
from interview_assistant.core.prompts import START_INTERVIEW_TRIGGER, generate_interviewer_prompt
from interview_assistant.schemas.interview import ChatMessage, MessageRole
from interview_assistant.services.pipeline.llm_parser import content_to_text
from interview_assistant.services.tools.rate_limiter import RequestThrottle

logger = logging.getLogger(__name__)


def to_langchain_message(message: ChatMessage) -> BaseMessage:
    """Map a transcript entry onto the matching LangChain message type."""
    if message.role == MessageRole.USER:
        return HumanMessage(content=message.content)
    if message.role == MessageRole.ASSISTANT:
        return AIMessage(content=message.content)
    if message.role == MessageRole.TOOL:
        # Transcript tool entries carry no tool_call_id, so they go in as context
        return SystemMessage(content=f"Tool result: {message.content}")
    return SystemMessage(content=message.content)


def build_messages(
    resume_text: str,
    job_description_text: str,
    transcript: Sequence[ChatMessage],
) -> List[BaseMessage]:
    """
    Assemble the prompt context for one turn.

    Order: interviewer system prompt, history, new input. When the transcript
    ends with a user message, that message is the new input and everything
    before it is history. Otherwise the whole transcript is history and the
    new input is the start-of-interview trigger.
    """
    messages: List[BaseMessage] = [
        SystemMessage(content=generate_interviewer_prompt(resume_text, job_description_text))
    ]

    if transcript and transcript[-1].role == MessageRole.USER:
        history, new_input = transcript[:-1], HumanMessage(content=transcript[-1].content)
    else:
        history, new_input = transcript, SystemMessage(content=START_INTERVIEW_TRIGGER)

    messages.extend(to_langchain_message(message) for message in history)
    messages.append(new_input)
    return messages


class InterviewAgent:
    """
    Streams interviewer replies turn by turn.

    Every LLM round passes the shared request throttle first. Tool calls are
    executed without confirmation and their results fed back to the model,
    for at most `max_tool_rounds` rounds per turn.
    """

    def __init__(
        self,
        llm: BaseChatModel,
        rate_limiter: RequestThrottle,
        tools: Sequence[BaseTool] = (),
        max_tool_rounds: int = settings.MAX_TOOL_ROUNDS,
    ):
        self.llm = llm
        self.rate_limiter = rate_limiter
        self.tools: Dict[str, BaseTool] = {tool.name: tool for tool in tools}
        self.max_tool_rounds = max(0, max_tool_rounds)
        self._runnable = llm.bind_tools(list(self.tools.values())) if self.tools else llm

    async def _run_tool(self, tool_call: dict) -> ToolMessage:
        name = tool_call.get("name", "")
        tool_call_id = tool_call.get("id") or name
        tool = self.tools.get(name)
        if tool is None:
            logger.warning(f"Model requested unknown tool '{name}'")
            return ToolMessage(content=f"Unknown tool '{name}'.", tool_call_id=tool_call_id)

        logger.info(f"Executing tool '{name}' with args {tool_call.get('args')}")
        try:
            result = await tool.ainvoke(tool_call.get("args") or {})
        except AppError as e:
            logger.warning(f"Tool '{name}' failed: {e.message}")
            return ToolMessage(content=f"Tool '{name}' failed: {e.message}", tool_call_id=tool_call_id)
        return ToolMessage(content=str(result), tool_call_id=tool_call_id)

    @log_async_execution_time
    async def invoke_turn(
        self,
        resume_text: str,
        job_description_text: str,
        transcript: Sequence[ChatMessage],
    ) -> AsyncIterator[str]:
        """
        Stream the interviewer's next reply as text chunks, in arrival order.

        No retry: errors propagate to the caller, chunks already yielded stay
        delivered.

        Raises:
            InvalidInputError: if either session document is empty.
        """
        if not (resume_text and resume_text.strip()) or not (job_description_text and job_description_text.strip()):
            raise InvalidInputError("Resume and job description are required before the interview can run.")

        messages = build_messages(resume_text, job_description_text, transcript)
        logger.info(f"Running interview turn with {len(transcript)} transcript messages")

        for round_index in range(self.max_tool_rounds + 1):
            await self.rate_limiter.acquire()

            gathered: Optional[AIMessageChunk] = None
            async with aclosing(self._runnable.astream(messages)) as stream:
                async for chunk in stream:
                    gathered = chunk if gathered is None else gathered + chunk
                    text = content_to_text(chunk.content)
                    if text:
                        yield text

            tool_calls = gathered.tool_calls if gathered is not None else []
            if not tool_calls:
                return
            if round_index == self.max_tool_rounds:
                logger.warning(f"Tool round limit ({self.max_tool_rounds}) reached, ending turn")
                return

            messages.append(AIMessage(content=gathered.content, tool_calls=tool_calls))
            for tool_call in tool_calls:
                messages.append(await self._run_tool(tool_call))
