"""
Shared fixtures for the interview assistant tests.

LLMs are faked with LangChain's fake chat models or with `ScriptedChatModel`
below; HTTP is faked with `httpx.MockTransport`.
"""
import asyncio
import json
from typing import Any, Callable, List, Optional

import pytest
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, AIMessageChunk, BaseMessage
from langchain_core.outputs import ChatGeneration, ChatGenerationChunk, ChatResult
from langchain_core.tools import StructuredTool
from pydantic import Field

from interview_assistant.services.pipeline.session_store import SessionStore
from interview_assistant.services.tools.normalizer import CONVERT_TOOL_NAME
from interview_assistant.services.tools.rate_limiter import RequestThrottle

RESUME_TEXT = "# Jane Doe\n\n- 5 years of Python\n- FastAPI, PostgreSQL, Docker"
JOB_TEXT = "# Backend Engineer\n\nWe are hiring a backend engineer with Python and cloud experience."


class ScriptedChatModel(BaseChatModel):
    """
    Replays `responses` one per call and records every message list it receives.

    Tool calls on a scripted response are streamed as tool-call chunks, the
    same way a provider streams function calls.
    """
    responses: List[AIMessage] = Field(default_factory=list)
    error: Optional[BaseException] = None
    delay: float = 0.0
    received: List[List[BaseMessage]] = Field(default_factory=list)
    bound_tools: List[Any] = Field(default_factory=list)

    @property
    def _llm_type(self) -> str:
        return "scripted"

    def _next(self, messages: List[BaseMessage]) -> AIMessage:
        self.received.append(list(messages))
        if self.error is not None:
            raise self.error
        return self.responses[len(self.received) - 1]

    def _generate(self, messages, stop=None, run_manager=None, **kwargs) -> ChatResult:
        return ChatResult(generations=[ChatGeneration(message=self._next(messages))])

    async def _agenerate(self, messages, stop=None, run_manager=None, **kwargs) -> ChatResult:
        if self.delay:
            await asyncio.sleep(self.delay)
        return self._generate(messages, stop=stop, **kwargs)

    def _chunks(self, message: AIMessage):
        if message.content:
            yield ChatGenerationChunk(message=AIMessageChunk(content=message.content))
        if message.tool_calls:
            tool_call_chunks = [
                {"name": call["name"], "args": json.dumps(call["args"]), "id": call["id"], "index": i}
                for i, call in enumerate(message.tool_calls)
            ]
            yield ChatGenerationChunk(message=AIMessageChunk(content="", tool_call_chunks=tool_call_chunks))

    def _stream(self, messages, stop=None, run_manager=None, **kwargs):
        yield from self._chunks(self._next(messages))

    async def _astream(self, messages, stop=None, run_manager=None, **kwargs):
        message = self._next(messages)
        for chunk in self._chunks(message):
            yield chunk

    def bind_tools(self, tools, **kwargs):
        self.bound_tools = list(tools)
        return self


class CountingThrottle(RequestThrottle):
    """Throttle without waiting that counts admissions."""

    def __init__(self):
        super().__init__(0)
        self.acquired = 0

    async def acquire(self) -> None:
        self.acquired += 1
        await super().acquire()


def make_convert_tool(convert: Callable[[str], Any], name: str = CONVERT_TOOL_NAME) -> StructuredTool:
    """A conversion tool backed by a plain function (which may raise)."""

    async def convert_to_markdown(uri: str) -> str:
        """Return the markdown of the document at `uri`."""
        return convert(uri)

    return StructuredTool.from_function(
        coroutine=convert_to_markdown,
        name=name,
        description="Convert the document at a URI to markdown.",
    )


@pytest.fixture
def scripted_model() -> Callable[..., ScriptedChatModel]:
    def factory(*responses: AIMessage, **kwargs) -> ScriptedChatModel:
        return ScriptedChatModel(responses=list(responses), **kwargs)
    return factory


@pytest.fixture
def throttle() -> CountingThrottle:
    return CountingThrottle()


@pytest.fixture
def session_store(tmp_path) -> SessionStore:
    return SessionStore(tmp_path / "sessions.sqlite3")


@pytest.fixture
def documents_by_url() -> dict:
    return {
        "https://example.com/resume.pdf": RESUME_TEXT,
        "https://example.com/job.html": JOB_TEXT,
    }


@pytest.fixture
def convert_tool(documents_by_url) -> StructuredTool:
    return make_convert_tool(lambda uri: documents_by_url.get(uri, ""))
