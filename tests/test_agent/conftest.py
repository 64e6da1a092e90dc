"""Fixtures for orchestrator tests: a scripted stand-in for the chat model."""

from typing import Any

import pytest
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage
from langchain_core.outputs import ChatGeneration, ChatResult
from pydantic import Field


class ScriptedChatModel(BaseChatModel):
    """Replays canned AI messages in order; the last one repeats once the script runs out."""

    script: list[AIMessage]
    calls: list[list[BaseMessage]] = Field(default_factory=list)
    bound_tools: list[Any] = Field(default_factory=list)

    @property
    def _llm_type(self) -> str:
        return "scripted"

    def bind_tools(self, tools, **kwargs):
        self.bound_tools = list(tools)
        return self

    def _generate(self, messages, stop=None, run_manager=None, **kwargs) -> ChatResult:
        self.calls.append(list(messages))
        index = min(len(self.calls), len(self.script)) - 1
        message = self.script[index].model_copy()
        return ChatResult(generations=[ChatGeneration(message=message)])


def tool_call(name: str, args: dict | None = None, call_id: str = "call_1") -> dict:
    return {"name": name, "args": args or {}, "id": call_id}


@pytest.fixture
def scripted_llm():
    """Return a factory building a ScriptedChatModel from AI messages."""

    def _make(*script: AIMessage) -> ScriptedChatModel:
        return ScriptedChatModel(script=list(script))

    return _make


@pytest.fixture
def make_tool_call():
    return tool_call
