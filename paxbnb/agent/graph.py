"""LangGraph graph definition for the PaxBnb assistant.

Builds a StateGraph with agent + tool nodes and conditional routing.
The agent node calls the LLM; if it requests tool calls, the tools node
executes them and loops back until the model answers in plain text or the
model turn budget is spent.

Flow:
    START → agent → [has tool_calls?]
                      ├─ YES → tools → [turns left?]
                      │                  ├─ YES → agent (loop)
                      │                  └─ NO  → END
                      └─ NO  → END
"""

import logging
import os

from langchain_core.language_models import BaseChatModel
from langchain_litellm import ChatLiteLLM
from langgraph.graph import END, START, StateGraph

from paxbnb.agent.nodes import create_agent_node, create_tools_node, should_continue, should_resume
from paxbnb.agent.prompts import SYSTEM_PROMPT
from paxbnb.agent.state import AgentState
from paxbnb.agent.tools import ToolContext
from paxbnb.config import settings

logger = logging.getLogger(__name__)


def create_llm() -> ChatLiteLLM:
    """Create the chat model via LiteLLM (OpenAI, Claude, Gemini via one API)."""
    if settings.openai_api_key:
        os.environ["OPENAI_API_KEY"] = settings.openai_api_key
    if settings.anthropic_api_key:
        os.environ["ANTHROPIC_API_KEY"] = settings.anthropic_api_key
    if settings.gemini_api_key:
        os.environ["GEMINI_API_KEY"] = settings.gemini_api_key

    return ChatLiteLLM(
        model=settings.default_llm_model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
    )


def recursion_limit(max_model_turns: int) -> int:
    """LangGraph super-step limit that never cuts the turn budget short."""
    return 2 * max_model_turns + 2


def create_agent(
    context: ToolContext,
    llm: BaseChatModel | None = None,
    system_prompt: str = SYSTEM_PROMPT,
    max_model_turns: int | None = None,
):
    """Create and return the compiled assistant graph for one request.

    Args:
        context: Caller identity, clock and session factory for the tools.
        llm: Chat model to use; defaults to ``create_llm()``.
        system_prompt: Instructions including the per-request user context.
        max_model_turns: Model call budget; defaults to the configured value.
    """
    llm = llm or create_llm()
    max_turns = max_model_turns or settings.agent_max_model_turns

    graph = StateGraph(AgentState)

    graph.add_node("agent", create_agent_node(llm, system_prompt))
    graph.add_node("tools", create_tools_node(context))

    graph.add_edge(START, "agent")
    graph.add_conditional_edges("agent", should_continue, {"tools": "tools", END: END})
    graph.add_conditional_edges(
        "tools",
        lambda state: should_resume(state, max_turns),
        {"agent": "agent", END: END},
    )

    compiled = graph.compile()
    logger.info("Agent graph compiled (max_model_turns=%d)", max_turns)
    return compiled
