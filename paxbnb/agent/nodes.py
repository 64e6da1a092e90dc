"""Agent reasoning, tool execution, and routing nodes for the LangGraph graph."""

import asyncio
import json
import logging
from typing import Literal

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import SystemMessage, ToolMessage
from langgraph.graph import END
from sqlalchemy.exc import InterfaceError, OperationalError

from paxbnb.agent.state import AgentState
from paxbnb.agent.tools import ToolContext, execute_tool, tool_definitions
from paxbnb.services.exceptions import UpstreamError

logger = logging.getLogger(__name__)

MAX_MODEL_TURNS = 5

# Store connectivity failures abort the request instead of becoming tool results.
_UPSTREAM_ERRORS = (OperationalError, InterfaceError, ConnectionError)

# Tool tasks still running after their request was cancelled.
_inflight_tools: set[asyncio.Task] = set()


def create_agent_node(llm: BaseChatModel, system_prompt: str):
    """Create the agent node function with the tool catalog bound to the LLM."""
    llm_with_tools = llm.bind_tools(tool_definitions())

    async def agent_node(state: AgentState) -> dict:
        """Call the LLM with conversation history and available tools."""
        messages = [SystemMessage(content=system_prompt)] + state["messages"]
        response = await llm_with_tools.ainvoke(messages)
        turns = state.get("model_turns", 0) + 1
        logger.info(
            "Model turn %d: %d tool call(s)",
            turns,
            len(getattr(response, "tool_calls", None) or []),
        )
        return {"messages": [response], "model_turns": turns}

    return agent_node


def should_continue(state: AgentState) -> Literal["tools", "__end__"]:
    """Route to tool execution if the LLM made tool calls, otherwise end."""
    last_message = state["messages"][-1]
    if getattr(last_message, "tool_calls", None):
        return "tools"
    return END


def should_resume(state: AgentState, max_turns: int = MAX_MODEL_TURNS) -> Literal["agent", "__end__"]:
    """Hand tool results back to the LLM while model turns remain.

    Once the budget is spent the request ends quietly with whatever text the
    model has produced so far.
    """
    if state.get("model_turns", 0) < max_turns:
        return "agent"
    logger.info("Model turn limit (%d) reached; ending request", max_turns)
    return END


async def _run_tool(tool_call: dict, context: ToolContext) -> dict:
    """Execute one tool call, shielded from cancellation of the request.

    If the client disconnects mid-stream the request is cancelled, but a tool
    already running (e.g. inserting a booking) is allowed to finish and
    commit.
    """
    name = tool_call["name"]
    task = asyncio.ensure_future(execute_tool(name, tool_call.get("args") or {}, context))
    _inflight_tools.add(task)
    task.add_done_callback(_inflight_tools.discard)
    try:
        return await asyncio.shield(task)
    except asyncio.CancelledError:
        logger.info("Request cancelled while tool %s was running; letting it finish", name)
        raise
    except _UPSTREAM_ERRORS as exc:
        logger.exception("Store unavailable while running tool %s", name)
        raise UpstreamError("The booking database is unavailable.") from exc
    except Exception:
        logger.exception("Tool %s failed", name)
        return {
            "success": False,
            "code": "tool_error",
            "error": "The tool failed unexpectedly. Please try again.",
        }


def create_tools_node(context: ToolContext):
    """Create the tools node, bound to this request's caller context.

    Tool calls are executed one after another in the order the model
    requested them.
    """

    async def tools_node(state: AgentState) -> dict:
        """Execute the last AI message's tool calls and append their results."""
        last_msg = state["messages"][-1]
        tool_calls = getattr(last_msg, "tool_calls", None) or []

        results = []
        for tc in tool_calls:
            result = await _run_tool(tc, context)
            results.append(
                ToolMessage(
                    content=json.dumps(result),
                    tool_call_id=tc["id"],
                    name=tc["name"],
                )
            )
        return {"messages": results}

    return tools_node
