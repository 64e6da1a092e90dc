"""Chat API router with SSE streaming.

POST /api/v1/chat: send the conversation so far, stream the assistant's reply via SSE

The client holds the conversation; each request carries the full message
history and nothing is persisted besides what the tools commit.
"""

import json
import logging
from collections.abc import AsyncIterator
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, ToolMessage
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sse_starlette.sse import EventSourceResponse
from starlette.requests import Request

from paxbnb.agent import create_agent, recursion_limit
from paxbnb.agent.prompts import SYSTEM_PROMPT, build_user_context
from paxbnb.agent.tools import CallerIdentity, ToolContext
from paxbnb.api.deps import get_db, get_optional_user
from paxbnb.config import settings
from paxbnb.database import get_session_factory
from paxbnb.models.profile import Profile
from paxbnb.schemas.chat import ChatMessage, ChatRequest
from paxbnb.services.booking_service import count_user_bookings, list_user_bookings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/chat", tags=["chat"])


def _tool_result_payload(msg: ToolMessage):
    content = msg.content if isinstance(msg.content, str) else str(msg.content)
    try:
        return json.loads(content)
    except ValueError:
        return content


async def stream_agent(
    agent,
    agent_input: dict,
    config: dict,
    request: Request,
) -> AsyncIterator[str]:
    """Translate a running agent graph into SSE event payloads.

    Uses mixed stream_mode=["messages", "updates"]:
    - "messages" streams LLM tokens as (AIMessageChunk, metadata) tuples
    - "updates" emits node state changes {node_name: {key: value}}
      after each node completes, carrying complete AIMessages with
      tool_calls and the ToolMessages holding each result

    Text is only taken from "messages" so a reply is never sent twice.
    Every stream ends with a ``done`` event whose ``ok`` flag is false when
    the model or the store failed, unless the client went away: then nothing
    more is sent.
    """
    stream_ok = False
    disconnected = False
    try:
        logger.info("Chat stream started")

        async for mode, chunk in agent.astream(
            agent_input,
            config=config,
            stream_mode=["messages", "updates"],
        ):
            if await request.is_disconnected():
                logger.info("Client disconnected; stopping chat stream")
                disconnected = True
                break

            if mode == "messages":
                msg_chunk, _metadata = chunk
                # Non-streaming models arrive as one whole AIMessage
                if isinstance(msg_chunk, AIMessage) and msg_chunk.content:
                    content = msg_chunk.content if isinstance(msg_chunk.content, str) else str(msg_chunk.content)
                    yield json.dumps({"type": "token", "content": content})

            elif mode == "updates":
                for _node_name, node_output in chunk.items():
                    if not isinstance(node_output, dict):
                        continue
                    for msg in node_output.get("messages", []):
                        if isinstance(msg, AIMessage) and msg.tool_calls:
                            for tc in msg.tool_calls:
                                yield json.dumps({
                                    "type": "tool_call",
                                    "name": tc.get("name", ""),
                                    "args": tc.get("args", {}),
                                })
                        elif isinstance(msg, ToolMessage):
                            yield json.dumps({
                                "type": "tool_result",
                                "name": getattr(msg, "name", "") or "",
                                "result": _tool_result_payload(msg),
                            })

        stream_ok = True

    except Exception:
        logger.exception("Error during chat streaming")
        yield json.dumps({
            "type": "error",
            "message": "An error occurred while processing your request.",
        })

    finally:
        logger.info("Chat stream finished (ok=%s, disconnected=%s)", stream_ok, disconnected)

    if disconnected:
        return

    # Send a done event so the client exits its loading state
    yield json.dumps({"type": "done", "ok": stream_ok})


def to_langchain_messages(history: list[ChatMessage]) -> list[BaseMessage]:
    """Convert client-held history into LangChain messages."""
    return [
        HumanMessage(content=m.content) if m.role == "user" else AIMessage(content=m.content)
        for m in history
    ]


async def _user_context(db: AsyncSession, caller: CallerIdentity | None) -> str:
    if caller is None:
        return build_user_context(None)
    total = await count_user_bookings(db, caller.user_id)
    recent = await list_user_bookings(db, caller.user_id, limit=3)
    return build_user_context(caller, total_bookings=total, recent_bookings=recent)


@router.post("")
async def chat(
    request: Request,
    chat_request: ChatRequest,
    db: AsyncSession = Depends(get_db),
    user: Profile | None = Depends(get_optional_user),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> EventSourceResponse:
    """Stream the assistant's reply to the given conversation via SSE."""
    caller = CallerIdentity.from_profile(user) if user is not None else None
    context = ToolContext(
        session_factory=session_factory,
        caller=caller,
        now=datetime.now(timezone.utc),
        search_limit=settings.search_result_limit,
    )
    system_prompt = SYSTEM_PROMPT + await _user_context(db, caller)

    agent_input = {"messages": to_langchain_messages(chat_request.messages), "model_turns": 0}
    config = {"recursion_limit": recursion_limit(settings.agent_max_model_turns)}

    logger.info(
        "Chat request with %d message(s) [user=%s]",
        len(chat_request.messages),
        caller.user_id if caller else "anonymous",
    )

    agent = create_agent(context, system_prompt=system_prompt)

    async def event_generator():
        async for event in stream_agent(agent, agent_input, config, request):
            yield event

    return EventSourceResponse(event_generator())
