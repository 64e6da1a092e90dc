"""Agent state schema for the LangGraph graph."""

import operator
from typing import Annotated, TypedDict

from langchain_core.messages import AnyMessage


class AgentState(TypedDict):
    """State for one chat request.

    The Annotated[..., operator.add] tells LangGraph to append new messages
    to the existing list rather than replacing it. ``model_turns`` counts
    language model calls made so far in this request.
    """

    messages: Annotated[list[AnyMessage], operator.add]
    model_turns: int
