"""PaxBnb conversational booking assistant."""

from paxbnb.agent.graph import create_agent, recursion_limit

__all__ = ["create_agent", "recursion_limit"]
