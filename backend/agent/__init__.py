"""Coding agent that works on a repository inside a remote sandbox."""

from agent.coding_agent import AgentResult, run_coding_agent
from agent.flaky import AttemptCounter
from agent.session import SandboxSession
from agent.tools import TOOL_SPECS, AgentTools, tool_definitions
from agent.tracing import init_weave

__all__ = [
    "run_coding_agent",
    "AgentResult",
    "AgentTools",
    "AttemptCounter",
    "SandboxSession",
    "TOOL_SPECS",
    "init_weave",
    "tool_definitions",
]
