"""Weave tracing for agent runs and tool calls."""

import logging
import os

import weave

logger = logging.getLogger(__name__)

# Track whether Weave has been initialized
_weave_initialized = False

SUMMARY_CHARS = 100


def init_weave() -> bool:
    """Initialize Weave if WANDB_API_KEY is set.

    Uses WEAVE_PROJECT env var for project name (default: repo-agent).
    Format should be "team/project" or just "project" (uses default team).

    Returns:
        True if Weave was initialized, False otherwise.
    """
    global _weave_initialized
    if _weave_initialized:
        return True

    if not os.getenv("WANDB_API_KEY"):
        logger.debug("WANDB_API_KEY not set, Weave tracing disabled")
        return False

    project_name = os.getenv("WEAVE_PROJECT", "repo-agent")
    try:
        weave.init(project_name)
    except Exception as e:
        logger.warning("Failed to initialize Weave: %s", e)
        return False

    _weave_initialized = True
    logger.info("Weave initialized for project: %s", project_name)
    return True


def _truncate(value: str) -> str:
    return value[:SUMMARY_CHARS] + "..." if len(value) > SUMMARY_CHARS else value


@weave.op()
def log_tool_call(tool_name: str, tool_input: dict) -> dict:
    """Log a tool call as a Weave child span of the agent run.

    Args:
        tool_name: Name of the tool (read_file, edit_file, create_pr, ...).
        tool_input: Validated arguments passed to the tool.

    Returns:
        A dict summarizing the tool call for the trace.
    """
    if tool_name in ("read_file", "list_files", "edit_file"):
        summary = tool_input.get("path") or "root directory"
    elif tool_name in ("create_pr", "create_issue"):
        summary = _truncate(tool_input.get("title", ""))
    else:
        summary = _truncate(str(tool_input))

    logger.info("[Agent] %s: %s", tool_name, summary)

    return {
        "tool": tool_name,
        "summary": summary,
        "input": tool_input,
    }
