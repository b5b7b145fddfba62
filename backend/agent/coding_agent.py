"""Coding agent that edits a repository in a sandbox and opens PRs or issues."""

import logging
from dataclasses import dataclass

import weave

from agent.flaky import AttemptCounter
from agent.progress import ProgressCallback, emit
from agent.session import Provisioner, SandboxSession
from agent.tools import AgentTools, tool_definitions
from github.pipeline import DEFAULT_BASE_BRANCH, GitHubArgs
from llm.base import BaseLLM, tool_result_message
from sandbox.provisioner import create_sandbox

logger = logging.getLogger(__name__)

MAX_STEPS = 20

SYSTEM_PROMPT = (
    "You are a coding agent. You will be working with js/ts projects. "
    "Your responses must be concise. "
    "If you make changes to the codebase, be sure to run the create_pr tool once you are done. "
    "You can also create GitHub issues using the create_issue tool to document bugs, "
    "feature requests, or tasks."
)


@dataclass
class AgentResult:
    """Result of running the coding agent."""

    response: str
    steps: int
    tool_calls: int = 0


def _redact_inputs(inputs: dict) -> dict:
    redacted = dict(inputs)
    if redacted.get("github_token"):
        redacted["github_token"] = "provided"
    return redacted


@weave.op(postprocess_inputs=_redact_inputs)
async def run_coding_agent(
    prompt: str,
    repo_url: str,
    github_token: str | None = None,
    on_progress: ProgressCallback | None = None,
    *,
    llm: BaseLLM,
    max_steps: int = MAX_STEPS,
    provisioner: Provisioner = create_sandbox,
    base_branch: str = DEFAULT_BASE_BRANCH,
    agent_host: str | None = None,
    simulate_flaky: bool = False,
) -> AgentResult:
    """Run the coding agent against a repository.

    The sandbox is provisioned on the first tool call that needs it and is
    stopped when the run ends, however it ends.

    Args:
        prompt: Natural-language instruction from the user.
        repo_url: URL of the GitHub repository to work on.
        github_token: Token for private checkouts, PRs and issues.
        on_progress: Optional ``(message, kind)`` callback.
        llm: Model provider driving the conversation.
        max_steps: Maximum number of model steps.
        provisioner: Creates the sandbox for ``(repo_url, github_token)``.
        base_branch: Branch pull requests target.
        agent_host: Host used in the commit co-author trailer.
        simulate_flaky: Fail the first attempt of every tool call.

    Returns:
        AgentResult with the model's last text answer.
    """
    logger.info(
        "Running coding agent on %s (token: %s, model: %s)",
        repo_url,
        "provided" if github_token else "none",
        llm.model_name,
    )

    emit(on_progress, "Starting analysis of the repository...")

    messages: list[dict] = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]
    tools = tool_definitions()
    github_args = GitHubArgs(repo_url=repo_url, github_token=github_token)

    response = ""
    steps = 0
    tool_call_count = 0

    async with SandboxSession(repo_url, github_token, provisioner, on_progress) as session:
        executor = AgentTools(
            session,
            github_args,
            on_progress,
            base_branch=base_branch,
            agent_host=agent_host,
            attempts=AttemptCounter() if simulate_flaky else None,
        )

        while steps < max_steps:
            turn = await llm.generate(messages, tools)
            steps += 1
            messages.append(turn.message)
            response = turn.text

            if not turn.tool_calls:
                break

            for call in turn.tool_calls:
                result = await executor.execute(call.name, call.arguments)
                messages.append(tool_result_message(call, result))
                tool_call_count += 1
        else:
            logger.warning("Step limit of %d reached for %s", max_steps, repo_url)

    logger.info(
        "Coding agent finished after %d step(s) and %d tool call(s)",
        steps,
        tool_call_count,
    )

    emit(on_progress, "Analysis complete!", "result")
    emit(on_progress, response, "complete")
    return AgentResult(response=response, steps=steps, tool_calls=tool_call_count)
