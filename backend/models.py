"""Pydantic models for the agent API."""

from typing import Literal

from pydantic import BaseModel, Field

ProgressEventKind = Literal["thinking", "result", "complete", "error"]


class AgentRequest(BaseModel):
    """A request to run the coding agent on a repository."""

    prompt: str = Field(min_length=1, description="Instruction for the agent")
    repo_url: str = Field(description="URL of the GitHub repository to work on")
    github_token: str | None = Field(
        default=None,
        description="Token for private repos, PRs and issues. Defaults to GITHUB_TOKEN.",
    )


class ProgressEvent(BaseModel):
    """A progress update emitted while the agent runs."""

    message: str
    kind: ProgressEventKind


class AgentResponse(BaseModel):
    """Final answer of an agent run."""

    response: str = Field(description="The model's last text answer")
    steps: int = Field(description="Number of model steps taken")
    progress: list[ProgressEvent] = Field(default_factory=list)
