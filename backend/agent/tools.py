"""The tools offered to the model and their executors.

Every executor returns a dict. Failures come back as ``{"error": message}``
and are never raised into the conversation loop.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from pydantic import BaseModel, Field, ValidationError

from agent.flaky import AttemptCounter
from agent.progress import ProgressCallback, emit
from agent.session import SandboxSession
from agent.tracing import log_tool_call
from github.pipeline import DEFAULT_BASE_BRANCH, GitHubArgs, create_issue, create_pr
from llm.base import ToolDefinition
from sandbox.files import edit_file, list_files, read_file

logger = logging.getLogger(__name__)

PROTECTED_PATHS = frozenset({".git", "node_modules"})


class ReadFileArgs(BaseModel):
    path: str = Field(description="The relative path of a file in the working directory.")


class ListFilesArgs(BaseModel):
    path: str | None = Field(
        default=None,
        description=(
            "Optional relative path to list files from. "
            "Defaults to current directory if not provided."
        ),
    )


class EditFileArgs(BaseModel):
    path: str = Field(description="The path to the file")
    old_str: str = Field(
        description="Text to search for - must match exactly and must only have one match exactly"
    )
    new_str: str = Field(description="Text to replace old_str with")


class CreatePRArgs(BaseModel):
    title: str = Field(description="The title of the pull request")
    body: str = Field(description="The body/description of the pull request")
    branch: str | None = Field(
        default=None,
        description="The name of the branch to create (defaults to a generated name)",
    )


class CreateIssueArgs(BaseModel):
    title: str = Field(description="The title of the issue")
    body: str = Field(description="The body/description of the issue")
    labels: list[str] | None = Field(
        default=None,
        description=(
            "Optional array of label names to add to the issue (e.g., ['bug', 'enhancement'])"
        ),
    )


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    args_model: type[BaseModel]

    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=self.description,
            parameters=self.args_model.model_json_schema(),
        )


TOOL_SPECS: dict[str, ToolSpec] = {
    spec.name: spec
    for spec in (
        ToolSpec(
            "read_file",
            "Read the contents of a given relative file path. Use this when you want to "
            "see what's inside a file. Do not use this with directory names.",
            ReadFileArgs,
        ),
        ToolSpec(
            "list_files",
            "List files and directories at a given path. If no path is provided, lists "
            "files in the current directory.",
            ListFilesArgs,
        ),
        ToolSpec(
            "edit_file",
            "Make edits to a text file. Replaces 'old_str' with 'new_str' in the given file. "
            "'old_str' and 'new_str' MUST be different from each other. If the file "
            "specified with path doesn't exist, it will be created.",
            EditFileArgs,
        ),
        ToolSpec(
            "create_pr",
            "Create a pull request with the current changes. This will add all files, "
            "commit changes, push to a new branch, and create a PR using GitHub's REST API. "
            "Use this as the final step when making changes.",
            CreatePRArgs,
        ),
        ToolSpec(
            "create_issue",
            "Create a GitHub issue in the repository. Use this to report bugs, request "
            "features, or document tasks that need to be done.",
            CreateIssueArgs,
        ),
    )
}


def tool_definitions() -> list[ToolDefinition]:
    return [spec.definition() for spec in TOOL_SPECS.values()]


def is_protected_path(path: str | None) -> bool:
    if not path:
        return False
    normalized = path.strip().removeprefix("./").rstrip("/")
    return normalized.split("/", 1)[0] in PROTECTED_PATHS


def _identifier(args: BaseModel) -> str | None:
    return getattr(args, "path", None) or getattr(args, "title", None)


class AgentTools:
    """Executes tool calls for one agent run against its sandbox session."""

    def __init__(
        self,
        session: SandboxSession,
        github_args: GitHubArgs,
        on_progress: ProgressCallback | None = None,
        *,
        base_branch: str = DEFAULT_BASE_BRANCH,
        agent_host: str | None = None,
        attempts: AttemptCounter | None = None,
    ):
        self.session = session
        self.github_args = github_args
        self.on_progress = on_progress
        self.base_branch = base_branch
        self.agent_host = agent_host
        self.attempts = attempts
        self._handlers: dict[str, Callable[[BaseModel], Awaitable[dict]]] = {
            "read_file": self._read_file,
            "list_files": self._list_files,
            "edit_file": self._edit_file,
            "create_pr": self._create_pr,
            "create_issue": self._create_issue,
        }

    async def execute(self, name: str, arguments: str | dict) -> dict:
        """Validate and run one tool call.

        Args:
            name: Tool name chosen by the model.
            arguments: JSON string or dict of arguments.

        Returns:
            The tool's success payload, or ``{"error": message}``.
        """
        spec = TOOL_SPECS.get(name)
        if spec is None:
            logger.warning("Model requested unknown tool: %s", name)
            return {"error": f"Unknown tool: {name}"}

        try:
            if isinstance(arguments, str):
                args = spec.args_model.model_validate_json(arguments or "{}")
            else:
                args = spec.args_model.model_validate(arguments)
        except ValidationError as e:
            logger.warning("Invalid arguments for %s: %s", name, e)
            return {"error": f"Invalid arguments for {name}: {e}"}

        log_tool_call(name, args.model_dump())

        if self.attempts and self.attempts.should_fail_first_attempt(name, _identifier(args)):
            logger.info("Simulating a failed first attempt of %s", name)
            return {"error": f"Simulated transient failure in {name}. Please retry the call."}

        try:
            return await self._handlers[name](args)
        except Exception as e:
            logger.error("Tool %s failed: %s", name, e)
            return {"error": str(e) or "Unknown error"}

    async def _read_file(self, args: ReadFileArgs) -> dict:
        if is_protected_path(args.path):
            return {"error": f"You cannot read the path: {args.path}", "path": args.path}

        sandbox = await self.session.get()
        emit(self.on_progress, f"Reading file: {args.path}")
        return await read_file(sandbox, args.path)

    async def _list_files(self, args: ListFilesArgs) -> dict:
        if is_protected_path(args.path):
            return {"error": f"You cannot read the path: {args.path}", "path": args.path}

        sandbox = await self.session.get()
        emit(self.on_progress, f"Listing files in: {args.path or 'root directory'}")
        output = await list_files(sandbox, args.path)
        return {"path": args.path, "output": output}

    async def _edit_file(self, args: EditFileArgs) -> dict:
        sandbox = await self.session.get()
        emit(self.on_progress, f"Editing file: {args.path}")
        await edit_file(sandbox, args.path, args.old_str, args.new_str)
        return {"success": True, "path": args.path}

    async def _create_pr(self, args: CreatePRArgs) -> dict:
        if not self.github_args.github_token:
            return {
                "error": (
                    "GitHub token is required to create a pull request. "
                    "Please provide a valid GitHub token."
                )
            }

        sandbox = await self.session.get()
        emit(self.on_progress, "Validating GitHub token...")
        emit(self.on_progress, "Creating pull request...")

        result = await create_pr(
            sandbox,
            self.github_args,
            args.title,
            args.body,
            args.branch,
            base_branch=self.base_branch,
            agent_host=self.agent_host,
        )
        if "error" in result:
            return {"error": result["error"]}

        emit(self.on_progress, f"Pull request created: {result['pr_url']}", "result")
        return result

    async def _create_issue(self, args: CreateIssueArgs) -> dict:
        if not self.github_args.github_token:
            return {
                "error": (
                    "GitHub token is required to create an issue. "
                    "Please provide a valid GitHub token."
                )
            }

        sandbox = await self.session.get()
        emit(self.on_progress, "Creating GitHub issue...")

        result = await create_issue(
            sandbox,
            self.github_args,
            args.title,
            args.body,
            args.labels,
        )
        if "error" in result:
            return {"error": result["error"]}

        emit(self.on_progress, f"Issue created: {result['issue_url']}", "result")
        return result
