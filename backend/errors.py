"""Exception types raised by the sandbox, file and GitHub layers.

The agent's tool executors catch all of these and hand them back to the model
as ``{"error": message}`` payloads, so messages should be readable on their own.
"""


class AgentError(Exception):
    """Base class for errors raised inside an agent run."""


class ProvisionError(AgentError):
    """The sandbox could not be created or the repository could not be checked out."""


class MissingCredentialError(AgentError):
    """A GitHub mutation was requested without a token."""


class InvalidCredentialError(AgentError):
    """The GitHub identity endpoint rejected the token."""


class InvalidRepoUrlError(AgentError):
    """The repository URL does not point at github.com/{owner}/{repo}."""


class EditNotFoundError(AgentError):
    """The text to replace is not present in the file. Nothing was written."""


class CommandError(AgentError):
    """A sandbox command exited with a non-zero status."""

    def __init__(self, message: str, exit_code: int, output: str = ""):
        super().__init__(message)
        self.exit_code = exit_code
        self.output = output


class GitHubAPIError(AgentError):
    """The GitHub REST API returned an unexpected response."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
