"""Daytona-backed sandbox provisioning.

A sandbox is created from a pinned runtime image and gets the target repository
cloned into it. It is ephemeral: it stops after a fixed idle interval and is
deleted once stopped. Every sandbox is billable remote state, so callers must
call ``stop()``, which deletes it, when they are done.
"""

import logging
import posixpath
import shlex

from daytona_sdk import AsyncDaytona, CreateSandboxFromImageParams, DaytonaConfig, Resources

from errors import CommandError, ProvisionError
from sandbox.base import CommandResult

logger = logging.getLogger(__name__)

SANDBOX_IMAGE = "node:22"
SANDBOX_VCPUS = 2
SANDBOX_IDLE_MINUTES = 5
CREATE_TIMEOUT_SECONDS = 120
COMMAND_TIMEOUT_SECONDS = 120

# Relative paths resolve against the sandbox user's working directory
REPO_DIR = "workspace/repo"

# Machine-user name GitHub accepts alongside an access token
TOKEN_USERNAME = "x-access-token"

OUTPUT_EXCERPT_CHARS = 500


class DaytonaSandbox:
    """Handle to one provisioned Daytona sandbox with a repository checkout."""

    def __init__(self, client: AsyncDaytona, sandbox, repo_dir: str = REPO_DIR):
        self._client = client
        self._sandbox = sandbox
        self.repo_dir = repo_dir

    @property
    def id(self) -> str:
        return getattr(self._sandbox, "id", "unknown")

    async def run_command(
        self,
        executable: str,
        args: list[str],
        *,
        check: bool = True,
    ) -> CommandResult:
        """Run a command from the root of the checkout.

        Args:
            executable: Program to run (``cat``, ``git``, ``curl``...).
            args: Arguments, quoted for a POSIX shell before execution.
            check: Raise ``CommandError`` when the command exits non-zero.

        Returns:
            CommandResult with the exit code and output.
        """
        command = shlex.join([executable, *args])
        response = await self._sandbox.process.exec(
            command,
            cwd=self.repo_dir,
            timeout=COMMAND_TIMEOUT_SECONDS,
        )
        result = CommandResult(
            exit_code=int(response.exit_code),
            output=response.result or "",
        )
        logger.debug("Sandbox %s ran %s (exit %d)", self.id, executable, result.exit_code)

        if check and not result.ok:
            excerpt = result.output.strip()[:OUTPUT_EXCERPT_CHARS]
            # Arguments are left out of the message: they can carry the token
            raise CommandError(
                f"Command '{executable}' failed with exit code {result.exit_code}: {excerpt}",
                exit_code=result.exit_code,
                output=result.output,
            )
        return result

    async def write_files(self, files: list[tuple[str, bytes]]) -> None:
        for path, content in files:
            remote_path = path if path.startswith("/") else posixpath.join(self.repo_dir, path)
            await self._sandbox.fs.upload_file(content, remote_path)
            logger.debug("Sandbox %s wrote %d bytes to %s", self.id, len(content), remote_path)

    async def stop(self) -> None:
        """Delete the remote sandbox and close the API client."""
        logger.info("Deleting sandbox %s", self.id)
        try:
            await self._sandbox.delete()
        finally:
            await self._client.close()


async def create_sandbox(
    repo_url: str,
    github_token: str | None = None,
    *,
    config: DaytonaConfig | None = None,
) -> DaytonaSandbox:
    """Create a sandbox and check out ``repo_url`` inside it.

    Args:
        repo_url: Git URL of the repository to clone.
        github_token: Optional token. When set, the clone authenticates as the
            ``x-access-token`` machine user; otherwise it is anonymous.
        config: Daytona API configuration. Defaults to the DAYTONA_* env vars.

    Returns:
        DaytonaSandbox bound to the checkout.

    Raises:
        ProvisionError: If the sandbox cannot be created or the clone fails.
    """
    client = AsyncDaytona(config) if config else AsyncDaytona()

    logger.info(
        "Provisioning sandbox for %s (token: %s)",
        repo_url,
        "provided" if github_token else "none",
    )

    params = CreateSandboxFromImageParams(
        image=SANDBOX_IMAGE,
        resources=Resources(cpu=SANDBOX_VCPUS),
        auto_stop_interval=SANDBOX_IDLE_MINUTES,
        ephemeral=True,
    )
    try:
        remote = await client.create(params, timeout=CREATE_TIMEOUT_SECONDS)
    except Exception as e:
        await client.close()
        raise ProvisionError(f"Failed to create sandbox: {e}") from e

    credentials = (
        {"username": TOKEN_USERNAME, "password": github_token} if github_token else {}
    )
    try:
        await remote.git.clone(url=repo_url, path=REPO_DIR, **credentials)
    except Exception as e:
        logger.error("Clone of %s failed, deleting sandbox %s", repo_url, remote.id)
        try:
            await remote.delete()
        except Exception as cleanup_error:
            logger.warning("Failed to delete sandbox %s: %s", remote.id, cleanup_error)
        finally:
            await client.close()
        raise ProvisionError(f"Failed to check out {repo_url}: {e}") from e

    logger.info("Sandbox %s ready with %s checked out", remote.id, repo_url)
    return DaytonaSandbox(client, remote)


def daytona_config(api_key: str | None, api_url: str | None) -> DaytonaConfig | None:
    """Build a DaytonaConfig from settings, or None to use the SDK's env defaults."""
    if not api_key:
        return None
    if api_url:
        return DaytonaConfig(api_key=api_key, api_url=api_url)
    return DaytonaConfig(api_key=api_key)
