"""Lazily provisioned sandbox owned by a single agent run."""

import logging
from collections.abc import Awaitable, Callable

from agent.progress import ProgressCallback, emit
from sandbox.base import Sandbox

logger = logging.getLogger(__name__)

Provisioner = Callable[[str, str | None], Awaitable[Sandbox]]


class SandboxSession:
    """Holds at most one sandbox for the lifetime of an agent run.

    The sandbox is created on the first ``get()`` and reused afterwards. Used
    as an async context manager, the session stops the sandbox exactly once on
    exit, whether the run finished or raised.
    """

    def __init__(
        self,
        repo_url: str,
        github_token: str | None,
        provisioner: Provisioner,
        on_progress: ProgressCallback | None = None,
    ):
        self.repo_url = repo_url
        self._github_token = github_token
        self._provisioner = provisioner
        self._on_progress = on_progress
        self._sandbox: Sandbox | None = None
        self._closed = False

    @property
    def provisioned(self) -> bool:
        return self._sandbox is not None

    async def get(self) -> Sandbox:
        """Return the run's sandbox, provisioning it on first use.

        Raises:
            RuntimeError: If the session is already closed.
            ProvisionError: If provisioning fails. A later call tries again.
        """
        if self._closed:
            raise RuntimeError("Sandbox session is closed")
        if self._sandbox is None:
            emit(self._on_progress, "Setting up development environment...")
            self._sandbox = await self._provisioner(self.repo_url, self._github_token)
            logger.info("Sandbox provisioned for %s", self.repo_url)
        return self._sandbox

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._sandbox is None:
            return

        emit(self._on_progress, "Cleaning up environment...")
        try:
            await self._sandbox.stop()
        except Exception as e:
            logger.warning("Failed to stop sandbox for %s: %s", self.repo_url, e)

    async def __aenter__(self) -> "SandboxSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
