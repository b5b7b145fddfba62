"""Sandbox protocol shared by the file operations and the GitHub pipeline."""

from dataclasses import dataclass
from typing import Protocol


@dataclass
class CommandResult:
    """Exit status and combined output of a sandbox command."""

    exit_code: int
    output: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class Sandbox(Protocol):
    """An isolated remote environment bound to one repository checkout.

    Commands run from the root of the checkout. Implementations must raise
    ``errors.CommandError`` from ``run_command`` when ``check`` is true and the
    command exits non-zero.
    """

    async def run_command(
        self,
        executable: str,
        args: list[str],
        *,
        check: bool = True,
    ) -> CommandResult:
        """Run ``executable`` with ``args`` inside the checkout."""
        ...

    async def write_files(self, files: list[tuple[str, bytes]]) -> None:
        """Write ``(path, content)`` pairs, relative to the checkout."""
        ...

    async def stop(self) -> None:
        """Release the remote environment."""
        ...
