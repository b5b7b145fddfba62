"""File operations against a sandbox checkout."""

import logging

from errors import EditNotFoundError
from sandbox.base import Sandbox

logger = logging.getLogger(__name__)


async def read_file(sandbox: Sandbox, path: str) -> dict:
    """Read a file from the checkout.

    Args:
        sandbox: Sandbox holding the checkout.
        path: Path of the file, relative to the checkout root.

    Returns:
        Dict with ``path`` and ``content``.

    Raises:
        CommandError: If the path does not exist or is a directory.
    """
    logger.info("Reading file: %s", path)
    result = await sandbox.run_command("cat", [path])
    logger.debug("Read %d chars from %s", len(result.output), path)
    return {"path": path, "content": result.output}


async def list_files(sandbox: Sandbox, path: str | None) -> str:
    """List a directory of the checkout, defaulting to its root.

    Returns:
        The raw ``ls -la`` listing.
    """
    target = path if path else "."
    logger.info("Listing files in: %s", target)
    result = await sandbox.run_command("ls", ["-la", target])
    return result.output


async def edit_file(sandbox: Sandbox, path: str, old_str: str, new_str: str) -> dict:
    """Replace the first occurrence of ``old_str`` with ``new_str`` in a file.

    A file that cannot be read is treated as empty, so an edit with an empty
    ``old_str`` creates it. An edit where ``old_str == new_str`` is written
    back unchanged rather than reported as a miss.

    Returns:
        ``{"success": True}`` once the new content has been written.

    Raises:
        EditNotFoundError: If ``old_str`` is absent. The file is not written.
    """
    logger.info("Editing file: %s", path)
    current = await sandbox.run_command("cat", [path], check=False)
    content = current.output if current.ok else ""

    updated = content.replace(old_str, new_str, 1)
    if updated == content and old_str != new_str:
        logger.info("String not found in %s, nothing written", path)
        raise EditNotFoundError(f'String "{old_str}" not found in file {path}')

    await sandbox.write_files([(path, updated.encode("utf-8"))])
    logger.info("File edited successfully: %s", path)
    return {"success": True}
