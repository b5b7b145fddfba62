"""Remote sandbox provisioning and file operations."""

from sandbox.base import CommandResult, Sandbox
from sandbox.files import edit_file, list_files, read_file
from sandbox.provisioner import DaytonaSandbox, create_sandbox, daytona_config

__all__ = [
    "CommandResult",
    "Sandbox",
    "DaytonaSandbox",
    "create_sandbox",
    "daytona_config",
    "read_file",
    "list_files",
    "edit_file",
]
