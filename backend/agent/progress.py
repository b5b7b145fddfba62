"""Progress events reported to the caller of an agent run."""

import logging
from collections.abc import Callable
from typing import Literal

logger = logging.getLogger(__name__)

ProgressKind = Literal["thinking", "result", "complete"]
ProgressCallback = Callable[[str, ProgressKind], None]


def emit(callback: ProgressCallback | None, message: str, kind: ProgressKind = "thinking") -> None:
    """Send a progress event. Callback failures are logged and never interrupt the run."""
    if callback is None:
        return
    try:
        callback(message, kind)
    except Exception as e:
        logger.warning("Progress callback failed for %r: %s", message, e)
