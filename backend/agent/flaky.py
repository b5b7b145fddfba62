"""Simulated flaky tool calls for demos and retry tests.

The first attempt of every (tool, identifier) pair fails; later attempts
succeed. Each agent run gets its own counter so runs never affect each other.
"""


class AttemptCounter:
    """Counts attempts per ``tool:identifier`` key."""

    def __init__(self):
        self._attempts: dict[str, int] = {}

    @staticmethod
    def key(tool_name: str, identifier: str | None = None) -> str:
        return f"{tool_name}:{identifier or 'default'}"

    def should_fail_first_attempt(self, tool_name: str, identifier: str | None = None) -> bool:
        """Record an attempt and return True if it is the first for this key."""
        key = self.key(tool_name, identifier)
        attempts = self._attempts.get(key, 0)
        self._attempts[key] = attempts + 1
        return attempts == 0

    def attempts(self, tool_name: str, identifier: str | None = None) -> int:
        return self._attempts.get(self.key(tool_name, identifier), 0)

    def reset(self) -> None:
        self._attempts.clear()
