"""Runtime configuration read from environment variables."""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-5"
DEFAULT_PROVIDER = "openai"
DEFAULT_MAX_STEPS = 20
DEFAULT_BASE_BRANCH = "main"


def get_model() -> str:
    """Return the model the agent uses to generate code."""
    return os.getenv("LLM_MODEL", DEFAULT_MODEL)


def _to_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _to_positive_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        parsed = int(value.strip())
    except ValueError:
        logger.warning("Ignoring non-integer value %r, using %d", value, default)
        return default
    return parsed if parsed > 0 else default


@dataclass
class Settings:
    """Settings for the agent and its HTTP surface."""

    llm_provider: str
    model: str
    github_token: str | None
    max_steps: int
    base_branch: str
    agent_host: str | None
    simulate_flaky: bool
    daytona_api_key: str | None
    daytona_api_url: str | None

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            llm_provider=os.getenv("LLM_PROVIDER", DEFAULT_PROVIDER),
            model=get_model(),
            github_token=os.getenv("GITHUB_TOKEN") or None,
            max_steps=_to_positive_int(os.getenv("AGENT_MAX_STEPS"), DEFAULT_MAX_STEPS),
            base_branch=os.getenv("GITHUB_BASE_BRANCH") or DEFAULT_BASE_BRANCH,
            agent_host=(
                os.getenv("AGENT_HOST")
                or os.getenv("VERCEL_PROJECT_PRODUCTION_URL")
                or None
            ),
            simulate_flaky=_to_bool(os.getenv("AGENT_SIMULATE_FLAKY")),
            daytona_api_key=os.getenv("DAYTONA_API_KEY") or None,
            daytona_api_url=os.getenv("DAYTONA_API_URL") or None,
        )
