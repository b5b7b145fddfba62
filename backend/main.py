"""FastAPI application for the repository coding agent."""

import asyncio
import logging
from contextlib import asynccontextmanager
from functools import partial
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.responses import StreamingResponse

# Load environment variables from .env file
load_dotenv(Path(__file__).parent / ".env")

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

from agent import init_weave, run_coding_agent
from config import Settings
from llm import BaseLLM, get_llm
from models import AgentRequest, AgentResponse, ProgressEvent
from sandbox import create_sandbox, daytona_config


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Application lifespan for startup/shutdown."""
    logger.info("Starting up...")

    if init_weave():
        logger.info("Weave observability enabled")

    yield

    logger.info("Shutting down...")


app = FastAPI(
    title="Repo Agent API",
    description="Let a language model edit a GitHub repository in a sandbox and open PRs",
    version="0.1.0",
    lifespan=lifespan,
)


def _load_llm(settings: Settings) -> BaseLLM:
    try:
        return get_llm(settings.llm_provider, model=settings.model)
    except ValueError as e:
        logger.error("LLM not configured: %s", e)
        raise HTTPException(status_code=500, detail=f"LLM not configured: {str(e)}") from e


def _agent_options(settings: Settings, llm: BaseLLM) -> dict:
    return {
        "llm": llm,
        "max_steps": settings.max_steps,
        "provisioner": partial(
            create_sandbox,
            config=daytona_config(settings.daytona_api_key, settings.daytona_api_url),
        ),
        "base_branch": settings.base_branch,
        "agent_host": settings.agent_host,
        "simulate_flaky": settings.simulate_flaky,
    }


# Health endpoints


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


# Agent endpoints


@app.post("/agent/run", response_model=AgentResponse)
async def run_agent(request: AgentRequest) -> AgentResponse:
    """Run the coding agent and return its answer once it finishes.

    Args:
        request: Prompt, repository URL and optional GitHub token.

    Returns:
        AgentResponse with the final answer and every progress event.
    """
    settings = Settings.from_env()
    llm = _load_llm(settings)
    progress: list[ProgressEvent] = []

    def on_progress(message: str, kind: str) -> None:
        progress.append(ProgressEvent(message=message, kind=kind))

    logger.info("Received agent run request for %s", request.repo_url)
    try:
        result = await run_coding_agent(
            request.prompt,
            request.repo_url,
            request.github_token or settings.github_token,
            on_progress,
            **_agent_options(settings, llm),
        )
    except Exception as e:
        logger.exception("Agent run failed: %s", e)
        raise HTTPException(
            status_code=500,
            detail=f"Agent run failed: {str(e)}",
        ) from e

    return AgentResponse(response=result.response, steps=result.steps, progress=progress)


@app.post("/agent/stream")
async def stream_agent(request: AgentRequest) -> StreamingResponse:
    """Run the coding agent and stream progress events as NDJSON.

    The last line is the ``complete`` event carrying the final answer, or an
    ``error`` event if the run crashed.
    """
    settings = Settings.from_env()
    llm = _load_llm(settings)
    queue: asyncio.Queue[ProgressEvent | None] = asyncio.Queue()

    def on_progress(message: str, kind: str) -> None:
        queue.put_nowait(ProgressEvent(message=message, kind=kind))

    async def run() -> None:
        try:
            await run_coding_agent(
                request.prompt,
                request.repo_url,
                request.github_token or settings.github_token,
                on_progress,
                **_agent_options(settings, llm),
            )
        except Exception as e:
            logger.exception("Agent run failed: %s", e)
            queue.put_nowait(ProgressEvent(message=f"Agent run failed: {str(e)}", kind="error"))
        finally:
            queue.put_nowait(None)

    async def events():
        task = asyncio.create_task(run())
        try:
            while (event := await queue.get()) is not None:
                yield event.model_dump_json() + "\n"
        finally:
            # Client went away before the run finished
            if not task.done():
                task.cancel()

    logger.info("Received agent stream request for %s", request.repo_url)
    return StreamingResponse(events(), media_type="application/x-ndjson")


def run_server() -> None:
    """Run the FastAPI server with uvicorn."""
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run_server()
