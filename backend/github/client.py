"""Minimal GitHub REST calls executed as curl commands inside a sandbox."""

import json
import logging
from dataclasses import dataclass

from errors import CommandError, GitHubAPIError, InvalidCredentialError
from sandbox.base import Sandbox

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"

# curl prints the status code on its own line after the body
STATUS_MARKER = "\\n%{http_code}"


@dataclass
class GitHubUser:
    """Identity behind a token, used as the git author."""

    login: str
    name: str
    email: str

    @classmethod
    def from_api(cls, data: dict) -> "GitHubUser":
        login = data["login"]
        return cls(
            login=login,
            name=data.get("name") or login,
            email=data.get("email") or f"{login}@users.noreply.github.com",
        )


@dataclass
class APIResponse:
    """Status code and decoded JSON body of a REST call."""

    status_code: int
    data: dict

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class GitHubClient:
    """GitHub REST client that sends its requests from inside the sandbox."""

    def __init__(self, sandbox: Sandbox, token: str):
        self.sandbox = sandbox
        self._token = token

    async def _request(self, method: str, path: str, payload: dict | None = None) -> APIResponse:
        args = [
            "-s",
            "-X",
            method,
            "-H",
            f"Authorization: token {self._token}",
            "-H",
            "Accept: application/vnd.github.v3+json",
            "-w",
            STATUS_MARKER,
        ]
        if payload is not None:
            args += ["-H", "Content-Type: application/json", "-d", json.dumps(payload)]
        args.append(f"{GITHUB_API_URL}{path}")

        logger.debug("GitHub %s %s", method, path)
        result = await self.sandbox.run_command("curl", args)

        body, _, status = result.output.rstrip().rpartition("\n")
        try:
            status_code = int(status.strip())
        except ValueError:
            raise GitHubAPIError(f"Malformed response from {method} {path}") from None

        data = json.loads(body) if body.strip() else {}
        if not isinstance(data, dict):
            raise GitHubAPIError(f"Unexpected response from {method} {path}", status_code)
        return APIResponse(status_code=status_code, data=data)

    async def get_user(self) -> GitHubUser:
        """Validate the token against ``GET /user``.

        Raises:
            InvalidCredentialError: On network errors, unparsable responses,
                or a response without a ``login`` field.
        """
        try:
            response = await self._request("GET", "/user")
        except (CommandError, GitHubAPIError, json.JSONDecodeError) as e:
            raise InvalidCredentialError(f"Token validation error: {e}") from e

        if response.ok and response.data.get("login"):
            user = GitHubUser.from_api(response.data)
            logger.info("Token belongs to %s (%s)", user.name, user.login)
            return user

        message = response.data.get("message")
        if message:
            raise InvalidCredentialError(f"Token validation failed: {message}")
        raise InvalidCredentialError("Token validation failed: Invalid response")

    async def create_pull(
        self,
        owner: str,
        repo: str,
        title: str,
        body: str,
        head: str,
        base: str,
    ) -> dict:
        """Open a pull request.

        Returns:
            The created pull request object.
        """
        response = await self._request(
            "POST",
            f"/repos/{owner}/{repo}/pulls",
            {"title": title, "body": body, "head": head, "base": base},
        )
        if not response.data.get("html_url"):
            raise GitHubAPIError(
                response.data.get("message") or "Failed to create PR",
                response.status_code,
            )
        logger.info("PR created: %s", response.data["html_url"])
        return response.data

    async def create_issue(
        self,
        owner: str,
        repo: str,
        title: str,
        body: str,
        labels: list[str] | None = None,
    ) -> dict:
        """Open an issue.

        Returns:
            The created issue object.
        """
        payload: dict = {"title": title, "body": body}
        if labels:
            payload["labels"] = labels

        response = await self._request("POST", f"/repos/{owner}/{repo}/issues", payload)
        if not response.data.get("html_url"):
            raise GitHubAPIError(
                response.data.get("message") or "Failed to create issue",
                response.status_code,
            )
        logger.info("Issue created: %s", response.data["html_url"])
        return response.data
