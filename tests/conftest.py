import pytest

from fakes import FakeSandbox


@pytest.fixture
def sandbox() -> FakeSandbox:
    return FakeSandbox({"README.md": "# Demo\n\nHello world.\n", "package.json": "{}\n"})


@pytest.fixture
def github_sandbox(sandbox: FakeSandbox) -> FakeSandbox:
    """A sandbox whose curl calls reach a working GitHub API."""
    sandbox.respond("GET", "/user", 200, {"login": "octocat", "name": None, "email": None})
    sandbox.respond(
        "POST",
        "/repos/octo/demo/pulls",
        201,
        {"html_url": "https://github.com/octo/demo/pull/7", "number": 7},
    )
    sandbox.respond(
        "POST",
        "/repos/octo/demo/issues",
        201,
        {"html_url": "https://github.com/octo/demo/issues/3", "number": 3},
    )
    return sandbox
