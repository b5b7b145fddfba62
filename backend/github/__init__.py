"""GitHub mutations driven from inside a sandbox checkout."""

from github.client import GitHubClient, GitHubUser
from github.pipeline import (
    GitHubArgs,
    build_commit_message,
    create_issue,
    create_pr,
    make_branch_name,
    parse_repo_url,
)

__all__ = [
    "GitHubClient",
    "GitHubUser",
    "GitHubArgs",
    "build_commit_message",
    "create_issue",
    "create_pr",
    "make_branch_name",
    "parse_repo_url",
]
