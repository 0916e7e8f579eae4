"""Integrations package for external services."""

from artifact_sync.integrations.git_runner import GitRunner
from artifact_sync.integrations.ci_context import load_ci_context
from artifact_sync.integrations.github_client import (
    GitHubClient,
    GitHubReviewReporter,
    get_github_client,
)

__all__ = [
    "GitRunner",
    "load_ci_context",
    "GitHubClient",
    "GitHubReviewReporter",
    "get_github_client",
]
