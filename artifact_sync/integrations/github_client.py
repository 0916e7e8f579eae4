"""
GitHub API client for posting pull request comments.
"""

from typing import Optional

from github import Github, GithubException, Auth
from github.IssueComment import IssueComment
from github.PullRequest import PullRequest
from github.Repository import Repository
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
import structlog

from artifact_sync.errors import ReportingError
from artifact_sync.models.state import CIContext
from artifact_sync.templates import comment_marker

logger = structlog.get_logger()

DEFAULT_API_URL = "https://api.github.com"


def _is_server_error(exc: BaseException) -> bool:
    return isinstance(exc, GithubException) and (exc.status or 0) >= 500


_retry_server_errors = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception(_is_server_error),
    reraise=True,
)


class GitHubClient:
    """Client for GitHub API operations."""

    def __init__(self, token: str, api_url: str = DEFAULT_API_URL):
        """
        Initialize GitHub client.

        Args:
            token: GitHub token (the Actions GITHUB_TOKEN is enough)
            api_url: GitHub API base URL (for Enterprise)
        """
        self.token = token
        self.api_url = api_url

        auth = Auth.Token(token)
        if api_url == DEFAULT_API_URL:
            self.client = Github(auth=auth)
        else:
            self.client = Github(base_url=api_url, auth=auth)

    def get_repository(self, full_name: str) -> Repository:
        """Get repository object."""
        try:
            repo = self.client.get_repo(full_name)
            logger.debug("repository_fetched", repo=full_name)
            return repo
        except GithubException as e:
            logger.error("failed_to_fetch_repository", repo=full_name, error=str(e))
            raise

    def find_comment(self, pr: PullRequest, label: str) -> Optional[IssueComment]:
        """Find the comment previously posted under ``label``, if any."""
        marker = comment_marker(label)
        for comment in pr.get_issue_comments():
            if marker in (comment.body or ""):
                return comment
        return None

    @_retry_server_errors
    def upsert_pr_comment(self, full_name: str, pr_number: int, label: str, body: str) -> None:
        """
        Create or update the labelled comment on a pull request.

        Args:
            full_name: Repository in owner/name form
            pr_number: Pull request number
            label: Identity of the posting tool; one comment per label
            body: Markdown comment body
        """
        repo = self.get_repository(full_name)
        pr = repo.get_pull(pr_number)
        marked_body = f"{comment_marker(label)}\n{body}"

        existing = self.find_comment(pr, label)
        if existing is not None:
            existing.edit(marked_body)
            logger.info("pr_comment_updated", pr_number=pr_number, comment_id=existing.id)
        else:
            comment = pr.create_issue_comment(marked_body)
            logger.info("pr_comment_created", pr_number=pr_number, comment_id=comment.id)

    def close(self):
        """Close the underlying HTTP session."""
        self.client.close()


def get_github_client(token: str, api_url: str = DEFAULT_API_URL) -> GitHubClient:
    """Create a new GitHub client."""
    return GitHubClient(token=token, api_url=api_url)


class GitHubReviewReporter:
    """Posts pending-change reports to the pull request that triggered the run."""

    def __init__(self, ci_context: CIContext, api_url: str = DEFAULT_API_URL):
        self.ci_context = ci_context
        self.api_url = api_url

    def post_comment(self, credential: str, label: str, body: str) -> None:
        """
        Post ``body`` as the ``label`` comment on the current pull request.

        Raises:
            ReportingError: if the PR cannot be identified or the API call fails
        """
        if not credential:
            logger.info("pr_comment_skipped", reason="no credential configured")
            return

        repository = self.ci_context.repository
        pr_number = self.ci_context.pr_number
        if not repository or pr_number is None:
            raise ReportingError("cannot identify pull request to comment on")

        client = get_github_client(token=credential, api_url=self.api_url)
        try:
            client.upsert_pr_comment(repository, pr_number, label, body)
        except GithubException as e:
            logger.error("pr_comment_failed", repo=repository, pr_number=pr_number, error=str(e))
            raise ReportingError(f"posting PR comment: {e}") from e
        finally:
            client.close()
