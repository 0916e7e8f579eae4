"""
State models for the synchronization engine.

Settings and CI facts are explicit values handed to the orchestrator; the
result models carry everything a run produced.
"""

from typing import List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field


TriggerKind = Literal["push", "pull-request", "other"]
Outcome = Literal["no-change", "pushed", "reported", "failed"]
PushState = Literal["attempting", "conflict-recovery", "succeeded", "exhausted"]


class CIContext(BaseModel):
    """Read-only facts about the CI event that started this run."""
    branch: str = ""
    trigger_kind: TriggerKind = "other"
    in_ci: bool = False
    repository: Optional[str] = None  # owner/name
    pr_number: Optional[int] = None


class SyncSettings(BaseModel):
    """Configuration for one invocation."""
    artifacts: List[str] = Field(default_factory=list)
    commit_message: str = "Update generated artifacts"
    committer_name: str = "artifact-sync"
    committer_email: str = "artifact-sync@users.noreply.github.com"
    remote: str = "origin"
    max_push_attempts: int = Field(default=3, ge=1)
    github_token: str = ""
    github_api_url: str = "https://api.github.com"
    comment_label: str = "artifact-sync"
    process_timeout: Optional[float] = None


class RetryState(BaseModel):
    """Bounded push-retry counter owned by a single commit_and_push call."""
    attempt: int = 1
    max_attempts: int = 3
    rebases: int = 0
    state: PushState = "attempting"

    @property
    def exhausted(self) -> bool:
        return self.attempt >= self.max_attempts


class SyncResult(BaseModel):
    """Terminal result of a run."""
    outcome: Outcome = "no-change"
    diff: str = ""
    error: Optional[str] = None
    comment_posted: bool = False
    push: Optional[RetryState] = None
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None

    @property
    def exit_code(self) -> int:
        return 1 if self.outcome == "failed" else 0
