"""
LangGraph-based orchestrator for a synchronization run.

Routes one invocation through diff computation and then, depending on the CI
trigger, into a direct push, a pull request report, or a no-op.
"""

from datetime import datetime
from typing import Any, Dict, Literal, Optional, Protocol
from langgraph.graph import StateGraph, END, START
from typing_extensions import TypedDict

from artifact_sync.agents.diff_engine import StagingDiffEngine
from artifact_sync.agents.synchronizer import CommitPushSynchronizer
from artifact_sync.errors import GitCommandError, SyncError
from artifact_sync.integrations.git_runner import GitRunner
from artifact_sync.logging_config import get_logger
from artifact_sync.models.state import CIContext, RetryState, SyncResult, SyncSettings
from artifact_sync.templates import render_comment_body

logger = get_logger(__name__)


class ReviewReporter(Protocol):
    def post_comment(self, credential: str, label: str, body: str) -> None:
        ...


class SyncGraphState(TypedDict, total=False):
    diff: str
    outcome: str
    error: Optional[str]
    comment_posted: bool
    retry: Optional[Dict[str, Any]]


def _failed(node: str, error: Exception) -> Dict[str, Any]:
    logger.error("sync_node_failed", node=node, error=str(error), error_type=type(error).__name__)
    return {"outcome": "failed", "error": str(error)}


# Conditional routing functions
def route_after_diff(state: SyncGraphState) -> Literal["configure_identity", "complete"]:
    """Route after diff computation."""
    if state.get("outcome") == "failed" or not state.get("diff"):
        return "complete"
    return "configure_identity"


class SyncOrchestrator:
    """Mode dispatcher for one synchronization run."""

    def __init__(
        self,
        settings: SyncSettings,
        ci_context: CIContext,
        reporter: ReviewReporter,
        runner: Optional[GitRunner] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            settings: Explicit run configuration
            ci_context: Facts about the triggering CI event
            reporter: Posts pending diffs on pull requests
            runner: Git runner (defaults to one in the current directory)
        """
        self.settings = settings
        self.ci_context = ci_context
        self.reporter = reporter
        self.runner = runner or GitRunner(timeout=settings.process_timeout)
        self.engine = StagingDiffEngine(self.runner)
        self.synchronizer = CommitPushSynchronizer(
            self.runner,
            remote=settings.remote,
            max_attempts=settings.max_push_attempts,
        )
        self.workflow = self._build_workflow()

    # Node functions

    def compute_diff_node(self, state: SyncGraphState) -> Dict[str, Any]:
        """Aggregate the staged diffs of every candidate artifact."""
        for path in self.settings.artifacts:
            logger.info("candidate_artifact", path=path)
        try:
            diff = self.engine.aggregate_diff(self.settings.artifacts)
        except SyncError as e:
            return _failed("compute_diff", e)

        if not diff:
            logger.info("no_changes_detected")
            return {"diff": "", "outcome": "no-change"}

        logger.info("changes_detected", diff=diff)
        return {"diff": diff}

    def configure_identity_node(self, state: SyncGraphState) -> Dict[str, Any]:
        try:
            self.runner.config_identity(self.settings.committer_name, self.settings.committer_email)
        except GitCommandError as e:
            return _failed("configure_identity", e)
        return {}

    def route_mode(self, state: SyncGraphState) -> Literal["push_changes", "report_diff", "skip_sync", "complete"]:
        """Pick the synchronization mode from the CI trigger."""
        if state.get("outcome") == "failed":
            return "complete"
        trigger = self.ci_context.trigger_kind
        if trigger == "push" and self.ci_context.in_ci:
            mode = "push_changes"
        elif trigger == "pull-request":
            mode = "report_diff"
        else:
            mode = "skip_sync"
        logger.info("sync_mode_selected", mode=mode, trigger=trigger, in_ci=self.ci_context.in_ci)
        return mode

    def push_changes_node(self, state: SyncGraphState) -> Dict[str, Any]:
        try:
            retry = self.synchronizer.commit_and_push(
                self.settings.artifacts,
                self.settings.commit_message,
                self.ci_context.branch,
            )
        except SyncError as e:
            return _failed("push_changes", e)
        return {"outcome": "pushed", "retry": retry.model_dump()}

    def report_diff_node(self, state: SyncGraphState) -> Dict[str, Any]:
        if not self.settings.github_token:
            logger.info(
                "pr_comment_skipped",
                reason="set GITHUB_TOKEN (or github.token) to comment on pull requests",
            )
            return {"outcome": "reported", "comment_posted": False}

        body = render_comment_body(state.get("diff", ""))
        try:
            self.reporter.post_comment(self.settings.github_token, self.settings.comment_label, body)
        except Exception as e:
            return _failed("report_diff", e)
        return {"outcome": "reported", "comment_posted": True}

    def skip_sync_node(self, state: SyncGraphState) -> Dict[str, Any]:
        if self.ci_context.trigger_kind == "push":
            logger.info("commit_skipped", reason="not running in CI")
        else:
            logger.info("unsupported_trigger", trigger=self.ci_context.trigger_kind)
        return {"outcome": "no-change"}

    def _build_workflow(self):
        """Build the LangGraph workflow."""
        workflow = StateGraph(SyncGraphState)

        workflow.add_node("compute_diff", self.compute_diff_node)
        workflow.add_node("configure_identity", self.configure_identity_node)
        workflow.add_node("push_changes", self.push_changes_node)
        workflow.add_node("report_diff", self.report_diff_node)
        workflow.add_node("skip_sync", self.skip_sync_node)

        workflow.add_edge(START, "compute_diff")
        workflow.add_conditional_edges(
            "compute_diff",
            route_after_diff,
            {"configure_identity": "configure_identity", "complete": END},
        )
        workflow.add_conditional_edges(
            "configure_identity",
            self.route_mode,
            {
                "push_changes": "push_changes",
                "report_diff": "report_diff",
                "skip_sync": "skip_sync",
                "complete": END,
            },
        )
        workflow.add_edge("push_changes", END)
        workflow.add_edge("report_diff", END)
        workflow.add_edge("skip_sync", END)

        return workflow.compile()

    def run(self) -> SyncResult:
        """Run the workflow once and return its terminal result."""
        result = SyncResult()
        logger.info(
            "sync_start",
            artifacts=self.settings.artifacts,
            branch=self.ci_context.branch,
            trigger=self.ci_context.trigger_kind,
        )

        final = self.workflow.invoke({
            "diff": "",
            "outcome": "no-change",
            "error": None,
            "comment_posted": False,
            "retry": None,
        })

        result.outcome = final.get("outcome", "no-change")
        result.diff = final.get("diff", "")
        result.error = final.get("error")
        result.comment_posted = final.get("comment_posted", False)
        if final.get("retry"):
            result.push = RetryState(**final["retry"])
        result.completed_at = datetime.utcnow()

        logger.info("sync_complete", outcome=result.outcome, error=result.error)
        return result
