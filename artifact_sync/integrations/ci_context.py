"""
CI context provider for GitHub Actions.

Reads the event facts the orchestrator needs from the runner environment.
"""

import json
import os
from typing import Any, Dict, Mapping, Optional

import structlog

from artifact_sync.models.state import CIContext

logger = structlog.get_logger()

PUSH_EVENTS = {"push"}
PULL_REQUEST_EVENTS = {"pull_request", "pull_request_target"}


def _truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes"}


def _branch_from_ref(ref: str) -> str:
    for prefix in ("refs/heads/", "refs/tags/"):
        if ref.startswith(prefix):
            return ref[len(prefix):]
    return ref


def _read_event(path: Optional[str]) -> Dict[str, Any]:
    if not path or not os.path.exists(path):
        return {}
    try:
        with open(path, "r") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("ci_event_unreadable", path=path, error=str(e))
        return {}


def load_ci_context(environ: Optional[Mapping[str, str]] = None) -> CIContext:
    """
    Build a CIContext from GitHub Actions environment variables.

    Args:
        environ: Environment mapping (defaults to os.environ)

    Returns:
        CIContext for this run
    """
    env = os.environ if environ is None else environ

    event_name = env.get("GITHUB_EVENT_NAME", "")
    if event_name in PUSH_EVENTS:
        trigger_kind = "push"
    elif event_name in PULL_REQUEST_EVENTS:
        trigger_kind = "pull-request"
    else:
        trigger_kind = "other"

    # Pull requests run on a merge ref; the head branch is what we report on
    branch = env.get("GITHUB_HEAD_REF") or _branch_from_ref(env.get("GITHUB_REF", ""))

    pr_number = None
    if trigger_kind == "pull-request":
        event = _read_event(env.get("GITHUB_EVENT_PATH"))
        number = event.get("number") or (event.get("pull_request") or {}).get("number")
        if number is not None:
            pr_number = int(number)

    context = CIContext(
        branch=branch,
        trigger_kind=trigger_kind,
        in_ci=_truthy(env.get("GITHUB_ACTIONS")) or _truthy(env.get("CI")),
        repository=env.get("GITHUB_REPOSITORY") or None,
        pr_number=pr_number,
    )
    logger.debug("ci_context_loaded", **context.model_dump())
    return context
