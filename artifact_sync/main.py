"""
Main entry point for artifact-sync.
"""

import argparse
import sys

from pydantic import ValidationError

from artifact_sync.config import get_config
from artifact_sync.integrations.ci_context import load_ci_context
from artifact_sync.integrations.github_client import GitHubReviewReporter
from artifact_sync.integrations.git_runner import GitRunner
from artifact_sync.logging_config import configure_logging, get_logger
from artifact_sync.models.state import SyncResult
from artifact_sync.orchestrator import SyncOrchestrator

logger = get_logger(__name__)


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Detect drift in generated artifacts and push or report it from CI"
    )

    parser.add_argument(
        "--artifact",
        action="append",
        dest="artifacts",
        metavar="PATH",
        help="Generated file to reconcile (repeatable; default: sync.artifacts from config)",
    )

    parser.add_argument(
        "--message",
        help="Commit message used when pushing changes",
    )

    parser.add_argument(
        "--max-push-attempts",
        type=int,
        help="Push attempts before giving up (default: 3)",
    )

    parser.add_argument(
        "--config",
        help="Path to config.yaml (default: ./config.yaml)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def print_results(result: SyncResult):
    """Print a short human summary to stdout."""
    if result.outcome == "failed":
        print(f"\n❌ Synchronization failed: {result.error}")
        return

    print(f"\n✓ Synchronization finished: {result.outcome}")
    if result.push:
        print(f"  Push attempts: {result.push.attempt}")
        print(f"  Rebases: {result.push.rebases}")
    if result.outcome == "reported":
        print(f"  Comment posted: {result.comment_posted}")


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = get_config(args.config)
    except Exception as e:
        configure_logging(debug=args.debug)
        logger.error("config_load_failed", error=str(e))
        print(f"Error loading config: {e}")
        sys.exit(1)

    configure_logging(debug=args.debug or config.development_mode)

    try:
        settings = config.sync_settings(
            artifacts=args.artifacts,
            commit_message=args.message,
            max_push_attempts=args.max_push_attempts,
        )
    except ValidationError as e:
        logger.error("invalid_settings", error=str(e))
        print(f"Error: invalid settings: {e}")
        sys.exit(1)
    if not settings.artifacts:
        logger.error("no_artifacts_configured")
        print("Error: no artifacts given. Use --artifact or sync.artifacts in config.")
        sys.exit(1)

    ci_context = load_ci_context()
    orchestrator = SyncOrchestrator(
        settings=settings,
        ci_context=ci_context,
        reporter=GitHubReviewReporter(ci_context, api_url=settings.github_api_url),
        runner=GitRunner(timeout=settings.process_timeout),
    )

    try:
        result = orchestrator.run()
    except KeyboardInterrupt:
        logger.info("sync_interrupted")
        print("\nOperation interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error("sync_exception", error=str(e), exc_info=True)
        print(f"Unexpected error: {e}")
        sys.exit(1)

    print_results(result)
    sys.exit(result.exit_code)


if __name__ == "__main__":
    main()
