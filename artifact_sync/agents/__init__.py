"""Agents package for artifact synchronization."""

from artifact_sync.agents.diff_engine import StagingDiffEngine
from artifact_sync.agents.synchronizer import CommitPushSynchronizer

__all__ = [
    "StagingDiffEngine",
    "CommitPushSynchronizer",
]
