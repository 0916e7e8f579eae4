"""Models package for artifact-sync."""

from artifact_sync.models.state import (
    CIContext,
    SyncSettings,
    RetryState,
    SyncResult,
)

__all__ = [
    "CIContext",
    "SyncSettings",
    "RetryState",
    "SyncResult",
]
