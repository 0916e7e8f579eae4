"""Templates package for diff reports and PR comments."""

from artifact_sync.templates.comment_templates import (
    comment_marker,
    render_comment_body,
    render_diff_section,
)

__all__ = [
    "comment_marker",
    "render_comment_body",
    "render_diff_section",
]
