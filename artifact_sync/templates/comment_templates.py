"""
Text templates for diff reports and pull request comments.
"""

PROJECT_LINK = "[artifact-sync](https://github.com/artifact-sync/artifact-sync)"

DIFF_SECTION = "Path `{path}`:\n\n```diff\n{diff}\n```\n\n"

PENDING_CHANGES = "{project} will apply the following changes after PR is merged.\n\n{diff}"

NO_CHANGES = "{project} detected no required changes to generated artifacts."

COMMENT_MARKER = "<!-- artifact-sync:{label} -->"


def render_diff_section(path: str, diff: str) -> str:
    """Label one path's hunk-only diff for the aggregate report."""
    return DIFF_SECTION.format(path=path, diff=diff)


def render_comment_body(diff: str) -> str:
    """Render the human-readable PR comment for an aggregate diff."""
    if not diff:
        return NO_CHANGES.format(project=PROJECT_LINK)
    return PENDING_CHANGES.format(project=PROJECT_LINK, diff=diff)


def comment_marker(label: str) -> str:
    """Hidden marker identifying comments posted under ``label``."""
    return COMMENT_MARKER.format(label=label)
