"""Markdown rendering of item records.

The ``- Updated Time:`` line of the basic information block is read back
by the tracker, so it must stay the first such line in every file.
"""

from gitrieve.core.models.items import Discussion, Issue
from gitrieve.sync.tracker import format_timestamp


def issue_filename(issue: Issue) -> str:
    return f"#{issue.number}.md"


def discussion_filename(discussion: Discussion) -> str:
    return f"{discussion.number}.md"


def render_issue(issue: Issue) -> str:
    lines = [
        f"# Issue #{issue.number}: {issue.title}",
        "",
        "## Basic Information",
        "",
        f"- Created Time: {format_timestamp(issue.created_at)}",
        f"- Updated Time: {format_timestamp(issue.updated_at)}",
        f"- State: {issue.state}",
        f"- Author: {issue.author}",
        f"- Comment Count: {len(issue.comments)}",
        "",
        "## Content",
        "",
        issue.body,
        "",
    ]
    if issue.comments:
        lines += ["## Comments", ""]
        for comment in issue.comments:
            lines += [
                f"### Comment #{comment.id}",
                "",
                f"- Author: {comment.author}",
                f"- Created Time: {format_timestamp(comment.created_at)}",
                f"- Updated Time: {format_timestamp(comment.updated_at)}",
                "",
                "- Content: ",
                "",
                comment.body,
                "",
                "---",
                "",
            ]
    return "\n".join(lines) + "\n"


def _fenced(body: str) -> list[str]:
    return ["```", body, "```", ""]


def render_discussion(discussion: Discussion) -> str:
    lines = [
        f"# Discussion: {discussion.title}",
        "",
        "## Basic Information",
        "",
        f"- Created Time: {format_timestamp(discussion.created_at)}",
        f"- Updated Time: {format_timestamp(discussion.updated_at)}",
        f"- Category: {discussion.category}",
        f"- Author: {discussion.author}",
        f"- Comment Count: {len(discussion.comments)}",
        "",
        "## Content",
        "",
        *_fenced(discussion.body),
    ]
    if discussion.comments:
        lines += ["## Comments", ""]
        for comment in discussion.comments:
            lines += [f"### Comment #{comment.id}", "", *_fenced(comment.body)]
            lines += [
                f"- Author: {comment.author}",
                f"- Created Time: {format_timestamp(comment.created_at)}",
                f"- Updated Time: {format_timestamp(comment.last_edited_at or comment.created_at)}",
                "",
                "---",
                "",
            ]
            for reply in comment.replies:
                lines += [f"#### Reply #{reply.id}", "", *_fenced(reply.body)]
                lines += [
                    f"- Author: {reply.author}",
                    f"- Created Time: {format_timestamp(reply.created_at)}",
                    f"- Updated Time: {format_timestamp(reply.last_edited_at or reply.created_at)}",
                    "",
                    "---",
                    "",
                ]
    return "\n".join(lines)
