"""Tests for item rendering."""

import pytest

from factories import DiscussionCommentFactory, DiscussionFactory, IssueCommentFactory, IssueFactory
from gitrieve.core.models.items import DiscussionReply
from gitrieve.sync.render import (
    discussion_filename,
    issue_filename,
    render_discussion,
    render_issue,
)
from gitrieve.sync.tracker import format_timestamp, parse_updated_time


@pytest.mark.unit
class TestRenderIssue:
    """Tests for issue rendering."""

    def test_filename(self):
        assert issue_filename(IssueFactory(number=42)) == "#42.md"

    def test_marker_is_the_issue_update_time(self):
        issue = IssueFactory(comments=[IssueCommentFactory()])
        content = render_issue(issue)

        assert parse_updated_time(content) == issue.updated_at
        assert f"# Issue #{issue.number}: {issue.title}" in content
        assert "- Comment Count: 1" in content
        assert issue.comments[0].body in content

    def test_without_comments(self):
        content = render_issue(IssueFactory())
        assert "## Comments" not in content


@pytest.mark.unit
class TestRenderDiscussion:
    """Tests for discussion rendering."""

    def test_filename(self):
        assert discussion_filename(DiscussionFactory(number=7)) == "7.md"

    def test_comments_and_replies(self):
        comment = DiscussionCommentFactory(
            replies=[
                DiscussionReply(id=9, author="replier", body="a reply", created_at="2024-02-01T00:00:00Z")
            ]
        )
        discussion = DiscussionFactory(comments=[comment])
        content = render_discussion(discussion)

        assert parse_updated_time(content) == discussion.updated_at
        assert f"### Comment #{comment.id}" in content
        assert "#### Reply #9" in content
        assert "```\na reply\n```" in content
        # Never-edited replies report their creation time
        assert "- Updated Time: 2024-02-01 00:00:00" in content
        assert f"- Updated Time: {format_timestamp(comment.created_at)}" in content
