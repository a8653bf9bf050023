"""Item records: issues and discussions with their nested comments."""

from datetime import datetime

from pydantic import BaseModel, Field


class IssueComment(BaseModel):
    """A comment on an issue."""

    id: int
    author: str = ""
    body: str = ""
    created_at: datetime
    updated_at: datetime


class Issue(BaseModel):
    """An issue (or pull request) as listed by the hosting API."""

    number: int
    title: str = ""
    body: str = ""
    state: str = ""
    author: str = ""
    created_at: datetime
    updated_at: datetime
    comments: list[IssueComment] = Field(default_factory=list)


class DiscussionReply(BaseModel):
    """A reply nested under a discussion comment."""

    id: int
    author: str = ""
    body: str = ""
    created_at: datetime
    # Never-edited replies carry no edit time; renderers fall back to created_at
    last_edited_at: datetime | None = None
    is_answer: bool = False


class DiscussionComment(BaseModel):
    """A top-level comment on a discussion.

    ``node_id`` is the opaque identifier used to page through replies.
    """

    id: int
    node_id: str = ""
    author: str = ""
    body: str = ""
    created_at: datetime
    last_edited_at: datetime | None = None
    is_answer: bool = False
    replies: list[DiscussionReply] = Field(default_factory=list)


class Discussion(BaseModel):
    """A repository discussion thread."""

    number: int
    title: str = ""
    body: str = ""
    category: str = ""
    author: str = ""
    created_at: datetime
    updated_at: datetime
    comments: list[DiscussionComment] = Field(default_factory=list)
