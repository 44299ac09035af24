"""Data structures for Reddit content and the raw Reddit JSON it comes from."""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

DELETED_AUTHOR = "[deleted]"
DELETED_BODIES = frozenset({"[deleted]", "[removed]"})


class Credential(BaseModel):
    """Bearer token plus the moment it stops being used."""

    token: str
    expires_at: float


class Post(BaseModel):
    """A submission as returned to callers."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    selftext: str = ""
    author: str = DELETED_AUTHOR
    score: int = 0
    num_comments: int = 0
    created_utc: float = 0
    url: str = ""
    subreddit: str = ""
    permalink: str = ""
    upvote_ratio: float = 0


class Comment(BaseModel):
    """A comment with up to three replies per level."""

    model_config = ConfigDict(frozen=True)

    id: str
    body: str
    author: str = DELETED_AUTHOR
    score: int = 0
    created_utc: float = 0
    depth: int = 0
    replies: list["Comment"] = Field(default_factory=list)


class SubredditSnapshot(BaseModel):
    """Posts and comments fetched for one request, both sorted by score."""

    subreddit: str
    posts: list[Post] = Field(default_factory=list)
    comments: list[Comment] = Field(default_factory=list)
    fetched_at: int = Field(..., description="Fetch time in epoch milliseconds")


# Raw Reddit JSON. Every field is optional; unknown fields are ignored.


class _Raw(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Thing(_Raw):
    """A ``{"kind": ..., "data": {...}}`` wrapper."""

    kind: str = ""
    data: dict[str, Any] = Field(default_factory=dict)


class ListingData(_Raw):
    # Children are decoded one at a time so a bad one can be skipped
    children: list[Any] = Field(default_factory=list)


class Listing(_Raw):
    kind: str = ""
    data: ListingData = Field(default_factory=ListingData)


class SubmissionData(_Raw):
    """The ``data`` of a ``t3`` thing."""

    id: str = ""
    title: str = ""
    selftext: Optional[str] = None
    author: Optional[str] = None
    score: Optional[int] = None
    num_comments: Optional[int] = None
    created_utc: Optional[float] = None
    url: Optional[str] = None
    subreddit: Optional[str] = None
    permalink: Optional[str] = None
    upvote_ratio: Optional[float] = None
    stickied: bool = False

    def to_post(self) -> Post:
        return Post(
            id=self.id,
            title=self.title,
            selftext=self.selftext or "",
            author=self.author or DELETED_AUTHOR,
            score=self.score or 0,
            num_comments=self.num_comments or 0,
            created_utc=self.created_utc or 0,
            url=self.url or "",
            subreddit=self.subreddit or "",
            permalink=self.permalink or "",
            upvote_ratio=self.upvote_ratio or 0,
        )


class CommentData(_Raw):
    """The ``data`` of a ``t1`` thing.

    Reddit sends ``replies`` as an empty string when there are none and as a
    listing otherwise.
    """

    id: str = ""
    body: Optional[str] = None
    author: Optional[str] = None
    score: Optional[int] = None
    created_utc: Optional[float] = None
    replies: Union[Listing, str, None] = None

    @property
    def has_body(self) -> bool:
        return bool(self.body) and self.body not in DELETED_BODIES

    def reply_children(self) -> list[Any]:
        if isinstance(self.replies, Listing):
            return self.replies.data.children
        return []
