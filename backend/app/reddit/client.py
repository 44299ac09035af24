"""Reddit content fetching over the OAuth API."""

import asyncio
import logging
import time
from collections.abc import Iterator
from typing import Any, Optional

import httpx
import pydantic

from app.core.config import Settings
from app.core.errors import AskRedditError, ForbiddenError, NotFoundError, UpstreamError
from app.reddit.auth import TokenCache
from app.reddit.schemas import (
    DELETED_AUTHOR,
    Comment,
    CommentData,
    Listing,
    Post,
    SubmissionData,
    SubredditSnapshot,
    Thing,
)

logger = logging.getLogger(__name__)

# Reddit has no 48 hour bucket, so 48h falls back to a day
TIMEFRAME_MAP = {
    "24h": "day",
    "48h": "day",
    "week": "week",
}

MAX_REPLIES_PER_LEVEL = 3


def map_timeframe(timeframe: str) -> str:
    """Translate a caller timeframe into Reddit's ``t`` parameter."""
    return TIMEFRAME_MAP.get(timeframe, "day")


def clamp_limit(limit: int, max_limit: int = 100) -> int:
    """Clamp a requested post count into ``[1, max_limit]``."""
    return min(max(limit, 1), max_limit)


def decode_things(children: list[Any]) -> Iterator[Thing]:
    """Decode listing children one at a time, skipping any that are malformed."""
    for child in children:
        try:
            yield Thing.model_validate(child)
        except pydantic.ValidationError as e:
            logger.warning(f"Skipping malformed listing child: {e.error_count()} errors")


def parse_submissions(payload: Any, limit: int) -> list[Post]:
    """Turn a ``/r/{name}/top`` listing into posts, in upstream order.

    Stickied submissions are dropped. Children that cannot be decoded are
    skipped.

    Raises:
        ValueError: If the payload is not a listing at all
    """
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, dict) or not isinstance(data.get("children"), list):
        raise ValueError("listing has no children")

    posts = []
    for thing in decode_things(data["children"][:limit]):
        try:
            submission = SubmissionData.model_validate(thing.data)
        except pydantic.ValidationError as e:
            logger.warning(f"Skipping malformed submission: {e.error_count()} errors")
            continue
        if submission.stickied:
            continue
        posts.append(submission.to_post())
    return posts


def _to_comment(thing: Thing, depth: int) -> Optional[Comment]:
    if thing.kind != "t1":
        return None
    try:
        data = CommentData.model_validate(thing.data)
    except pydantic.ValidationError as e:
        logger.warning(f"Skipping malformed comment: {e.error_count()} errors")
        return None
    if not data.has_body:
        return None

    replies = []
    for reply_thing in decode_things(data.reply_children()):
        reply = _to_comment(reply_thing, depth + 1)
        if reply is not None:
            replies.append(reply)
        if len(replies) == MAX_REPLIES_PER_LEVEL:
            break

    return Comment(
        id=data.id,
        body=data.body or "",
        author=data.author or DELETED_AUTHOR,
        score=data.score or 0,
        created_utc=data.created_utc or 0,
        depth=depth,
        replies=replies,
    )


def parse_comments(payload: Any, limit: int) -> list[Comment]:
    """Turn a ``/comments/{id}`` response into top-level comments.

    The response is a two element array; index 1 holds the comment tree.
    Only comments with a live body and a positive score are kept, and the
    cap is applied after that filter.
    """
    if not isinstance(payload, list) or len(payload) < 2:
        return []
    try:
        listing = Listing.model_validate(payload[1])
    except pydantic.ValidationError:
        return []

    comments = []
    for thing in decode_things(listing.data.children):
        comment = _to_comment(thing, depth=0)
        if comment is None or comment.score <= 0:
            continue
        comments.append(comment)
        if len(comments) == limit:
            break
    return comments


class RedditClient:
    """Fetches top posts and their comments for a subreddit."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        token_cache: TokenCache,
        settings: Settings,
    ) -> None:
        self.http_client = http_client
        self.token_cache = token_cache
        self.settings = settings

    async def _get(self, path: str, params: Optional[dict[str, Any]] = None) -> httpx.Response:
        token = await self.token_cache.get_token()
        try:
            return await self.http_client.get(
                f"{self.settings.reddit_api_base_url}{path}",
                params=params,
                headers={
                    "Authorization": f"Bearer {token}",
                    "User-Agent": self.settings.reddit_user_agent,
                },
                timeout=self.settings.reddit_timeout_seconds,
            )
        except httpx.HTTPError as e:
            raise UpstreamError(f"Reddit API request failed: {e}") from e

    async def fetch_snapshot(
        self,
        subreddit: str,
        timeframe: str = "24h",
        limit: int = 25,
    ) -> SubredditSnapshot:
        """Fetch the top posts of a subreddit plus comments for the first few.

        Args:
            subreddit: Subreddit name without the ``r/`` prefix
            timeframe: One of ``24h``, ``48h`` or ``week``
            limit: Number of posts to request, clamped to ``[1, 100]``

        Returns:
            Snapshot with posts and comments sorted by score, highest first

        Raises:
            NotFoundError: If the subreddit does not exist
            ForbiddenError: If the subreddit is private or banned
            UpstreamError: For any other Reddit failure
            AuthError: If no token could be obtained
        """
        limit = clamp_limit(limit, self.settings.reddit_max_limit)

        logger.info(f"Fetching submissions from r/{subreddit}")
        response = await self._get(
            f"/r/{subreddit}/top",
            params={"t": map_timeframe(timeframe), "limit": limit},
        )

        if response.status_code == 404:
            raise NotFoundError(f"Subreddit r/{subreddit} not found")
        if response.status_code == 403:
            raise ForbiddenError(f"Subreddit r/{subreddit} is private or banned")
        if not response.is_success:
            raise UpstreamError(
                f"Reddit API error: {response.status_code} {response.reason_phrase}",
                upstream_status=response.status_code,
            )

        try:
            posts = parse_submissions(response.json(), limit)
        except ValueError as e:
            raise UpstreamError(f"No data received from r/{subreddit}") from e

        comment_posts = posts[: self.settings.comment_post_count]
        per_post = await asyncio.gather(
            *(
                self._comments_or_empty(post.id, self.settings.comments_per_post)
                for post in comment_posts
            )
        )
        comments = [comment for batch in per_post for comment in batch]

        logger.info(
            f"Fetched {len(posts)} posts and {len(comments)} comments from r/{subreddit}"
        )

        return SubredditSnapshot(
            subreddit=subreddit,
            posts=sorted(posts, key=lambda p: p.score, reverse=True),
            comments=sorted(comments, key=lambda c: c.score, reverse=True),
            fetched_at=int(time.time() * 1000),
        )

    async def fetch_comments(self, submission_id: str, limit: int = 10) -> list[Comment]:
        """Fetch the top comments of one submission.

        Raises:
            UpstreamError: If Reddit answers with a non-success status
        """
        response = await self._get(
            f"/comments/{submission_id}",
            params={"limit": limit, "sort": "top", "depth": 2},
        )
        if not response.is_success:
            raise UpstreamError(
                f"Error fetching comments: {response.status_code}",
                upstream_status=response.status_code,
            )
        return parse_comments(response.json(), limit)

    async def _comments_or_empty(self, submission_id: str, limit: int) -> list[Comment]:
        try:
            return await self.fetch_comments(submission_id, limit)
        except (AskRedditError, ValueError) as e:
            logger.error(f"Error fetching comments for post {submission_id}: {e}")
            return []

    async def ping(self) -> None:
        """Check that Reddit accepts our credentials.

        Raises:
            AuthError: If authentication fails
            UpstreamError: If Reddit does not answer successfully
        """
        response = await self._get("/r/test/about")
        if not response.is_success:
            raise UpstreamError(
                f"Reddit API error: {response.status_code} {response.reason_phrase}",
                upstream_status=response.status_code,
            )
