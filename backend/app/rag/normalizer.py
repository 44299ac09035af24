"""Turn Reddit posts and comments into a bounded block of prompt text."""

import re
from collections.abc import Sequence

from app.reddit.schemas import Comment, Post

MIN_POST_CHARS = 50
MIN_COMMENT_CHARS = 30
MAX_POSTS = 10
MAX_COMMENTS = 15

BLOCK_SEPARATOR = "\n\n---\n\n"
POSTS_END_MARKER = "\n\n===POSTS_END===\n\n"

_CLEANUP_RULES: list[tuple[re.Pattern[str], str]] = [
    # Markdown emphasis, strikethrough and code spans
    (re.compile(r"\*\*(.*?)\*\*"), r"\1"),
    (re.compile(r"\*(.*?)\*"), r"\1"),
    (re.compile(r"~~(.*?)~~"), r"\1"),
    (re.compile(r"`(.*?)`"), r"\1"),
    (re.compile(r"https?://\S+"), "[URL]"),
    (re.compile(r"/?\br/[A-Za-z0-9_]+"), "[SUBREDDIT]"),
    (re.compile(r"/?\bu/[A-Za-z0-9_-]+"), "[USER]"),
    (re.compile(r"\n{3,}"), "\n\n"),
    (re.compile(r"\s{2,}"), " "),
]


def clean_reddit_text(text: str) -> str:
    """Strip markdown and Reddit-specific noise from a post or comment body."""
    for pattern, replacement in _CLEANUP_RULES:
        text = pattern.sub(replacement, text)
    return text.strip()


def truncate_text(text: str, max_length: int) -> str:
    """Cut ``text`` to ``max_length`` characters, marking the cut with ``...``."""
    if len(text) <= max_length:
        return text
    return text[:max_length].strip() + "..."


def build_prompt_text(
    posts: Sequence[Post],
    comments: Sequence[Comment],
    max_item_chars: int = 1500,
) -> str:
    """Render posts and comments as the context block of the prompt.

    Posts need a body longer than 50 characters and comments a body longer
    than 30 characters and a positive score. At most 10 posts and 15
    comments are used, in the order given (already sorted by score).

    Returns:
        The rendered text, or an empty string when nothing qualifies
    """
    post_blocks = []
    for post in posts:
        if len(post.selftext) <= MIN_POST_CHARS:
            continue
        body = truncate_text(clean_reddit_text(post.selftext), max_item_chars)
        post_blocks.append(f"POST ({post.score} upvotes): {post.title}\n{body}")
        if len(post_blocks) == MAX_POSTS:
            break

    comment_blocks = []
    for comment in comments:
        if len(comment.body) <= MIN_COMMENT_CHARS or comment.score <= 0:
            continue
        body = truncate_text(clean_reddit_text(comment.body), max_item_chars)
        comment_blocks.append(f"COMMENT ({comment.score} upvotes): {body}")
        if len(comment_blocks) == MAX_COMMENTS:
            break

    groups = [
        BLOCK_SEPARATOR.join(post_blocks),
        BLOCK_SEPARATOR.join(comment_blocks),
    ]
    return POSTS_END_MARKER.join(group for group in groups if group)
