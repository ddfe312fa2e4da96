"""
Counter Ledger
==============

Keeps Post.like_count / Post.comment_count equal to their detail rows.

Every write to a Post row goes through compare_and_swap():

    UPDATE post
       SET <changes>, version = version + 1, updated_at = now()
     WHERE id = %s AND version = %s

Zero rows updated means another writer got there first: reload the post,
rebuild the change from the fresh row, and try again. A store error
(lock timeout, serialization failure) is treated the same way. Each attempt
runs in its own savepoint so a failed statement does not poison the
caller's transaction.

When WALL_COUNTER_MAX_RETRIES attempts have failed, Conflict is raised.
Callers run inside transaction.atomic(), so the detail-row change made
before the counter update is rolled back with it. A counter is never left
out of step with its rows.
"""

import logging
from typing import Callable, Dict

from django.conf import settings
from django.db import OperationalError, transaction
from django.utils import timezone

from .exceptions import Conflict, NotFound
from .models import Post

logger = logging.getLogger(__name__)

COUNTER_FIELDS = ('like_count', 'comment_count')


def _swap(post_id: int, expected_version: int, changes: Dict) -> int:
    """Conditional update on the version token. Returns rows updated (0 or 1)."""
    return (
        Post.objects
        .filter(id=post_id, version=expected_version)
        .update(version=expected_version + 1, updated_at=timezone.now(), **changes)
    )


def compare_and_swap(post_id: int, build_changes: Callable[[Post], Dict]) -> Post:
    """
    Apply `build_changes(post)` to the current row of `post_id` under the
    version check, retrying on conflict.

    `build_changes` is called again on every retry with the reloaded post,
    so deltas are re-applied to fresh values rather than to a stale copy.

    Returns the post as written.
    """
    max_attempts = max(1, settings.WALL_COUNTER_MAX_RETRIES)

    for attempt in range(1, max_attempts + 1):
        try:
            with transaction.atomic():
                post = Post.objects.filter(id=post_id).first()
                if post is None:
                    raise NotFound("Post not found", post_id=post_id)
                changes = build_changes(post)
                swapped = _swap(post.id, post.version, changes)
        except OperationalError as exc:
            logger.warning(
                "Post update failed: post_id=%s, attempt=%d/%d, error=%s",
                post_id, attempt, max_attempts, exc
            )
            continue

        if swapped:
            for field, value in changes.items():
                setattr(post, field, value)
            post.version += 1
            return post

        logger.warning(
            "Version conflict on post: post_id=%s, version=%s, attempt=%d/%d",
            post_id, post.version, attempt, max_attempts
        )

    logger.warning("Giving up on post update after %d attempts: post_id=%s", max_attempts, post_id)
    raise Conflict(
        "The post was modified concurrently. Please retry.",
        post_id=post_id,
        attempts=max_attempts,
    )


def apply_counter_delta(post_id: int, field: str, delta: int) -> Post:
    """Adjust one counter by `delta`, floor-clamped at 0."""
    if field not in COUNTER_FIELDS:
        raise ValueError(f"Unknown counter: {field}")

    def build_changes(post):
        current = getattr(post, field)
        if current + delta < 0:
            logger.warning(
                "Counter would go negative, clamping: post_id=%s, %s=%d, delta=%d",
                post.id, field, current, delta
            )
        return {field: max(0, current + delta)}

    return compare_and_swap(post_id, build_changes)


def increment(post_id: int, field: str) -> Post:
    return apply_counter_delta(post_id, field, 1)


def decrement(post_id: int, field: str) -> Post:
    return apply_counter_delta(post_id, field, -1)
