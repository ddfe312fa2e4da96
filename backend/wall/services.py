"""
Wall Services
=============

Use cases exposed to the request layer. Every mutating use case follows
the same shape, inside ONE transaction.atomic() block:

    1. load the post (NotFound) and pass the Visibility Guard (Forbidden)
    2. check ownership / validate input (Forbidden / ValidationFailed)
    3. mutate the detail row (Like, Comment)
    4. adjust the post counter through the ledger (Conflict on exhaustion)

Steps 1-2 raise before anything is written. A Conflict in step 4 rolls
back step 3 with it, so a like or comment is never saved without its
counter update, or the other way round.

SOFT DELETE:
------------
Hiding one comment walks the ledger (comment_count - 1). Hiding a post
bulk-hides all of its comments with one UPDATE and leaves comment_count
alone, so after a post-level hide comment_count means "comments ever
added and not individually hidden", not "comments currently visible".
Unhiding the post restores every comment the same way, including ones
that had been hidden individually before the post was hidden.
"""

import logging
from typing import Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F

from . import ledger
from .exceptions import Conflict, Forbidden, NotFound, ValidationFailed
from .identity import get_school_domain
from .models import Comment, Like, Post
from .queries import (
    PageResult,
    paginate,
    sort_comments,
    sort_posts,
    visible_comments,
    with_liked,
)
from .visibility import ensure_access, parse_wall, visible_posts

logger = logging.getLogger(__name__)


def _validate_text(value: Optional[str], label: str) -> str:
    if value is None or not value.strip():
        raise ValidationFailed(f"{label} cannot be empty")
    # Limit applies to the text as submitted, surrounding whitespace included
    max_length = settings.WALL_MAX_CONTENT_LENGTH
    if len(value) > max_length:
        raise ValidationFailed(
            f"{label} exceeds maximum length of {max_length} characters"
        )
    return value.strip()


def _load_post(post_id: int) -> Post:
    post = Post.objects.filter(id=post_id).first()
    if post is None:
        raise NotFound("Post not found", post_id=post_id)
    return post


def _load_comment(post_id: int, comment_id: int) -> Comment:
    comment = Comment.objects.filter(id=comment_id).first()
    if comment is None:
        raise NotFound("Comment not found", comment_id=comment_id)
    if comment.post_id != post_id:
        raise NotFound(
            "Comment does not belong to this post",
            post_id=post_id,
            comment_id=comment_id,
        )
    return comment


# ============================================================================
# POSTS
# ============================================================================

def create_post(user_id: int, content: Optional[str], wall: Optional[str] = None) -> Post:
    """
    Create a post on the campus (default) or national wall.

    Campus posts are stamped with the author's school domain; an author
    without one cannot post there.
    """
    content = _validate_text(content, "Post content")
    wall = parse_wall(wall if wall is not None else Post.Wall.CAMPUS)

    user_domain = get_school_domain(user_id)
    school_domain = None
    if wall == Post.Wall.CAMPUS:
        if not user_domain:
            raise ValidationFailed(
                "Cannot post to campus wall without school domain",
                user_id=user_id,
            )
        school_domain = user_domain

    post = Post.objects.create(
        author_id=user_id,
        content=content,
        wall=wall,
        school_domain=school_domain,
    )
    logger.info(
        "Post created: id=%s, wall=%s, schoolDomain=%s, user=%s",
        post.id, wall, school_domain, user_id
    )
    return post


def list_posts(wall, page, size, sort, caller_id: int) -> PageResult:
    """Page of non-hidden posts on `wall` that the caller may discover."""
    queryset = visible_posts(wall, caller_id)
    queryset = with_liked(sort_posts(queryset, sort), caller_id)
    return paginate(queryset, page, size)


def get_post(post_id: int, caller_id: int) -> Post:
    """Single post by id, hidden or not, if the caller may see its wall."""
    post = with_liked(Post.objects.filter(id=post_id), caller_id).first()
    if post is None:
        raise NotFound("Post not found", post_id=post_id)
    ensure_access(post, caller_id)
    return post


# ============================================================================
# COMMENTS
# ============================================================================

def add_comment(post_id: int, user_id: int, text: Optional[str]) -> Comment:
    with transaction.atomic():
        post = _load_post(post_id)
        ensure_access(post, user_id)
        text = _validate_text(text, "Comment text")

        comment = Comment.objects.create(post_id=post.id, author_id=user_id, text=text)
        post = ledger.increment(post.id, 'comment_count')

    logger.info(
        "Comment added: id=%s, postId=%s, user=%s, newCommentCount=%s",
        comment.id, post_id, user_id, post.comment_count
    )
    return comment


def list_comments(post_id: int, page, size, sort, caller_id: int) -> PageResult:
    post = _load_post(post_id)
    ensure_access(post, caller_id)
    return paginate(sort_comments(visible_comments(post.id), sort), page, size)


def _set_comment_hidden(comment: Comment, hidden: bool) -> None:
    updated = (
        Comment.objects
        .filter(id=comment.id, version=comment.version)
        .update(hidden=hidden, version=comment.version + 1)
    )
    if not updated:
        raise Conflict(
            "The comment was modified concurrently. Please retry.",
            comment_id=comment.id,
        )
    comment.hidden = hidden
    comment.version += 1


def _toggle_comment_hidden(post_id: int, comment_id: int, user_id: int, hidden: bool) -> Comment:
    action = 'hide' if hidden else 'unhide'

    with transaction.atomic():
        post = _load_post(post_id)
        ensure_access(post, user_id)
        comment = _load_comment(post.id, comment_id)

        if comment.author_id != user_id:
            raise Forbidden(
                f"You can only {action} your own comments",
                comment_id=comment_id,
                user_id=user_id,
            )

        if comment.hidden == hidden:
            return comment

        _set_comment_hidden(comment, hidden)
        post = ledger.apply_counter_delta(post.id, 'comment_count', -1 if hidden else 1)

    logger.info(
        "Comment %s: id=%s, postId=%s, user=%s, newCommentCount=%s",
        'hidden' if hidden else 'unhidden', comment_id, post_id, user_id, post.comment_count
    )
    return comment


def hide_comment(post_id: int, comment_id: int, user_id: int) -> Comment:
    """Soft-delete a comment. Author only; no-op if already hidden."""
    return _toggle_comment_hidden(post_id, comment_id, user_id, hidden=True)


def unhide_comment(post_id: int, comment_id: int, user_id: int) -> Comment:
    """Restore a hidden comment. Author only; no-op if visible."""
    return _toggle_comment_hidden(post_id, comment_id, user_id, hidden=False)


# ============================================================================
# LIKES
# ============================================================================

def toggle_like(post_id: int, user_id: int) -> bool:
    """
    Like the post if the user has not liked it, unlike it otherwise.

    Returns True if the post is now liked, False if now unliked. Two calls
    in a row leave the like row and like_count as they were.
    """
    with transaction.atomic():
        post = _load_post(post_id)
        ensure_access(post, user_id)

        if Like.objects.filter(post_id=post.id, user_id=user_id).exists():
            deleted, _ = Like.objects.filter(post_id=post.id, user_id=user_id).delete()
            if not deleted:
                raise Conflict("Like state changed concurrently. Please retry.", post_id=post_id)
            post = ledger.decrement(post.id, 'like_count')
            liked = False
        else:
            try:
                Like.objects.create(post_id=post.id, user_id=user_id)
            except IntegrityError as exc:
                raise Conflict(
                    "Like state changed concurrently. Please retry.",
                    post_id=post_id,
                ) from exc
            post = ledger.increment(post.id, 'like_count')
            liked = True

    logger.info(
        "Post %s: postId=%s, user=%s, newLikeCount=%s",
        'liked' if liked else 'unliked', post_id, user_id, post.like_count
    )
    return liked


# ============================================================================
# POST SOFT DELETE
# ============================================================================

def _toggle_post_hidden(post_id: int, user_id: int, hidden: bool) -> Post:
    action = 'hide' if hidden else 'unhide'

    with transaction.atomic():
        post = _load_post(post_id)

        if post.author_id != user_id:
            raise Forbidden(
                f"You can only {action} your own posts",
                post_id=post_id,
                user_id=user_id,
            )

        if post.hidden == hidden:
            return post

        post = ledger.compare_and_swap(post.id, lambda current: {'hidden': hidden})

        # Bulk cascade: one UPDATE, comment_count untouched
        cascaded = (
            Comment.objects
            .filter(post_id=post.id)
            .update(hidden=hidden, version=F('version') + 1)
        )

    logger.info(
        "Post %s: id=%s, user=%s, cascadedComments=%d",
        'hidden' if hidden else 'unhidden', post_id, user_id, cascaded
    )
    return post


def hide_post(post_id: int, user_id: int) -> Post:
    """Soft-delete a post and all of its comments. Author only."""
    return _toggle_post_hidden(post_id, user_id, hidden=True)


def unhide_post(post_id: int, user_id: int) -> Post:
    """Restore a post and all of its comments. Author only."""
    return _toggle_post_hidden(post_id, user_id, hidden=False)
