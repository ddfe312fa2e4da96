"""
Visibility Guard
================

Two ways of enforcing the campus/national split:

1. Per entity (check_access / ensure_access): used before fetching one post
   by id, commenting, liking, listing its comments and hiding/unhiding its
   comments. A denied caller gets an explicit Forbidden.

2. Per collection (visible_posts): used by listings. Foreign-school posts
   are never part of the queryset at all, so a listing cannot leak their
   existence. A caller without a school domain gets an empty campus feed.

    national  -> always allowed
    campus    -> caller domain must be present and equal the post's domain
"""

from dataclasses import dataclass
from typing import Optional

from .exceptions import Forbidden, ValidationFailed
from .identity import get_school_domain
from .models import Post

DENIED_NO_DOMAIN = 'no domain'
DENIED_CROSS_SCHOOL = 'cross-school'

DENIAL_MESSAGES = {
    DENIED_NO_DOMAIN: "You do not have access to campus posts",
    DENIED_CROSS_SCHOOL: "You do not have access to posts from other schools",
}


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: Optional[str] = None

    def __bool__(self):
        return self.allowed


ALLOWED = AccessDecision(allowed=True)


def parse_wall(value) -> str:
    """Validate a wall name (case-insensitive)."""
    wall = str(value).strip().lower() if value is not None else ''
    if wall not in Post.Wall.values:
        raise ValidationFailed("Wall must be 'campus' or 'national'", wall=value)
    return wall


def check_access(post: Post, user_id) -> AccessDecision:
    # Unknown callers are NotFound on both walls
    user_domain = get_school_domain(user_id)
    if post.wall == Post.Wall.NATIONAL:
        return ALLOWED

    if not user_domain:
        return AccessDecision(allowed=False, reason=DENIED_NO_DOMAIN)
    if user_domain != post.school_domain:
        return AccessDecision(allowed=False, reason=DENIED_CROSS_SCHOOL)
    return ALLOWED


def ensure_access(post: Post, user_id) -> None:
    decision = check_access(post, user_id)
    if not decision:
        raise Forbidden(
            DENIAL_MESSAGES[decision.reason],
            post_id=post.id,
            user_id=user_id,
            reason=decision.reason,
        )


def visible_posts(wall, user_id):
    """Non-hidden posts of `wall` that `user_id` is allowed to discover."""
    wall = parse_wall(wall)
    queryset = Post.objects.filter(wall=wall, hidden=False)

    user_domain = get_school_domain(user_id)
    if wall == Post.Wall.NATIONAL:
        return queryset

    if not user_domain:
        return queryset.none()
    return queryset.filter(school_domain=user_domain)
