"""
Sort & Pagination
=================

Page-number pagination over posts and comments.

SORT DISPATCH:
--------------
Each sort mode maps to exactly one ordering. The primary key is always the
last ordering column, in the same direction as the primary one, so rows
with equal created_at / like_count keep a fixed order across pages.

    posts     NEWEST       -created_at, -id
              OLDEST        created_at,  id
              MOST_LIKED   -like_count, -id
              LEAST_LIKED   like_count,  id

    comments  NEWEST, MOST_LIKED    -created_at, -id
              OLDEST, LEAST_LIKED    created_at,  id

Comments have no like concept, so the like-based modes fold onto the two
time orders.

QUERY COUNT:
------------
1 COUNT(*) + 1 page SELECT. The caller's liked state is annotated with an
EXISTS subquery, so it costs no extra query per post.
"""

import enum
import math
from dataclasses import dataclass, field
from typing import Any, List, Optional

from django.conf import settings
from django.db.models import Exists, OuterRef, QuerySet

from .models import Comment, Like


class SortBy(str, enum.Enum):
    NEWEST = 'NEWEST'
    OLDEST = 'OLDEST'
    MOST_LIKED = 'MOST_LIKED'
    LEAST_LIKED = 'LEAST_LIKED'

    @classmethod
    def parse(cls, value) -> 'SortBy':
        """Case-insensitive. Blank or unknown values mean NEWEST."""
        if isinstance(value, cls):
            return value
        if value is None or not str(value).strip():
            return cls.NEWEST
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.NEWEST


POST_ORDERINGS = {
    SortBy.NEWEST: ('-created_at', '-id'),
    SortBy.OLDEST: ('created_at', 'id'),
    SortBy.MOST_LIKED: ('-like_count', '-id'),
    SortBy.LEAST_LIKED: ('like_count', 'id'),
}

COMMENT_ORDERINGS = {
    SortBy.NEWEST: ('-created_at', '-id'),
    SortBy.MOST_LIKED: ('-created_at', '-id'),
    SortBy.OLDEST: ('created_at', 'id'),
    SortBy.LEAST_LIKED: ('created_at', 'id'),
}


@dataclass
class PageResult:
    items: List[Any] = field(default_factory=list)
    page: int = 1
    size: int = 20
    total: int = 0
    total_pages: int = 0


def clamp_page(page) -> int:
    try:
        page = int(page)
    except (TypeError, ValueError):
        return 1
    return max(1, page)


def clamp_size(size) -> int:
    """[1, WALL_MAX_PAGE_SIZE]; missing or non-numeric means the default."""
    default = settings.WALL_DEFAULT_PAGE_SIZE
    if size is None:
        return default
    try:
        size = int(size)
    except (TypeError, ValueError):
        return default
    return min(max(1, size), settings.WALL_MAX_PAGE_SIZE)


def paginate(queryset: QuerySet, page, size) -> PageResult:
    page = clamp_page(page)
    size = clamp_size(size)

    total = queryset.count()
    offset = (page - 1) * size
    items = list(queryset[offset:offset + size]) if offset < total else []

    return PageResult(
        items=items,
        page=page,
        size=size,
        total=total,
        total_pages=math.ceil(total / size),
    )


def sort_posts(queryset: QuerySet, sort) -> QuerySet:
    return queryset.order_by(*POST_ORDERINGS[SortBy.parse(sort)])


def sort_comments(queryset: QuerySet, sort) -> QuerySet:
    return queryset.order_by(*COMMENT_ORDERINGS[SortBy.parse(sort)])


def with_liked(queryset: QuerySet, user_id: Optional[int]) -> QuerySet:
    """Annotate each post with `liked`: whether `user_id` has liked it."""
    return queryset.annotate(
        liked=Exists(Like.objects.filter(post=OuterRef('pk'), user_id=user_id))
    )


def visible_comments(post_id: int) -> QuerySet:
    return Comment.objects.filter(post_id=post_id, hidden=False)
