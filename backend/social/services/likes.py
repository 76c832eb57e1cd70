"""
Like Registry
=============

At most one like per (user, post). Each like/unlike adjusts the post's
likes_count through posts.update_counts().

CONCURRENCY STRATEGY:
---------------------
Problem: Two requests from the same user liking at the same moment.
Naive: Check if exists -> Create if not -> RACE CONDITION!

We keep the check (for a clear 409 in the common case) and rely on the
unique constraint for the race:
    - Try to insert inside a savepoint
    - DB rejects the duplicate (IntegrityError)
    - Translate to Conflict; the counter is only bumped after a real insert

TRANSACTION STRATEGY:
--------------------
Only the INSERT sits in transaction.atomic(). The counter update runs
afterwards as its own statement, so likes_count can briefly disagree
with the Like rows if the process dies in between.
"""

import logging

from django.db import IntegrityError, transaction

from ..exceptions import Conflict, NotFound
from ..models import Like, User
from ..pagination import DEFAULT_LIMIT, DEFAULT_PAGE, Page, paginate
from . import posts

logger = logging.getLogger(__name__)


def like_post(post_id, user: User) -> Like:
    """
    Like a post.

    OPERATION:
    1. Get post (verify exists, propagates NotFound)
    2. Reject if already liked (Conflict)
    3. Insert Like (unique constraint prevents duplicates)
    4. Increment likes_count
    """
    post = posts.find_one(post_id)

    if Like.objects.filter(post_id=post.id, user_id=user.id).exists():
        raise Conflict('Post already liked')

    try:
        with transaction.atomic():
            like = Like.objects.create(post_id=post.id, user_id=user.id)
    except IntegrityError:
        logger.warning("Duplicate like by %s on %s rejected by constraint", user.id, post.id)
        raise Conflict('Post already liked')

    posts.update_counts(post.id, 'likes_count', True)
    return like


def unlike_post(post_id, user: User) -> None:
    deleted_count, _ = Like.objects.filter(post_id=post_id, user_id=user.id).delete()

    if deleted_count == 0:
        raise NotFound('Like not found')

    posts.update_counts(post_id, 'likes_count', False)


def get_post_likes(post_id, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT) -> Page:
    """Likes on a post with the liker JOINed, newest first."""
    queryset = (
        Like.objects
        .filter(post_id=post_id)
        .select_related('user')
        .defer('user__password')
        .order_by('-created_at', '-id')
    )
    return paginate(queryset, page, limit)


def check_user_like(post_id, user_id) -> bool:
    return Like.objects.filter(post_id=post_id, user_id=user_id).exists()
