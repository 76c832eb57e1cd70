"""
Follow Graph
============

Directed follow edges between users. Each follow/unfollow adjusts two
counters in the User Directory: followers_count on the target and
following_count on the actor.

CONSISTENCY:
------------
The edge insert/delete and the two counter updates are separate
statements, not one transaction. A crash in between leaves counters off
by one until check_counters is run. Accepted trade-off for cheap reads.

The unique constraint (follower, following) is the real guard against
duplicate edges; the exists() pre-check only produces a nicer error.
"""

import logging

from django.db import IntegrityError, transaction

from ..exceptions import BadRequest, Conflict, NotFound
from ..models import Follow, User
from ..pagination import DEFAULT_LIMIT, DEFAULT_PAGE, Page, paginate
from . import users

logger = logging.getLogger(__name__)


def follow_user(target_id, acting_user: User) -> None:
    """
    Follow another user.

    Raises:
    - BadRequest: following yourself
    - NotFound: target user doesn't exist
    - Conflict: already following
    """
    if str(target_id) == str(acting_user.id):
        raise BadRequest('You cannot follow yourself')

    users.find_by_id(target_id)

    if Follow.objects.filter(follower_id=acting_user.id, following_id=target_id).exists():
        raise Conflict('Already following this user')

    try:
        with transaction.atomic():
            Follow.objects.create(follower_id=acting_user.id, following_id=target_id)
    except IntegrityError:
        # Lost the race against a concurrent follow of the same pair
        logger.warning("Duplicate follow %s -> %s rejected by constraint", acting_user.id, target_id)
        raise Conflict('Already following this user')

    users.adjust_counter(target_id, 'followers', 1)
    users.adjust_counter(acting_user.id, 'following', 1)

    logger.info("User %s followed %s", acting_user.id, target_id)


def unfollow_user(target_id, acting_user: User) -> None:
    deleted_count, _ = Follow.objects.filter(
        follower_id=acting_user.id,
        following_id=target_id
    ).delete()

    if deleted_count == 0:
        raise NotFound('Follow relationship not found')

    users.adjust_counter(target_id, 'followers', -1)
    users.adjust_counter(acting_user.id, 'following', -1)

    logger.info("User %s unfollowed %s", acting_user.id, target_id)


def _edge_users(edges_page: Page, side: str) -> Page:
    edges_page['items'] = [getattr(edge, side) for edge in edges_page['items']]
    return edges_page


def get_followers(user_id, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT) -> Page:
    """
    Users following user_id, most recent follow first.

    Query: COUNT + 1 SELECT with the follower JOINed (no N+1).
    """
    queryset = (
        Follow.objects
        .filter(following_id=user_id)
        .select_related('follower')
        .defer('follower__password')
        .order_by('-created_at', '-id')
    )
    return _edge_users(paginate(queryset, page, limit), 'follower')


def get_following(user_id, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT) -> Page:
    """Users that user_id follows, most recent follow first."""
    queryset = (
        Follow.objects
        .filter(follower_id=user_id)
        .select_related('following')
        .defer('following__password')
        .order_by('-created_at', '-id')
    )
    return _edge_users(paginate(queryset, page, limit), 'following')


def check_follow_status(follower_id, following_id) -> bool:
    return Follow.objects.filter(follower_id=follower_id, following_id=following_id).exists()
