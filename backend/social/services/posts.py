"""
Post Store
==========

Owns posts and their aggregate counters (likes_count, comments_count).

Ownership rule: only the author may update or delete a post.

COUNTER STRATEGY:
-----------------
update_counts() is the single write path for likes_count/comments_count.
It issues one UPDATE with an F() expression:

    UPDATE social_post SET likes_count = likes_count + 1 WHERE id = %s

Two concurrent likes both land, because the database does the addition.
A read-modify-write in Python would lose one of them.
"""

import logging
from typing import Literal

from django.db.models import F

from ..exceptions import Forbidden, NotFound
from ..models import Post, User
from ..pagination import DEFAULT_LIMIT, DEFAULT_PAGE, Page, paginate
from . import users

logger = logging.getLogger(__name__)

PostCounterField = Literal['likes_count', 'comments_count']

POST_FIELDS = ('title', 'content', 'image')


def _posts_with_author():
    # Explicit projection: author JOINed, password hash never loaded
    return Post.objects.select_related('author').defer('author__password')


def create(data: dict, author: User) -> Post:
    post = Post.objects.create(
        author_id=author.id,
        **{field: data[field] for field in POST_FIELDS if field in data}
    )
    users.adjust_counter(author.id, 'posts', 1)

    logger.info("User %s created post %s", author.id, post.id)
    return find_one(post.id)


def find_all(page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT) -> Page:
    """Feed of all posts, newest first."""
    return paginate(_posts_with_author().order_by('-created_at', '-id'), page, limit)


def find_one(post_id) -> Post:
    post = _posts_with_author().filter(id=post_id).first()
    if post is None:
        raise NotFound('Post not found')
    return post


def find_by_author(author_id, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT) -> Page:
    queryset = _posts_with_author().filter(author_id=author_id).order_by('-created_at', '-id')
    return paginate(queryset, page, limit)


def update(post_id, patch: dict, acting_user: User) -> Post:
    post = find_one(post_id)

    if post.author_id != acting_user.id:
        raise Forbidden('You can only update your own posts')

    changes = {field: value for field, value in patch.items() if field in POST_FIELDS}
    if changes:
        for field, value in changes.items():
            setattr(post, field, value)
        post.save(update_fields=[*changes, 'updated_at'])

    return find_one(post_id)


def remove(post_id, acting_user: User) -> None:
    """
    Delete a post and decrement the author's posts_count.

    Comments and likes go with the post through the FK cascade; no other
    counters are touched.
    """
    post = find_one(post_id)

    if post.author_id != acting_user.id:
        raise Forbidden('You can only delete your own posts')

    Post.objects.filter(id=post.id).delete()
    users.adjust_counter(post.author_id, 'posts', -1)

    logger.info("User %s deleted post %s", acting_user.id, post_id)


def update_counts(post_id, field: PostCounterField, increment: bool) -> None:
    """
    Atomic +1/-1 on a post counter.

    Decrements only match rows with a positive counter so the value
    never drops below zero.
    """
    if field not in ('likes_count', 'comments_count'):
        raise ValueError(f"Invalid post counter field: {field}")

    queryset = Post.objects.filter(id=post_id)
    if increment:
        queryset.update(**{field: F(field) + 1})
    else:
        queryset.filter(**{f'{field}__gt': 0}).update(**{field: F(field) - 1})
