"""
User Directory
==============

Owns user records and their aggregate counters
(followers_count, following_count, posts_count).

Read accessors return a projection without the password hash
(PUBLIC_USER_FIELDS). Counters are only ever changed through
adjust_counter(), which issues one relative UPDATE.
"""

import logging
from typing import Literal

from django.db import IntegrityError, transaction
from django.db.models import F, Q

from ..exceptions import Conflict, NotFound
from ..models import PUBLIC_USER_FIELDS, User

logger = logging.getLogger(__name__)

CounterField = Literal['followers', 'following', 'posts']

COUNTER_COLUMNS = {
    'followers': 'followers_count',
    'following': 'following_count',
    'posts': 'posts_count',
}

PROFILE_FIELDS = ('first_name', 'last_name', 'bio', 'avatar')


def _public_users():
    return User.objects.only(*PUBLIC_USER_FIELDS)


def create(profile: dict) -> User:
    """
    Register a new user.

    Raises Conflict if the email or username is taken. The pre-check gives
    the common case a clean error; the unique indexes catch the race.
    """
    email = profile['email']
    username = profile['username']

    if User.objects.filter(Q(email=email) | Q(username=username)).exists():
        raise Conflict('Email or username already exists')

    extra = {field: profile[field] for field in PROFILE_FIELDS if profile.get(field) is not None}

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                username=username,
                email=email,
                password=profile['password'],
                **extra
            )
    except IntegrityError:
        logger.warning("Concurrent registration for %s / %s", email, username)
        raise Conflict('Email or username already exists')

    logger.info("Registered user %s (%s)", user.username, user.id)
    return user


def find_by_id(user_id) -> User:
    user = _public_users().filter(id=user_id).first()
    if user is None:
        raise NotFound('User not found')
    return user


def find_by_email(email: str) -> User:
    user = _public_users().filter(email=email).first()
    if user is None:
        raise NotFound('User not found')
    return user


def find_by_username(username: str) -> User:
    user = _public_users().filter(username=username).first()
    if user is None:
        raise NotFound('User not found')
    return user


def update(user_id, patch: dict) -> User:
    """Apply a partial profile patch and return the fresh projection."""
    changes = {field: value for field, value in patch.items() if field in PROFILE_FIELDS}
    if changes:
        User.objects.filter(id=user_id).update(**changes)
    return find_by_id(user_id)


def adjust_counter(user_id, field: CounterField, delta: int) -> None:
    """
    Relative counter update in a single statement.

    UPDATE social_user SET <field>_count = <field>_count + delta WHERE id = ...

    Using F() keeps concurrent adjustments of the same counter from losing
    updates. Decrements only match rows whose counter is above zero, so
    the counter never goes negative.
    """
    if field not in COUNTER_COLUMNS:
        raise ValueError(f"Invalid counter field: {field}")
    if delta not in (1, -1):
        raise ValueError(f"Counter delta must be +1 or -1, got {delta}")

    column = COUNTER_COLUMNS[field]
    queryset = User.objects.filter(id=user_id)
    if delta < 0:
        queryset = queryset.filter(**{f'{column}__gt': 0})
    queryset.update(**{column: F(column) + delta})


def remove(user_id) -> None:
    deleted_count, _ = User.objects.filter(id=user_id).delete()
    if deleted_count == 0:
        raise NotFound('User not found')
    logger.info("Removed user %s", user_id)
