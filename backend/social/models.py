"""
Data Models for SocialHub
=========================

Design Philosophy:
------------------
1. Aggregate counters live on the parent row
   - User: followers_count, following_count, posts_count
   - Post: likes_count, comments_count
   - Updated only by the service layer with F() expressions
   - Trade-off: cheap reads, but counters can drift from row counts
     (see management command check_counters)

2. Uniqueness is enforced by the database, not by Python
   - One Like per (user, post), one Follow per (follower, following)
   - The service layer checks first for a friendlier error, but the
     constraint is what actually holds under concurrent requests

3. Comments use an Adjacency List (parent_id) with NO database constraint
   - Deleting a comment leaves its replies pointing at a missing row
   - Known latent bug, kept on purpose: replies are neither cascaded
     nor re-parented

Indexes Strategy:
-----------------
- post.author + post.created_at: a user's posts, newest first
- comment.post + comment.created_at: top-level comments for a post
- comment.parent + comment.created_at: replies for a comment
- like.post + like.created_at: likers of a post
- follow.follower/following + follow.created_at: follow listings
"""

import uuid

from django.contrib.auth.models import AbstractUser
from django.core.validators import MinLengthValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone


# Fields safe to expose for a user. The password hash is never selected
# by the read accessors in services.users.
PUBLIC_USER_FIELDS = (
    'id',
    'email',
    'username',
    'first_name',
    'last_name',
    'avatar',
    'bio',
    'followers_count',
    'following_count',
    'posts_count',
    'created_at',
)


class User(AbstractUser):
    """
    Account record with denormalized social counters.

    Extends Django's AbstractUser so authentication, password hashing and
    the admin keep working; email is made unique on top of username.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    avatar = models.CharField(max_length=255, blank=True, null=True)
    bio = models.CharField(max_length=500, blank=True, null=True)

    followers_count = models.PositiveIntegerField(default=0)
    following_count = models.PositiveIntegerField(default=0)
    posts_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.username


class Post(models.Model):
    """
    A text post with an optional image reference.

    `image` holds the opaque filename returned by the upload endpoint;
    nothing here inspects the file.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    author = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='posts',
    )
    title = models.CharField(
        max_length=300,
        validators=[MinLengthValidator(1)]
    )
    content = models.TextField()
    image = models.CharField(max_length=255, blank=True, null=True)

    # Denormalized counts - written by services with F() only
    likes_count = models.PositiveIntegerField(default=0)
    comments_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(
        default=timezone.now,
        db_index=True  # Feed ordering
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['author', '-created_at'], name='social_post_author__0b6d3f_idx'),
        ]

    def __str__(self):
        return f"{self.title[:50]} by {self.author_id}"


class Comment(models.Model):
    """
    Comment on a post, optionally a reply to another comment.

    Replies fold into the post's comments_count. One level of nesting is
    a client convention, the schema allows any depth.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        related_name='comments',
    )
    author = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='comments'
    )
    # No FK constraint and no cascade: a deleted parent leaves replies
    # with a dangling parent_id.
    parent = models.ForeignKey(
        'self',
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        null=True,
        blank=True,
        related_name='replies',
    )
    content = models.TextField()
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['post', 'created_at'], name='social_comm_post_id_4c1e2a_idx'),
            models.Index(fields=['parent', 'created_at'], name='social_comm_parent__9f3b7d_idx'),
        ]

    def __str__(self):
        return f"Comment by {self.author_id} on {self.post_id}"


class Like(models.Model):
    """
    A user's like on a post.

    CONCURRENCY:
    - Unique constraint (user, post) enforced at DB level
    - Two simultaneous likes: one insert wins, the other hits IntegrityError
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='likes'
    )
    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        related_name='likes'
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'post'],
                name='unique_like_per_user_per_post'
            )
        ]
        indexes = [
            models.Index(fields=['post', 'created_at'], name='social_like_post_id_7a2c51_idx'),
        ]

    def __str__(self):
        return f"{self.user_id} liked {self.post_id}"


class Follow(models.Model):
    """
    Directed follow edge: follower -> following.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    follower = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='following_edges'
    )
    following = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='follower_edges'
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['follower', 'following'],
                name='unique_follow_per_pair'
            ),
            models.CheckConstraint(
                condition=~Q(follower=F('following')),
                name='no_self_follow'
            ),
        ]
        indexes = [
            models.Index(fields=['follower', 'created_at'], name='social_foll_followe_1d8e4b_idx'),
            models.Index(fields=['following', 'created_at'], name='social_foll_followi_6e0a9c_idx'),
        ]

    def __str__(self):
        return f"{self.follower_id} follows {self.following_id}"
