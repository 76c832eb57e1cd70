"""
DRF Serializers
===============

Serializers handle:
1. Validation of incoming data (register, post/comment bodies, paging)
2. Projection of model instances to JSON

DESIGN DECISIONS:
-----------------
1. Input and output serializers are separate; services take plain dicts
2. UserSerializer never exposes the password hash
3. Counters are always read-only; clients cannot write them
4. Replies are read from the `reply_list` attribute that
   services.comments attaches, so serialization never triggers queries
"""

import os

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from .models import Comment, Like, Post
from .pagination import DEFAULT_LIMIT, MAX_LIMIT
from .uploads import ALLOWED_IMAGE_EXTENSIONS, MAX_UPLOAD_SIZE

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Public user projection for embedding in other objects."""

    class Meta:
        model = User
        fields = [
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
        ]
        read_only_fields = fields


class AuthorSerializer(serializers.ModelSerializer):
    """Minimal author representation for posts, comments and likes."""

    class Meta:
        model = User
        fields = ['id', 'username', 'first_name', 'last_name', 'avatar']
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(min_length=6, write_only=True)
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    bio = serializers.CharField(max_length=500, required=False, allow_blank=True)

    def validate_username(self, value):
        if not value.strip():
            raise serializers.ValidationError("Username cannot be empty.")
        return value.strip()

    def validate(self, attrs):
        validate_password(
            attrs['password'],
            user=User(username=attrs['username'], email=attrs['email'])
        )
        return attrs


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class UserUpdateSerializer(serializers.Serializer):
    """Partial profile patch. Only these fields can change."""
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    bio = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)
    avatar = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)


class PostSerializer(serializers.ModelSerializer):
    """
    Post with its author.

    The author is JOINed by services.posts, no extra query here.
    """
    author = AuthorSerializer(read_only=True)

    class Meta:
        model = Post
        fields = [
            'id',
            'title',
            'content',
            'image',
            'author',
            'likes_count',
            'comments_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class PostWriteSerializer(serializers.Serializer):
    """
    Post create/update body.

    Author comes from request.user in the view, never from input.
    `image` is the filename returned by the upload endpoint.
    """
    title = serializers.CharField(max_length=300)
    content = serializers.CharField()
    image = serializers.CharField(max_length=255, required=False, allow_null=True, allow_blank=True)

    def validate_title(self, value):
        if not value.strip():
            raise serializers.ValidationError("Title cannot be empty.")
        return value.strip()

    def validate_content(self, value):
        if not value.strip():
            raise serializers.ValidationError("Content cannot be empty.")
        return value.strip()


class CommentSerializer(serializers.ModelSerializer):
    """
    Single comment without replies.

    `parent` is the raw parent_id; it may point at a deleted comment.
    """
    author = AuthorSerializer(read_only=True)
    post = serializers.UUIDField(source='post_id', read_only=True)
    parent = serializers.UUIDField(source='parent_id', read_only=True, allow_null=True)

    class Meta:
        model = Comment
        fields = [
            'id',
            'content',
            'author',
            'post',
            'parent',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class CommentWithRepliesSerializer(CommentSerializer):
    """Top-level comment with its replies attached by the service."""
    replies = serializers.SerializerMethodField()

    class Meta(CommentSerializer.Meta):
        fields = CommentSerializer.Meta.fields + ['replies']
        read_only_fields = fields

    def get_replies(self, obj):
        return CommentSerializer(getattr(obj, 'reply_list', []), many=True).data


class PostStubSerializer(serializers.ModelSerializer):
    class Meta:
        model = Post
        fields = ['id', 'title']
        read_only_fields = fields


class CommentDetailSerializer(CommentWithRepliesSerializer):
    """Comment + author + post stub + replies."""
    post = PostStubSerializer(read_only=True)


class CommentWriteSerializer(serializers.Serializer):
    content = serializers.CharField()

    def validate_content(self, value):
        if not value.strip():
            raise serializers.ValidationError("Comment cannot be empty.")
        return value.strip()


class LikeSerializer(serializers.ModelSerializer):
    user = AuthorSerializer(read_only=True)
    post = serializers.UUIDField(source='post_id', read_only=True)

    class Meta:
        model = Like
        fields = ['id', 'user', 'post', 'created_at']
        read_only_fields = fields


class PaginationQuerySerializer(serializers.Serializer):
    """
    Validates ?page=&limit= query params.

    The default limit differs per endpoint (replies use 5), so the view
    passes it in through context.
    """
    page = serializers.IntegerField(min_value=1, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=MAX_LIMIT, required=False)

    def validate(self, attrs):
        if attrs.get('limit') is None:
            attrs['limit'] = self.context.get('default_limit', DEFAULT_LIMIT)
        return attrs


class UploadSerializer(serializers.Serializer):
    """Post image upload: jpg, jpeg, png or gif, at most 5 MB."""
    file = serializers.FileField()

    def validate_file(self, value):
        _, ext = os.path.splitext(value.name)
        if ext.lower() not in ALLOWED_IMAGE_EXTENSIONS:
            raise serializers.ValidationError("Only image files are allowed (jpg, jpeg, png, gif).")
        if value.size > MAX_UPLOAD_SIZE:
            raise serializers.ValidationError("File too large, the limit is 5 MB.")
        return value
