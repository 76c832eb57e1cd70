"""
Tests for the Like Registry (services.likes)

Focus areas:
1. One like per (user, post), enforced by the DB constraint
2. likes_count == number of Like rows after any like/unlike sequence
"""

import uuid
from datetime import timedelta
from unittest.mock import patch

from django.test import TestCase
from django.utils import timezone

from social.exceptions import Conflict, NotFound
from social.models import Like, Post, User
from social.services import likes


class LikeTestCase(TestCase):

    def setUp(self):
        self.author = User.objects.create_user('author', 'a@test.com', 'pass')
        self.post = Post.objects.create(author=self.author, title='Test', content='Content')
        self.likers = [
            User.objects.create_user(f'liker{i}', f'l{i}@test.com', 'pass')
            for i in range(5)
        ]

    def test_like_increments_count(self):
        likes.like_post(self.post.id, self.likers[0])

        self.post.refresh_from_db()
        self.assertEqual(self.post.likes_count, 1)
        self.assertTrue(likes.check_user_like(self.post.id, self.likers[0].id))
        self.assertFalse(likes.check_user_like(self.post.id, self.likers[1].id))

    def test_cannot_like_twice(self):
        likes.like_post(self.post.id, self.likers[0])

        with self.assertRaises(Conflict):
            likes.like_post(self.post.id, self.likers[0])

        self.post.refresh_from_db()
        self.assertEqual(self.post.likes_count, 1)
        self.assertEqual(Like.objects.filter(post=self.post).count(), 1)

    def test_like_missing_post(self):
        with self.assertRaises(NotFound):
            likes.like_post(uuid.uuid4(), self.likers[0])

    def test_unlike_without_like(self):
        with self.assertRaises(NotFound):
            likes.unlike_post(self.post.id, self.likers[0])

        self.post.refresh_from_db()
        self.assertEqual(self.post.likes_count, 0)

    def test_like_unlike_like(self):
        likes.like_post(self.post.id, self.likers[0])
        likes.unlike_post(self.post.id, self.likers[0])
        likes.like_post(self.post.id, self.likers[0])

        self.post.refresh_from_db()
        self.assertEqual(self.post.likes_count, 1)

    def test_counter_matches_rows(self):
        """N likes and M unlikes by distinct users leave likes_count == N - M."""
        for liker in self.likers:
            likes.like_post(self.post.id, liker)
        for liker in self.likers[:2]:
            likes.unlike_post(self.post.id, liker)

        self.post.refresh_from_db()
        self.assertEqual(self.post.likes_count, 3)
        self.assertEqual(self.post.likes_count, Like.objects.filter(post=self.post).count())

    def test_constraint_rejects_race(self):
        """
        A like that slips past the exists() pre-check is still rejected
        by the unique constraint, and the counter is not bumped.
        """
        Like.objects.create(post=self.post, user=self.likers[0])

        with patch('social.services.likes.Like.objects.filter') as mock_filter:
            mock_filter.return_value.exists.return_value = False
            with self.assertRaises(Conflict):
                likes.like_post(self.post.id, self.likers[0])

        self.post.refresh_from_db()
        self.assertEqual(self.post.likes_count, 0)
        self.assertEqual(Like.objects.count(), 1)


class PostLikesListingTestCase(TestCase):

    def setUp(self):
        author = User.objects.create_user('author', 'a@test.com', 'pass')
        self.post = Post.objects.create(author=author, title='Test', content='Content')
        self.likers = [
            User.objects.create_user(f'liker{i}', f'l{i}@test.com', 'pass')
            for i in range(3)
        ]
        now = timezone.now()
        for i, liker in enumerate(self.likers):
            likes.like_post(self.post.id, liker)
            Like.objects.filter(user=liker).update(created_at=now + timedelta(minutes=i))

    def test_newest_first_with_liker(self):
        result = likes.get_post_likes(self.post.id)

        self.assertEqual(result['total'], 3)
        self.assertEqual(
            [like.user.username for like in result['items']],
            ['liker2', 'liker1', 'liker0']
        )

    def test_paginated(self):
        result = likes.get_post_likes(self.post.id, page=2, limit=2)

        self.assertEqual(result['total_pages'], 2)
        self.assertEqual([like.user_id for like in result['items']], [self.likers[0].id])
