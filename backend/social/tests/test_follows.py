"""
Tests for the Follow Graph (services.follows)

Focus areas:
1. Self-follow and duplicate follow are rejected
2. followers_count / following_count track the edges
3. Unique constraint catches a follow that slips past the pre-check
"""

import uuid
from datetime import timedelta
from unittest.mock import patch

from django.test import TestCase
from django.utils import timezone

from social.exceptions import BadRequest, Conflict, NotFound
from social.models import Follow, User
from social.services import follows


class FollowTestCase(TestCase):

    def setUp(self):
        self.alice = User.objects.create_user('alice', 'a@test.com', 'pass')
        self.bob = User.objects.create_user('bob', 'b@test.com', 'pass')

    def test_cannot_follow_self(self):
        with self.assertRaises(BadRequest):
            follows.follow_user(self.alice.id, self.alice)
        self.assertEqual(Follow.objects.count(), 0)

    def test_cannot_follow_self_by_string_id(self):
        with self.assertRaises(BadRequest):
            follows.follow_user(str(self.alice.id), self.alice)

    def test_follow_missing_user(self):
        with self.assertRaises(NotFound):
            follows.follow_user(uuid.uuid4(), self.alice)

    def test_follow_unfollow_scenario(self):
        """
        A follows B -> status true, B.followers 1, A.following 1
        A unfollows B -> both counters back to 0, status false
        """
        follows.follow_user(self.bob.id, self.alice)

        self.assertTrue(follows.check_follow_status(self.alice.id, self.bob.id))
        self.assertFalse(follows.check_follow_status(self.bob.id, self.alice.id))
        self.alice.refresh_from_db()
        self.bob.refresh_from_db()
        self.assertEqual(self.bob.followers_count, 1)
        self.assertEqual(self.alice.following_count, 1)
        self.assertEqual(self.alice.followers_count, 0)
        self.assertEqual(self.bob.following_count, 0)

        follows.unfollow_user(self.bob.id, self.alice)

        self.assertFalse(follows.check_follow_status(self.alice.id, self.bob.id))
        self.alice.refresh_from_db()
        self.bob.refresh_from_db()
        self.assertEqual(self.bob.followers_count, 0)
        self.assertEqual(self.alice.following_count, 0)

    def test_second_follow_conflicts(self):
        follows.follow_user(self.bob.id, self.alice)
        with self.assertRaises(Conflict):
            follows.follow_user(self.bob.id, self.alice)

        self.bob.refresh_from_db()
        self.assertEqual(self.bob.followers_count, 1)

    def test_follow_again_after_unfollow(self):
        follows.follow_user(self.bob.id, self.alice)
        follows.unfollow_user(self.bob.id, self.alice)
        follows.follow_user(self.bob.id, self.alice)

        self.bob.refresh_from_db()
        self.assertEqual(self.bob.followers_count, 1)
        self.assertEqual(Follow.objects.count(), 1)

    def test_unfollow_without_edge(self):
        with self.assertRaises(NotFound):
            follows.unfollow_user(self.bob.id, self.alice)

    def test_constraint_rejects_race(self):
        """
        Simulate a concurrent follow that passed the exists() check:
        the unique constraint must turn it into Conflict and the
        counters must stay untouched.
        """
        Follow.objects.create(follower=self.alice, following=self.bob)

        with patch('social.services.follows.Follow.objects.filter') as mock_filter:
            mock_filter.return_value.exists.return_value = False
            with self.assertRaises(Conflict):
                follows.follow_user(self.bob.id, self.alice)

        self.assertEqual(Follow.objects.count(), 1)
        self.bob.refresh_from_db()
        self.assertEqual(self.bob.followers_count, 0)


class FollowListingTestCase(TestCase):

    def setUp(self):
        self.target = User.objects.create_user('target', 't@test.com', 'pass')
        self.fans = [
            User.objects.create_user(f'fan{i}', f'fan{i}@test.com', 'pass')
            for i in range(12)
        ]
        now = timezone.now()
        for i, fan in enumerate(self.fans):
            follows.follow_user(self.target.id, fan)
            Follow.objects.filter(follower=fan).update(created_at=now + timedelta(minutes=i))

    def test_followers_newest_first(self):
        result = follows.get_followers(self.target.id, page=1, limit=10)

        self.assertEqual(result['total'], 12)
        self.assertEqual(result['total_pages'], 2)
        self.assertEqual(len(result['items']), 10)
        self.assertEqual(result['items'][0].id, self.fans[-1].id)
        self.assertEqual(result['items'][-1].id, self.fans[2].id)

    def test_followers_second_page(self):
        result = follows.get_followers(self.target.id, page=2, limit=10)
        self.assertEqual([u.id for u in result['items']], [self.fans[1].id, self.fans[0].id])

    def test_following(self):
        result = follows.get_following(self.fans[0].id)
        self.assertEqual(result['total'], 1)
        self.assertEqual(result['items'][0].id, self.target.id)
        self.assertEqual(result['limit'], 10)
        self.assertEqual(result['page'], 1)

    def test_following_empty(self):
        result = follows.get_following(self.target.id)
        self.assertEqual(result['total'], 0)
        self.assertEqual(result['items'], [])
        self.assertEqual(result['total_pages'], 0)
