"""
Tests for the Post Store (services.posts)

Focus areas:
1. posts_count follows create/remove
2. Ownership checks on update/remove
3. Offset pagination envelope
4. update_counts is a relative, non-negative update
"""

import uuid
from datetime import timedelta

from django.db import connection
from django.test import TestCase
from django.test.utils import CaptureQueriesContext
from django.utils import timezone

from social.exceptions import Forbidden, NotFound
from social.models import Comment, Like, Post, User
from social.services import posts


class PostLifecycleTestCase(TestCase):

    def setUp(self):
        self.author = User.objects.create_user('author', 'a@test.com', 'pass')
        self.other = User.objects.create_user('other', 'o@test.com', 'pass')

    def test_create_increments_posts_count(self):
        post = posts.create({'title': 'Hello', 'content': 'World', 'image': '123-456.png'}, self.author)

        self.assertEqual(post.author_id, self.author.id)
        self.assertEqual(post.image, '123-456.png')
        self.assertEqual(post.likes_count, 0)
        self.assertEqual(post.comments_count, 0)
        self.author.refresh_from_db()
        self.assertEqual(self.author.posts_count, 1)

    def test_find_one_missing(self):
        with self.assertRaises(NotFound):
            posts.find_one(uuid.uuid4())

    def test_author_can_update(self):
        post = posts.create({'title': 'Old', 'content': 'Body'}, self.author)

        updated = posts.update(post.id, {'title': 'New'}, self.author)

        self.assertEqual(updated.title, 'New')
        self.assertEqual(updated.content, 'Body')

    def test_update_cannot_touch_counters(self):
        post = posts.create({'title': 'T', 'content': 'C'}, self.author)
        posts.update(post.id, {'likes_count': 50}, self.author)

        post.refresh_from_db()
        self.assertEqual(post.likes_count, 0)

    def test_non_author_cannot_update(self):
        post = posts.create({'title': 'Mine', 'content': 'Body'}, self.author)

        with self.assertRaises(Forbidden):
            posts.update(post.id, {'title': 'Stolen'}, self.other)

        post.refresh_from_db()
        self.assertEqual(post.title, 'Mine')

    def test_non_author_cannot_remove(self):
        post = posts.create({'title': 'Mine', 'content': 'Body'}, self.author)

        with self.assertRaises(Forbidden):
            posts.remove(post.id, self.other)

        self.assertTrue(Post.objects.filter(id=post.id).exists())

    def test_author_can_remove(self):
        post = posts.create({'title': 'Mine', 'content': 'Body'}, self.author)

        posts.remove(post.id, self.author)

        self.assertFalse(Post.objects.filter(id=post.id).exists())
        self.author.refresh_from_db()
        self.assertEqual(self.author.posts_count, 0)

    def test_remove_cascades_comments_and_likes(self):
        post = posts.create({'title': 'Mine', 'content': 'Body'}, self.author)
        Comment.objects.create(post=post, author=self.other, content='hi')
        Like.objects.create(post=post, user=self.other)

        posts.remove(post.id, self.author)

        self.assertEqual(Comment.objects.count(), 0)
        self.assertEqual(Like.objects.count(), 0)

    def test_remove_missing_post(self):
        with self.assertRaises(NotFound):
            posts.remove(uuid.uuid4(), self.author)


class PostPaginationTestCase(TestCase):

    def setUp(self):
        self.author = User.objects.create_user('author', 'a@test.com', 'pass')
        self.other = User.objects.create_user('other', 'o@test.com', 'pass')
        now = timezone.now()
        self.posts = []
        for i in range(25):
            post = Post.objects.create(
                author=self.author,
                title=f'Post {i}',
                content='Body',
                created_at=now - timedelta(minutes=i)
            )
            self.posts.append(post)

    def test_page_two_of_twenty_five(self):
        result = posts.find_all(page=2, limit=10)

        self.assertEqual(len(result['items']), 10)
        self.assertEqual(result['total'], 25)
        self.assertEqual(result['total_pages'], 3)
        self.assertEqual(result['page'], 2)
        self.assertEqual(result['limit'], 10)
        self.assertEqual(result['items'][0].id, self.posts[10].id)

    def test_last_page_is_partial(self):
        result = posts.find_all(page=3, limit=10)
        self.assertEqual(len(result['items']), 5)

    def test_page_past_the_end_is_empty(self):
        result = posts.find_all(page=4, limit=10)
        self.assertEqual(result['items'], [])
        self.assertEqual(result['total'], 25)

    def test_newest_first(self):
        result = posts.find_all()
        created = [post.created_at for post in result['items']]
        self.assertEqual(created, sorted(created, reverse=True))

    def test_find_by_author(self):
        Post.objects.create(author=self.other, title='Other', content='Body')

        result = posts.find_by_author(self.other.id)

        self.assertEqual(result['total'], 1)
        self.assertEqual(result['items'][0].title, 'Other')

    def test_author_is_joined(self):
        """Reading authors of a page must not issue one query per post."""
        result = posts.find_all(page=1, limit=10)

        with CaptureQueriesContext(connection) as context:
            usernames = [post.author.username for post in result['items']]

        self.assertEqual(len(context), 0)
        self.assertEqual(set(usernames), {'author'})

    def test_invalid_page(self):
        with self.assertRaises(ValueError):
            posts.find_all(page=0)


class UpdateCountsTestCase(TestCase):

    def setUp(self):
        author = User.objects.create_user('author', 'a@test.com', 'pass')
        self.post = Post.objects.create(author=author, title='T', content='C')

    def test_increment_decrement(self):
        posts.update_counts(self.post.id, 'likes_count', True)
        posts.update_counts(self.post.id, 'likes_count', True)
        posts.update_counts(self.post.id, 'comments_count', True)
        posts.update_counts(self.post.id, 'likes_count', False)

        self.post.refresh_from_db()
        self.assertEqual(self.post.likes_count, 1)
        self.assertEqual(self.post.comments_count, 1)

    def test_single_update_statement(self):
        with CaptureQueriesContext(connection) as context:
            posts.update_counts(self.post.id, 'likes_count', True)

        self.assertEqual(len(context), 1)
        self.assertTrue(context[0]['sql'].upper().startswith('UPDATE'))

    def test_decrement_at_zero_stays_zero(self):
        posts.update_counts(self.post.id, 'comments_count', False)
        self.post.refresh_from_db()
        self.assertEqual(self.post.comments_count, 0)

    def test_invalid_field(self):
        with self.assertRaises(ValueError):
            posts.update_counts(self.post.id, 'followers_count', True)


class SameTimestampPagingTestCase(TestCase):
    """Posts sharing a created_at still page without repeats or gaps."""

    def setUp(self):
        author = User.objects.create_user('author', 'a@test.com', 'pass')
        stamp = timezone.now()
        self.ids = {
            Post.objects.create(author=author, title=f'Post {i}', content='Body', created_at=stamp).id
            for i in range(7)
        }

    def test_pages_cover_every_post_once(self):
        seen = []
        for page in range(1, 5):
            seen.extend(post.id for post in posts.find_all(page=page, limit=2)['items'])

        self.assertEqual(len(seen), 7)
        self.assertEqual(set(seen), self.ids)

    def test_order_is_stable_between_calls(self):
        first = [post.id for post in posts.find_all(limit=7)['items']]
        second = [post.id for post in posts.find_all(limit=7)['items']]
        self.assertEqual(first, second)
