"""
Management command to seed the database with sample data.

Usage: python manage.py seed_data

Everything goes through the service layer so counters stay in sync with
the rows they count.
"""

import random
from django.core.management.base import BaseCommand

from social.exceptions import Conflict
from social.management.commands.check_counters import POST_COUNTERS, USER_COUNTERS, find_drift
from social.models import User, Post, Comment, Like, Follow
from social.services import comments, follows, likes, posts, users


class Command(BaseCommand):
    help = 'Seed the database with sample users, posts, comments, likes and follows'

    def add_arguments(self, parser):
        parser.add_argument(
            '--users',
            type=int,
            default=20,
            help='Number of users to create'
        )
        parser.add_argument(
            '--posts',
            type=int,
            default=50,
            help='Number of posts to create'
        )
        parser.add_argument(
            '--comments',
            type=int,
            default=100,
            help='Number of comments to create'
        )
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data before seeding'
        )

    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            Like.objects.all().delete()
            Comment.objects.all().delete()
            Follow.objects.all().delete()
            Post.objects.all().delete()
            User.objects.filter(is_superuser=False).delete()
            # Surviving superusers may have followed deleted users
            for model, counters in ((User, USER_COUNTERS), (Post, POST_COUNTERS)):
                for obj, field, _, actual in find_drift(model, counters):
                    model.objects.filter(pk=obj.pk).update(**{field: actual})

        self.stdout.write('Creating users...')
        seeded_users = self._create_users(options['users'])

        self.stdout.write('Creating posts...')
        seeded_posts = self._create_posts(seeded_users, options['posts'])

        self.stdout.write('Creating comments...')
        seeded_comments = self._create_comments(seeded_users, seeded_posts, options['comments'])

        self.stdout.write('Creating likes...')
        like_count = self._create_likes(seeded_users, seeded_posts)

        self.stdout.write('Creating follows...')
        follow_count = self._create_follows(seeded_users)

        self.stdout.write(self.style.SUCCESS(
            f'Successfully created:\n'
            f'  - {len(seeded_users)} users\n'
            f'  - {len(seeded_posts)} posts\n'
            f'  - {len(seeded_comments)} comments\n'
            f'  - {like_count} likes\n'
            f'  - {follow_count} follows'
        ))

    def _create_users(self, count):
        seeded = []
        for i in range(count):
            username = f'user{i+1}'
            try:
                user = users.create({
                    'username': username,
                    'email': f'{username}@example.com',
                    'password': 'password123',
                    'first_name': 'User',
                    'last_name': f'{i+1}',
                })
            except Conflict:
                user = User.objects.get(username=username)
            seeded.append(user)
        return seeded

    def _create_posts(self, seeded_users, count):
        titles = [
            "Just discovered this amazing trick!",
            "What do you think about...",
            "Help needed with a problem",
            "Check out my latest project",
            "TIL something interesting",
            "Weekly roundup",
        ]
        contents = [
            "Lorem ipsum dolor sit amet, consectetur adipiscing elit.",
            "I've been working on this for a while and wanted to share my thoughts.",
            "Has anyone else experienced this? I'd love to hear your perspectives.",
            "Here's what I learned after years of experience in this field.",
        ]

        return [
            posts.create(
                {
                    'title': f"{random.choice(titles)} #{i+1}",
                    'content': random.choice(contents),
                },
                random.choice(seeded_users)
            )
            for i in range(count)
        ]

    def _create_comments(self, seeded_users, seeded_posts, count):
        comment_texts = [
            "Great point! I totally agree.",
            "Thanks for sharing!",
            "Can you elaborate on this?",
            "Well said!",
            "I have a different perspective on this.",
        ]

        created = []
        for _ in range(count):
            post = random.choice(seeded_posts)
            author = random.choice(seeded_users)
            content = random.choice(comment_texts)

            # 30% chance of replying to an existing top-level comment
            top_level = [c for c in created if c.post_id == post.id and c.parent_id is None]
            if top_level and random.random() < 0.3:
                comment = comments.create_reply(random.choice(top_level).id, content, author)
            else:
                comment = comments.create(post.id, content, author)
            created.append(comment)

        return created

    def _create_likes(self, seeded_users, seeded_posts):
        count = 0
        for post in seeded_posts:
            for liker in random.sample(seeded_users, k=len(seeded_users) // 2):
                try:
                    likes.like_post(post.id, liker)
                    count += 1
                except Conflict:
                    continue
        return count

    def _create_follows(self, seeded_users):
        count = 0
        for follower in seeded_users:
            candidates = [u for u in seeded_users if u.id != follower.id]
            for target in random.sample(candidates, k=min(5, len(candidates))):
                try:
                    follows.follow_user(target.id, follower)
                    count += 1
                except Conflict:
                    continue
        return count
