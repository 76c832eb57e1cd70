"""
Management command to audit denormalized counters.

Usage:
    python manage.py check_counters          # report drift only
    python manage.py check_counters --fix    # also rewrite drifted counters

Counters are adjusted outside the transaction that inserts/deletes the
counted row, so a crash in between (or a deleted parent comment whose
replies stay behind) can leave them off. This command recounts the rows
and compares. It never runs implicitly.
"""

from django.core.management.base import BaseCommand
from django.db.models import Count

from social.models import Post, User

USER_COUNTERS = {
    'followers_count': 'follower_edges',
    'following_count': 'following_edges',
    'posts_count': 'posts',
}

POST_COUNTERS = {
    'likes_count': 'likes',
    'comments_count': 'comments',
}


def find_drift(model, counters):
    """
    Yield (obj, field, stored, actual) for every counter that disagrees
    with its row count.

    Query: 1 (all counts annotated with COUNT DISTINCT)
    """
    annotations = {
        f'actual_{field}': Count(relation, distinct=True)
        for field, relation in counters.items()
    }
    for obj in model.objects.annotate(**annotations).order_by('pk'):
        for field in counters:
            stored = getattr(obj, field)
            actual = getattr(obj, f'actual_{field}')
            if stored != actual:
                yield obj, field, stored, actual


class Command(BaseCommand):
    help = 'Compare denormalized counters with actual row counts'

    def add_arguments(self, parser):
        parser.add_argument(
            '--fix',
            action='store_true',
            help='Rewrite drifted counters with the recounted values'
        )

    def handle(self, *args, **options):
        drifted = 0

        for model, counters in ((User, USER_COUNTERS), (Post, POST_COUNTERS)):
            for obj, field, stored, actual in find_drift(model, counters):
                drifted += 1
                self.stdout.write(
                    f'{model.__name__} {obj.pk}: {field} is {stored}, rows say {actual}'
                )
                if options['fix']:
                    model.objects.filter(pk=obj.pk).update(**{field: actual})

        if drifted == 0:
            self.stdout.write(self.style.SUCCESS('All counters match their rows'))
        elif options['fix']:
            self.stdout.write(self.style.SUCCESS(f'Fixed {drifted} counter(s)'))
        else:
            self.stdout.write(self.style.WARNING(
                f'{drifted} counter(s) drifted; run with --fix to rewrite them'
            ))
