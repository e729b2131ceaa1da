from django.conf import settings
from django.core.management.base import BaseCommand

from src.engagement.tracking import prune_anonymous_views


class Command(BaseCommand):
    help = "Delete anonymous view records older than the retention period"

    def add_arguments(self, parser):
        parser.add_argument("--listing", type=int, default=None)

    def handle(self, *args, **opts):
        deleted = prune_anonymous_views(listing_id=opts.get("listing"))
        self.stdout.write(
            f"Deleted {deleted} anonymous views older than {settings.ANONYMOUS_VIEW_RETENTION_DAYS} days"
        )
