from django.core.management.base import BaseCommand
from django.db.models import Count

from src.engagement.models import AnonymousView, Inquiry, ListingLike, ListingSave, ListingView
from src.listings.models import Listing

COUNTERS = ("views", "likes", "saves", "inquiries")


def _counts(model):
    return dict(
        model.objects.values("listing_id")
        .annotate(c=Count("id"))
        .values_list("listing_id", "c")
    )


class Command(BaseCommand):
    help = "Recompute likes, saves and inquiries from detail rows; raise views to at least the tracked rows"

    def add_arguments(self, parser):
        parser.add_argument("--dry-run", action="store_true")
        parser.add_argument("--batch", type=int, default=500)

    def handle(self, *args, **opts):
        dry = opts["dry_run"]
        batch_size = opts["batch"]

        likes = _counts(ListingLike)
        saves = _counts(ListingSave)
        inquiries = _counts(Inquiry)
        member_views = _counts(ListingView)
        anonymous_views = _counts(AnonymousView)

        to_update = []
        changed = 0
        updated = 0

        qs = Listing.objects.all().only("id", *COUNTERS)
        for listing in qs.iterator():
            # Anonymous rows are pruned, so stored views may legitimately exceed the detail rows.
            tracked = member_views.get(listing.id, 0) + anonymous_views.get(listing.id, 0)
            expected = {
                "views": max(listing.views, tracked),
                "likes": likes.get(listing.id, 0),
                "saves": saves.get(listing.id, 0),
                "inquiries": inquiries.get(listing.id, 0),
            }
            if all(getattr(listing, k) == v for k, v in expected.items()):
                continue
            changed += 1
            if dry:
                continue
            for k, v in expected.items():
                setattr(listing, k, v)
            to_update.append(listing)
            if len(to_update) >= batch_size:
                Listing.objects.bulk_update(to_update, list(COUNTERS), batch_size=batch_size)
                updated += len(to_update)
                to_update.clear()

        if not dry and to_update:
            Listing.objects.bulk_update(to_update, list(COUNTERS), batch_size=batch_size)
            updated += len(to_update)

        if dry:
            self.stdout.write(f"[DRY] Would update: {changed}")
        self.stdout.write(f"Updated listings: {updated}")
