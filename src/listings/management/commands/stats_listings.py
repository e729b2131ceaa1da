import json

from django.core.management.base import BaseCommand
from django.db.models import Count

from src.listings.models import Listing
from src.listings.queries import listing_stats


class Command(BaseCommand):
    help = "Show listing stats"

    def add_arguments(self, parser):
        parser.add_argument("--json", action="store_true")

    def handle(self, *args, **opts):
        data = listing_stats()
        by_currency_rows = Listing.objects.values("currency").annotate(c=Count("id")).order_by("currency")
        data["byCurrency"] = {r["currency"]: r["c"] for r in by_currency_rows}

        if opts.get("json"):
            self.stdout.write(json.dumps(data, ensure_ascii=False, indent=2, default=str))
            return

        self.stdout.write(f"Total: {data['total']}")
        self.stdout.write(f"Active: {data['active']}")
        self.stdout.write(f"Pending approval: {data['pendingApproval']}")
        self.stdout.write(f"For rent: {data['forRent']}")
        self.stdout.write(f"For sale: {data['forSale']}")
        self.stdout.write(f"Revenue: {data['revenue']}")
        self.stdout.write("By currency:")
        for k, v in data["byCurrency"].items():
            self.stdout.write(f"  {k}: {v}")
