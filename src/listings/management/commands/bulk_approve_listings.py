from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from src.accounts.permissions import is_admin_user
from src.listings import moderation


class Command(BaseCommand):
    help = "Approve every pending listing on behalf of an administrator"

    def add_arguments(self, parser):
        parser.add_argument("--admin", required=True, help="Email of the approving administrator")

    def handle(self, *args, **opts):
        User = get_user_model()
        actor = User.objects.filter(email__iexact=opts["admin"]).first()
        if actor is None:
            raise CommandError(f"No user with email {opts['admin']}")
        if not is_admin_user(actor):
            raise CommandError(f"{actor.email} is not an administrator")
        modified = moderation.bulk_approve(actor)
        self.stdout.write(f"Successfully approved {modified} listings")
