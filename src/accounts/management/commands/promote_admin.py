import logging

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Grant (or with --revoke, remove) administrator rights for a user by email"

    def add_arguments(self, parser):
        parser.add_argument("email")
        parser.add_argument("--revoke", action="store_true")

    def handle(self, *args, **opts):
        User = get_user_model()
        user = User.objects.filter(email__iexact=opts["email"]).first()
        if user is None:
            raise CommandError(f"No user with email {opts['email']}")
        user.is_admin = not opts["revoke"]
        user.save(update_fields=["is_admin"])
        logger.info("User %s role updated to admin=%s from the command line", user.pk, user.is_admin)
        self.stdout.write(f"{user.email}: admin={user.is_admin}")
