from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from incomplete_orders.conf import get_setting
from incomplete_orders.services import purge_terminal


class Command(BaseCommand):
    help = "Delete converted/hidden incomplete orders older than N days. Pending rows are kept."

    def add_arguments(self, parser):
        parser.add_argument("--days", type=int, default=None)

    def handle(self, *args, **options):
        days = options["days"] if options["days"] is not None else int(get_setting("RETENTION_DAYS", 90))
        cutoff = timezone.now() - timedelta(days=days)
        n = purge_terminal(cutoff)
        self.stdout.write(self.style.SUCCESS(f"Deleted {n} old incomplete orders"))
