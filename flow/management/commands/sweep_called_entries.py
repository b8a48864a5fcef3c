from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from flow.exceptions import InvalidTransition
from flow.models import QueueEntry, Stage
from flow.services import queue_service


class Command(BaseCommand):
    help = "Skip queue entries left in 'called' longer than the stale-call limit."

    def add_arguments(self, parser):
        parser.add_argument("--minutes", type=int, default=settings.FLOW_STALE_CALL_MINUTES)
        parser.add_argument("--stage", choices=Stage.values)
        parser.add_argument("--dry-run", action="store_true")

    def handle(self, *args, **opts):
        if opts["minutes"] < 1:
            raise CommandError("--minutes must be at least 1")
        cutoff = timezone.now() - timedelta(minutes=opts["minutes"])
        qs = QueueEntry.objects.filter(status=QueueEntry.STATUS_CALLED, called_at__lt=cutoff)
        if opts["stage"]:
            qs = qs.filter(stage=opts["stage"])
        stale = list(qs.order_by("called_at").values_list("id", "token_number"))

        if opts["dry_run"]:
            for _, token in stale:
                self.stdout.write(f"would skip {token}")
            self.stdout.write(self.style.SUCCESS(f"{len(stale)} stale entries (dry run)"))
            return

        skipped = raced = 0
        for entry_id, token in stale:
            try:
                queue_service.skip_entry(entry_id)
            except InvalidTransition:
                # a station served or skipped it after the scan
                raced += 1
                continue
            skipped += 1
            self.stdout.write(f"skipped {token}")
        self.stdout.write(self.style.SUCCESS(f"Skipped {skipped} stale entries, {raced} already handled"))
