from django.core.management.base import BaseCommand

from certificates.tasks import purge_expired


class Command(BaseCommand):
    help = "Delete certificate PDFs and batch zips completed or first downloaded more than N hours ago."

    def add_arguments(self, parser):
        parser.add_argument(
            "--hours",
            type=int,
            default=1,
            help="Age threshold in hours (default: 1).",
        )

    def handle(self, *args, **options):
        hours = options["hours"]
        counts = purge_expired(hours)
        self.stdout.write(
            self.style.SUCCESS(
                f"Purge done (> {hours}h): PDFs deleted: {counts['certificates']}, zips deleted: {counts['batches']}"
            )
        )
