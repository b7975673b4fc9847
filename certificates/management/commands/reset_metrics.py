from django.core.management.base import BaseCommand

from certificates.services.metrics import reset_metrics


class Command(BaseCommand):
    help = "Reset the Redis counters behind the live certificate monitor."

    def handle(self, *args, **options):
        reset_metrics()
        self.stdout.write(self.style.SUCCESS("Metrics reset."))
