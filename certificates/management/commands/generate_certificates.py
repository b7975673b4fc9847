from django.core.management.base import BaseCommand

from certificates.services.issuing import eligible_submissions, prepare_certificate
from certificates.tasks import generate_certificate


class Command(BaseCommand):
    help = "Enqueue bulk certificate generation for approved, scored submissions."

    def add_arguments(self, parser):
        parser.add_argument(
            "--batch-size",
            dest="batch_size",
            type=int,
            default=500,
            help="Number of submissions prepared per transaction (default: 500).",
        )
        parser.add_argument(
            "--queue",
            dest="queue",
            default="certificates",
            help="Celery queue to send tasks to (default: certificates).",
        )
        parser.add_argument(
            "--submission-ids",
            nargs="+",
            type=int,
            dest="submission_ids",
            help="Only these submissions (default: every eligible submission).",
        )
        parser.add_argument(
            "--force-new",
            action="store_true",
            dest="force_new",
            help="Create new certificates instead of reusing the latest ones.",
        )

    def handle(self, *args, **options):
        batch_size = options["batch_size"]
        queue = options["queue"]
        submission_ids = options.get("submission_ids")

        submissions_qs = eligible_submissions()
        if submission_ids:
            submissions_qs = submissions_qs.filter(id__in=submission_ids)

        total = submissions_qs.count()
        if total == 0:
            self.stdout.write(self.style.WARNING("No eligible submissions found."))
            return

        self.stdout.write(f"Enqueue {total} certificates in batches of {batch_size} on queue '{queue}'")

        enqueued = 0
        skipped = 0
        for offset in range(0, total, batch_size):
            batch = list(submissions_qs.order_by("id")[offset : offset + batch_size])
            to_enqueue = []
            for submission in batch:
                cert, enqueue = prepare_certificate(submission, options["force_new"])
                if enqueue:
                    to_enqueue.append(cert.id)
                else:
                    skipped += 1
            for cert_id in to_enqueue:
                generate_certificate.apply_async(args=[cert_id], queue=queue)
                enqueued += 1
            self.stdout.write(f"Batch {offset // batch_size + 1}: {len(batch)} submissions, {enqueued} tasks queued.")

        self.stdout.write(self.style.SUCCESS(f"Done. Tasks queued: {enqueued}. Already ready or pending: {skipped}."))
