import logging
from typing import Tuple

from django.db import transaction

from activities.models import EventSubmission
from certificates.models import Certificate
from certificates.services.metrics import mark_pending
from certificates.services.tiers import tier_for_score

logger = logging.getLogger(__name__)


class NotEligible(Exception):
    """Only approved, scored submissions get certificates."""


def eligible_submissions():
    return (
        EventSubmission.objects.filter(status="approved", score__isnull=False)
        .select_related("school", "event")
        .order_by("-score", "id")
    )


def prepare_certificate(submission: EventSubmission, force_new: bool = False) -> Tuple[Certificate, bool]:
    """
    Reuse the latest certificate of ``submission`` or create one, and mark it
    PENDING. Returns ``(certificate, enqueue)``; ``enqueue`` is False when the
    certificate is already READY or already waiting in the queue.
    """
    if submission.status != "approved" or submission.score is None:
        raise NotEligible(f"Submission {submission.id} is not approved with a score")
    tier = tier_for_score(submission.score)

    with transaction.atomic():
        existing = None
        if not force_new:
            existing = (
                Certificate.objects.select_for_update()
                .filter(submission=submission)
                .order_by("-created_at")
                .first()
            )
        if existing is None:
            cert = Certificate.objects.create(submission=submission, tier=tier, status="PENDING")
            mark_pending(cert.id)
            return cert, True
        if existing.status == "READY" and existing.tier == tier:
            return existing, False
        if existing.status == "PENDING":
            return existing, False
        existing.status = "PENDING"
        existing.tier = tier
        existing.pdf_path = ""
        existing.pdf_url = ""
        existing.completed_at = None
        existing.save(update_fields=["status", "tier", "pdf_path", "pdf_url", "completed_at"])
        mark_pending(existing.id)
        logger.info("Certificate reset for regeneration", extra={"certificate_id": existing.id, "tier": tier})
        return existing, True
