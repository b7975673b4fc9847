import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone

from activities.models import EventSubmission
from activities.services.submissions import SubmissionError, validate_description

logger = logging.getLogger(__name__)

MIN_SCORE = 1
MAX_SCORE = 100


class ReviewError(Exception):
    """Review input rejected; nothing was written."""


class InvalidTransition(ReviewError):
    """The submission is not in a state that allows the requested action."""


def _require_comments(comments: Optional[str], message: str) -> str:
    comments = (comments or "").strip()
    if not comments:
        raise ReviewError(message)
    return comments


def _validate_score(score) -> int:
    # bool is an int subclass; a checkbox value is never a score
    if isinstance(score, bool) or not isinstance(score, int):
        raise ReviewError("Please enter a valid score between 1 and 100")
    if score < MIN_SCORE or score > MAX_SCORE:
        raise ReviewError("Please enter a valid score between 1 and 100")
    return score


def _locked_pending(submission: EventSubmission) -> EventSubmission:
    locked = EventSubmission.objects.select_for_update().get(pk=submission.pk)
    if locked.status != "pending":
        raise InvalidTransition(f"Submission is {locked.status}; only pending submissions can be reviewed")
    return locked


def _finish(locked: EventSubmission, status: str, comments: str, reviewer, extra_fields=()):
    locked.status = status
    locked.admin_comments = comments
    locked.reviewed_at = timezone.now()
    locked.reviewed_by = reviewer
    locked.save(update_fields=["status", "admin_comments", "reviewed_at", "reviewed_by", "updated_at", *extra_fields])
    logger.info(
        "Submission reviewed",
        extra={
            "submission_id": locked.id,
            "status": status,
            "score": locked.score,
            "reviewer_id": getattr(reviewer, "id", None),
        },
    )
    return locked


def approve(submission: EventSubmission, score, comments: Optional[str], reviewer) -> EventSubmission:
    score = _validate_score(score)
    comments = _require_comments(comments, "Please provide comments for approval")
    with transaction.atomic():
        locked = _locked_pending(submission)
        locked.score = score
        return _finish(locked, "approved", comments, reviewer, extra_fields=("score",))


def request_revision(submission: EventSubmission, comments: Optional[str], reviewer) -> EventSubmission:
    comments = _require_comments(comments, "Please provide comments for the revision request")
    with transaction.atomic():
        locked = _locked_pending(submission)
        return _finish(locked, "revision_requested", comments, reviewer)


def reject(submission: EventSubmission, comments: Optional[str], reviewer, confirmed: bool = False) -> EventSubmission:
    """
    Reject a pending submission. Rejection is final, so callers must pass
    ``confirmed=True`` once the reviewer has confirmed a second time.
    The score is left as it was.
    """
    comments = _require_comments(comments, "Please provide a reason for rejection")
    if not confirmed:
        raise ReviewError("Rejection must be confirmed")
    with transaction.atomic():
        locked = _locked_pending(submission)
        return _finish(locked, "rejected", comments, reviewer)


def resubmit(
    submission: EventSubmission, description: Optional[str] = None, document_url: Optional[str] = None
) -> EventSubmission:
    with transaction.atomic():
        locked = EventSubmission.objects.select_for_update().get(pk=submission.pk)
        if locked.status != "revision_requested":
            raise InvalidTransition("Only submissions with a revision request can be resubmitted")
        new_document = locked.document_url if document_url is None else document_url
        new_description = validate_description(
            locked.short_description if description is None else description, new_document
        )
        fields = ["status", "submitted_at", "updated_at"]
        if description is not None:
            locked.short_description = new_description
            fields.append("short_description")
        if document_url is not None:
            locked.document_url = document_url
            fields.append("document_url")
        locked.status = "pending"
        locked.submitted_at = timezone.now()
        locked.save(update_fields=fields)
    logger.info("Submission resubmitted", extra={"submission_id": locked.id})
    return locked
