import logging
from typing import List, Optional

from django.db import IntegrityError, transaction
from django.db.models import Min, Q
from django.utils import timezone

from activities.models import Event, EventAssignment, EventSubmission, MediaFile, Publication

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_WORDS = 250
MIN_WORDS_WITHOUT_DOCUMENT = 50


class SubmissionError(Exception):
    """Submission input rejected before any write."""


def word_count(text: Optional[str]) -> int:
    return len((text or "").split())


def _assignment_filter(school) -> Q:
    q = Q(school=school)
    if school.chapter_id:
        q |= Q(chapter_id=school.chapter_id)
    return q


def is_assigned(event: Event, school) -> bool:
    return EventAssignment.objects.filter(_assignment_filter(school), event=event).exists()


def assigned_events(school) -> List[dict]:
    """
    Active events assigned to ``school`` directly or through its chapter,
    soonest first, with the nearest deadline and the school's own submission.
    """
    assignments = EventAssignment.objects.filter(_assignment_filter(school), event__status="active")
    deadlines = {
        row["event_id"]: row["deadline"]
        for row in assignments.values("event_id").annotate(deadline=Min("deadline"))
    }
    events = Event.objects.filter(id__in=deadlines.keys()).select_related("program_type").order_by("start_date")
    submitted = {
        s.event_id: s
        for s in EventSubmission.objects.filter(school=school, event_id__in=deadlines.keys())
    }
    rows = []
    for event in events:
        submission = submitted.get(event.id)
        rows.append(
            {
                "event": event,
                "deadline": deadlines[event.id],
                "submission_id": submission.id if submission else None,
                "submission_status": submission.status if submission else None,
            }
        )
    return rows


def validate_description(description: Optional[str], document_url: Optional[str]) -> str:
    description = (description or "").strip()
    words = word_count(description)
    if words > MAX_DESCRIPTION_WORDS:
        raise SubmissionError(f"Description must be at most {MAX_DESCRIPTION_WORDS} words (got {words})")
    if words < MIN_WORDS_WITHOUT_DOCUMENT and not document_url:
        raise SubmissionError(
            f"Please upload a document or write at least {MIN_WORDS_WITHOUT_DOCUMENT} words of description"
        )
    return description


def create_submission(school, event: Event, description: Optional[str], document_url: Optional[str] = None, teacher=None) -> EventSubmission:
    if school.status != "approved":
        raise SubmissionError("Only approved schools can submit activity reports")
    if event.status != "active":
        raise SubmissionError("This activity is no longer accepting submissions")
    if not is_assigned(event, school):
        raise SubmissionError("This activity is not assigned to your school")
    description = validate_description(description, document_url)
    if EventSubmission.objects.filter(event=event, school=school).exists():
        raise SubmissionError("Your school has already submitted a report for this activity")
    if teacher is None:
        teacher = school.teachers.filter(is_current=True).order_by("-created_at").first()

    try:
        with transaction.atomic():
            submission = EventSubmission.objects.create(
                event=event,
                school=school,
                teacher=teacher,
                short_description=description,
                document_url=document_url or "",
                status="pending",
                submitted_at=timezone.now(),
            )
    except IntegrityError:
        # lost a race with a concurrent submit for the same event
        raise SubmissionError("Your school has already submitted a report for this activity")
    logger.info("Submission created", extra={"submission_id": submission.id, "event_id": event.id, "school_id": school.id})
    return submission


def add_media(submission: EventSubmission, file_url: str, file_type: str, file_size: Optional[int] = None) -> MediaFile:
    media = MediaFile.objects.create(submission=submission, file_url=file_url, file_type=file_type, file_size=file_size)
    logger.info("Media attached", extra={"submission_id": submission.id, "file_type": file_type, "file_size": file_size})
    return media


def add_publication(submission: EventSubmission, **fields) -> Publication:
    if not (fields.get("url") or fields.get("file_url") or fields.get("media_name")):
        raise SubmissionError("A publication needs a media name, a link or an uploaded file")
    publication = Publication.objects.create(submission=submission, **fields)
    logger.info("Publication attached", extra={"submission_id": submission.id, "media_type": publication.media_type})
    return publication
