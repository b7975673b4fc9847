import logging
import os
import uuid

from django.conf import settings
from django.shortcuts import get_object_or_404
from rest_framework import serializers, status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import ADMIN, EVALUATOR, SCHOOL_ADMIN, HasRole, roles_for
from activities import demo_data
from activities.datasource import DataSource
from activities.models import Event, EventAssignment, EventSubmission, MediaFile, Publication, ProgramType
from activities.services import review
from activities.services.rankings import (
    WINDOWS,
    LeaderboardFilters,
    RankedEntry,
    RankingFilters,
    aggregate_leaderboard,
    average_score,
    leaderboard_summary,
    rank_entries,
    rank_submissions,
    record_from_fixture,
    records_from_queryset,
    sort_submissions,
    status_counts,
)
from activities.services.submissions import (
    SubmissionError,
    add_media,
    add_publication,
    assigned_events,
    create_submission,
)
from certificates.services.storage import store_file
from schools.models import Chapter, School

logger = logging.getLogger(__name__)

IsAdmin = HasRole(ADMIN)
IsReviewer = HasRole(ADMIN, EVALUATOR)
IsSchoolAdmin = HasRole(SCHOOL_ADMIN)

STATUS_FILTER_CHOICES = ["all"] + [c[0] for c in EventSubmission.STATUS_CHOICES]


def _school_for(user):
    return School.objects.select_related("chapter").filter(user=user).first()


def _unavailable(result):
    return Response(
        {"detail": "Data is temporarily unavailable. Please try again.", "source": result.source},
        status=status.HTTP_503_SERVICE_UNAVAILABLE,
    )


def event_payload(event: Event) -> dict:
    return {
        "id": event.id,
        "title": event.title,
        "description": event.description,
        "location": event.location,
        "start_date": event.start_date.isoformat(),
        "end_date": event.end_date.isoformat(),
        "status": event.status,
        "program_type": event.program_type.code if event.program_type_id else None,
        "thumbnail_url": event.thumbnail_url,
    }


def submission_payload(submission: EventSubmission, detail: bool = False) -> dict:
    data = {
        "id": submission.id,
        "event_id": submission.event_id,
        "event_title": submission.event.title,
        "school_id": submission.school_id,
        "school_name": submission.school.school_name,
        "kc_no": submission.school.kc_no,
        "chapter_name": submission.school.chapter_name,
        "teacher_name": submission.teacher.name if submission.teacher_id else None,
        "status": submission.status,
        "score": submission.score,
        "admin_comments": submission.admin_comments,
        "submitted_at": submission.submitted_at.isoformat() if submission.submitted_at else None,
        "reviewed_at": submission.reviewed_at.isoformat() if submission.reviewed_at else None,
    }
    if detail:
        data["short_description"] = submission.short_description
        data["document_url"] = submission.document_url
        data["media_files"] = [
            {"id": m.id, "file_url": m.file_url, "file_type": m.file_type, "file_size": m.file_size}
            for m in submission.media_files.all()
        ]
        data["publications"] = [
            {
                "id": p.id,
                "media_type": p.media_type,
                "media_name": p.media_name,
                "url": p.url,
                "file_url": p.file_url,
                "publication_date": p.publication_date.isoformat() if p.publication_date else None,
            }
            for p in submission.publications.all()
        ]
    return data


def _record_payload(record) -> dict:
    return {
        "id": record.id,
        "event_title": record.event_title,
        "school_id": record.school_id,
        "school_name": record.school_name,
        "kc_no": record.kc_no,
        "chapter_name": record.chapter_name,
        "status": record.status,
        "score": record.score,
        "submitted_at": record.submitted_at.isoformat() if record.submitted_at else None,
    }


# ============================
# Events and assignment
# ============================


class EventSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    location = serializers.CharField(required=False, allow_blank=True, default="")
    start_date = serializers.DateTimeField()
    end_date = serializers.DateTimeField()
    program_type = serializers.CharField(required=False, allow_blank=True, default="")
    thumbnail_url = serializers.URLField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if attrs["end_date"] < attrs["start_date"]:
            raise serializers.ValidationError({"end_date": "End date must be on or after the start date."})
        return attrs


class EventListCreateView(APIView):
    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAuthenticated(), IsAdmin()]
        return [IsAuthenticated()]

    def get(self, request):
        events = Event.objects.select_related("program_type").order_by("-start_date")
        status_filter = request.query_params.get("status")
        if status_filter:
            events = events.filter(status=status_filter)
        return Response({"results": [event_payload(e) for e in events]})

    def post(self, request):
        serializer = EventSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        program_type = None
        if data["program_type"]:
            program_type = get_object_or_404(ProgramType, code=data["program_type"])
        event = Event.objects.create(
            title=data["title"],
            description=data["description"],
            location=data["location"],
            start_date=data["start_date"],
            end_date=data["end_date"],
            program_type=program_type,
            thumbnail_url=data["thumbnail_url"],
            created_by=request.user,
        )
        logger.info("Event created", extra={"event_id": event.id, "created_by": request.user.id})
        return Response(event_payload(event), status=status.HTTP_201_CREATED)


class AssignmentSerializer(serializers.Serializer):
    school_id = serializers.IntegerField(required=False)
    chapter_id = serializers.IntegerField(required=False)
    deadline = serializers.DateTimeField()

    def validate(self, attrs):
        if ("school_id" in attrs) == ("chapter_id" in attrs):
            raise serializers.ValidationError("Assign the activity to exactly one school or one chapter.")
        return attrs


class EventAssignmentView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request, pk):
        event = get_object_or_404(Event, pk=pk)
        serializer = AssignmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        school = chapter = None
        if "school_id" in data:
            school = get_object_or_404(School, pk=data["school_id"], status="approved")
        else:
            chapter = get_object_or_404(Chapter, pk=data["chapter_id"])
        assignment = EventAssignment.objects.create(event=event, school=school, chapter=chapter, deadline=data["deadline"])
        logger.info(
            "Event assigned",
            extra={"event_id": event.id, "school_id": getattr(school, "id", None), "chapter_id": getattr(chapter, "id", None)},
        )
        return Response(
            {
                "id": assignment.id,
                "event_id": event.id,
                "school_id": assignment.school_id,
                "chapter_id": assignment.chapter_id,
                "deadline": assignment.deadline.isoformat(),
            },
            status=status.HTTP_201_CREATED,
        )


class SchoolActivitiesView(APIView):
    permission_classes = [IsAuthenticated, IsSchoolAdmin]

    def get(self, request):
        school = _school_for(request.user)
        if school is None:
            return Response({"detail": "No school is linked to this account."}, status=status.HTTP_404_NOT_FOUND)
        rows = assigned_events(school)
        return Response(
            {
                "results": [
                    {
                        **event_payload(row["event"]),
                        "deadline": row["deadline"].isoformat(),
                        "submission_id": row["submission_id"],
                        "submission_status": row["submission_status"],
                    }
                    for row in rows
                ]
            }
        )


# ============================
# Submissions
# ============================


class SubmissionQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, default="")
    status = serializers.ChoiceField(choices=STATUS_FILTER_CHOICES, required=False, default="all")
    chapter = serializers.CharField(required=False, allow_blank=True, default="")
    window = serializers.ChoiceField(choices=WINDOWS, required=False, default="all")
    sort_by = serializers.ChoiceField(choices=["rank", "date", "score"], required=False, default="rank")
    order = serializers.ChoiceField(choices=["asc", "desc"], required=False, default="desc")


class SubmissionCreateSerializer(serializers.Serializer):
    event_id = serializers.IntegerField()
    short_description = serializers.CharField(required=False, allow_blank=True, default="")
    document_url = serializers.URLField(required=False, allow_blank=True, default="")


class SubmissionListCreateView(APIView):
    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAuthenticated(), IsSchoolAdmin()]
        return [IsAuthenticated(), IsReviewer()]

    def get(self, request):
        params = SubmissionQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        q = params.validated_data
        filters = RankingFilters(search=q["search"], status=q["status"], chapter=q["chapter"] or None, window=q["window"])

        def query():
            return [r.record for r in rank_submissions(records_from_queryset(EventSubmission.objects.all()), filters)]

        def fixture():
            records = [record_from_fixture(row) for row in demo_data.demo_submissions()]
            return [r.record for r in rank_submissions(records, filters)]

        result = DataSource("submissions", query, fixture).fetch()
        if result.error and not result.is_fixture:
            return _unavailable(result)
        records = sort_submissions(result.rows, q["sort_by"], q["order"])
        return Response(
            {
                "source": result.source,
                "counts": status_counts(records),
                "results": [_record_payload(r) for r in records],
            }
        )

    def post(self, request):
        school = _school_for(request.user)
        if school is None:
            return Response({"detail": "No school is linked to this account."}, status=status.HTTP_404_NOT_FOUND)
        serializer = SubmissionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        event = get_object_or_404(Event, pk=data["event_id"])
        try:
            submission = create_submission(school, event, data["short_description"], data["document_url"])
        except SubmissionError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(submission_payload(submission, detail=True), status=status.HTTP_201_CREATED)


class SubmissionSummaryView(APIView):
    permission_classes = [IsAuthenticated, IsReviewer]

    def get(self, request):
        records = records_from_queryset(EventSubmission.objects.all())
        counts = status_counts(records)
        return Response({**counts, "average_score": average_score(records)})


def _owned_or_reviewer(request, submission) -> bool:
    if roles_for(request.user) & {ADMIN, EVALUATOR}:
        return True
    return submission.school.user_id == request.user.id


def _owned(request, submission) -> bool:
    return submission.school.user_id == request.user.id


class SubmissionDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        submission = get_object_or_404(EventSubmission.objects.select_related("event", "school__chapter", "teacher"), pk=pk)
        if not _owned_or_reviewer(request, submission):
            return Response({"detail": "You cannot view this submission."}, status=status.HTTP_403_FORBIDDEN)
        return Response(submission_payload(submission, detail=True))


class ReviewSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=["approve", "request_revision", "reject"])
    score = serializers.IntegerField(required=False, allow_null=True, default=None)
    comments = serializers.CharField(required=False, allow_blank=True, default="")
    confirmed = serializers.BooleanField(required=False, default=False)


class SubmissionReviewView(APIView):
    permission_classes = [IsAuthenticated, IsReviewer]

    def post(self, request, pk):
        submission = get_object_or_404(EventSubmission, pk=pk)
        serializer = ReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            if data["action"] == "approve":
                submission = review.approve(submission, data["score"], data["comments"], request.user)
            elif data["action"] == "request_revision":
                submission = review.request_revision(submission, data["comments"], request.user)
            else:
                submission = review.reject(submission, data["comments"], request.user, confirmed=data["confirmed"])
        except review.InvalidTransition as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        except review.ReviewError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        submission = EventSubmission.objects.select_related("event", "school__chapter", "teacher").get(pk=submission.pk)
        return Response(submission_payload(submission, detail=True))


class ResubmitSerializer(serializers.Serializer):
    short_description = serializers.CharField(required=False, allow_blank=True)
    document_url = serializers.URLField(required=False, allow_blank=True)


class SubmissionResubmitView(APIView):
    permission_classes = [IsAuthenticated, IsSchoolAdmin]

    def post(self, request, pk):
        submission = get_object_or_404(EventSubmission.objects.select_related("school"), pk=pk)
        if not _owned(request, submission):
            return Response({"detail": "You cannot change this submission."}, status=status.HTTP_403_FORBIDDEN)
        serializer = ResubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            submission = review.resubmit(submission, data.get("short_description"), data.get("document_url"))
        except review.InvalidTransition as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        except SubmissionError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"id": submission.id, "status": submission.status})


class MediaSerializer(serializers.Serializer):
    file = serializers.FileField(required=False)
    file_url = serializers.CharField(required=False, max_length=512)
    file_type = serializers.ChoiceField(choices=[c[0] for c in MediaFile.FILE_TYPES], required=False)

    def validate(self, attrs):
        if not attrs.get("file") and not attrs.get("file_url"):
            raise serializers.ValidationError("Upload a file or give its URL.")
        if attrs.get("file_url") and not attrs.get("file_type"):
            raise serializers.ValidationError({"file_type": "Required when giving a file URL."})
        return attrs


def _file_type_for(content_type: str) -> str:
    if content_type.startswith("image/"):
        return "image"
    if content_type.startswith("video/"):
        return "video"
    return "document"


class SubmissionMediaView(APIView):
    permission_classes = [IsAuthenticated, IsSchoolAdmin]
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def post(self, request, pk):
        submission = get_object_or_404(EventSubmission.objects.select_related("school"), pk=pk)
        if not _owned(request, submission):
            return Response({"detail": "You cannot change this submission."}, status=status.HTTP_403_FORBIDDEN)
        serializer = MediaSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        upload = data.get("file")
        if upload is not None:
            if upload.size > settings.MAX_UPLOAD_BYTES:
                return Response({"detail": "File is too large."}, status=status.HTTP_400_BAD_REQUEST)
            content_type = upload.content_type or "application/octet-stream"
            key = f"submissions/{submission.id}/{uuid.uuid4().hex}_{os.path.basename(upload.name)}"
            file_url, _ = store_file(key, upload.read(), content_type)
            media = add_media(submission, file_url, data.get("file_type") or _file_type_for(content_type), upload.size)
        else:
            media = add_media(submission, data["file_url"], data["file_type"])
        return Response(
            {"id": media.id, "file_url": media.file_url, "file_type": media.file_type, "file_size": media.file_size},
            status=status.HTTP_201_CREATED,
        )


class PublicationSerializer(serializers.Serializer):
    media_type = serializers.ChoiceField(choices=[c[0] for c in Publication.MEDIA_TYPES])
    media_name = serializers.CharField(required=False, allow_blank=True, default="")
    url = serializers.URLField(required=False, allow_blank=True, default="")
    file_url = serializers.CharField(required=False, allow_blank=True, default="")
    publication_date = serializers.DateField(required=False, allow_null=True, default=None)


class SubmissionPublicationView(APIView):
    permission_classes = [IsAuthenticated, IsSchoolAdmin]

    def post(self, request, pk):
        submission = get_object_or_404(EventSubmission.objects.select_related("school"), pk=pk)
        if not _owned(request, submission):
            return Response({"detail": "You cannot change this submission."}, status=status.HTTP_403_FORBIDDEN)
        serializer = PublicationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            publication = add_publication(submission, **serializer.validated_data)
        except SubmissionError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"id": publication.id, "media_type": publication.media_type}, status=status.HTTP_201_CREATED)


# ============================
# Leaderboard and reports
# ============================


class LeaderboardQuerySerializer(serializers.Serializer):
    window = serializers.ChoiceField(choices=WINDOWS, required=False, default="all")
    chapter = serializers.CharField(required=False, allow_blank=True, default="")


class LeaderboardView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        params = LeaderboardQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        chapter = params.validated_data["chapter"].strip() or None
        filters = LeaderboardFilters(window=params.validated_data["window"], chapter=chapter)

        def query():
            approved = EventSubmission.objects.filter(status="approved", score__isnull=False)
            return aggregate_leaderboard(records_from_queryset(approved), filters)

        def fixture():
            entries = [
                RankedEntry(approved_submissions=row["submissions_count"], **row)
                for row in demo_data.demo_leaderboard()
                if not chapter or row["chapter_name"].casefold() == chapter.casefold()
            ]
            return rank_entries(entries)

        result = DataSource("leaderboard", query, fixture).fetch()
        if result.error and not result.is_fixture:
            return _unavailable(result)
        return Response(
            {
                "source": result.source,
                "summary": leaderboard_summary(result.rows),
                "results": [e.as_dict() for e in result.rows],
            }
        )


class RankingsReportView(APIView):
    permission_classes = [IsAuthenticated, IsReviewer]

    def get(self, request):
        params = SubmissionQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        q = params.validated_data
        filters = RankingFilters(search=q["search"], status=q["status"], chapter=q["chapter"] or None, window=q["window"])

        def query():
            return rank_submissions(records_from_queryset(EventSubmission.objects.all()), filters)

        def fixture():
            return rank_submissions([record_from_fixture(row) for row in demo_data.demo_submissions()], filters)

        result = DataSource("rankings", query, fixture).fetch()
        if result.error and not result.is_fixture:
            return _unavailable(result)
        return Response({"source": result.source, "results": [r.as_dict() for r in result.rows]})
