from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q

from schools.models import Chapter, School, Teacher


class ProgramType(models.Model):
    code = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=128)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name


class Event(models.Model):
    STATUS_CHOICES = [
        ("active", "Active"),
        ("completed", "Completed"),
        ("cancelled", "Cancelled"),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    program_type = models.ForeignKey(ProgramType, on_delete=models.SET_NULL, null=True, blank=True)
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default="active")
    thumbnail_url = models.URLField(max_length=512, blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    def clean(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({"end_date": "End date must be on or after the start date."})


class EventAssignment(models.Model):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="assignments")
    school = models.ForeignKey(School, on_delete=models.CASCADE, null=True, blank=True)
    chapter = models.ForeignKey(Chapter, on_delete=models.CASCADE, null=True, blank=True)
    deadline = models.DateTimeField()
    assigned_date = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        target = self.school or self.chapter
        return f"{self.event} -> {target}"

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=(Q(school__isnull=False, chapter__isnull=True) | Q(school__isnull=True, chapter__isnull=False)),
                name="eventassignment_single_target",
            ),
        ]


class EventSubmission(models.Model):
    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("approved", "Approved"),
        ("rejected", "Rejected"),
        ("revision_requested", "Revision requested"),
    ]

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="submissions")
    school = models.ForeignKey(School, on_delete=models.CASCADE, related_name="submissions")
    teacher = models.ForeignKey(Teacher, on_delete=models.SET_NULL, null=True, blank=True)
    short_description = models.TextField(blank=True)
    document_url = models.URLField(max_length=512, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")
    score = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    admin_comments = models.TextField(blank=True)
    submitted_at = models.DateTimeField(null=True, blank=True)
    reviewed_at = models.DateTimeField(null=True, blank=True)
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.school.school_name} - {self.event.title}"

    def clean(self):
        if self.status == "approved" and (self.score is None or not (self.admin_comments or "").strip()):
            raise ValidationError("Approved submissions need a score and reviewer comments.")

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["event", "school"], name="eventsubmission_event_school_uniq"),
        ]
        indexes = [
            models.Index(fields=["status", "score"], name="submission_status_score_idx"),
        ]


class MediaFile(models.Model):
    FILE_TYPES = [("image", "Image"), ("video", "Video"), ("document", "Document")]

    submission = models.ForeignKey(EventSubmission, on_delete=models.CASCADE, related_name="media_files")
    file_url = models.CharField(max_length=512)
    file_type = models.CharField(max_length=12, choices=FILE_TYPES)
    file_size = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.file_type} for submission {self.submission_id}"


class Publication(models.Model):
    MEDIA_TYPES = [("print", "Print"), ("tv", "Television"), ("online", "Online")]

    submission = models.ForeignKey(EventSubmission, on_delete=models.CASCADE, related_name="publications")
    media_type = models.CharField(max_length=12, choices=MEDIA_TYPES)
    media_name = models.CharField(max_length=255, blank=True)
    url = models.URLField(max_length=512, blank=True)
    file_url = models.CharField(max_length=512, blank=True)
    publication_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.get_media_type_display()} - {self.media_name}"
