from pathlib import Path

from django.conf import settings
from django.db import models

from activities.models import EventSubmission


class Certificate(models.Model):
    TIER_CHOICES = [
        ("Excellence", "Excellence"),
        ("Merit", "Merit"),
        ("Participation", "Participation"),
    ]
    STATUS_CHOICES = [
        ("PENDING", "Pending"),
        ("READY", "Ready"),
        ("FAILED", "Failed"),
    ]

    submission = models.ForeignKey(EventSubmission, on_delete=models.CASCADE, related_name="certificates")
    tier = models.CharField(max_length=16, choices=TIER_CHOICES)
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default="PENDING")
    pdf_path = models.CharField(max_length=512, blank=True)
    pdf_url = models.CharField(max_length=512, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    first_download_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"Certificate of {self.tier} - submission {self.submission_id}"

    class Meta:
        indexes = [
            models.Index(fields=["submission", "status"], name="certificate_submission_idx"),
        ]


class CertificateBatch(models.Model):
    STATUS_CHOICES = [
        ("PENDING", "Pending"),
        ("IN_PROGRESS", "In progress"),
        ("READY", "Ready"),
        ("FAILED", "Failed"),
    ]

    certificates = models.JSONField(default=list)  # Certificate ids
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default="PENDING")
    zip_path = models.CharField(max_length=512, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    first_download_at = models.DateTimeField(null=True, blank=True)

    def batches_dir(self) -> Path:
        return Path(getattr(settings, "MEDIA_ROOT", Path("."))) / "certificate_batches"

    def zip_full_path(self) -> Path:
        batches_dir = self.batches_dir()
        batches_dir.mkdir(parents=True, exist_ok=True)
        return batches_dir / f"certificates_{self.id}.zip"
