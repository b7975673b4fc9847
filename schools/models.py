from django.conf import settings
from django.db import models


class Chapter(models.Model):
    name = models.CharField(max_length=200, unique=True)
    location = models.CharField(max_length=200)
    state = models.CharField(max_length=100)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name


class School(models.Model):
    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("approved", "Approved"),
        ("rejected", "Rejected"),
    ]

    kc_no = models.CharField(max_length=50, unique=True)
    school_name = models.CharField(max_length=200)
    principal_name = models.CharField(max_length=100)
    contact_number = models.CharField(max_length=10)
    email = models.EmailField(max_length=255)
    kendra_name = models.CharField(max_length=200)
    chapter = models.ForeignKey(Chapter, on_delete=models.SET_NULL, null=True, blank=True, related_name="schools")
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="school"
    )
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default="pending")
    rejection_reason = models.TextField(blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    onboarding_completed = models.BooleanField(default=False)
    logo = models.ImageField(upload_to="logos/", blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.school_name} ({self.kc_no})"

    @property
    def chapter_name(self) -> str:
        if self.chapter_id:
            return self.chapter.name
        return self.kendra_name

    class Meta:
        indexes = [
            models.Index(fields=["status", "created_at"], name="school_status_created_idx"),
        ]


class Teacher(models.Model):
    school = models.ForeignKey(School, on_delete=models.CASCADE, related_name="teachers")
    name = models.CharField(max_length=100)
    email = models.EmailField(max_length=255)
    mobile = models.CharField(max_length=10)
    academic_year = models.CharField(max_length=16)
    is_current = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.name} - {self.school.school_name}"
