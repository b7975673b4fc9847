import logging
import re
from typing import Optional

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from accounts.permissions import SCHOOL_ADMIN, grant_role
from schools.models import Chapter, School, Teacher

logger = logging.getLogger(__name__)

PHONE_RE = re.compile(r"^[0-9]{10}$")


class OnboardingError(Exception):
    """Registration or approval input rejected before any write."""


class StatusTransitionError(OnboardingError):
    """The school is not in a state that allows the requested change."""


def _require_phone(value: str, label: str) -> str:
    value = (value or "").strip()
    if not PHONE_RE.match(value):
        raise OnboardingError(f"{label} must be 10 digits")
    return value


def register_school(user, school_data: dict, teacher_data: dict) -> School:
    """
    Create a pending school for ``user`` with its teacher in charge and grant
    the school_admin role. Everything happens in one transaction.
    """
    kc_no = (school_data.get("kc_no") or "").strip()
    if not kc_no:
        raise OnboardingError("KC number is required")
    contact_number = _require_phone(school_data.get("contact_number"), "Contact number")
    mobile = _require_phone(teacher_data.get("mobile"), "Teacher mobile")

    if School.objects.filter(kc_no__iexact=kc_no).exists():
        raise OnboardingError(f"A school with KC number {kc_no} is already registered")
    if School.objects.filter(user=user).exists():
        raise OnboardingError("This account already has a registered school")

    kendra_name = (school_data.get("kendra_name") or "").strip()
    chapter = Chapter.objects.filter(name__iexact=kendra_name).first() if kendra_name else None

    with transaction.atomic():
        school = School.objects.create(
            user=user,
            kc_no=kc_no,
            school_name=school_data["school_name"].strip(),
            principal_name=school_data["principal_name"].strip(),
            contact_number=contact_number,
            email=school_data["email"].strip(),
            kendra_name=kendra_name,
            chapter=chapter,
            status="pending",
        )
        Teacher.objects.create(
            school=school,
            name=teacher_data["name"].strip(),
            email=teacher_data["email"].strip(),
            mobile=mobile,
            academic_year=str(timezone.localdate().year),
            is_current=True,
        )
        school.onboarding_completed = True
        school.save(update_fields=["onboarding_completed"])
        grant_role(user, SCHOOL_ADMIN)

    logger.info("School registered", extra={"school_id": school.id, "kc_no": kc_no, "chapter_id": getattr(chapter, "id", None)})
    return school


def approve_school(school: School, approver) -> School:
    with transaction.atomic():
        school = School.objects.select_for_update().get(pk=school.pk)
        if school.status != "pending":
            raise StatusTransitionError(f"School is already {school.status}")
        school.status = "approved"
        school.approved_at = timezone.now()
        school.approved_by = approver
        school.rejection_reason = ""
        school.save(update_fields=["status", "approved_at", "approved_by", "rejection_reason", "updated_at"])
    logger.info("School approved", extra={"school_id": school.id, "approved_by": getattr(approver, "id", None)})
    return school


def reject_school(school: School, reason: str) -> School:
    reason = (reason or "").strip()
    if not reason:
        raise OnboardingError("Please provide a rejection reason")
    with transaction.atomic():
        school = School.objects.select_for_update().get(pk=school.pk)
        if school.status != "pending":
            raise StatusTransitionError(f"School is already {school.status}")
        school.status = "rejected"
        school.rejection_reason = reason
        school.save(update_fields=["status", "rejection_reason", "updated_at"])
    logger.info("School rejected", extra={"school_id": school.id})
    return school


def filter_schools(queryset, status: Optional[str] = None, search: Optional[str] = None):
    if status and status != "all":
        queryset = queryset.filter(status=status)
    if search:
        queryset = queryset.filter(
            Q(school_name__icontains=search) | Q(kc_no__icontains=search) | Q(email__icontains=search)
        )
    return queryset
