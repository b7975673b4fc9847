from datetime import timedelta

from django.contrib.auth import get_user_model
from django.utils import timezone

from accounts.permissions import grant_role
from activities.models import Event, EventAssignment, EventSubmission
from schools.models import Chapter, School, Teacher


def make_user(username, *roles, **extra):
    user = get_user_model().objects.create_user(username=username, password="p", **extra)
    for role in roles:
        grant_role(user, role)
    return user


def make_chapter(name="Pune Karuna Kendra"):
    return Chapter.objects.create(name=name, location=name.split()[0], state="Maharashtra")


def make_school(kc_no, name, chapter=None, user=None, status="approved"):
    school = School.objects.create(
        kc_no=kc_no,
        school_name=name,
        principal_name="Principal",
        contact_number="9876543210",
        email=f"{kc_no.lower()}@school.edu",
        kendra_name=chapter.name if chapter else "",
        chapter=chapter,
        user=user,
        status=status,
    )
    Teacher.objects.create(school=school, name="Teacher", email="t@school.edu", mobile="9876543211", academic_year="2024")
    return school


def make_event(title="Tree Plantation Drive", status="active", assign_to=None):
    now = timezone.now()
    event = Event.objects.create(title=title, start_date=now, end_date=now + timedelta(days=30), status=status)
    if assign_to is not None:
        target = {"chapter": assign_to} if isinstance(assign_to, Chapter) else {"school": assign_to}
        EventAssignment.objects.create(event=event, deadline=now + timedelta(days=20), **target)
    return event


def make_submission(event, school, status="pending", score=None, comments=""):
    return EventSubmission.objects.create(
        event=event,
        school=school,
        short_description="We planted trees.",
        status=status,
        score=score,
        admin_comments=comments,
        submitted_at=timezone.now(),
    )
