from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from activities import demo_data
from activities.models import Event, EventAssignment, EventSubmission
from donations.models import Donation, Donor
from schools.models import Chapter, School, Teacher


class Command(BaseCommand):
    help = "Load the demo chapters, schools, events, submissions and donations into the database."

    def add_arguments(self, parser):
        parser.add_argument("--skip-donations", action="store_true", help="Do not create demo donors and donations")
        parser.add_argument("--deadline-days", type=int, default=30, help="Days until the demo assignment deadlines (default: 30)")

    @transaction.atomic
    def handle(self, *args, **options):
        now = timezone.now()
        deadline = now + timedelta(days=options["deadline_days"])

        chapters = {}
        for name in demo_data.DEMO_CHAPTERS:
            chapters[name], _ = Chapter.objects.get_or_create(
                name=name, defaults={"location": name.split()[0], "state": ""}
            )

        schools = {}
        for row in demo_data.DEMO_SCHOOLS:
            school, created = School.objects.get_or_create(
                kc_no=row["kc_no"],
                defaults={
                    "school_name": row["school_name"],
                    "principal_name": row["principal_name"],
                    "contact_number": row["contact_number"],
                    "email": row["email"],
                    "kendra_name": row["kendra_name"],
                    "chapter": chapters.get(row["kendra_name"]),
                    "status": row["status"],
                    "approved_at": now if row["status"] == "approved" else None,
                    "onboarding_completed": True,
                },
            )
            schools[row["id"]] = school

        events = {}
        submissions_created = 0
        for row in demo_data.DEMO_SUBMISSIONS:
            title = row["event_title"]
            if title not in events:
                events[title], _ = Event.objects.get_or_create(
                    title=title,
                    defaults={"start_date": now - timedelta(days=30), "end_date": deadline, "status": "active"},
                )
            event = events[title]
            school = schools[row["school_id"]]
            if school.chapter_id and not EventAssignment.objects.filter(event=event, chapter=school.chapter).exists():
                EventAssignment.objects.create(event=event, chapter=school.chapter, deadline=deadline)

            teacher, _ = Teacher.objects.get_or_create(
                school=school,
                name=row["teacher_name"],
                defaults={"email": school.email, "mobile": school.contact_number, "academic_year": str(now.year)},
            )
            _, created = EventSubmission.objects.get_or_create(
                event=event,
                school=school,
                defaults={
                    "teacher": teacher,
                    "short_description": f"{title} at {school.school_name}.",
                    "status": row["status"],
                    "score": row["score"],
                    "admin_comments": row["admin_comments"],
                    "submitted_at": row["submitted_at"],
                    "reviewed_at": row["submitted_at"] if row["status"] != "pending" else None,
                },
            )
            submissions_created += 1 if created else 0

        donations_created = 0
        if not options["skip_donations"]:
            for row in demo_data.DEMO_DONATIONS:
                donor, _ = Donor.objects.get_or_create(email=row["donor_email"], defaults={"name": row["donor_name"]})
                if Donation.objects.filter(donor=donor, donation_date=row["donation_date"]).exists():
                    continue
                Donation.objects.create(
                    donor=donor,
                    amount=Decimal(row["amount"]),
                    donation_type=row["donation_type"],
                    payment_method=row["payment_method"],
                    status=row["status"],
                    is_recurring=row["is_recurring"],
                    receipt_sent=row["receipt_sent"],
                    donation_date=row["donation_date"],
                )
                donations_created += 1

        self.stdout.write(
            self.style.SUCCESS(
                f"Chapters: {len(chapters)}, schools: {len(schools)}, events: {len(events)}, "
                f"new submissions: {submissions_created}, new donations: {donations_created}"
            )
        )
