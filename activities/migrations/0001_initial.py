from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("schools", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ProgramType",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=32, unique=True)),
                ("name", models.CharField(max_length=128)),
                ("description", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("location", models.CharField(blank=True, max_length=255)),
                ("start_date", models.DateTimeField()),
                ("end_date", models.DateTimeField()),
                ("status", models.CharField(choices=[("active", "Active"), ("completed", "Completed"), ("cancelled", "Cancelled")], default="active", max_length=12)),
                ("thumbnail_url", models.URLField(blank=True, max_length=512)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
                ("program_type", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to="activities.programtype")),
            ],
        ),
        migrations.CreateModel(
            name="EventAssignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("deadline", models.DateTimeField()),
                ("assigned_date", models.DateTimeField(auto_now_add=True)),
                ("chapter", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, to="schools.chapter")),
                ("event", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="assignments", to="activities.event")),
                ("school", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, to="schools.school")),
            ],
        ),
        migrations.AddConstraint(
            model_name="eventassignment",
            constraint=models.CheckConstraint(
                condition=models.Q(
                    models.Q(("chapter__isnull", True), ("school__isnull", False)),
                    models.Q(("chapter__isnull", False), ("school__isnull", True)),
                    _connector="OR",
                ),
                name="eventassignment_single_target",
            ),
        ),
        migrations.CreateModel(
            name="EventSubmission",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("short_description", models.TextField(blank=True)),
                ("document_url", models.URLField(blank=True, max_length=512)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected"), ("revision_requested", "Revision requested")], default="pending", max_length=20)),
                ("score", models.PositiveSmallIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ("admin_comments", models.TextField(blank=True)),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("event", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="submissions", to="activities.event")),
                ("reviewed_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("school", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="submissions", to="schools.school")),
                ("teacher", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to="schools.teacher")),
            ],
        ),
        migrations.AddConstraint(
            model_name="eventsubmission",
            constraint=models.UniqueConstraint(fields=("event", "school"), name="eventsubmission_event_school_uniq"),
        ),
        migrations.AddIndex(
            model_name="eventsubmission",
            index=models.Index(fields=["status", "score"], name="submission_status_score_idx"),
        ),
        migrations.CreateModel(
            name="MediaFile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("file_url", models.CharField(max_length=512)),
                ("file_type", models.CharField(choices=[("image", "Image"), ("video", "Video"), ("document", "Document")], max_length=12)),
                ("file_size", models.PositiveIntegerField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("submission", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="media_files", to="activities.eventsubmission")),
            ],
        ),
        migrations.CreateModel(
            name="Publication",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("media_type", models.CharField(choices=[("print", "Print"), ("tv", "Television"), ("online", "Online")], max_length=12)),
                ("media_name", models.CharField(blank=True, max_length=255)),
                ("url", models.URLField(blank=True, max_length=512)),
                ("file_url", models.CharField(blank=True, max_length=512)),
                ("publication_date", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("submission", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="publications", to="activities.eventsubmission")),
            ],
        ),
    ]
