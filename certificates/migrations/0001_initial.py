from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("activities", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Certificate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tier", models.CharField(choices=[("Excellence", "Excellence"), ("Merit", "Merit"), ("Participation", "Participation")], max_length=16)),
                ("status", models.CharField(choices=[("PENDING", "Pending"), ("READY", "Ready"), ("FAILED", "Failed")], default="PENDING", max_length=12)),
                ("pdf_path", models.CharField(blank=True, max_length=512)),
                ("pdf_url", models.CharField(blank=True, max_length=512)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("first_download_at", models.DateTimeField(blank=True, null=True)),
                ("submission", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="certificates", to="activities.eventsubmission")),
            ],
        ),
        migrations.AddIndex(
            model_name="certificate",
            index=models.Index(fields=["submission", "status"], name="certificate_submission_idx"),
        ),
        migrations.CreateModel(
            name="CertificateBatch",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("certificates", models.JSONField(default=list)),
                ("status", models.CharField(choices=[("PENDING", "Pending"), ("IN_PROGRESS", "In progress"), ("READY", "Ready"), ("FAILED", "Failed")], default="PENDING", max_length=16)),
                ("zip_path", models.CharField(blank=True, max_length=512)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("first_download_at", models.DateTimeField(blank=True, null=True)),
            ],
        ),
    ]
