from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Donor",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("email", models.EmailField(max_length=255, unique=True)),
                ("phone", models.CharField(blank=True, max_length=20)),
                ("address", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name="Donation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("donation_type", models.CharField(choices=[("online", "Online"), ("offline", "Offline")], max_length=10)),
                ("payment_method", models.CharField(blank=True, max_length=32)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("completed", "Completed"), ("failed", "Failed")], default="pending", max_length=12)),
                ("is_recurring", models.BooleanField(default=False)),
                ("receipt_sent", models.BooleanField(default=False)),
                ("receipt_url", models.URLField(blank=True, max_length=512)),
                ("notes", models.TextField(blank=True)),
                ("donation_date", models.DateTimeField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("donor", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="donations", to="donations.donor")),
            ],
        ),
        migrations.AddIndex(
            model_name="donation",
            index=models.Index(fields=["status", "donation_type"], name="donation_status_type_idx"),
        ),
    ]
