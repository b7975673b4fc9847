from django.db import models


class Donor(models.Model):
    name = models.CharField(max_length=200)
    email = models.EmailField(max_length=255, unique=True)
    phone = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.name} <{self.email}>"


class Donation(models.Model):
    TYPE_CHOICES = [("online", "Online"), ("offline", "Offline")]
    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("completed", "Completed"),
        ("failed", "Failed"),
    ]

    donor = models.ForeignKey(Donor, on_delete=models.PROTECT, related_name="donations")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    donation_type = models.CharField(max_length=10, choices=TYPE_CHOICES)
    payment_method = models.CharField(max_length=32, blank=True)
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default="pending")
    is_recurring = models.BooleanField(default=False)
    receipt_sent = models.BooleanField(default=False)
    receipt_url = models.URLField(max_length=512, blank=True)
    notes = models.TextField(blank=True)
    donation_date = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.donor.name} - {self.amount}"

    class Meta:
        indexes = [
            models.Index(fields=["status", "donation_type"], name="donation_status_type_idx"),
        ]
