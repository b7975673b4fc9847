from datetime import datetime, timezone
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework.test import APIClient

from accounts.permissions import grant_role
from activities.demo_data import demo_donations
from donations.models import Donation, Donor
from donations.services.summary import donation_summary, record_donation

WHEN = datetime(2024, 12, 1, 10, 0, tzinfo=timezone.utc)


class DonationSummaryTests(SimpleTestCase):
    def test_totals_only_count_completed(self):
        rows = [
            {"amount": "100.00", "status": "completed", "donation_type": "online", "is_recurring": True},
            {"amount": "50.00", "status": "completed", "donation_type": "offline", "is_recurring": False},
            {"amount": "999.00", "status": "failed", "donation_type": "online", "is_recurring": True},
            {"amount": "10.00", "status": "pending", "donation_type": "offline", "is_recurring": False},
        ]
        summary = donation_summary(rows)
        self.assertEqual(summary["total_amount"], Decimal("150.00"))
        self.assertEqual(summary["online_amount"], Decimal("100.00"))
        self.assertEqual(summary["offline_amount"], Decimal("50.00"))
        self.assertEqual(summary["recurring_count"], 2)

    def test_demo_rows_add_up(self):
        summary = donation_summary(demo_donations())
        self.assertEqual(summary["total_amount"], Decimal("275000.00"))
        self.assertEqual(summary["online_amount"], Decimal("150000.00"))
        self.assertEqual(summary["offline_amount"], Decimal("125000.00"))
        self.assertEqual(summary["recurring_count"], 2)


class DonationApiTests(TestCase):
    def setUp(self):
        self.admin = get_user_model().objects.create_user(username="admin", password="p")
        grant_role(self.admin, "admin")
        self.client = APIClient()
        self.client.force_authenticate(user=self.admin)

    def test_create_reuses_donor_by_email(self):
        payload = {
            "donor": {"name": "Rajesh Gupta", "email": "Rajesh.Gupta@email.com"},
            "amount": "50000.00",
            "donation_type": "online",
            "payment_method": "upi",
            "donation_date": WHEN.isoformat(),
        }
        self.assertEqual(self.client.post("/api/donations/", payload, format="json").status_code, 201)
        self.assertEqual(self.client.post("/api/donations/", {**payload, "is_recurring": True}, format="json").status_code, 201)
        self.assertEqual(Donor.objects.count(), 1)
        self.assertEqual(Donation.objects.count(), 2)

    def test_tabs_and_search(self):
        record_donation({"name": "ABC Corporation", "email": "csr@abccorp.com"}, amount=Decimal("100000"),
                        donation_type="offline", status="completed", donation_date=WHEN)
        record_donation({"name": "Sunita Mehta", "email": "sunita@email.com"}, amount=Decimal("25000"),
                        donation_type="online", status="completed", is_recurring=True, donation_date=WHEN)
        resp = self.client.get("/api/donations/", {"tab": "recurring"})
        self.assertEqual([d["donor_name"] for d in resp.data["results"]], ["Sunita Mehta"])
        resp = self.client.get("/api/donations/", {"search": "abccorp"})
        self.assertEqual([d["donor_name"] for d in resp.data["results"]], ["ABC Corporation"])

        summary = self.client.get("/api/donations/summary/").data
        self.assertEqual(summary["total_amount"], "125000.00")
        self.assertEqual(summary["recurring_count"], 1)

    @override_settings(DEMO_FIXTURES_ENABLED=True)
    def test_fixture_rows_when_empty(self):
        resp = self.client.get("/api/donations/", {"tab": "offline"})
        self.assertEqual(resp.data["source"], "fixture")
        self.assertEqual(len(resp.data["results"]), 3)

    def test_non_admin_is_forbidden(self):
        other = get_user_model().objects.create_user(username="school", password="p")
        self.client.force_authenticate(user=other)
        self.assertEqual(self.client.get("/api/donations/").status_code, 403)
