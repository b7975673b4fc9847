from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from accounts.permissions import grant_role
from schools.models import Chapter, School

PAYLOAD = {
    "school": {
        "kc_no": "PUN-002",
        "school_name": "Delhi Public School",
        "principal_name": "Mrs. Sunita Sharma",
        "contact_number": "9876543211",
        "email": "dps@school.edu",
        "kendra_name": "Pune Karuna Kendra",
    },
    "teacher": {"name": "Mr. Rajesh Kumar", "email": "rajesh@school.edu", "mobile": "9876500002"},
}


class SchoolApiTests(TestCase):
    def setUp(self):
        User = get_user_model()
        self.applicant = User.objects.create_user(username="dps", password="p")
        self.admin = User.objects.create_user(username="admin", password="p")
        grant_role(self.admin, "admin")
        self.client = APIClient()

    def test_register_then_admin_approves(self):
        self.client.force_authenticate(user=self.applicant)
        resp = self.client.post("/api/schools/register/", PAYLOAD, format="json")
        self.assertEqual(resp.status_code, 201)
        school_id = resp.data["id"]

        session = self.client.get("/api/session/")
        self.assertEqual(session.data["roles"], ["school_admin"])
        self.assertEqual(session.data["school"]["status"], "pending")

        # applicants cannot approve themselves
        self.assertEqual(self.client.post(f"/api/schools/{school_id}/approve/").status_code, 403)

        self.client.force_authenticate(user=self.admin)
        resp = self.client.post(f"/api/schools/{school_id}/approve/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["status"], "approved")
        self.assertEqual(self.client.post(f"/api/schools/{school_id}/approve/").status_code, 409)

    def test_invalid_registration_is_bad_request(self):
        self.client.force_authenticate(user=self.applicant)
        bad = {**PAYLOAD, "teacher": {**PAYLOAD["teacher"], "mobile": "12"}}
        self.assertEqual(self.client.post("/api/schools/register/", bad, format="json").status_code, 400)
        self.assertFalse(School.objects.exists())

    def test_reject_needs_reason(self):
        self.client.force_authenticate(user=self.applicant)
        school_id = self.client.post("/api/schools/register/", PAYLOAD, format="json").data["id"]
        self.client.force_authenticate(user=self.admin)
        self.assertEqual(self.client.post(f"/api/schools/{school_id}/reject/", {"reason": ""}, format="json").status_code, 400)
        resp = self.client.post(f"/api/schools/{school_id}/reject/", {"reason": "Duplicate"}, format="json")
        self.assertEqual(resp.data["status"], "rejected")

    def test_admin_lists_with_filters(self):
        self.client.force_authenticate(user=self.applicant)
        self.client.post("/api/schools/register/", PAYLOAD, format="json")
        self.client.force_authenticate(user=self.admin)
        resp = self.client.get("/api/schools/", {"status": "pending", "search": "delhi"})
        self.assertEqual([s["kc_no"] for s in resp.data["results"]], ["PUN-002"])

    def test_chapters_live_and_fixture(self):
        self.client.force_authenticate(user=self.applicant)
        self.assertEqual(self.client.get("/api/chapters/").data["results"], [])
        with override_settings(DEMO_FIXTURES_ENABLED=True):
            resp = self.client.get("/api/chapters/")
            self.assertEqual(resp.data["source"], "fixture")
            self.assertEqual(len(resp.data["results"]), 8)
        Chapter.objects.create(name="Pune Karuna Kendra", location="Pune", state="Maharashtra")
        resp = self.client.get("/api/chapters/")
        self.assertEqual([c["name"] for c in resp.data["results"]], ["Pune Karuna Kendra"])

    def test_anonymous_session_is_rejected(self):
        self.assertIn(self.client.get("/api/session/").status_code, (401, 403))
