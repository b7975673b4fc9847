from django.contrib.auth import get_user_model
from django.test import Client, TestCase, override_settings


class CorsHeaderTests(TestCase):
    def setUp(self):
        staff = get_user_model().objects.create_user("staff", password="pw", is_staff=True)
        self.client = Client()
        self.client.force_login(staff)

    def _get(self, origin):
        return self.client.get("/api/donations/", HTTP_ORIGIN=origin)

    @override_settings(CORS_ALLOWED_ORIGINS=["https://admin.karuna.org"])
    def test_unlisted_origin_gets_no_cors_headers(self):
        resp = self._get("https://evil.example")
        self.assertEqual(resp.status_code, 200)
        self.assertNotIn("Access-Control-Allow-Origin", resp)
        self.assertNotIn("Access-Control-Allow-Credentials", resp)

    @override_settings(CORS_ALLOWED_ORIGINS=["https://admin.karuna.org"])
    def test_listed_origin_is_echoed_with_credentials(self):
        resp = self._get("https://admin.karuna.org")
        self.assertEqual(resp["Access-Control-Allow-Origin"], "https://admin.karuna.org")
        self.assertEqual(resp["Access-Control-Allow-Credentials"], "true")
        self.assertIn("Origin", resp["Vary"])

    @override_settings(CORS_ALLOWED_ORIGINS=["*"])
    def test_wildcard_never_echoes_origin_or_allows_credentials(self):
        resp = self._get("https://evil.example")
        self.assertEqual(resp["Access-Control-Allow-Origin"], "*")
        self.assertNotIn("Access-Control-Allow-Credentials", resp)

    @override_settings(CORS_ALLOWED_ORIGINS=["*", "https://admin.karuna.org"])
    def test_explicit_entry_wins_over_wildcard(self):
        resp = self._get("https://admin.karuna.org")
        self.assertEqual(resp["Access-Control-Allow-Origin"], "https://admin.karuna.org")
        self.assertEqual(resp["Access-Control-Allow-Credentials"], "true")

    @override_settings(CORS_ALLOWED_ORIGINS=["https://admin.karuna.org"])
    def test_preflight_for_listed_origin(self):
        resp = self.client.options(
            "/api/donations/",
            HTTP_ORIGIN="https://admin.karuna.org",
            HTTP_ACCESS_CONTROL_REQUEST_HEADERS="Content-Type",
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp["Access-Control-Allow-Headers"], "Content-Type")
