import tempfile
from datetime import timedelta
from pathlib import Path
from unittest.mock import ANY, patch

from django.test import TestCase, override_settings
from django.utils import timezone

from activities.tests.utils import make_chapter, make_event, make_school, make_submission
from certificates.models import Certificate, CertificateBatch
from certificates.services.latex_renderer import LatexRenderError
from certificates.tasks import generate_certificate, purge_certificate_file, purge_expired


class GenerateCertificateTaskTests(TestCase):
    def setUp(self):
        chapter = make_chapter()
        school = make_school("AHM-001", "St. Xavier's High School", chapter=chapter)
        event = make_event(assign_to=chapter)
        submission = make_submission(event, school, status="approved", score=85)
        self.cert = Certificate.objects.create(submission=submission, tier="Excellence", status="PENDING")

    @patch("certificates.tasks.mark_ready")
    @patch("certificates.tasks.store_certificate_pdf", return_value=("http://files/c.pdf", "/tmp/c.pdf"))
    @patch("certificates.tasks.LatexRenderer")
    def test_success_marks_ready(self, mock_renderer, mock_store, mock_ready):
        mock_renderer.return_value.generate.return_value = b"%PDF-1.5"
        url = generate_certificate(self.cert.id)
        self.assertEqual(url, "http://files/c.pdf")
        self.cert.refresh_from_db()
        self.assertEqual(self.cert.status, "READY")
        self.assertEqual(self.cert.pdf_path, "/tmp/c.pdf")
        self.assertIsNotNone(self.cert.completed_at)
        mock_store.assert_called_once()
        mock_ready.assert_called_once_with(self.cert.id, "Excellence", ANY)

    @patch("certificates.tasks.mark_failed")
    @patch("certificates.tasks.LatexRenderer")
    def test_render_failure_marks_failed_and_raises(self, mock_renderer, mock_failed):
        mock_renderer.return_value.generate.side_effect = LatexRenderError("! Undefined control sequence.")
        with self.assertRaises(LatexRenderError):
            generate_certificate(self.cert.id)
        self.cert.refresh_from_db()
        self.assertEqual(self.cert.status, "FAILED")
        mock_failed.assert_called_once_with(self.cert.id, "Excellence")


@override_settings(CERTIFICATE_TTL_SECONDS=900)
class PurgeTaskTests(TestCase):
    def setUp(self):
        chapter = make_chapter()
        school = make_school("AHM-001", "St. Xavier's High School", chapter=chapter)
        submission = make_submission(make_event(assign_to=chapter), school, status="approved", score=65)
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.pdf = Path(self.tmp.name) / "c.pdf"
        self.pdf.write_bytes(b"%PDF")
        self.cert = Certificate.objects.create(
            submission=submission, tier="Merit", status="READY", pdf_path=str(self.pdf), completed_at=timezone.now()
        )

    def test_file_kept_before_ttl(self):
        self.cert.first_download_at = timezone.now()
        self.cert.save()
        purge_certificate_file(self.cert.id)
        self.assertTrue(self.pdf.exists())

    def test_file_removed_after_ttl(self):
        self.cert.first_download_at = timezone.now() - timedelta(seconds=901)
        self.cert.save()
        purge_certificate_file(self.cert.id)
        self.assertFalse(self.pdf.exists())
        self.cert.refresh_from_db()
        self.assertEqual(self.cert.pdf_path, "")

    def test_purge_expired_counts(self):
        Certificate.objects.filter(id=self.cert.id).update(completed_at=timezone.now() - timedelta(hours=2))
        zip_file = Path(self.tmp.name) / "b.zip"
        zip_file.write_bytes(b"PK")
        CertificateBatch.objects.create(
            certificates=[self.cert.id], status="READY", zip_path=str(zip_file), completed_at=timezone.now()
        )
        counts = purge_expired(1)
        self.assertEqual(counts, {"certificates": 1, "batches": 0})
        self.assertFalse(self.pdf.exists())
        self.assertTrue(zip_file.exists())
