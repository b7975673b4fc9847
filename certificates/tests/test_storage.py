import io
import tempfile
from pathlib import Path
from unittest.mock import patch

from botocore.exceptions import ClientError
from django.test import SimpleTestCase, override_settings

from certificates.services.storage import read_file, store_file


class StoreFileTests(SimpleTestCase):
    def test_local_storage_writes_under_key(self):
        with tempfile.TemporaryDirectory() as tmp:
            with override_settings(FILE_STORAGE="local", FILE_STORAGE_PATH=Path(tmp), FILE_BASE_URL="http://files/uploads/"):
                url, path = store_file("/submissions/3/photo.jpg", b"jpeg", "image/jpeg")
            self.assertEqual(url, "http://files/uploads/submissions/3/photo.jpg")
            self.assertEqual(Path(path).read_bytes(), b"jpeg")

    @override_settings(
        FILE_STORAGE="s3",
        FILE_BASE_URL="",
        AWS_ACCESS_KEY_ID="key",
        AWS_SECRET_ACCESS_KEY="secret",
        AWS_STORAGE_BUCKET_NAME="outreach",
        AWS_S3_ENDPOINT_URL="https://s3.example.com",
        AWS_REGION="ap-south-1",
    )
    @patch("certificates.services.storage.boto3.session.Session")
    def test_s3_storage_puts_object(self, mock_session):
        client = mock_session.return_value.client.return_value
        url, path = store_file("certificates/1_AHM-001_merit.pdf", b"%PDF", "application/pdf")
        client.put_object.assert_called_once_with(
            Bucket="outreach", Key="certificates/1_AHM-001_merit.pdf", Body=b"%PDF", ContentType="application/pdf"
        )
        self.assertEqual(url, "https://s3.example.com/outreach/certificates/1_AHM-001_merit.pdf")
        self.assertEqual(path, "certificates/1_AHM-001_merit.pdf")


class ReadFileTests(SimpleTestCase):
    def test_local_file_and_missing_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            pdf = Path(tmp) / "c.pdf"
            pdf.write_bytes(b"%PDF")
            with override_settings(FILE_STORAGE="local"):
                self.assertEqual(read_file(str(pdf)), b"%PDF")
                self.assertIsNone(read_file(str(Path(tmp) / "gone.pdf")))
                self.assertIsNone(read_file(""))

    @override_settings(
        FILE_STORAGE="s3",
        AWS_ACCESS_KEY_ID="key",
        AWS_SECRET_ACCESS_KEY="secret",
        AWS_STORAGE_BUCKET_NAME="outreach",
        AWS_S3_ENDPOINT_URL="https://s3.example.com",
        AWS_REGION="ap-south-1",
    )
    @patch("certificates.services.storage.boto3.session.Session")
    def test_s3_object_is_fetched_by_key(self, mock_session):
        client = mock_session.return_value.client.return_value
        client.get_object.return_value = {"Body": io.BytesIO(b"%PDF")}
        self.assertEqual(read_file("certificates/1_AHM-001_merit.pdf"), b"%PDF")
        client.get_object.assert_called_once_with(Bucket="outreach", Key="certificates/1_AHM-001_merit.pdf")

        client.get_object.side_effect = ClientError({"Error": {"Code": "NoSuchKey"}}, "GetObject")
        self.assertIsNone(read_file("certificates/1_AHM-001_merit.pdf"))

        client.get_object.side_effect = ClientError({"Error": {"Code": "AccessDenied"}}, "GetObject")
        with self.assertRaises(ClientError):
            read_file("certificates/1_AHM-001_merit.pdf")
