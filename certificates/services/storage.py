import re
from pathlib import Path
from typing import Optional, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError
from django.conf import settings


def _store_local(key: str, data: bytes) -> Tuple[str, str]:
    dest = Path(settings.FILE_STORAGE_PATH) / key
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(data)
    url = f"{settings.FILE_BASE_URL.rstrip('/')}/{key}"
    return url, str(dest)


def _s3_client():
    session = boto3.session.Session(
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        region_name=getattr(settings, "AWS_REGION", None),
    )
    return session.client(
        "s3",
        endpoint_url=settings.AWS_S3_ENDPOINT_URL,
        config=Config(s3={"addressing_style": "virtual"}),
    )


def _store_s3(key: str, data: bytes, content_type: str) -> Tuple[str, str]:
    client = _s3_client()
    client.put_object(Bucket=settings.AWS_STORAGE_BUCKET_NAME, Key=key, Body=data, ContentType=content_type)
    base_url = getattr(settings, "FILE_BASE_URL", None)
    if base_url:
        url = f"{base_url.rstrip('/')}/{key}"
    else:
        endpoint = (settings.AWS_S3_ENDPOINT_URL or "").rstrip("/")
        url = f"{endpoint}/{settings.AWS_STORAGE_BUCKET_NAME}/{key}"
    return url, key


def store_file(key: str, data: bytes, content_type: str = "application/octet-stream") -> Tuple[str, str]:
    """
    Write ``data`` under ``key`` and return ``(url, path)``. ``path`` is the
    local file path, or the object key when storing on S3.
    """
    key = key.lstrip("/")
    if getattr(settings, "FILE_STORAGE", "local") == "s3":
        return _store_s3(key, data, content_type)
    return _store_local(key, data)


def read_file(path: str) -> Optional[bytes]:
    """
    Bytes stored under ``path`` by ``store_file``, or None when the file or
    object is gone.
    """
    if not path:
        return None
    if getattr(settings, "FILE_STORAGE", "local") == "s3":
        try:
            obj = _s3_client().get_object(Bucket=settings.AWS_STORAGE_BUCKET_NAME, Key=path)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                return None
            raise
        return obj["Body"].read()
    local = Path(path)
    if not local.exists():
        return None
    return local.read_bytes()


def store_certificate_pdf(certificate, pdf_bytes: bytes) -> Tuple[str, str]:
    submission = certificate.submission
    kc_no = re.sub(r"[^A-Za-z0-9-]+", "_", submission.school.kc_no)
    key = f"certificates/{certificate.id}_{kc_no}_{certificate.tier.lower()}.pdf"
    return store_file(key, pdf_bytes, "application/pdf")
