import logging
from datetime import timedelta
from pathlib import Path

from celery import shared_task
from django.conf import settings
from django.utils import timezone

from certificates.models import Certificate, CertificateBatch
from certificates.services.builder import build_context
from certificates.services.latex_renderer import LatexRenderer
from certificates.services.metrics import mark_failed, mark_ready
from certificates.services.storage import store_certificate_pdf

logger = logging.getLogger(__name__)


@shared_task(bind=True, autoretry_for=(Exception,), retry_backoff=5, max_retries=3)
def generate_certificate(self, certificate_id: int):
    cert = Certificate.objects.select_related("submission__school", "submission__event").get(id=certificate_id)
    logger.info("Start generate_certificate", extra={"certificate_id": certificate_id, "tier": cert.tier})
    try:
        context = build_context(cert)
        renderer = LatexRenderer(Path(settings.CERTIFICATE_TEMPLATE), context)
        pdf_bytes = renderer.generate()
        logger.info("PDF generated", extra={"certificate_id": certificate_id, "size_bytes": len(pdf_bytes)})
        pdf_url, pdf_path = store_certificate_pdf(cert, pdf_bytes)
        cert.pdf_path = pdf_path
        cert.pdf_url = pdf_url
        cert.status = "READY"
        cert.completed_at = timezone.now()
        cert.save(update_fields=["pdf_path", "pdf_url", "status", "completed_at"])
        duration = (cert.completed_at - cert.created_at).total_seconds() if cert.created_at else 0
        mark_ready(cert.id, cert.tier, duration)
        logger.info("PDF stored", extra={"certificate_id": certificate_id, "pdf_path": pdf_path, "pdf_url": pdf_url})
        return pdf_url
    except Exception:
        cert.status = "FAILED"
        cert.completed_at = timezone.now()
        cert.save(update_fields=["status", "completed_at"])
        mark_failed(cert.id, cert.tier)
        raise


def _ttl_seconds() -> int:
    return int(getattr(settings, "CERTIFICATE_TTL_SECONDS", 900))


@shared_task
def purge_certificate_file(certificate_id: int):
    cert = Certificate.objects.filter(id=certificate_id).first()
    if not cert or not cert.first_download_at or not cert.pdf_path:
        return
    if timezone.now() - cert.first_download_at < timedelta(seconds=_ttl_seconds()):
        return
    path = cert.pdf_path
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Failed to purge PDF for certificate %s: %s", certificate_id, exc)
        return
    cert.pdf_path = ""
    cert.save(update_fields=["pdf_path"])
    logger.info("Purged PDF after TTL", extra={"certificate_id": certificate_id, "path": path})


@shared_task
def purge_batch_zip(batch_id: int):
    batch = CertificateBatch.objects.filter(id=batch_id).first()
    if not batch or not batch.first_download_at or not batch.zip_path:
        return
    if timezone.now() - batch.first_download_at < timedelta(seconds=_ttl_seconds()):
        return
    path = batch.zip_path
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Failed to purge batch zip %s: %s", batch_id, exc)
        return
    batch.zip_path = ""
    batch.save(update_fields=["zip_path"])
    logger.info("Purged batch zip after TTL", extra={"batch_id": batch_id, "path": path})


@shared_task
def purge_expired(hours: int = 1):
    cutoff = timezone.now() - timedelta(hours=hours)
    deleted_certificates = 0
    for cert in Certificate.objects.exclude(pdf_path=""):
        ts = cert.first_download_at or cert.completed_at
        if ts and ts < cutoff:
            Path(cert.pdf_path).unlink(missing_ok=True)
            cert.pdf_path = ""
            cert.save(update_fields=["pdf_path"])
            deleted_certificates += 1

    deleted_batches = 0
    for batch in CertificateBatch.objects.exclude(zip_path=""):
        ts = batch.first_download_at or batch.completed_at
        if ts and ts < cutoff:
            Path(batch.zip_path).unlink(missing_ok=True)
            batch.zip_path = ""
            batch.save(update_fields=["zip_path"])
            deleted_batches += 1

    logger.info(
        "purge_expired done",
        extra={"hours": hours, "deleted_certificates": deleted_certificates, "deleted_batches": deleted_batches},
    )
    return {"certificates": deleted_certificates, "batches": deleted_batches}
