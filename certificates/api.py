import logging
import os
import zipfile
from pathlib import Path

from django.conf import settings
from django.db.models import Q
from django.http import FileResponse, HttpResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import ADMIN, HasRole
from activities.models import EventSubmission
from certificates.models import Certificate, CertificateBatch
from certificates.services.builder import build_context
from certificates.services.issuing import NotEligible, eligible_submissions, prepare_certificate
from certificates.services.latex_renderer import LatexRenderer
from certificates.services.metrics import mark_failed, reset_metrics
from certificates.services.storage import read_file
from certificates.services.tiers import EXCELLENCE, MERIT, PARTICIPATION, tier_for_score
from certificates.tasks import generate_certificate, purge_batch_zip, purge_certificate_file

logger = logging.getLogger(__name__)

IsAdmin = HasRole(ADMIN)


class EligibleCertificatesView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request):
        submissions = eligible_submissions()
        search = (request.query_params.get("search") or "").strip()
        if search:
            submissions = submissions.filter(
                Q(school__school_name__icontains=search) | Q(school__kc_no__icontains=search)
            )
        latest = {}
        for cert in Certificate.objects.filter(submission__in=submissions).order_by("created_at"):
            latest[cert.submission_id] = cert

        rows = []
        counts = {EXCELLENCE: 0, MERIT: 0, PARTICIPATION: 0}
        for sub in submissions:
            tier = tier_for_score(sub.score)
            counts[tier] += 1
            cert = latest.get(sub.id)
            rows.append(
                {
                    "submission_id": sub.id,
                    "school_name": sub.school.school_name,
                    "kc_no": sub.school.kc_no,
                    "event_title": sub.event.title,
                    "score": sub.score,
                    "tier": tier,
                    "certificate_id": cert.id if cert else None,
                    "certificate_status": cert.status if cert else None,
                }
            )
        return Response({"counts": counts, "results": rows})


class CertificateRequestSerializer(serializers.Serializer):
    submission_id = serializers.IntegerField()
    force_new = serializers.BooleanField(required=False, default=False)


def _fail(cert: Certificate):
    cert.status = "FAILED"
    cert.completed_at = timezone.now()
    cert.save(update_fields=["status", "completed_at"])
    mark_failed(cert.id, cert.tier)


class GenerateCertificateView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request):
        serializer = CertificateRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        submission = get_object_or_404(EventSubmission, pk=serializer.validated_data["submission_id"])
        try:
            cert, enqueue = prepare_certificate(submission, serializer.validated_data["force_new"])
        except NotEligible as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        if cert.status == "READY":
            return Response({"id": cert.id, "status": cert.status, "tier": cert.tier}, status=status.HTTP_200_OK)

        try:
            if getattr(settings, "CELERY_TASK_ALWAYS_EAGER", False):
                pdf_url = generate_certificate.apply(args=[cert.id]).get()
                return Response({"id": cert.id, "status": "READY", "tier": cert.tier, "pdf_url": pdf_url}, status=status.HTTP_200_OK)
            if enqueue:
                generate_certificate.delay(cert.id)
        except Exception as exc:
            logger.exception("Certificate generation could not be started", extra={"certificate_id": cert.id})
            cert.refresh_from_db(fields=["status"])
            # the task marks its own failures
            if cert.status != "FAILED":
                _fail(cert)
            return Response({"detail": str(exc)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return Response({"id": cert.id, "status": cert.status, "tier": cert.tier}, status=status.HTTP_202_ACCEPTED)


class StreamCertificateView(APIView):
    """
    Ephemeral generation: compile and stream the PDF without storing it or creating a Certificate row.
    """

    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request):
        serializer = CertificateRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        submission = get_object_or_404(
            EventSubmission.objects.select_related("school", "event"), pk=serializer.validated_data["submission_id"]
        )
        if submission.status != "approved" or submission.score is None:
            return Response({"detail": "Only approved submissions with a score get certificates."}, status=status.HTTP_400_BAD_REQUEST)

        cert = Certificate(submission=submission, tier=tier_for_score(submission.score), created_at=timezone.now())
        renderer = LatexRenderer(Path(settings.CERTIFICATE_TEMPLATE), build_context(cert))
        pdf_bytes = renderer.generate()
        response = HttpResponse(pdf_bytes, content_type="application/pdf")
        filename = f"certificate_{submission.id}_{cert.tier.lower()}.pdf"
        response["Content-Disposition"] = f'attachment; filename="{filename}"'
        return response


def _schedule_purge(task, obj_id):
    task.apply_async(args=[obj_id], countdown=int(getattr(settings, "CERTIFICATE_TTL_SECONDS", 900)))


class DownloadCertificateView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request, pk):
        cert = get_object_or_404(Certificate, pk=pk, status="READY")
        if cert.first_download_at is None:
            cert.first_download_at = timezone.now()
            cert.save(update_fields=["first_download_at"])
            _schedule_purge(purge_certificate_file, cert.id)
        if cert.pdf_path and os.path.exists(cert.pdf_path):
            response = FileResponse(open(cert.pdf_path, "rb"), content_type="application/pdf")
            response["Content-Disposition"] = f'attachment; filename="{os.path.basename(cert.pdf_path)}"'
            return response
        if cert.pdf_url:
            return Response({"id": cert.id, "tier": cert.tier, "url": cert.pdf_url})
        return Response({"detail": "Certificate file has expired, generate it again."}, status=status.HTTP_410_GONE)


class ResetMetricsView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request):
        reset_metrics()
        return Response({"detail": "Metrics reset"}, status=status.HTTP_200_OK)


# ============================
# Batch (zip) generation
# ============================


class BatchCreateSerializer(serializers.Serializer):
    submission_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=True, required=False)
    force_new = serializers.BooleanField(required=False, default=False)


class CreateBatchView(APIView):
    """Generate certificates for the given submissions, or for every eligible one."""

    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request):
        serializer = BatchCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ids = serializer.validated_data.get("submission_ids")
        force_new = serializer.validated_data["force_new"]

        submissions = eligible_submissions()
        if ids:
            submissions = submissions.filter(id__in=ids)
            missing = set(ids) - set(submissions.values_list("id", flat=True))
            if missing:
                return Response(
                    {"detail": f"Not eligible for certificates: {sorted(missing)}"}, status=status.HTTP_400_BAD_REQUEST
                )
        submissions = list(submissions)
        if not submissions:
            return Response({"detail": "No approved submissions to certify."}, status=status.HTTP_400_BAD_REQUEST)

        batch = CertificateBatch.objects.create(status="PENDING", certificates=[])
        cert_ids = []
        for submission in submissions:
            cert, enqueue = prepare_certificate(submission, force_new)
            cert_ids.append(cert.id)
            if getattr(settings, "CELERY_TASK_ALWAYS_EAGER", False):
                generate_certificate.apply(args=[cert.id])
            elif enqueue:
                generate_certificate.delay(cert.id)

        batch.certificates = cert_ids
        batch.status = "IN_PROGRESS"
        batch.save(update_fields=["certificates", "status"])
        logger.info("Certificate batch created", extra={"batch_id": batch.id, "count": len(cert_ids)})
        return Response({"batch_id": batch.id, "count": len(cert_ids), "status": batch.status}, status=status.HTTP_202_ACCEPTED)


def _write_zip(batch: CertificateBatch, certs) -> Path:
    zip_file = batch.zip_full_path()
    with zipfile.ZipFile(zip_file, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for cert in certs:
            data = read_file(cert.pdf_path)
            if data is None:
                logger.warning("Certificate file missing from batch zip", extra={"batch_id": batch.id, "certificate_id": cert.id})
                continue
            zf.writestr(os.path.basename(cert.pdf_path), data)
    return zip_file


class BatchStatusView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request, pk):
        batch = get_object_or_404(CertificateBatch, pk=pk)
        certs = list(Certificate.objects.filter(id__in=batch.certificates))
        counts = {"READY": 0, "PENDING": 0, "FAILED": 0}
        for cert in certs:
            counts[cert.status] = counts.get(cert.status, 0) + 1

        if counts["FAILED"] > 0:
            batch.status = "FAILED"
        elif certs and counts["READY"] == len(certs):
            batch.status = "READY"
        else:
            batch.status = "IN_PROGRESS"
        batch.save(update_fields=["status"])

        zip_url = None
        if batch.status == "READY":
            if not batch.zip_path or not Path(batch.zip_path).exists():
                batch.zip_path = str(_write_zip(batch, certs))
                batch.completed_at = timezone.now()
                batch.save(update_fields=["zip_path", "completed_at"])
            media_url = getattr(settings, "MEDIA_URL", "").rstrip("/")
            if media_url:
                zip_url = f"{media_url}/certificate_batches/{Path(batch.zip_path).name}"

        return Response(
            {
                "id": batch.id,
                "status": batch.status,
                "counts": counts,
                "zip_path": batch.zip_path,
                "zip_url": zip_url,
            }
        )


class BatchDownloadView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request, pk):
        batch = get_object_or_404(CertificateBatch, pk=pk, status="READY")
        if not batch.zip_path or not Path(batch.zip_path).exists():
            return Response({"detail": "Archive missing"}, status=status.HTTP_404_NOT_FOUND)
        if batch.first_download_at is None:
            batch.first_download_at = timezone.now()
            batch.save(update_fields=["first_download_at"])
            _schedule_purge(purge_batch_zip, batch.id)
        zip_path = Path(batch.zip_path)
        response = FileResponse(open(zip_path, "rb"), content_type="application/zip")
        response["Content-Disposition"] = f'attachment; filename="{zip_path.name}"'
        return response
