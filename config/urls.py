from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import path, re_path
from django.views.static import serve

from accounts.api import SessionView
from activities.api import (
    EventAssignmentView,
    EventListCreateView,
    LeaderboardView,
    RankingsReportView,
    SchoolActivitiesView,
    SubmissionDetailView,
    SubmissionListCreateView,
    SubmissionMediaView,
    SubmissionPublicationView,
    SubmissionResubmitView,
    SubmissionReviewView,
    SubmissionSummaryView,
)
from certificates.api import (
    BatchDownloadView,
    BatchStatusView,
    CreateBatchView,
    DownloadCertificateView,
    EligibleCertificatesView,
    GenerateCertificateView,
    ResetMetricsView,
    StreamCertificateView,
)
from donations.api import DonationListCreateView, DonationSummaryView
from schools.api import ChapterListView, SchoolApproveView, SchoolListView, SchoolRegisterView, SchoolRejectView


urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/session/", SessionView.as_view(), name="session"),
    path("api/chapters/", ChapterListView.as_view(), name="chapter-list"),
    path("api/schools/", SchoolListView.as_view(), name="school-list"),
    path("api/schools/register/", SchoolRegisterView.as_view(), name="school-register"),
    path("api/schools/me/activities/", SchoolActivitiesView.as_view(), name="school-activities"),
    path("api/schools/<int:pk>/approve/", SchoolApproveView.as_view(), name="school-approve"),
    path("api/schools/<int:pk>/reject/", SchoolRejectView.as_view(), name="school-reject"),
    path("api/events/", EventListCreateView.as_view(), name="event-list"),
    path("api/events/<int:pk>/assignments/", EventAssignmentView.as_view(), name="event-assignments"),
    path("api/submissions/", SubmissionListCreateView.as_view(), name="submission-list"),
    path("api/submissions/summary/", SubmissionSummaryView.as_view(), name="submission-summary"),
    path("api/submissions/<int:pk>/", SubmissionDetailView.as_view(), name="submission-detail"),
    path("api/submissions/<int:pk>/review/", SubmissionReviewView.as_view(), name="submission-review"),
    path("api/submissions/<int:pk>/resubmit/", SubmissionResubmitView.as_view(), name="submission-resubmit"),
    path("api/submissions/<int:pk>/media/", SubmissionMediaView.as_view(), name="submission-media"),
    path("api/submissions/<int:pk>/publications/", SubmissionPublicationView.as_view(), name="submission-publications"),
    path("api/leaderboard/", LeaderboardView.as_view(), name="leaderboard"),
    path("api/reports/rankings/", RankingsReportView.as_view(), name="rankings-report"),
    path("api/donations/", DonationListCreateView.as_view(), name="donation-list"),
    path("api/donations/summary/", DonationSummaryView.as_view(), name="donation-summary"),
    path("api/certificates/", GenerateCertificateView.as_view(), name="generate-certificate"),
    path("api/certificates/eligible/", EligibleCertificatesView.as_view(), name="eligible-certificates"),
    path("api/certificates/stream/", StreamCertificateView.as_view(), name="stream-certificate"),
    path("api/certificates/<int:pk>/download/", DownloadCertificateView.as_view(), name="download-certificate"),
    path("api/certificate-batches/", CreateBatchView.as_view(), name="create-batch"),
    path("api/certificate-batches/<int:pk>/", BatchStatusView.as_view(), name="batch-status"),
    path("api/certificate-batches/<int:pk>/download/", BatchDownloadView.as_view(), name="batch-download"),
    path("api/metrics/reset/", ResetMetricsView.as_view(), name="reset-metrics"),
] + static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

# uploads and zips are served from MEDIA_ROOT even with DEBUG off
if not settings.DEBUG and settings.MEDIA_URL and settings.MEDIA_ROOT:
    urlpatterns += [
        re_path(r"^%s(?P<path>.*)$" % settings.MEDIA_URL.lstrip("/"), serve, {"document_root": settings.MEDIA_ROOT}),
    ]
