from django.contrib import admin

from .models import Certificate, CertificateBatch


@admin.register(Certificate)
class CertificateAdmin(admin.ModelAdmin):
    list_display = ("id", "submission", "tier", "status", "created_at", "completed_at")
    list_filter = ("tier", "status")
    search_fields = ("submission__school__school_name", "submission__school__kc_no", "submission__event__title")


@admin.register(CertificateBatch)
class CertificateBatchAdmin(admin.ModelAdmin):
    list_display = ("id", "status", "created_at", "completed_at")
    list_filter = ("status",)
