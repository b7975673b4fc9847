from django.contrib import admin

from activities.models import Event, EventAssignment, EventSubmission, MediaFile, Publication, ProgramType


@admin.register(ProgramType)
class ProgramTypeAdmin(admin.ModelAdmin):
    list_display = ("code", "name")


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ("title", "status", "start_date", "end_date", "program_type")
    list_filter = ("status", "program_type")
    search_fields = ("title",)


@admin.register(EventAssignment)
class EventAssignmentAdmin(admin.ModelAdmin):
    list_display = ("event", "school", "chapter", "deadline")


@admin.register(EventSubmission)
class EventSubmissionAdmin(admin.ModelAdmin):
    list_display = ("id", "event", "school", "status", "score", "submitted_at", "reviewed_at")
    list_filter = ("status",)
    search_fields = ("school__school_name", "school__kc_no", "event__title")
    readonly_fields = ("reviewed_at", "reviewed_by")


admin.site.register(MediaFile)
admin.site.register(Publication)
