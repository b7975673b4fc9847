from django.contrib import admin

from .models import Chapter, School, Teacher


@admin.register(Chapter)
class ChapterAdmin(admin.ModelAdmin):
    list_display = ("name", "location", "state")
    search_fields = ("name", "location", "state")


class TeacherInline(admin.TabularInline):
    model = Teacher
    extra = 0


@admin.register(School)
class SchoolAdmin(admin.ModelAdmin):
    list_display = ("school_name", "kc_no", "chapter", "status", "created_at")
    list_filter = ("status", "chapter")
    search_fields = ("school_name", "kc_no", "email")
    readonly_fields = ("approved_at", "approved_by")
    inlines = [TeacherInline]


@admin.register(Teacher)
class TeacherAdmin(admin.ModelAdmin):
    list_display = ("name", "school", "academic_year", "is_current")
    list_filter = ("is_current",)
    search_fields = ("name", "email", "school__school_name")
