from django.contrib import admin
from .models import College, Major, Course, Schedule


@admin.register(College)
class CollegeAdmin(admin.ModelAdmin):
    list_display = ("name",)
    search_fields = ("name",)


@admin.register(Major)
class MajorAdmin(admin.ModelAdmin):
    list_display = ("name", "degree", "college")
    search_fields = ("name", "college__name")
    list_filter = ("college",)


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    """Admin configuration for catalog courses (list/search filters)."""

    list_display = ("division", "number", "name", "units", "college")
    search_fields = ("division", "number", "name")
    list_filter = ("division", "college")


@admin.register(Schedule)
class ScheduleAdmin(admin.ModelAdmin):
    list_display = ("user", "name", "columns", "is_public", "updated_at")
    search_fields = ("name", "user__username")
    list_filter = ("is_public",)
