from django.urls import path
from . import views

app_name = "core"

urlpatterns = [
    # Home / schedules
    path("", views.home, name="home"),
    path("schedules/", views.schedule_list, name="schedule_list"),

    # Builder page (form posts stand in for drag-and-drop)
    path("schedules/<int:pk>/", views.builder, name="builder"),
    path("schedules/<int:pk>/delete/", views.schedule_delete, name="schedule_delete"),
    path("schedules/<int:pk>/export/", views.schedule_export, name="schedule_export"),
    path("schedules/<int:pk>/<str:action>/", views.builder_action, name="builder_action"),

    # Catalog API
    path("fetch-major-colleges", views.fetch_major_colleges, name="fetch_major_colleges"),
    path("query-data", views.query_data, name="query_data"),

    # Schedule API
    path("get-user-schedules", views.get_user_schedules, name="get_user_schedules"),
    path("create-schedule", views.create_schedule, name="create_schedule"),
    path("fetch-schedule", views.fetch_schedule, name="fetch_schedule"),
    path("edit-schedule", views.edit_schedule, name="edit_schedule"),
    path("post-schedule", views.post_schedule, name="post_schedule"),
    path("delete-schedule", views.delete_schedule, name="delete_schedule"),
    path("fetch-schedules-batch", views.fetch_schedules_batch, name="fetch_schedules_batch"),
]
