from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path("admin/", admin.site.urls),

    # Accounts JSON API, sign-up and profile pages (namespaced)
    path("", include(("accounts.urls", "accounts"), namespace="accounts")),

    # Django auth (provides 'login', 'logout', password URLs)
    path("accounts/", include("django.contrib.auth.urls")),

    # Catalog, schedules and builder (namespaced)
    path("", include(("core.urls", "core"), namespace="core")),
]
